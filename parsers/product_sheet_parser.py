"""
Product workbook parser.

The workbook holds one sheet per store, named after the store. Each row
is one product with a name, a packaging spec and a counting unit. Column
headers vary between store templates, so each field accepts aliases.
"""

import re
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Union
import structlog

import pandas as pd

from exceptions import SheetNotFoundError, SourceUnavailableError
from utils.text_utils import clean_text, first_text

logger = structlog.get_logger(__name__)

# Column aliases, highest priority first
NAME_COLUMNS = ("货品名称", "name")
SPEC_COLUMNS = ("规格", "spec")
UNIT_COLUMNS = ("点货单位", "单位", "unit")

DEFAULT_NAME = "未知商品"
DEFAULT_SPEC = ""
DEFAULT_UNIT = "个"

# Excel sheet title limits
SHEET_TITLE_MAX = 31
_INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")


@dataclass
class ProductRow:
    """One product line from the store's sheet."""
    name: str
    spec: str
    unit: str


def sheet_name_for_store(store_name: str) -> str:
    """
    Sheet title for a store, within Excel's title rules.

    Invalid characters become "_" and the title is cut to 31 characters.
    """
    title = _INVALID_SHEET_CHARS.sub("_", store_name.strip())
    return title[:SHEET_TITLE_MAX]


def normalize_product_row(row: dict) -> ProductRow:
    """Map a raw row (any alias headers) to a ProductRow with defaults."""
    return ProductRow(
        name=first_text(row, NAME_COLUMNS, DEFAULT_NAME),
        spec=first_text(row, SPEC_COLUMNS, DEFAULT_SPEC),
        unit=first_text(row, UNIT_COLUMNS, DEFAULT_UNIT),
    )


def _find_sheet(sheet_names: list[str], store_name: str) -> str:
    """Exact store name first, then the Excel-safe title."""
    for candidate in (store_name, sheet_name_for_store(store_name)):
        if candidate in sheet_names:
            return candidate
    raise SheetNotFoundError(store_name)


def _is_blank(row: dict) -> bool:
    return all(clean_text(value) is None for value in row.values())


def parse_product_sheet(
    file: Union[str, Path, BytesIO],
    store_name: str,
) -> list[ProductRow]:
    """
    Parse the store's sheet from the product workbook.

    Args:
        file: File path (str/Path) or file-like object (BytesIO)
        store_name: Store whose sheet to read

    Returns:
        Product rows in sheet order (blank rows dropped)

    Raises:
        SourceUnavailableError: If the workbook or sheet cannot be read
        SheetNotFoundError: If the workbook has no sheet for the store
    """
    logger.info("parsing_product_sheet", store=store_name, file_type=type(file).__name__)

    try:
        excel = pd.ExcelFile(file, engine="openpyxl")
    except Exception as e:
        logger.error("product_workbook_read_failed", error=str(e))
        raise SourceUnavailableError("products", str(e)) from e

    with excel:
        sheet = _find_sheet(excel.sheet_names, store_name)

        try:
            df = excel.parse(sheet, dtype=object)
        except Exception as e:
            logger.error("product_sheet_read_failed", sheet=sheet, error=str(e))
            raise SourceUnavailableError("products", str(e)) from e

    # Normalize column names (stray spaces in headers)
    df.columns = [str(col).strip() for col in df.columns]

    rows = [
        normalize_product_row(record)
        for record in df.to_dict(orient="records")
        if not _is_blank(record)
    ]

    logger.info("product_sheet_parsed", store=store_name, sheet=sheet, rows=len(rows))

    return rows
