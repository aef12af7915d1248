"""
Spreadsheet parsers module.
"""

from parsers.product_sheet_parser import (
    parse_product_sheet,
    normalize_product_row,
    sheet_name_for_store,
    ProductRow,
)

__all__ = [
    "parse_product_sheet",
    "normalize_product_row",
    "sheet_name_for_store",
    "ProductRow",
]
