"""
Item source service: load a store's product list for a new session.

Reads the store's sheet from the product workbook. Any failure (missing
file, unreadable workbook, no sheet for the store, empty sheet) falls
back to built-in defaults so a session never starts with zero items.
"""

from pathlib import Path
from typing import Optional

import structlog

from config import settings
from exceptions import AppError
from models.session import ItemStatus, ProductItem
from parsers.product_sheet_parser import ProductRow, normalize_product_row, parse_product_sheet

logger = structlog.get_logger(__name__)


# ===================
# BUILT-IN DEFAULTS
# ===================

DEFAULT_PRODUCTS_WDK = [
    {"name": "原味奶酪", "spec": "200g/碗", "unit": "碗"},
    {"name": "草莓果酱", "spec": "5kg/桶", "unit": "桶"},
    {"name": "一次性勺子", "spec": "100支/包", "unit": "包"},
    {"name": "打包袋", "spec": "50个/捆", "unit": "捆"},
    {"name": "全脂牛奶", "spec": "1L/盒", "unit": "盒"},
]

DEFAULT_PRODUCTS_XZM = [
    {"name": "希腊酸奶", "spec": "150g/杯", "unit": "杯"},
    {"name": "蓝莓", "spec": "125g/盒", "unit": "盒"},
    {"name": "格兰诺拉麦片", "spec": "1kg/袋", "unit": "袋"},
    {"name": "蜂蜜", "spec": "500g/瓶", "unit": "瓶"},
]

WDK_STORE_KEYWORD = "五道口"


def default_rows_for_store(store_name: str) -> list[ProductRow]:
    """Built-in product list: the 五道口 store's list, or the generic one."""
    source = DEFAULT_PRODUCTS_WDK if WDK_STORE_KEYWORD in store_name else DEFAULT_PRODUCTS_XZM
    return [normalize_product_row(row) for row in source]


def rows_to_items(rows: list[ProductRow]) -> list[ProductItem]:
    """Fresh PENDING items, ids 'item-{n}' in row order."""
    return [
        ProductItem(
            id=f"item-{index}",
            name=row.name,
            spec=row.spec,
            unit=row.unit,
            quantity=None,
            status=ItemStatus.PENDING,
        )
        for index, row in enumerate(rows)
    ]


class ItemSourceService:
    """
    Product list loader with fallback.

    Usage:
        items = get_item_source_service().load_items("宝珠奶酪（五道口店）")
    """

    def __init__(self, products_path: Optional[Path] = None):
        self.products_path = products_path or settings.products_path

    def load_rows(self, store_name: str) -> list[ProductRow]:
        """
        Product rows for a store, never empty.

        Source errors are logged and replaced by the built-in defaults.
        """
        try:
            rows = parse_product_sheet(self.products_path, store_name)
        except AppError as e:
            logger.warning(
                "item_source_fallback",
                store=store_name,
                reason=e.code,
                details=e.details
            )
            return default_rows_for_store(store_name)

        if not rows:
            logger.warning("item_source_fallback", store=store_name, reason="EMPTY_SHEET")
            return default_rows_for_store(store_name)

        return rows

    def load_items(self, store_name: str) -> list[ProductItem]:
        """Product rows for a store as fresh PENDING session items."""
        items = rows_to_items(self.load_rows(store_name))

        logger.info("items_loaded", store=store_name, count=len(items))

        return items


# Singleton instance
_item_source_service: Optional[ItemSourceService] = None


def get_item_source_service() -> ItemSourceService:
    """Get or create ItemSourceService instance."""
    global _item_source_service
    if _item_source_service is None:
        _item_source_service = ItemSourceService()
    return _item_source_service
