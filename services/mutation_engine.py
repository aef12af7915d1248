"""
Mutation engine: per-item quantity, skip, unused and correction rules.

Enforces the item status machine:
    PENDING -> COMPLETED   quantity committed, or marked unused
    PENDING -> SKIPPED     ORDER mode only ("no order needed")
    any     -> COMPLETED   a later quantity commit overrides a skip
Nothing ever goes back to PENDING.

All operations are in-memory and synchronous. Confirmation policy
(modals, prompts) lives with the caller; the engine only answers
whether an action deserves one.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

import structlog

from exceptions import InvalidItemError, InvalidModeOperationError
from models.session import ConfirmationPrompt, ItemStatus, Mode, ProductItem
from utils.text_utils import clean_text

logger = structlog.get_logger(__name__)

SKIP_MARKER = "无需订货"
DEFAULT_NEW_ITEM_SPEC = "无规格"
DEFAULT_NEW_ITEM_UNIT = "个"

# Modes where "skip" is a valid operation
SKIP_MODES = frozenset({Mode.ORDER})

# Leading decimal literal, same prefix rule as a browser's parseFloat
_LEADING_NUMBER = re.compile(
    r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)"
)

# Accepted magnitude range (adjusted exponent) for a committed quantity
MAX_QUANTITY_EXPONENT = 12
MIN_QUANTITY_EXPONENT = -6


# ===================
# QUANTITY TEXT
# ===================

def parse_quantity(text: Optional[str]) -> Optional[Decimal]:
    """
    Parse staged quantity text.

    "5" -> 5, " 2.50" -> 2.50, "3kg" -> 3, ".5" -> 0.5
    "", "abc", "-" -> None
    "1e1000000", "1e-1000000" -> None (outside 1e-6 .. 1e13)

    Returns:
        Parsed Decimal, or None on a parse failure
    """
    if not text:
        return None

    match = _LEADING_NUMBER.match(text)
    if not match:
        return None

    try:
        quantity = Decimal(match.group(1))
    except InvalidOperation:
        return None

    if not quantity.is_finite():
        return None
    if quantity.is_zero():
        return Decimal("0")
    if not MIN_QUANTITY_EXPONENT <= quantity.adjusted() <= MAX_QUANTITY_EXPONENT:
        return None

    return quantity


def format_quantity(quantity: Optional[Decimal]) -> str:
    """
    Render a quantity as plain decimal text without trailing zeros.

    5 -> "5", 2.50 -> "2.5", 100 -> "100", None -> ""
    """
    if quantity is None:
        return ""
    if quantity == 0:
        return "0"
    return format(quantity.normalize(), "f")


def seed_staged_text(item: ProductItem) -> str:
    """
    Staged text shown when an item gains focus.

    The committed quantity as text, or empty when nothing is committed.
    A skipped item also seeds empty: its 0 is a placeholder, and seeding
    "0" would turn the skip into a commit on the next move, so browsing
    past a skip would silently complete it. Keep the empty seed.
    """
    if item.status == ItemStatus.SKIPPED:
        return ""
    return format_quantity(item.quantity)


# ===================
# ENGINE
# ===================

class MutationEngine:
    """Applies operator actions to a single item."""

    def commit_staged(self, item: ProductItem, staged_text: str) -> bool:
        """
        Commit staged quantity text to the item.

        - Empty text on a non-skipped item: nothing to commit.
        - Unparsable text: nothing committed, item unchanged.
        - A number: quantity set, status forced to COMPLETED.

        Returns:
            True if a quantity was committed
        """
        if not staged_text and item.status != ItemStatus.SKIPPED:
            return False

        quantity = parse_quantity(staged_text)
        if quantity is None:
            if staged_text:
                logger.debug("quantity_parse_failed", item_id=item.id, text=staged_text)
            return False

        item.quantity = quantity
        item.status = ItemStatus.COMPLETED

        logger.debug(
            "quantity_committed",
            item_id=item.id,
            quantity=str(quantity)
        )
        return True

    def skip(self, item: ProductItem, mode: Mode) -> None:
        """
        Mark the item "no order needed".

        Raises:
            InvalidModeOperationError: If mode does not allow skipping
        """
        if mode not in SKIP_MODES:
            logger.warning("skip_rejected", item_id=item.id, mode=mode.value)
            raise InvalidModeOperationError(
                operation="skip",
                mode=mode.value,
                allowed=sorted(m.value for m in SKIP_MODES)
            )

        item.status = ItemStatus.SKIPPED
        item.quantity = Decimal("0")

        logger.info("item_skipped", item_id=item.id)

    def toggle_unused(self, item: ProductItem) -> bool:
        """
        Flip the "no longer used" flag.

        Turning it on forces quantity 0 and COMPLETED. Turning it off
        leaves quantity and status alone.

        Returns:
            The new flag value
        """
        item.is_unused = not item.is_unused

        if item.is_unused:
            item.quantity = Decimal("0")
            item.status = ItemStatus.COMPLETED

        logger.info("item_unused_toggled", item_id=item.id, is_unused=item.is_unused)
        return item.is_unused

    def correct(self, item: ProductItem, name: str, spec: str, unit: str) -> None:
        """
        Overwrite the descriptive fields and flag the item as corrected.

        Pre-correction values are captured only on the first correction.
        """
        if item.original_name is None:
            item.original_name = item.name
        if item.original_spec is None:
            item.original_spec = item.spec
        if item.original_unit is None:
            item.original_unit = item.unit

        item.name = name
        item.spec = spec
        item.unit = unit
        item.has_error = True

        logger.info(
            "item_corrected",
            item_id=item.id,
            name=name,
            original_name=item.original_name
        )

    def build_new_item(
        self,
        item_id: str,
        name: str,
        spec: Optional[str] = None,
        unit: Optional[str] = None,
        quantity_text: Optional[str] = None,
    ) -> ProductItem:
        """
        Create an operator-added item, already COMPLETED.

        Raises:
            InvalidItemError: If name is blank
        """
        clean_name = clean_text(name)
        if clean_name is None:
            raise InvalidItemError("New item needs a name", details={"field": "name"})

        quantity = parse_quantity(quantity_text)

        return ProductItem(
            id=item_id,
            name=clean_name,
            spec=clean_text(spec) or DEFAULT_NEW_ITEM_SPEC,
            unit=clean_text(unit) or DEFAULT_NEW_ITEM_UNIT,
            quantity=quantity if quantity is not None else Decimal("0"),
            status=ItemStatus.COMPLETED,
            is_new=True,
        )

    # ===================
    # CONFIRMATION QUERIES
    # ===================

    def unused_confirmation(self, item: ProductItem) -> ConfirmationPrompt:
        """Marking unused always asks first, in either direction."""
        return ConfirmationPrompt(
            required=True,
            message=f"确定标记 {item.name} 为不再使用吗？"
        )

    def finish_confirmation(self, pending_count: int) -> ConfirmationPrompt:
        """Finishing with pending items is a soft warning."""
        if pending_count > 0:
            return ConfirmationPrompt(
                required=True,
                message=f"还有 {pending_count} 个货品未处理，确定要结束吗？"
            )
        return ConfirmationPrompt(required=False)
