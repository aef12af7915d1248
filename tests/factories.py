"""
Test data factories.

Uses factory pattern to generate consistent test data.
"""

from decimal import Decimal
from typing import Optional

from models.operator import Operator
from models.session import ItemStatus, Mode, ProductItem
from services.session_service import WorkSession


class ProductItemFactory:
    """
    Factory for creating test ProductItems.

    Usage:
        # Create with defaults (PENDING, no quantity)
        item = ProductItemFactory.create()

        # Create with overrides
        item = ProductItemFactory.create(name="原味奶酪", quantity=Decimal("5"))

        # Create multiple
        items = ProductItemFactory.create_batch(5)
    """

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(
        cls,
        id: Optional[str] = None,
        name: Optional[str] = None,
        spec: str = "1kg/袋",
        unit: str = "袋",
        quantity: Optional[Decimal] = None,
        status: ItemStatus = ItemStatus.PENDING,
        **flags
    ) -> ProductItem:
        """
        Create a single item.

        Args:
            id: Item id (auto-generated if not provided)
            name: Product name (auto-generated if not provided)
            spec: Packaging spec
            unit: Counting unit
            quantity: Committed quantity
            status: Item status
            **flags: is_unused, has_error, is_new, original_* overrides

        Returns:
            ProductItem
        """
        counter = cls._next_counter()

        return ProductItem(
            id=id or f"item-test-{counter}",
            name=name or f"测试货品 {counter}",
            spec=spec,
            unit=unit,
            quantity=quantity,
            status=status,
            **flags
        )

    @classmethod
    def create_batch(cls, count: int, **overrides) -> list[ProductItem]:
        """Create multiple items with unique ids."""
        return [cls.create(**overrides) for _ in range(count)]

    @classmethod
    def create_completed(cls, quantity: Decimal = Decimal("1"), **overrides) -> ProductItem:
        """Create an item with a committed quantity."""
        return cls.create(quantity=quantity, status=ItemStatus.COMPLETED, **overrides)

    @classmethod
    def create_skipped(cls, **overrides) -> ProductItem:
        """Create an item marked "no order needed"."""
        return cls.create(quantity=Decimal("0"), status=ItemStatus.SKIPPED, **overrides)

    @classmethod
    def reset_counter(cls):
        """Reset the counter (call in test setup if needed)."""
        cls._counter = 0


class SessionFactory:
    """
    Factory for creating test WorkSessions.

    Usage:
        session = SessionFactory.create(mode=Mode.ORDER, item_count=2)
    """

    @classmethod
    def create(
        cls,
        mode: Mode = Mode.COUNT,
        items: Optional[list[ProductItem]] = None,
        item_count: int = 3,
        username: str = "tester",
        store_name: str = "测试门店",
        **kwargs
    ) -> WorkSession:
        """
        Create a session.

        Args:
            mode: COUNT or ORDER
            items: Items to use (item_count fresh PENDING items if not provided)
            item_count: Number of items to generate when items is None
            username: Operator username
            store_name: Operator store
            **kwargs: Passed to WorkSession (start_time, session_id)

        Returns:
            WorkSession
        """
        if items is None:
            items = ProductItemFactory.create_batch(item_count)

        return WorkSession(
            operator=Operator(username=username, store_name=store_name),
            mode=mode,
            items=items,
            **kwargs
        )
