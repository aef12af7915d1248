"""
Session controller: one operator's count or order run over a store's items.

Composes the item repository, the traversal cursor and the mutation
engine. Owns the session metadata and the staged quantity text of the
focused item. Every navigation commits the staged text first.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional
from uuid import uuid4

import structlog

from exceptions import EmptySessionError
from models.operator import Operator
from models.session import (
    ConfirmationPrompt,
    FinishSummary,
    ItemStatus,
    Mode,
    ProductItem,
    SessionProgress,
)
from services.item_repository import ItemRepository
from services.mutation_engine import MutationEngine, seed_staged_text
from services.traversal_cursor import TraversalCursor

logger = structlog.get_logger(__name__)

ALL_PROCESSED_MESSAGE = "所有货品已处理完毕！"
LEAVE_SESSION_MESSAGE = "确定要退出当前系统返回主菜单吗？"


def _is_pending(item: ProductItem) -> bool:
    return item.status == ItemStatus.PENDING


def _is_processed(item: ProductItem) -> bool:
    return item.status != ItemStatus.PENDING


class WorkSession:
    """
    A single count/order session.

    Usage:
        session = WorkSession(operator, Mode.COUNT, items)
        session.stage_input("5")
        session.next()
        summary = session.finish()
    """

    def __init__(
        self,
        operator: Operator,
        mode: Mode,
        items: Iterable[ProductItem],
        start_time: Optional[datetime] = None,
        session_id: Optional[str] = None,
        engine: Optional[MutationEngine] = None,
    ):
        self.id = session_id or str(uuid4())
        self.operator = operator
        self.mode = mode
        self.start_time = start_time or datetime.now(timezone.utc)

        self.items = ItemRepository(items)
        if len(self.items) == 0:
            raise EmptySessionError(operator.store_name)

        self.cursor = TraversalCursor(lambda: len(self.items))
        self.engine = engine or MutationEngine()
        self.staged_text = seed_staged_text(self.current_item)

        logger.info(
            "session_opened",
            session_id=self.id,
            operator=operator.username,
            store=operator.store_name,
            mode=mode.value,
            item_count=len(self.items)
        )

    # ===================
    # STATE
    # ===================

    @property
    def store_name(self) -> str:
        return self.operator.store_name

    @property
    def current_index(self) -> int:
        return self.cursor.position

    @property
    def current_item(self) -> ProductItem:
        return self.items.get(self.cursor.position)

    @property
    def progress(self) -> SessionProgress:
        return SessionProgress(
            completed=self.items.count(_is_processed),
            total=len(self.items)
        )

    @property
    def pending_count(self) -> int:
        return self.items.count(_is_pending)

    def processed_entries(self) -> list[tuple[int, ProductItem]]:
        """Items already counted/ordered/skipped, for list selection."""
        return self.items.entries(_is_processed)

    def pending_entries(self) -> list[tuple[int, ProductItem]]:
        """Items still waiting, for list selection."""
        return self.items.entries(_is_pending)

    # ===================
    # INPUT STAGING
    # ===================

    def stage_input(self, text: str) -> None:
        """Replace the staged quantity text. Nothing is committed."""
        self.staged_text = text or ""

    def commit_staged(self) -> bool:
        """Commit the staged text to the focused item."""
        return self.engine.commit_staged(self.current_item, self.staged_text)

    def _reseed(self) -> None:
        self.staged_text = seed_staged_text(self.current_item)

    # ===================
    # NAVIGATION
    # ===================

    def next(self) -> bool:
        """
        Commit, then move to the next item.

        Returns:
            True if the cursor moved (False at the last item)
        """
        self.commit_staged()
        moved = self.cursor.advance()
        self._reseed()
        return moved

    def previous(self) -> bool:
        """
        Commit, then move to the previous item.

        Returns:
            True if the cursor moved (False at the first item)
        """
        self.commit_staged()
        moved = self.cursor.retreat()
        self._reseed()
        return moved

    def jump_to(self, index: int) -> None:
        """
        Commit, then focus index (list selection).

        Raises:
            InvalidCursorPositionError: If index is out of range
        """
        self.commit_staged()
        self.cursor.jump_to(index)
        self._reseed()

    def jump_to_first_pending(self) -> Optional[int]:
        """
        Commit, then focus the first PENDING item in list order.

        Returns:
            The new index, or None when every item is processed
            (cursor stays where it is)
        """
        self.commit_staged()
        index = self.items.first_index(_is_pending)

        if index is None:
            logger.info("all_items_processed", session_id=self.id)
            self._reseed()
            return None

        self.cursor.jump_to(index)
        self._reseed()
        return index

    # ===================
    # ITEM ACTIONS
    # ===================

    def skip(self) -> None:
        """
        Mark the focused item "no order needed" and advance.

        Raises:
            InvalidModeOperationError: In COUNT mode
        """
        self.engine.skip(self.current_item, self.mode)
        self.staged_text = ""
        if self.cursor.advance():
            self._reseed()

    def toggle_unused(self) -> bool:
        """
        Toggle "no longer used" on the focused item.

        Turning it on forces quantity 0 / COMPLETED and advances unless
        at the last item. Turning it off only clears the flag.

        Returns:
            The new flag value
        """
        is_unused = self.engine.toggle_unused(self.current_item)
        if is_unused:
            self._reseed()
            if not self.cursor.at_last:
                self.next()
        return is_unused

    def correct_current(self, name: str, spec: str, unit: str) -> ProductItem:
        """Apply an operator correction to the focused item."""
        item = self.current_item
        self.engine.correct(item, name=name, spec=spec, unit=unit)
        return item

    def append_item(
        self,
        name: str,
        spec: Optional[str] = None,
        unit: Optional[str] = None,
        quantity_text: Optional[str] = None,
    ) -> ProductItem:
        """
        Append an operator-added item at the end. The cursor does not move.

        Raises:
            InvalidItemError: If name is blank
        """
        item = self.engine.build_new_item(
            item_id=f"new-{len(self.items)}",
            name=name,
            spec=spec,
            unit=unit,
            quantity_text=quantity_text,
        )
        self.items.append(item)

        logger.info(
            "item_appended",
            session_id=self.id,
            item_id=item.id,
            name=item.name
        )
        return item

    def finish(self) -> FinishSummary:
        """
        Commit the focused item and report what is left.

        Never blocks: pending items only produce a confirmation prompt.
        """
        self.commit_staged()
        self._reseed()

        pending = self.pending_count
        summary = FinishSummary(
            pending_count=pending,
            progress=self.progress,
            confirmation=self.engine.finish_confirmation(pending)
        )

        logger.info(
            "session_finished",
            session_id=self.id,
            completed=summary.progress.completed,
            total=summary.progress.total,
            pending=pending
        )
        return summary

    # ===================
    # CONFIRMATION QUERIES
    # ===================

    def unused_confirmation(self) -> ConfirmationPrompt:
        return self.engine.unused_confirmation(self.current_item)

    def finish_confirmation(self) -> ConfirmationPrompt:
        """Prompt for finishing now (counts the staged text as uncommitted)."""
        return self.engine.finish_confirmation(self.pending_count)

    def leave_confirmation(self) -> ConfirmationPrompt:
        return ConfirmationPrompt(required=True, message=LEAVE_SESSION_MESSAGE)
