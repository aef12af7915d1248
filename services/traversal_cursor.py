"""
Position tracking over the item list.

The cursor knows only the list length; committing staged input before a
move is the session controller's job.
"""

from typing import Callable

from exceptions import InvalidCursorPositionError


class TraversalCursor:
    """
    Integer position p with 0 <= p < length.

    length is read through a callable so items appended to the
    repository are visible without re-syncing.
    """

    def __init__(self, length: Callable[[], int], position: int = 0):
        self._length = length
        self._position = 0
        self.jump_to(position)

    @property
    def position(self) -> int:
        return self._position

    @property
    def at_first(self) -> bool:
        return self._position == 0

    @property
    def at_last(self) -> bool:
        return self._position == self._length() - 1

    def advance(self) -> bool:
        """Move forward one item. Returns False (no-op) at the last item."""
        if self._position < self._length() - 1:
            self._position += 1
            return True
        return False

    def retreat(self) -> bool:
        """Move back one item. Returns False (no-op) at the first item."""
        if self._position > 0:
            self._position -= 1
            return True
        return False

    def jump_to(self, index: int) -> None:
        """
        Focus index.

        Raises:
            InvalidCursorPositionError: If index is outside 0..length-1
        """
        total = self._length()
        if not 0 <= index < total:
            raise InvalidCursorPositionError(index, total)
        self._position = index
