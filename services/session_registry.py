"""
In-memory registry of active sessions for the HTTP layer.

Sessions live only as long as the process. Discarding a session (logout,
back to mode selection) drops it entirely; nothing is persisted.
"""

from typing import Optional

import structlog

from exceptions import SessionNotFoundError
from models.operator import Operator
from models.session import Mode
from services.item_source_service import ItemSourceService, get_item_source_service
from services.session_service import WorkSession

logger = structlog.get_logger(__name__)


class SessionRegistry:
    """
    Active sessions by id.

    An operator holds at most one session: opening a new one replaces
    the previous one.
    """

    def __init__(self, item_source: Optional[ItemSourceService] = None):
        self.item_source = item_source or get_item_source_service()
        self._sessions: dict[str, WorkSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def open(self, operator: Operator, mode: Mode) -> WorkSession:
        """Load the operator's items and start a session in mode."""
        for session_id, existing in list(self._sessions.items()):
            if existing.operator.username == operator.username:
                logger.info("session_replaced", session_id=session_id, operator=operator.username)
                del self._sessions[session_id]

        items = self.item_source.load_items(operator.store_name)
        session = WorkSession(operator=operator, mode=mode, items=items)
        self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> WorkSession:
        """
        Raises:
            SessionNotFoundError: If no active session has this id
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def discard(self, session_id: str) -> None:
        """
        Drop a session and all of its state.

        Raises:
            SessionNotFoundError: If no active session has this id
        """
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFoundError(session_id)
        logger.info("session_discarded", session_id=session_id)

    def clear(self) -> None:
        self._sessions.clear()


# Singleton instance
_session_registry: Optional[SessionRegistry] = None


def get_session_registry() -> SessionRegistry:
    """Get or create SessionRegistry instance."""
    global _session_registry
    if _session_registry is None:
        _session_registry = SessionRegistry()
    return _session_registry
