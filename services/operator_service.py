"""
Operator directory: username/password/store lookup for login.

Reads a JSON list of {"username", "password", "storeName"} entries.
An unreadable or malformed file falls back to the built-in operators.
"""

import json
from pathlib import Path
from typing import Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from config import settings
from exceptions import InvalidCredentialsError, SourceUnavailableError
from models.operator import Operator, OperatorRecord

logger = structlog.get_logger(__name__)

DEFAULT_OPERATORS = [
    {"username": "wdk_user", "password": "123", "storeName": "宝珠奶酪（五道口店）"},
    {"username": "xzm_user", "password": "123", "storeName": "OMEGA酸奶（西直门店）"},
]


def parse_operator_records(data: object) -> list[OperatorRecord]:
    """
    Validate raw directory JSON.

    Raises:
        SourceUnavailableError: If data is not a list of operator entries
    """
    if not isinstance(data, list):
        raise SourceUnavailableError("operators", "directory must be a JSON list")

    records = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise SourceUnavailableError("operators", f"entry {index} is not an object")
        try:
            records.append(OperatorRecord(
                username=entry.get("username", ""),
                password=str(entry.get("password", "")),
                store_name=entry.get("storeName") or entry.get("store_name") or "",
            ))
        except PydanticValidationError as e:
            raise SourceUnavailableError("operators", f"entry {index}: {e}") from e

    return records


class OperatorService:
    """
    Operator directory lookups.

    The directory is read once, on first use.
    """

    def __init__(self, users_path: Optional[Path] = None):
        self.users_path = users_path or settings.users_path
        self._records: Optional[list[OperatorRecord]] = None

    def _read_directory(self) -> list[OperatorRecord]:
        """Read the directory file, raising SourceUnavailableError on any problem."""
        try:
            data = json.loads(Path(self.users_path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise SourceUnavailableError("operators", str(e)) from e
        return parse_operator_records(data)

    def get_records(self) -> list[OperatorRecord]:
        """Directory entries, falling back to the built-in operators."""
        if self._records is None:
            try:
                self._records = self._read_directory()
                logger.info("operators_loaded", count=len(self._records))
            except SourceUnavailableError as e:
                logger.warning(
                    "operator_directory_fallback",
                    path=str(self.users_path),
                    reason=e.details.get("reason")
                )
                self._records = parse_operator_records(DEFAULT_OPERATORS)
        return self._records

    def store_names(self) -> list[str]:
        """Store names in directory order, duplicates removed."""
        return list(dict.fromkeys(record.store_name for record in self.get_records()))

    def authenticate(self, username: str, password: str) -> Operator:
        """
        Check credentials.

        Returns:
            The operator profile (no password)

        Raises:
            InvalidCredentialsError: If no entry matches both fields
        """
        for record in self.get_records():
            if record.username == username and record.password == password:
                logger.info("operator_authenticated", username=username, store=record.store_name)
                return record.to_operator()

        logger.warning("operator_authentication_failed", username=username)
        raise InvalidCredentialsError(username)

    def reload(self) -> None:
        """Forget the cached directory; the next lookup re-reads the file."""
        self._records = None


# Singleton instance
_operator_service: Optional[OperatorService] = None


def get_operator_service() -> OperatorService:
    """Get or create OperatorService instance."""
    global _operator_service
    if _operator_service is None:
        _operator_service = OperatorService()
    return _operator_service
