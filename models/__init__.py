"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.operator import Operator, OperatorRecord
from models.session import (
    Mode,
    ItemStatus,
    ProductItem,
    SessionProgress,
    ConfirmationPrompt,
    FinishSummary,
)
from models.workshop import (
    LoginRequest,
    OperatorResponse,
    SessionOpenRequest,
    StageInputRequest,
    CorrectionRequest,
    NewItemRequest,
    ItemResponse,
    ItemEntryResponse,
    ItemListResponse,
    SessionLabels,
    SessionStateResponse,
    JumpResponse,
    FinishResponse,
    ExportInfoResponse,
)

__all__ = [
    # Base
    "BaseSchema",

    # Operator
    "Operator",
    "OperatorRecord",

    # Session
    "Mode",
    "ItemStatus",
    "ProductItem",
    "SessionProgress",
    "ConfirmationPrompt",
    "FinishSummary",

    # API
    "LoginRequest",
    "OperatorResponse",
    "SessionOpenRequest",
    "StageInputRequest",
    "CorrectionRequest",
    "NewItemRequest",
    "ItemResponse",
    "ItemEntryResponse",
    "ItemListResponse",
    "SessionLabels",
    "SessionStateResponse",
    "JumpResponse",
    "FinishResponse",
    "ExportInfoResponse",
]
