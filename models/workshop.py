"""
Request/response schemas for the session API.
"""

from pydantic import Field
from typing import Optional
from decimal import Decimal
from datetime import datetime

from models.base import BaseSchema
from models.session import ConfirmationPrompt, ItemStatus, Mode, SessionProgress


# ===================
# AUTH
# ===================

class LoginRequest(BaseSchema):
    """Operator credentials."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class OperatorResponse(BaseSchema):
    """Logged-in operator profile."""

    username: str
    store_name: str


# ===================
# SESSION COMMANDS
# ===================

class SessionOpenRequest(LoginRequest):
    """Credentials plus the mode picked on the dashboard."""

    mode: Mode = Field(..., description="COUNT or ORDER")


class StageInputRequest(BaseSchema):
    """Staged quantity text (free-form until committed)."""

    text: str = Field("", max_length=64, description="Raw quantity text")


class CorrectionRequest(BaseSchema):
    """Corrected descriptive fields for the focused item."""

    name: str = Field(..., min_length=1, max_length=255)
    spec: str = Field("", max_length=255)
    unit: str = Field("", max_length=50)


class NewItemRequest(BaseSchema):
    """Item the operator adds after the list was loaded."""

    name: str = Field(..., min_length=1, max_length=255)
    spec: Optional[str] = Field(None, max_length=255)
    unit: Optional[str] = Field(None, max_length=50)
    quantity: Optional[str] = Field(None, max_length=64, description="Quantity text, 0 if unparsable")


# ===================
# RESPONSES
# ===================

class ItemResponse(BaseSchema):
    """Item as shown to the operator."""

    id: str
    name: str
    spec: str
    unit: str
    quantity: Optional[Decimal] = None
    status: ItemStatus
    is_unused: bool
    has_error: bool
    is_new: bool
    original_name: Optional[str] = None
    original_spec: Optional[str] = None
    original_unit: Optional[str] = None


class ItemEntryResponse(BaseSchema):
    """Item with its position, for list selection."""

    index: int
    item: ItemResponse


class ItemListResponse(BaseSchema):
    """Filtered item list."""

    data: list[ItemEntryResponse]
    total: int


class SessionLabels(BaseSchema):
    """Mode-dependent display text."""

    system_name: str
    document_type: str
    quantity_header: str
    finish_label: str


class SessionStateResponse(BaseSchema):
    """Full session state after any command."""

    id: str
    mode: Mode
    operator: OperatorResponse
    start_time: datetime
    current_index: int
    current_item: ItemResponse
    staged_text: str
    progress: SessionProgress
    at_first: bool
    at_last: bool
    can_skip: bool
    labels: SessionLabels
    unused_confirmation: ConfirmationPrompt
    leave_confirmation: ConfirmationPrompt


class JumpResponse(BaseSchema):
    """Result of jump-to-first-pending."""

    all_processed: bool
    message: Optional[str] = None
    state: SessionStateResponse


class FinishResponse(BaseSchema):
    """Result of finishing a session."""

    pending_count: int
    confirmation: ConfirmationPrompt
    state: SessionStateResponse


class ExportInfoResponse(BaseSchema):
    """What the export sink needs besides the file bytes."""

    file_name: str
    document_type: str
    share_message: str
    row_count: int
