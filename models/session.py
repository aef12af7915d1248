"""
Session data model: modes, item status, product items, progress.
"""

from pydantic import Field, computed_field
from typing import Optional
from enum import Enum
from decimal import Decimal

from models.base import BaseSchema


class Mode(str, Enum):
    """Work session mode. Fixed for the life of a session."""
    COUNT = "COUNT"  # 盘点
    ORDER = "ORDER"  # 订货

    @property
    def document_type(self) -> str:
        """Document type label used in file names and exports."""
        return _DOCUMENT_TYPES[self]

    @property
    def quantity_header(self) -> str:
        """Header of the quantity column in exports."""
        return _QUANTITY_HEADERS[self]

    @property
    def system_name(self) -> str:
        return _SYSTEM_NAMES[self]

    @property
    def finish_label(self) -> str:
        return _FINISH_LABELS[self]


_DOCUMENT_TYPES = {
    Mode.COUNT: "盘点单",
    Mode.ORDER: "订货单",
}

_QUANTITY_HEADERS = {
    Mode.COUNT: "盘点数量",
    Mode.ORDER: "订货数量",
}

_SYSTEM_NAMES = {
    Mode.COUNT: "盘点系统",
    Mode.ORDER: "订货系统",
}

_FINISH_LABELS = {
    Mode.COUNT: "结束盘点",
    Mode.ORDER: "结束订货",
}


class ItemStatus(str, Enum):
    """
    Per-item processing status.

    PENDING -> COMPLETED (quantity committed or marked unused)
    PENDING -> SKIPPED (ORDER mode only, "no order needed")
    A quantity commit always lands on COMPLETED.
    """
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    SKIPPED = "SKIPPED"


class ProductItem(BaseSchema):
    """
    One product line in a session.

    Descriptive fields change only through a correction, which also
    captures the pre-correction values once into the original_* fields.
    """

    id: str = Field(..., min_length=1, description="Identifier, unique within the session")
    name: str = Field(..., description="Product name")
    spec: str = Field("", description="Packaging spec, e.g. 5kg/桶")
    unit: str = Field("", description="Counting unit")

    quantity: Optional[Decimal] = Field(
        None,
        description="Committed quantity (None until committed)"
    )
    status: ItemStatus = Field(ItemStatus.PENDING, description="Processing status")

    is_unused: bool = Field(False, description="不再使用")
    has_error: bool = Field(False, description="信息有误")
    is_new: bool = Field(False, description="新增货品, appended during the session")

    original_name: Optional[str] = Field(None, description="Name before the first correction")
    original_spec: Optional[str] = Field(None, description="Spec before the first correction")
    original_unit: Optional[str] = Field(None, description="Unit before the first correction")

    @property
    def is_pending(self) -> bool:
        return self.status == ItemStatus.PENDING


class SessionProgress(BaseSchema):
    """Processed vs total item count."""

    completed: int = Field(..., ge=0, description="Items with status != PENDING")
    total: int = Field(..., ge=0, description="Items in the session")

    @computed_field
    @property
    def ratio(self) -> float:
        if self.total == 0:
            return 0.0
        return self.completed / self.total

    @computed_field
    @property
    def pending(self) -> int:
        return self.total - self.completed


class ConfirmationPrompt(BaseSchema):
    """
    Whether an action should be confirmed by the operator first.

    The engine never blocks; the caller decides what to do with this.
    """

    required: bool = Field(..., description="Ask the operator before proceeding")
    message: Optional[str] = Field(None, description="Text to show when asking")


class FinishSummary(BaseSchema):
    """Result of finishing a session."""

    pending_count: int = Field(..., ge=0, description="Items still PENDING")
    progress: SessionProgress
    confirmation: ConfirmationPrompt
