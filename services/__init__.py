"""
Business logic services.

Each service handles one domain area.
"""

from services.item_repository import ItemRepository
from services.traversal_cursor import TraversalCursor
from services.mutation_engine import (
    MutationEngine,
    parse_quantity,
    format_quantity,
    seed_staged_text,
    SKIP_MARKER,
)
from services.session_service import WorkSession
from services.export_service import (
    ExportService,
    ExportLayout,
    ExportTable,
    build_export_table,
    build_export_filename,
    build_share_message,
    get_export_service,
)
from services.item_source_service import ItemSourceService, get_item_source_service
from services.operator_service import OperatorService, get_operator_service
from services.session_registry import SessionRegistry, get_session_registry

__all__ = [
    "ItemRepository",
    "TraversalCursor",
    "MutationEngine",
    "parse_quantity",
    "format_quantity",
    "seed_staged_text",
    "SKIP_MARKER",
    "WorkSession",
    "ExportService",
    "ExportLayout",
    "ExportTable",
    "build_export_table",
    "build_export_filename",
    "build_share_message",
    "get_export_service",
    "ItemSourceService",
    "get_item_source_service",
    "OperatorService",
    "get_operator_service",
    "SessionRegistry",
    "get_session_registry",
]
