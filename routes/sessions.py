"""
Session API routes.

One count/order session per operator. Every command returns the full
session state so the client can re-render from it.
"""

from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse, StreamingResponse
import structlog

from config import settings
from models.workshop import (
    SessionOpenRequest,
    StageInputRequest,
    CorrectionRequest,
    NewItemRequest,
    ItemResponse,
    ItemEntryResponse,
    ItemListResponse,
    OperatorResponse,
    SessionLabels,
    SessionStateResponse,
    JumpResponse,
    FinishResponse,
    ExportInfoResponse,
)
from services.export_service import (
    ExportLayout,
    XLSX_MEDIA_TYPE,
    build_export_filename,
    build_share_message,
    get_export_service,
)
from services.mutation_engine import SKIP_MODES
from services.operator_service import get_operator_service
from services.session_registry import get_session_registry
from services.session_service import ALL_PROCESSED_MESSAGE, WorkSession
from routes.auth import attachment_headers
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# STATE
# ===================

def build_state(session: WorkSession) -> SessionStateResponse:
    """Snapshot of a session for the client."""
    return SessionStateResponse(
        id=session.id,
        mode=session.mode,
        operator=OperatorResponse(
            username=session.operator.username,
            store_name=session.store_name
        ),
        start_time=session.start_time,
        current_index=session.current_index,
        current_item=ItemResponse.model_validate(session.current_item.model_dump()),
        staged_text=session.staged_text,
        progress=session.progress,
        at_first=session.cursor.at_first,
        at_last=session.cursor.at_last,
        can_skip=session.mode in SKIP_MODES,
        labels=SessionLabels(
            system_name=session.mode.system_name,
            document_type=session.mode.document_type,
            quantity_header=session.mode.quantity_header,
            finish_label=session.mode.finish_label,
        ),
        unused_confirmation=session.unused_confirmation(),
        leave_confirmation=session.leave_confirmation(),
    )


# ===================
# LIFECYCLE
# ===================

@router.post("", response_model=SessionStateResponse, status_code=201)
async def open_session(data: SessionOpenRequest):
    """
    Log in and start a session in the chosen mode.

    Loads the store's item list (or the built-in defaults when the
    product workbook is unavailable). Replaces any earlier session of
    the same operator.
    """
    try:
        operator = get_operator_service().authenticate(data.username, data.password)
        session = get_session_registry().open(operator, data.mode)
        return build_state(session)

    except Exception as e:
        return handle_error(e)


@router.get("/{session_id}", response_model=SessionStateResponse)
async def get_session(session_id: str):
    """Get current session state."""
    try:
        return build_state(get_session_registry().get(session_id))

    except Exception as e:
        return handle_error(e)


@router.delete("/{session_id}", status_code=204)
async def discard_session(session_id: str):
    """
    Leave the session (back to mode selection, or logout).

    All session state is dropped.
    """
    try:
        get_session_registry().discard(session_id)
        return None

    except Exception as e:
        return handle_error(e)


@router.get("/{session_id}/items", response_model=ItemListResponse)
async def list_items(
    session_id: str,
    status: Optional[str] = Query(
        None,
        pattern="^(pending|processed)$",
        description="pending = not yet processed, processed = everything else"
    )
):
    """
    List items with their positions, for picking one to jump to.
    """
    try:
        session = get_session_registry().get(session_id)

        if status == "pending":
            entries = session.pending_entries()
        elif status == "processed":
            entries = session.processed_entries()
        else:
            entries = list(enumerate(session.items))

        data = [
            ItemEntryResponse(
                index=index,
                item=ItemResponse.model_validate(item.model_dump())
            )
            for index, item in entries
        ]
        return ItemListResponse(data=data, total=len(data))

    except Exception as e:
        return handle_error(e)


# ===================
# INPUT AND NAVIGATION
# ===================

@router.put("/{session_id}/input", response_model=SessionStateResponse)
async def stage_input(session_id: str, data: StageInputRequest):
    """Replace the staged quantity text of the focused item."""
    try:
        session = get_session_registry().get(session_id)
        session.stage_input(data.text)
        return build_state(session)

    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/next", response_model=SessionStateResponse)
async def next_item(session_id: str):
    """Commit staged input, then move to the next item."""
    try:
        session = get_session_registry().get(session_id)
        session.next()
        return build_state(session)

    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/previous", response_model=SessionStateResponse)
async def previous_item(session_id: str):
    """Commit staged input, then move to the previous item."""
    try:
        session = get_session_registry().get(session_id)
        session.previous()
        return build_state(session)

    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/jump/pending", response_model=JumpResponse)
async def jump_to_first_pending(session_id: str):
    """
    Focus the first unprocessed item.

    When everything is processed the cursor stays put and
    all_processed is true.
    """
    try:
        session = get_session_registry().get(session_id)
        index = session.jump_to_first_pending()

        return JumpResponse(
            all_processed=index is None,
            message=ALL_PROCESSED_MESSAGE if index is None else None,
            state=build_state(session)
        )

    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/jump/{index}", response_model=SessionStateResponse)
async def jump_to_item(session_id: str, index: int):
    """Commit staged input, then focus the item at index."""
    try:
        session = get_session_registry().get(session_id)
        session.jump_to(index)
        return build_state(session)

    except Exception as e:
        return handle_error(e)


# ===================
# ITEM ACTIONS
# ===================

@router.post("/{session_id}/skip", response_model=SessionStateResponse)
async def skip_item(session_id: str):
    """
    Mark the focused item "no order needed" and advance.

    Only available in ORDER mode; COUNT mode returns 409.
    """
    try:
        session = get_session_registry().get(session_id)
        session.skip()
        return build_state(session)

    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/unused", response_model=SessionStateResponse)
async def toggle_unused(session_id: str):
    """
    Toggle "no longer used" on the focused item.

    Clients confirm first (see unused_confirmation in the state).
    """
    try:
        session = get_session_registry().get(session_id)
        session.toggle_unused()
        return build_state(session)

    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/correct", response_model=SessionStateResponse)
async def correct_item(session_id: str, data: CorrectionRequest):
    """Correct name/spec/unit of the focused item."""
    try:
        session = get_session_registry().get(session_id)
        session.correct_current(name=data.name, spec=data.spec, unit=data.unit)
        return build_state(session)

    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/items", response_model=ItemResponse, status_code=201)
async def append_item(session_id: str, data: NewItemRequest):
    """Add an item that was missing from the list."""
    try:
        session = get_session_registry().get(session_id)
        item = session.append_item(
            name=data.name,
            spec=data.spec,
            unit=data.unit,
            quantity_text=data.quantity,
        )
        return ItemResponse.model_validate(item.model_dump())

    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/finish", response_model=FinishResponse)
async def finish_session(session_id: str):
    """
    Commit the focused item and report pending items.

    Never refuses: pending items only come back as a confirmation
    prompt. The session stays open for edits and export.
    """
    try:
        session = get_session_registry().get(session_id)
        summary = session.finish()

        return FinishResponse(
            pending_count=summary.pending_count,
            confirmation=summary.confirmation,
            state=build_state(session)
        )

    except Exception as e:
        return handle_error(e)


# ===================
# EXPORT
# ===================

def _resolve_layout(layout: Optional[ExportLayout]) -> ExportLayout:
    return layout or ExportLayout(settings.export_layout)


@router.get("/{session_id}/export")
async def export_session(
    session_id: str,
    layout: Optional[ExportLayout] = Query(None, description="flat or with_header")
):
    """Download the count/order sheet as .xlsx."""
    try:
        session = get_session_registry().get(session_id)
        output = get_export_service().generate_session_excel(
            session,
            layout=_resolve_layout(layout)
        )
        file_name = build_export_filename(session)

        logger.info("session_exported", session_id=session_id, file_name=file_name)

        return StreamingResponse(
            output,
            media_type=XLSX_MEDIA_TYPE,
            headers=attachment_headers(file_name)
        )

    except Exception as e:
        return handle_error(e)


@router.get("/{session_id}/export/info", response_model=ExportInfoResponse)
async def export_info(session_id: str):
    """File name, document type and share text for the export."""
    try:
        session = get_session_registry().get(session_id)

        return ExportInfoResponse(
            file_name=build_export_filename(session),
            document_type=session.mode.document_type,
            share_message=build_share_message(session),
            row_count=len(session.items),
        )

    except Exception as e:
        return handle_error(e)
