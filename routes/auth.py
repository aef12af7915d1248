"""
Auth API routes.

Credential check against the operator directory, plus the product
template download stores use to set up their item lists.
"""

from urllib.parse import quote

from fastapi import APIRouter
from fastapi.responses import JSONResponse, StreamingResponse
import structlog

from models.workshop import LoginRequest, OperatorResponse
from services.operator_service import get_operator_service
from services.export_service import get_export_service, XLSX_MEDIA_TYPE
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()

TEMPLATE_FILE_NAME = "products.xlsx"


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


def attachment_headers(file_name: str) -> dict:
    """Content-Disposition for a (possibly non-ASCII) download name."""
    return {
        "Content-Disposition": f"attachment; filename*=UTF-8''{quote(file_name)}"
    }


# ===================
# ROUTES
# ===================

@router.post("/login", response_model=OperatorResponse)
async def login(data: LoginRequest):
    """
    Check operator credentials.

    Returns the operator's username and store.
    """
    try:
        operator = get_operator_service().authenticate(data.username, data.password)
        return OperatorResponse(username=operator.username, store_name=operator.store_name)

    except Exception as e:
        return handle_error(e)


@router.get("/template")
async def download_template():
    """
    Download an empty product workbook.

    One sheet per store in the operator directory, with the header row
    the item source expects.
    """
    try:
        store_names = get_operator_service().store_names()
        output = get_export_service().generate_products_template(store_names)

        return StreamingResponse(
            output,
            media_type=XLSX_MEDIA_TYPE,
            headers=attachment_headers(TEMPLATE_FILE_NAME)
        )

    except Exception as e:
        return handle_error(e)
