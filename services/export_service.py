"""
Export service: Turn a finished session into the count/order sheet.

build_export_table is the pure serializer (session -> rows).
ExportService renders the table into an .xlsx workbook with openpyxl.
Also generates the product workbook template stores fill in.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from io import BytesIO
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font, Border, Side, PatternFill
from openpyxl.utils import get_column_letter
import structlog

from models.session import ItemStatus, ProductItem
from parsers.product_sheet_parser import sheet_name_for_store
from services.mutation_engine import SKIP_MARKER, format_quantity
from services.session_service import WorkSession

logger = structlog.get_logger(__name__)

SHEET_TITLE = "清单"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

NOTE_NEW = "新增"
NOTE_UNUSED = "不再使用"
NOTE_CORRECTED = "信息有误(已修正)"

TEMPLATE_COLUMNS = ["货品名称", "规格", "单位"]

# Column widths by header (characters)
COLUMN_WIDTHS = {
    "序号": 6,
    "货品名称": 24,
    "规格": 16,
    "单位": 8,
    "备注": 28,
    "原始名称": 24,
    "原始规格": 16,
}
DEFAULT_COLUMN_WIDTH = 12


class ExportLayout(str, Enum):
    """Export sheet variants."""
    FLAT = "flat"                # item table only
    WITH_HEADER = "with_header"  # metadata rows, blank row, item table


@dataclass
class ExportTable:
    """Tabular export record, independent of the file format."""
    columns: list[str]
    rows: list[list]
    metadata: list[tuple[str, str]] = field(default_factory=list)

    def as_records(self) -> list[dict]:
        """Rows keyed by column header."""
        return [dict(zip(self.columns, row)) for row in self.rows]


# ===================
# PURE SERIALIZER
# ===================

def export_columns(session: WorkSession) -> list[str]:
    """Item table header, with the quantity column labelled by mode."""
    return [
        "序号",
        "货品名称",
        "规格",
        "单位",
        session.mode.quantity_header,
        "备注",
        "原始名称",
        "原始规格",
    ]


def quantity_cell(item: ProductItem) -> str:
    """Skip marker for skipped items, else the quantity as text ("0" if unset)."""
    if item.status == ItemStatus.SKIPPED:
        return SKIP_MARKER
    return format_quantity(item.quantity) or "0"


def notes_cell(item: ProductItem) -> str:
    """True flags only, in the fixed order new, unused, corrected."""
    notes = []
    if item.is_new:
        notes.append(NOTE_NEW)
    if item.is_unused:
        notes.append(NOTE_UNUSED)
    if item.has_error:
        notes.append(NOTE_CORRECTED)
    return ", ".join(notes)


def export_row(sequence: int, item: ProductItem) -> list:
    return [
        sequence,
        item.name,
        item.spec,
        item.unit,
        quantity_cell(item),
        notes_cell(item),
        item.original_name or "",
        item.original_spec or "",
    ]


def export_metadata(session: WorkSession, exported_at: datetime) -> list[tuple[str, str]]:
    return [
        ("门店", session.store_name),
        ("操作员", session.operator.username),
        ("单据类型", session.mode.document_type),
        ("开始时间", session.start_time.strftime("%Y-%m-%d %H:%M:%S")),
        ("导出时间", exported_at.strftime("%Y-%m-%d %H:%M:%S")),
    ]


def build_export_table(
    session: WorkSession,
    layout: ExportLayout = ExportLayout.FLAT,
    exported_at: Optional[datetime] = None,
) -> ExportTable:
    """
    Serialize a session into one row per item, in item order.

    Args:
        session: Session to export (not modified)
        layout: FLAT for the item table only, WITH_HEADER to add metadata rows
        exported_at: Timestamp for the metadata rows (defaults to now)

    Returns:
        ExportTable with len(rows) == number of items
    """
    if exported_at is None:
        exported_at = datetime.now(timezone.utc)

    rows = [
        export_row(sequence, item)
        for sequence, item in enumerate(session.items, start=1)
    ]

    metadata = []
    if layout == ExportLayout.WITH_HEADER:
        metadata = export_metadata(session, exported_at)

    return ExportTable(
        columns=export_columns(session),
        rows=rows,
        metadata=metadata,
    )


def build_export_filename(session: WorkSession, on: Optional[date] = None) -> str:
    """
    File name for the export.

    '{store}_{document type}_{operator}_{YYYY-MM-DD}.xlsx'
    """
    if on is None:
        on = datetime.now(timezone.utc).date()
    return (
        f"{session.store_name}_{session.mode.document_type}_"
        f"{session.operator.username}_{on.isoformat()}.xlsx"
    )


def build_share_message(session: WorkSession) -> str:
    """Text sent along with the file when it is shared instead of downloaded."""
    return f"这是 {session.store_name} 的{session.mode.document_type}，请查收。"


# ===================
# EXCEL RENDERING
# ===================

class ExportService:
    """Service for generating session export files."""

    def generate_session_excel(
        self,
        session: WorkSession,
        layout: ExportLayout = ExportLayout.FLAT,
        exported_at: Optional[datetime] = None,
    ) -> BytesIO:
        """
        Generate the count/order sheet as an Excel file.

        Args:
            session: Session to export
            layout: Sheet variant
            exported_at: Timestamp for the metadata rows (defaults to now)

        Returns:
            BytesIO containing the Excel file
        """
        table = build_export_table(session, layout=layout, exported_at=exported_at)

        logger.info(
            "generating_session_excel",
            session_id=session.id,
            mode=session.mode.value,
            layout=layout.value,
            item_count=len(table.rows),
        )

        wb = Workbook()
        ws = wb.active
        ws.title = SHEET_TITLE

        # Styles
        bold_font = Font(bold=True)
        thin_border = Border(
            bottom=Side(style="thin", color="000000")
        )
        header_fill = PatternFill(start_color="E0E8FF", end_color="E0E8FF", fill_type="solid")

        row = 1

        # Metadata block (WITH_HEADER only)
        for label, value in table.metadata:
            ws.cell(row=row, column=1, value=label).font = bold_font
            ws.cell(row=row, column=2, value=value)
            row += 1
        if table.metadata:
            row += 1  # blank row

        # Column headers
        for col, header in enumerate(table.columns, start=1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.font = bold_font
            cell.border = thin_border
            cell.fill = header_fill
            ws.column_dimensions[get_column_letter(col)].width = COLUMN_WIDTHS.get(
                header, DEFAULT_COLUMN_WIDTH
            )
        row += 1

        # Items
        for values in table.rows:
            for col, value in enumerate(values, start=1):
                ws.cell(row=row, column=col, value=value)
            row += 1

        logger.info(
            "session_excel_generated",
            session_id=session.id,
            rows=len(table.rows),
        )

        # Save to BytesIO
        output = BytesIO()
        wb.save(output)
        output.seek(0)

        return output

    def generate_products_template(self, store_names: list[str]) -> BytesIO:
        """
        Generate an empty product workbook, one sheet per store.

        Each sheet carries the header row the item source reads.
        Duplicate store names get a single sheet.

        Args:
            store_names: Stores from the operator directory

        Returns:
            BytesIO containing the Excel file
        """
        logger.info("generating_products_template", stores=len(store_names))

        wb = Workbook()
        wb.remove(wb.active)

        bold_font = Font(bold=True)
        seen = set()

        for store_name in store_names:
            title = sheet_name_for_store(store_name)
            if title in seen:
                continue
            seen.add(title)

            ws = wb.create_sheet(title=title)
            for col, header in enumerate(TEMPLATE_COLUMNS, start=1):
                ws.cell(row=1, column=col, value=header).font = bold_font
                ws.column_dimensions[get_column_letter(col)].width = COLUMN_WIDTHS.get(
                    header, DEFAULT_COLUMN_WIDTH
                )

        if not wb.sheetnames:
            ws = wb.create_sheet(title="门店")
            for col, header in enumerate(TEMPLATE_COLUMNS, start=1):
                ws.cell(row=1, column=col, value=header).font = bold_font

        output = BytesIO()
        wb.save(output)
        output.seek(0)

        return output


# Singleton instance
_export_service: Optional[ExportService] = None


def get_export_service() -> ExportService:
    """Get or create ExportService instance."""
    global _export_service
    if _export_service is None:
        _export_service = ExportService()
    return _export_service
