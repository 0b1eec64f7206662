"""
Excel export utilities.

Functions to build the cash register reports downloaded from the admin.
"""
import io
from typing import Any

import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet


# Default styles for Excel exports
HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="16A34A", end_color="16A34A", fill_type="solid")
HEADER_ALIGNMENT = Alignment(horizontal="center", vertical="center")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)


def create_excel_workbook(title: str) -> tuple[Workbook, Worksheet]:
    """
    Create a new Excel workbook with a named sheet.

    Args:
        title: The title for the active sheet

    Returns:
        Tuple of (workbook, active_worksheet)
    """
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = title[:31]  # Excel sheet names max 31 chars
    return workbook, sheet


def style_header_row(ws: Worksheet, row: int, columns: list[str]) -> None:
    """
    Add styled headers to a worksheet row.
    """
    for col_idx, header in enumerate(columns, start=1):
        cell = ws.cell(row=row, column=col_idx, value=header)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGNMENT
        cell.border = THIN_BORDER


def add_data_rows(
    ws: Worksheet,
    data: list[list[Any]],
    start_row: int,
    apply_border: bool = True,
) -> int:
    """
    Add multiple rows of data to a worksheet.

    Returns:
        The row number after the last data row
    """
    current_row = start_row
    for row_data in data:
        for col_idx, value in enumerate(row_data, start=1):
            cell = ws.cell(row=current_row, column=col_idx, value=value)
            if apply_border:
                cell.border = THIN_BORDER
        current_row += 1
    return current_row


def auto_adjust_column_widths(ws: Worksheet, min_width: int = 10, max_width: int = 50) -> None:
    """
    Auto-adjust column widths based on content.
    """
    for column in ws.columns:
        column_letter = column[0].column_letter
        max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
        ws.column_dimensions[column_letter].width = min(max(max_length + 2, min_width), max_width)


def workbook_to_bytes(workbook: Workbook) -> bytes:
    output = io.BytesIO()
    workbook.save(output)
    return output.getvalue()
