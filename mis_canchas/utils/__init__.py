"""
Utilidades de Mis Canchas.

Funciones puras (montos, fechas, formato, exportacion) reutilizadas por
servicios, estados y rutas de la API.
"""
from mis_canchas.utils.formatting import (
    round_currency,
    parse_float_safe,
)
from mis_canchas.utils.dates import (
    parse_date,
    parse_time,
    format_datetime_display,
)
from mis_canchas.utils.exports import (
    create_excel_workbook,
    style_header_row,
    add_data_rows,
    workbook_to_bytes,
)

__all__ = [
    # formatting
    "round_currency",
    "parse_float_safe",
    # dates
    "parse_date",
    "parse_time",
    "format_datetime_display",
    # exports
    "create_excel_workbook",
    "style_header_row",
    "add_data_rows",
    "workbook_to_bytes",
]
