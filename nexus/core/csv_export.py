"""
CSV rendering shared by the export endpoints.

Cells containing a comma, quote or newline are quoted and embedded quotes
doubled (csv.QUOTE_MINIMAL). Rows end with a bare newline.
"""

import csv
import io
from collections.abc import Iterable, Sequence
from datetime import date, datetime

from nexus.config import settings
from nexus.core.calculations import round_money, to_float
from nexus.models.base import utcnow

TOTALS_LABEL = "TOTALS"


def format_money(value) -> str:
    return f"{round_money(value):.2f}"


def format_percent(value) -> str:
    return f"{to_float(value):.1f}"


def format_date(value: date | datetime | None) -> str:
    """MM/DD/YYYY, empty for missing dates."""
    if value is None:
        return ""
    return value.strftime("%m/%d/%Y")


def money_header(label: str) -> str:
    """Column header for a currency column, e.g. 'Cost Price (R)'."""
    return f"{label} ({settings.CURRENCY_SYMBOL})"


def humanize(value) -> str:
    """Enum or snake_case value as a title-cased label ('low_stock' -> 'Low Stock')."""
    raw = getattr(value, "value", value)
    if raw is None:
        return ""
    return str(raw).replace("_", " ").title()


def render_csv(headers: Sequence[str], rows: Iterable[Sequence]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow(["" if cell is None else cell for cell in row])
    return buffer.getvalue()


def export_filename(prefix: str, on: date | None = None) -> str:
    """'<prefix>-export-YYYY-MM-DD.csv' for the given (default: current UTC) date."""
    on = on or utcnow().date()
    return f"{prefix}-export-{on.isoformat()}.csv"
