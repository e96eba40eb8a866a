# core/utils/csv_export.py
import csv
import io
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence


def format_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"


def format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def to_csv(rows: Iterable[Dict[str, Any]], columns: Optional[Sequence[str]] = None) -> str:
    """Render dict rows as CSV text.

    Fields containing a comma, quote, CR or LF are quoted and inner quotes
    doubled. Lines end with ``\\n``, including the last one. Without
    ``columns`` the header is the sorted union of the row keys.
    """
    rows = list(rows)
    header: List[str] = list(columns) if columns else sorted({key for row in rows for key in row})

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(header)
    for row in rows:
        writer.writerow([format_cell(row.get(column)) for column in header])
    return buffer.getvalue()
