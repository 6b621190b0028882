"""Date and time helpers for agenda timestamps.

Agenda start values are ISO 8601 strings. Values carrying an offset keep
their instant; values without one are read as wall-clock time in the
configured zone.
"""

from datetime import datetime, timezone, tzinfo
from typing import Any, Optional
from dateutil import parser as dateutil_parser

from agenda_ccb.utils.logger import log_debug


WEEKDAY_ABBREVIATIONS = ["seg", "ter", "qua", "qui", "sex", "sáb", "dom"]


def parse_event_start(value: Any, zone: tzinfo) -> Optional[datetime]:
    """Parse an ISO 8601 start value and convert it into ``zone``.

    Args:
        value: Raw start value from the agenda
        zone: Configured time zone

    Returns:
        Aware datetime in ``zone``, or None if the value is missing or invalid
    """
    if not isinstance(value, str) or not value.strip():
        return None

    try:
        parsed = dateutil_parser.isoparse(value.strip())
    except (ValueError, OverflowError) as e:
        log_debug(f"Ignoring invalid start '{value}': {e}")
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=zone)
    return parsed.astimezone(zone)


def format_local_when(moment: datetime) -> str:
    """Format a local start as ``dd/MM (ddd) às HH:mm``, e.g. ``10/06 (seg) às 15:00``."""
    weekday = WEEKDAY_ABBREVIATIONS[moment.weekday()]
    return f"{moment:%d/%m} ({weekday}) às {moment:%H:%M}"


def to_local_iso(moment: datetime) -> str:
    """ISO 8601 with milliseconds and the local offset."""
    return moment.isoformat(timespec="milliseconds")


def to_utc_iso(moment: datetime) -> str:
    """ISO 8601 in UTC with milliseconds and a ``Z`` suffix."""
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")
