"""Selection of agenda events that fall inside the active window."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Iterable, List

from agenda_ccb.models.agenda import EventRecord
from agenda_ccb.utils.date_parser import parse_event_start
from agenda_ccb.utils.logger import log_debug


@dataclass(frozen=True)
class FilteredEvent:
    """An agenda event with its start resolved in the configured zone."""
    record: EventRecord
    start: datetime


class TimeWindowFilter:
    """Keeps events starting in ``(now - grace, now + window_days)``.

    The grace period lets an event that started a few minutes ago still be
    considered, so a reminder that is due for it is not lost.
    """

    def __init__(self, zone: tzinfo, grace: timedelta = timedelta(hours=1)):
        self.zone = zone
        self.grace = grace

    def select(
        self,
        events: Iterable[EventRecord],
        now: datetime,
        window_days: int = 7,
    ) -> List[FilteredEvent]:
        """Return valid events inside the window, earliest first.

        Args:
            events: Raw agenda records
            now: Current instant (timezone-aware)
            window_days: Lookahead in days

        Returns:
            Events sorted by start; equal starts keep their input order
        """
        # Bounds and ordering use UTC instants; local clocks repeat on DST fall-back
        now_utc = now.astimezone(timezone.utc)
        lower = now_utc - self.grace
        upper = (now.astimezone(self.zone) + timedelta(days=window_days)).astimezone(timezone.utc)

        selected = []
        for record in events:
            start = parse_event_start(record.start, self.zone)
            if start is None:
                continue
            if lower < start.astimezone(timezone.utc) < upper:
                selected.append(FilteredEvent(record=record, start=start))

        # list.sort is stable
        selected.sort(key=lambda event: event.start.astimezone(timezone.utc))
        log_debug(f"{len(selected)} event(s) between {lower.isoformat()} and {upper.isoformat()}")
        return selected
