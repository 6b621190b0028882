"""Turns filtered events into reminder instructions.

Every (event, offset) pair gets a deduplication key that only depends on
the event identity and the offset, so re-running against the same agenda
yields the same keys and the notification service can drop the repeats.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from config.config import ReminderRule
from agenda_ccb.reminders.time_window import FilteredEvent
from agenda_ccb.utils.date_parser import format_local_when, to_local_iso


_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class ReminderInstruction:
    """A notification ready to be submitted."""
    title: str
    message: str
    send_at: datetime  # UTC
    dedup_key: str
    url: Optional[str]
    offset_minutes: int
    event_start: datetime


def build_event_key(event: FilteredEvent) -> str:
    """Stable identity of an event.

    Uses the agenda id when there is one. Otherwise the start, title and
    location are joined with ``|`` and whitespace runs become ``_``.
    """
    record = event.record
    if record.id:
        return record.id
    composite = f"{to_local_iso(event.start)}|{record.title or ''}|{record.location or ''}"
    return _WHITESPACE.sub("_", composite)


def build_dedup_key(namespace: str, event_key: str, offset_minutes: int) -> str:
    return f"{namespace}:{event_key}:{offset_minutes}"


class ReminderPlanner:
    """Derives send times, texts and keys for one event at a time."""

    def __init__(
        self,
        namespace: str = "agenda-ccb",
        title: str = "Lembrete CCB",
        fallback_title: str = "Culto",
        message_template: str = "Daqui {label}: {title}{place}. Hoje {when}.",
        safety_margin: timedelta = timedelta(minutes=1),
        default_url: Optional[str] = None,
    ):
        """Initialize the planner.

        Args:
            namespace: Prefix of every deduplication key
            title: Notification heading
            fallback_title: Event title used when the agenda has none
            message_template: Body template with {label}, {title}, {place} and {when}
            safety_margin: Reminders due sooner than now + margin are skipped
            default_url: Click-through URL for events without their own
        """
        self.namespace = namespace
        self.title = title
        self.fallback_title = fallback_title
        self.message_template = message_template
        self.safety_margin = safety_margin
        self.default_url = default_url or None

    def build_message(self, event: FilteredEvent, rule: ReminderRule) -> str:
        record = event.record
        place = f" - {record.location}" if record.location else ""
        return self.message_template.format(
            label=rule.label,
            title=record.title or self.fallback_title,
            place=place,
            when=format_local_when(event.start),
        )

    def plan(
        self,
        event: FilteredEvent,
        offsets: Iterable[ReminderRule],
        now: datetime,
    ) -> List[ReminderInstruction]:
        """Build the instructions for ``event``.

        Offsets whose send time is not safely in the future are skipped.

        Args:
            event: Event selected by the window filter
            offsets: Reminder rules, processed in order
            now: Current instant (timezone-aware)

        Returns:
            Zero or more instructions, one per surviving offset
        """
        earliest = now.astimezone(timezone.utc) + self.safety_margin
        event_key = build_event_key(event)
        url = event.record.url or self.default_url

        instructions = []
        for rule in offsets:
            if not rule.enabled:
                continue

            send_at = event.start.astimezone(timezone.utc) - timedelta(minutes=rule.offset_minutes)
            if send_at <= earliest:
                continue

            instructions.append(ReminderInstruction(
                title=self.title,
                message=self.build_message(event, rule),
                send_at=send_at,
                dedup_key=build_dedup_key(self.namespace, event_key, rule.offset_minutes),
                url=url,
                offset_minutes=rule.offset_minutes,
                event_start=event.start,
            ))

        return instructions
