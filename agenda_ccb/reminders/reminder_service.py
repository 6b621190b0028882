"""Reminder service that runs one scheduling pass over the agenda.

This module provides the ReminderService class that ties together the
TimeWindowFilter, ReminderPlanner and NotificationDispatcher.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from config.config import AppConfig
from agenda_ccb.agenda.loader import load_agenda
from agenda_ccb.models.agenda import Agenda
from agenda_ccb.reminders.notification_dispatcher import DispatchOutcome, NotificationDispatcher
from agenda_ccb.reminders.reminder_planner import ReminderInstruction, ReminderPlanner
from agenda_ccb.reminders.time_window import TimeWindowFilter
from agenda_ccb.utils.date_parser import to_local_iso, to_utc_iso
from agenda_ccb.utils.logger import log_info, log_debug


@dataclass
class RunSummary:
    """What one run considered and submitted."""
    events_considered: int
    now: datetime
    outcomes: List[DispatchOutcome] = field(default_factory=list)

    @property
    def scheduled(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.success)


class ReminderService:
    """Runs a single pass: agenda -> window -> plan -> dispatch.

    The service keeps no state between runs; repeated runs are made safe by
    the deduplication keys sent to the notification service.
    """

    def __init__(
        self,
        config: AppConfig,
        dispatcher: Optional[NotificationDispatcher] = None,
        dry_run: bool = False,
    ):
        """Initialize the reminder service.

        Args:
            config: Application configuration
            dispatcher: Dispatcher to submit reminders with (built from config when omitted)
            dry_run: Plan and log reminders without submitting them
        """
        self.config = config
        self.zone = config.env.timezone
        self.dry_run = dry_run
        self.window = TimeWindowFilter(
            zone=self.zone,
            grace=timedelta(minutes=config.schedule.grace_minutes),
        )
        self.offsets = [rule for rule in config.schedule.offsets if rule.enabled]

        if dispatcher is None and not dry_run:
            dispatcher = NotificationDispatcher(
                app_id=config.env.onesignal_app_id,
                rest_api_key=config.env.onesignal_rest_api_key,
                api_url=config.onesignal.api_url,
                language=config.onesignal.language,
                segment=config.onesignal.segment,
                timeout_seconds=config.onesignal.timeout_seconds,
            )
        self.dispatcher = dispatcher

        log_debug(f"ReminderService initialized with {len(self.offsets)} offsets, zone {config.env.tz}")

    def build_planner(self, agenda: Agenda) -> ReminderPlanner:
        schedule = self.config.schedule
        return ReminderPlanner(
            namespace=schedule.namespace,
            title=schedule.title,
            fallback_title=schedule.fallback_title,
            message_template=schedule.message_template,
            safety_margin=timedelta(minutes=schedule.safety_margin_minutes),
            default_url=agenda.defaults.url or self.config.env.site_url,
        )

    async def run(self, now: Optional[datetime] = None, agenda: Optional[Agenda] = None) -> RunSummary:
        """Schedule every due reminder once.

        Args:
            now: Reference instant (defaults to the current time)
            agenda: Pre-loaded agenda (read from the configured path when omitted)

        Returns:
            RunSummary with one outcome per submitted reminder
        """
        now = (now or datetime.now(self.zone)).astimezone(self.zone)
        if agenda is None:
            agenda = load_agenda(self.config.agenda.path)

        events = self.window.select(agenda.events, now, self.config.schedule.window_days)
        planner = self.build_planner(agenda)

        instructions: List[ReminderInstruction] = []
        for event in events:
            instructions.extend(planner.plan(event, self.offsets, now))

        log_debug(f"{len(instructions)} reminder(s) planned for {len(events)} event(s)")
        outcomes = await self.dispatch_all(instructions)

        summary = RunSummary(events_considered=len(events), now=now, outcomes=outcomes)
        log_info(f"Finalizado. Eventos: {summary.events_considered}. Agora: {to_local_iso(now)}")
        return summary

    async def dispatch_all(self, instructions: List[ReminderInstruction]) -> List[DispatchOutcome]:
        """Dispatch instructions, one at a time unless max_concurrency allows more.

        Outcomes are returned in the same order as ``instructions``.
        """
        if self.dry_run:
            return [self._dry_run(instruction) for instruction in instructions]

        limit = self.config.schedule.max_concurrency
        if limit <= 1:
            outcomes = []
            for instruction in instructions:
                outcomes.append(await self.dispatcher.send(instruction))
            return outcomes

        semaphore = asyncio.Semaphore(limit)

        async def bounded(instruction: ReminderInstruction) -> DispatchOutcome:
            async with semaphore:
                return await self.dispatcher.send(instruction)

        return list(await asyncio.gather(*(bounded(i) for i in instructions)))

    def _dry_run(self, instruction: ReminderInstruction) -> DispatchOutcome:
        log_info(f"DRY-RUN: {instruction.dedup_key} -> {to_utc_iso(instruction.send_at)} | {instruction.message}")
        return DispatchOutcome(
            success=True,
            dedup_key=instruction.dedup_key,
            send_at=instruction.send_at,
        )

    async def aclose(self) -> None:
        if self.dispatcher is not None:
            await self.dispatcher.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
