"""Reminders module for agenda push notifications."""

from agenda_ccb.reminders.time_window import TimeWindowFilter, FilteredEvent
from agenda_ccb.reminders.reminder_planner import ReminderPlanner, ReminderInstruction
from agenda_ccb.reminders.notification_dispatcher import NotificationDispatcher, DispatchOutcome
from agenda_ccb.reminders.reminder_service import ReminderService, RunSummary

__all__ = [
    'TimeWindowFilter',
    'FilteredEvent',
    'ReminderPlanner',
    'ReminderInstruction',
    'NotificationDispatcher',
    'DispatchOutcome',
    'ReminderService',
    'RunSummary',
]
