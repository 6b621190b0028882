from __future__ import annotations

from datetime import datetime, timedelta, timezone

from config.config import ReminderRule, default_rules
from agenda_ccb.models.agenda import EventRecord
from agenda_ccb.reminders.reminder_planner import ReminderPlanner, build_event_key
from agenda_ccb.reminders.time_window import FilteredEvent, TimeWindowFilter


def select_one(zone, now: datetime, **fields) -> FilteredEvent:
    events = TimeWindowFilter(zone).select([EventRecord(**fields)], now, 7)
    assert len(events) == 1
    return events[0]


def test_culto_scenario_produces_both_reminders(zone, now: datetime) -> None:
    event = select_one(
        zone, now, id="E1", start="2024-06-10T15:00:00-04:00", title="Culto", location="Sede"
    )
    planner = ReminderPlanner(default_url="https://ccb.example.org")

    four_hours, one_hour = planner.plan(event, default_rules(), now)

    minus_four = timezone(timedelta(hours=-4))
    assert four_hours.send_at == datetime(2024, 6, 10, 11, 0, tzinfo=minus_four)
    assert four_hours.dedup_key == "agenda-ccb:E1:240"
    assert one_hour.send_at == datetime(2024, 6, 10, 14, 0, tzinfo=minus_four)
    assert one_hour.dedup_key == "agenda-ccb:E1:60"

    assert four_hours.send_at.utcoffset() == timedelta(0)
    assert four_hours.title == "Lembrete CCB"
    assert four_hours.message == "Daqui 4 horas: Culto - Sede. Hoje 10/06 (seg) às 15:00."
    assert one_hour.message == "Daqui 1 hora: Culto - Sede. Hoje 10/06 (seg) às 15:00."
    assert one_hour.url == "https://ccb.example.org"


def test_event_too_close_gets_no_reminders(zone, now: datetime) -> None:
    event = select_one(zone, now, id="E2", start="2024-06-10T10:30:00-04:00")
    assert ReminderPlanner().plan(event, default_rules(), now) == []


def test_only_offsets_safely_in_future_survive(zone, now: datetime) -> None:
    # 4h reminder would be due at 10:01, exactly now + margin
    event = select_one(zone, now, id="E3", start="2024-06-10T14:01:00-04:00")
    instructions = ReminderPlanner().plan(event, default_rules(), now)
    assert [i.offset_minutes for i in instructions] == [60]

    event = select_one(zone, now, id="E4", start="2024-06-10T14:01:01-04:00")
    instructions = ReminderPlanner().plan(event, default_rules(), now)
    assert [i.offset_minutes for i in instructions] == [240, 60]


def test_recently_started_event_has_nothing_due(zone, now: datetime) -> None:
    event = select_one(zone, now, id="E5", start="2024-06-10T09:50:00-04:00")
    assert ReminderPlanner().plan(event, default_rules(), now) == []


def test_disabled_rules_are_ignored(zone, now: datetime) -> None:
    event = select_one(zone, now, id="E6", start="2024-06-11T19:30:00-04:00")
    rules = [
        ReminderRule(offset_minutes=240, label="4 horas", enabled=False),
        ReminderRule(offset_minutes=30, label="30 minutos"),
    ]
    instructions = ReminderPlanner().plan(event, rules, now)
    assert [i.dedup_key for i in instructions] == ["agenda-ccb:E6:30"]


def test_message_fallbacks(zone, now: datetime) -> None:
    event = select_one(zone, now, id="E7", start="2024-06-15T19:30:00-04:00")
    planner = ReminderPlanner(fallback_title="Culto")
    message = planner.plan(event, [ReminderRule(offset_minutes=60, label="1 hora")], now)[0].message
    assert message == "Daqui 1 hora: Culto. Hoje 15/06 (sáb) às 19:30."


def test_event_url_overrides_default(zone, now: datetime) -> None:
    event = select_one(
        zone, now, id="E8", start="2024-06-11T19:30:00-04:00", url="https://ccb.example.org/e8"
    )
    planner = ReminderPlanner(default_url="https://ccb.example.org")
    assert planner.plan(event, default_rules(), now)[0].url == "https://ccb.example.org/e8"

    no_default = ReminderPlanner(default_url="")
    plain = select_one(zone, now, id="E9", start="2024-06-11T19:30:00-04:00")
    assert no_default.plan(plain, default_rules(), now)[0].url is None


def test_derived_key_without_id(zone, now: datetime) -> None:
    fields = dict(start="2024-06-11T19:30:00-04:00", title="Culto Oficial", location="Sede  Central")
    first = select_one(zone, now, **fields)
    second = select_one(zone, now, **fields)

    assert build_event_key(first) == "2024-06-11T19:30:00.000-04:00|Culto_Oficial|Sede_Central"
    assert build_event_key(first) == build_event_key(second)

    keys = [i.dedup_key for i in ReminderPlanner().plan(first, default_rules(), now)]
    assert keys == [
        "agenda-ccb:2024-06-11T19:30:00.000-04:00|Culto_Oficial|Sede_Central:240",
        "agenda-ccb:2024-06-11T19:30:00.000-04:00|Culto_Oficial|Sede_Central:60",
    ]


def test_derived_key_without_title_or_location(zone, now: datetime) -> None:
    event = select_one(zone, now, id="", start="2024-06-11T23:30:00Z")
    assert build_event_key(event) == "2024-06-11T19:30:00.000-04:00||"


def test_keys_are_stable_across_runs(zone, now: datetime) -> None:
    event = select_one(zone, now, id="E10", start="2024-06-12T19:30:00-04:00")
    planner = ReminderPlanner(namespace="agenda-ccb")
    first = [i.dedup_key for i in planner.plan(event, default_rules(), now)]
    later = [i.dedup_key for i in planner.plan(event, default_rules(), now + timedelta(hours=2))]
    assert first == later == ["agenda-ccb:E10:240", "agenda-ccb:E10:60"]
