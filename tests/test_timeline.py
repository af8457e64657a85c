#!/usr/bin/env python3
"""
Tests for the planner and calendar projections.

Covers:
1. Battery and scheduled tasks, with the battery status override
2. Stable date ordering and the due/future split
3. Calendar buckets from batteries, scheduled events and legacy revisions
4. Skipping unreadable records without breaking the rest
"""

import logging
from datetime import date

import pytest

from models import (
    Battery,
    BatteryStatus,
    EventKind,
    FormField,
    FormTemplate,
    LogEntry,
    RecurrenceInterval,
    ScheduledEvent,
    Site,
    SkipReason,
    TaskKind,
    Technology,
    TemplateCatalog,
    build_calendar,
    build_planner,
    default_catalog,
)


def make_battery(id, next_date, status=BatteryStatus.HEALTHY, notes=None):
    return Battery(id, 18, 12, "2022-05-10", next_date, status, notes=notes)


def make_event(id, next_date, precision_on_day=True, **kwargs):
    return ScheduledEvent(id, f"Event {id}", "2024-01-01", next_date, precision_on_day=precision_on_day, **kwargs)


def make_site(id, batteries=(), events=(), log=(), tech_name="Fire panel"):
    tech = Technology(f"t-{id}", tech_name, "1st floor", batteries=list(batteries))
    return Site(
        id,
        f"Site {id}",
        "Main street 1",
        technologies=[tech],
        scheduled_events=list(events),
        log_entries=list(log),
    )


# =============================================================================
# Planner projection
# =============================================================================


class TestPlannerTasks:
    """Tests for the tasks produced by build_planner."""

    def test_battery_task_fields(self):
        site = make_site("1", batteries=[make_battery("b1", "2025-05-10", notes="Check fuse")])
        result = build_planner([site], date(2025, 1, 1))

        assert result.due == []
        task = result.future[0]
        assert task.id == "b-b1"
        assert task.kind == TaskKind.BATTERY
        assert task.site is site
        assert task.label == "Fire panel"
        assert task.date == date(2025, 5, 10)
        assert task.info == "18Ah / 12V"
        assert task.note == "Check fuse"
        assert task.precision_on_day is True

    def test_scheduled_task_fields(self):
        event = ScheduledEvent(
            "se1",
            "Annual revision",
            "2024-03-15",
            "2024-03-15",
            RecurrenceInterval.ANNUALLY,
            future_notes="Bring spare bases",
            precision_on_day=False,
        )
        site = make_site("1", events=[event])
        task = build_planner([site], date(2024, 1, 1)).future[0]

        assert task.id == "se-se1"
        assert task.kind == TaskKind.SCHEDULED
        assert task.label == "Annual revision"
        assert task.info == "annually"
        assert task.note == "Bring spare bases"
        assert task.precision_on_day is False

    def test_missing_notes_default_to_empty(self):
        site = make_site("1", batteries=[make_battery("b1", "2025-05-10")], events=[make_event("e1", "2025-06-01")])
        tasks = build_planner([site], date(2025, 1, 1)).tasks
        assert [t.note for t in tasks] == ["", ""]

    @pytest.mark.parametrize(
        "now, expected",
        [(date(2025, 5, 9), False), (date(2025, 5, 10), True), (date(2025, 5, 11), True)],
    )
    def test_healthy_battery_due_on_replacement_day(self, now, expected):
        site = make_site("1", batteries=[make_battery("b1", "2025-05-10")])
        result = build_planner([site], now)
        assert len(result.due) == (1 if expected else 0)

    def test_critical_battery_due_a_year_early(self):
        site = make_site("1", batteries=[make_battery("b1", "2026-05-10", BatteryStatus.CRITICAL)])
        result = build_planner([site], date(2025, 5, 10))
        assert [t.id for t in result.due] == ["b-b1"]

    @pytest.mark.parametrize(
        "now, expected", [(date(2024, 3, 20), False), (date(2024, 4, 1), True)]
    )
    def test_month_precision_event(self, now, expected):
        site = make_site("1", events=[make_event("e1", "2024-03-15", precision_on_day=False)])
        result = build_planner([site], now)
        assert len(result.due) == (1 if expected else 0)

    def test_inactive_events_included(self):
        site = make_site("1", events=[make_event("e1", "2024-03-15", is_active=False)])
        result = build_planner([site], date(2024, 4, 1))
        assert [t.id for t in result.due] == ["se-e1"]


class TestPlannerOrdering:
    """Tests for sorting and partitioning in build_planner."""

    @pytest.fixture
    def sites(self):
        return [
            make_site(
                "1",
                batteries=[make_battery("b1", "2025-06-01"), make_battery("b2", "2024-01-01", BatteryStatus.WARNING)],
                events=[make_event("e1", "2025-03-01"), make_event("e2", "2024-06-01", precision_on_day=False)],
            ),
            make_site(
                "2",
                batteries=[make_battery("b3", "2025-01-15")],
                events=[make_event("e3", "2026-01-01")],
            ),
        ]

    def test_task_count(self, sites):
        """One task per battery plus one per scheduled event."""
        result = build_planner(sites, date(2025, 2, 1))
        assert len(result.due) + len(result.future) == 6
        assert result.skipped == []

    def test_partition_matches_due_flag(self, sites):
        result = build_planner(sites, date(2025, 2, 1))
        assert all(t.is_due for t in result.due)
        assert not any(t.is_due for t in result.future)
        assert {t.id for t in result.tasks} == {"b-b1", "b-b2", "se-e1", "se-e2", "b-b3", "se-e3"}

    def test_sorted_within_partitions(self, sites):
        result = build_planner(sites, date(2025, 2, 1))
        assert [t.id for t in result.due] == ["b-b2", "se-e2", "b-b3"]
        assert [t.id for t in result.future] == ["se-e1", "b-b1", "se-e3"]

    def test_ties_keep_emission_order(self):
        """Batteries before events within a site, sites in input order."""
        day = "2025-03-01"
        sites = [
            make_site("A", batteries=[make_battery("a1", day)], events=[make_event("ae", day)]),
            make_site("B", batteries=[make_battery("b1", day)], events=[make_event("be", day)]),
        ]
        result = build_planner(sites, date(2025, 1, 1))
        assert [t.id for t in result.future] == ["b-a1", "se-ae", "b-b1", "se-be"]

    def test_repeatable(self, sites):
        now = date(2025, 2, 1)
        assert build_planner(sites, now) == build_planner(sites, now)

    def test_empty_input(self):
        result = build_planner([], date(2025, 1, 1))
        assert result.due == [] and result.future == [] and result.skipped == []


class TestPlannerSkipping:
    """Tests for unreadable dates in build_planner."""

    def test_invalid_battery_date_skipped(self, caplog):
        site = make_site("1", batteries=[make_battery("bad", "someday"), make_battery("b1", "2025-05-10")])
        with caplog.at_level(logging.WARNING):
            result = build_planner([site], date(2025, 1, 1))

        assert [t.id for t in result.tasks] == ["b-b1"]
        assert len(result.skipped) == 1
        skipped = result.skipped[0]
        assert skipped.reason == SkipReason.INVALID_DATE
        assert skipped.site_id == "1"
        assert skipped.record_id == "b-bad"
        assert skipped.value == "someday"
        assert "b-bad" in caplog.text

    def test_invalid_event_date_skipped(self):
        site = make_site("1", events=[make_event("e1", ""), make_event("e2", "2025-05-10")])
        result = build_planner([site], date(2025, 1, 1))
        assert [t.id for t in result.tasks] == ["se-e2"]
        assert [s.record_id for s in result.skipped] == ["se-e1"]


# =============================================================================
# Calendar projection
# =============================================================================


def revision_entry(id, next_date, note=None, template_id="t-revision"):
    data = {"f6": "Pass"}
    if next_date is not None:
        data["f7"] = next_date
    if note is not None:
        data["f9"] = note
    return LogEntry(id, template_id, "2024-03-15T09:00:00Z", "Jan", data)


class TestCalendarEvents:
    """Tests for the events produced by build_calendar."""

    def test_three_sources(self):
        site = make_site(
            "1",
            batteries=[make_battery("b1", "2025-05-10", notes="Spare in van")],
            events=[make_event("e1", "2025-03-15", future_notes="Bring ladder")],
            log=[revision_entry("l1", "2025-04-01", note="Replace siren")],
        )
        result = build_calendar([site], default_catalog())

        assert [e.id for e in result.events] == ["b-b1", "se-e1", "r-l1"]
        battery, scheduled, revision = result.events
        assert battery.kind == EventKind.BATTERY
        assert battery.title == "Replacement: Fire panel"
        assert battery.note == "Spare in van"
        assert scheduled.kind == EventKind.SCHEDULED
        assert scheduled.title == "Event e1"
        assert scheduled.note == "Bring ladder"
        assert revision.kind == EventKind.REVISION
        assert revision.title == "Revision: Site 1"
        assert revision.date == date(2025, 4, 1)
        assert revision.note == "Replace siren"

    def test_revision_without_note(self):
        site = make_site("1", log=[revision_entry("l1", "2025-04-01")])
        event = build_calendar([site], default_catalog()).events[0]
        assert event.note == ""

    def test_revision_without_next_date_ignored(self):
        site = make_site("1", log=[revision_entry("l1", None), revision_entry("l2", "")])
        result = build_calendar([site], default_catalog())
        assert result.events == []
        assert result.skipped == []

    def test_non_revision_entries_ignored(self):
        entry = LogEntry("l1", "t-service", "2024-03-15", "Jan", {"f1": "Work", "f7": "2025-04-01"})
        unknown = LogEntry("l2", "t-unknown", "2024-03-15", "Jan", {"f7": "2025-04-01"})
        site = make_site("1", log=[entry, unknown])
        assert build_calendar([site], default_catalog()).events == []

    def test_custom_revision_template_mapping(self):
        catalog = TemplateCatalog(
            [
                FormTemplate(
                    "t-inspection",
                    "Inspection",
                    [FormField("next", "Next inspection", "date")],
                    category="revision",
                    date_field="next",
                )
            ]
        )
        entry = LogEntry("l1", "t-inspection", "2024-03-15", "Jan", {"next": "1.6.2025"})
        site = make_site("1", log=[entry])
        events = build_calendar([site], catalog).events
        assert [(e.id, e.date, e.note) for e in events] == [("r-l1", date(2025, 6, 1), "")]

    def test_inactive_events_included(self):
        site = make_site("1", events=[make_event("e1", "2025-03-15", is_active=False)])
        assert len(build_calendar([site], default_catalog()).events) == 1


class TestCalendarGrouping:
    """Tests for day buckets in build_calendar."""

    def test_same_day_across_sites(self):
        """Three events on one day stay separate and in emission order."""
        sites = [
            make_site("1", batteries=[make_battery("b1", "2024-03-15")]),
            make_site("2", events=[make_event("e2", "2024-03-15")]),
            make_site("3", log=[revision_entry("l3", "2024-03-15")]),
        ]
        result = build_calendar(sites, default_catalog())
        bucket = result.events_on(date(2024, 3, 15))
        assert [e.id for e in bucket] == ["b-b1", "se-e2", "r-l3"]
        assert [e.site.id for e in bucket] == ["1", "2", "3"]
        assert list(result.days) == [date(2024, 3, 15)]

    def test_empty_day(self):
        result = build_calendar([make_site("1")], default_catalog())
        assert result.events_on(date(2024, 3, 15)) == []

    def test_events_in_month(self):
        site = make_site(
            "1",
            batteries=[make_battery("b1", "2024-03-20")],
            events=[make_event("e1", "2024-03-05"), make_event("e2", "2024-04-01")],
        )
        result = build_calendar([site], default_catalog())
        assert [e.id for e in result.events_in_month(2024, 3)] == ["se-e1", "b-b1"]
        assert [e.id for e in result.events_in_month(2024, 4)] == ["se-e2"]
        assert result.events_in_month(2024, 5) == []

    def test_repeatable(self):
        sites = [make_site("1", batteries=[make_battery("b1", "2024-03-15")], log=[revision_entry("l1", "2024-03-15")])]
        catalog = default_catalog()
        assert build_calendar(sites, catalog) == build_calendar(sites, catalog)


class TestCalendarSkipping:
    """Tests for unreadable records in build_calendar."""

    def test_invalid_revision_date_skipped(self):
        site = make_site(
            "1",
            batteries=[make_battery("b1", "2024-03-15")],
            log=[revision_entry("l1", "next spring")],
        )
        result = build_calendar([site], default_catalog())
        assert [e.id for e in result.events] == ["b-b1"]
        assert [(s.reason, s.record_id) for s in result.skipped] == [(SkipReason.INVALID_DATE, "r-l1")]

    def test_revision_template_without_mapping_skipped(self, caplog):
        catalog = TemplateCatalog([FormTemplate("t-old", "Old revision", category="revision")])
        entry = LogEntry("l1", "t-old", "2024-03-15", "Jan", {"f7": "2025-01-01"})
        site = make_site("1", batteries=[make_battery("b1", "2024-03-15")], log=[entry])

        with caplog.at_level(logging.WARNING):
            result = build_calendar([site], catalog)

        assert [e.id for e in result.events] == ["b-b1"]
        assert len(result.skipped) == 1
        assert result.skipped[0].reason == SkipReason.MISSING_TEMPLATE_MAPPING
        assert result.skipped[0].record_id == "r-l1"
        assert "t-old" in caplog.text

    def test_invalid_battery_date_skipped(self):
        site = make_site("1", batteries=[make_battery("b1", "31.02.2024"), make_battery("b2", "2024-03-15")])
        result = build_calendar([site], default_catalog())
        assert [e.id for e in result.events] == ["b-b2"]
        assert result.skipped[0].record_id == "b-b1"
