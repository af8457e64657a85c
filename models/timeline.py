"""
Planner and calendar projections over a collection of sites.

Both projections are recomputed from scratch on every call. The reference
instant is always passed in. Records whose dates cannot be parsed are left
out and reported in the result's skipped list instead of raising.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from .calculations import (
    DateLike,
    battery_is_due,
    group_by_day,
    is_due,
    parse_date,
    partition_due,
    sort_by_date,
)
from .calendar_event import CalendarEvent
from .errors import InvalidDate, MissingTemplateMapping
from .maintenance_task import MaintenanceTask
from .site import Site
from .status import EventKind, SkipReason, TaskKind
from .template import TemplateCatalog

logger = logging.getLogger(__name__)


@dataclass
class SkippedRecord:
    """A record left out of an aggregation, with the reason."""

    reason: SkipReason
    site_id: str
    record_id: str
    value: Any = None
    message: str = ""


@dataclass
class PlannerResult:
    """Tasks split into due and future, each sorted by date."""

    due: List[MaintenanceTask] = field(default_factory=list)
    future: List[MaintenanceTask] = field(default_factory=list)
    skipped: List[SkippedRecord] = field(default_factory=list)

    @property
    def tasks(self) -> List[MaintenanceTask]:
        return self.due + self.future


@dataclass
class CalendarResult:
    """Calendar events bucketed by calendar day."""

    events: List[CalendarEvent] = field(default_factory=list)
    days: Dict[date, List[CalendarEvent]] = field(default_factory=dict)
    skipped: List[SkippedRecord] = field(default_factory=list)

    def events_on(self, day: date) -> List[CalendarEvent]:
        return self.days.get(day, [])

    def events_in_month(self, year: int, month: int) -> List[CalendarEvent]:
        """Events falling in a month, ordered by day then emission order."""
        return [
            event
            for day in sorted(self.days)
            if day.year == year and day.month == month
            for event in self.days[day]
        ]


def _skip(
    skipped: List[SkippedRecord],
    reason: SkipReason,
    site: Site,
    record_id: str,
    exc: Exception,
    value: Any = None,
) -> None:
    logger.warning("Skipping %s in site %s: %s", record_id, site.id, exc)
    skipped.append(SkippedRecord(reason, site.id, record_id, value, str(exc)))


def _try_parse(
    value: Any, site: Site, record_id: str, skipped: List[SkippedRecord]
) -> Optional[date]:
    try:
        return parse_date(value)
    except InvalidDate as exc:
        _skip(skipped, SkipReason.INVALID_DATE, site, record_id, exc, value)
        return None


# =============================================================================
# Planner projection
# =============================================================================


def _planner_tasks(
    site: Site, now: DateLike, skipped: List[SkippedRecord]
) -> List[MaintenanceTask]:
    """Battery tasks for a site followed by its scheduled-event tasks."""
    tasks = []
    for tech, battery in site.iter_batteries():
        task_id = f"b-{battery.id}"
        target = _try_parse(battery.next_replacement_date, site, task_id, skipped)
        if target is None:
            continue
        tasks.append(
            MaintenanceTask(
                id=task_id,
                kind=TaskKind.BATTERY,
                site=site,
                label=tech.name,
                date=target,
                is_due=battery_is_due(target, battery.status, now),
                info=battery.rating,
                note=battery.notes or "",
                precision_on_day=True,
            )
        )

    # Inactive events are included as well
    for event in site.scheduled_events:
        task_id = f"se-{event.id}"
        target = _try_parse(event.next_date, site, task_id, skipped)
        if target is None:
            continue
        tasks.append(
            MaintenanceTask(
                id=task_id,
                kind=TaskKind.SCHEDULED,
                site=site,
                label=event.title,
                date=target,
                is_due=is_due(target, event.precision_on_day, now),
                info=event.interval.label,
                note=event.future_notes or "",
                precision_on_day=event.precision_on_day,
            )
        )
    return tasks


def build_planner(sites: Iterable[Site], now: DateLike) -> PlannerResult:
    """
    Evaluate every battery and scheduled event as of now.

    Tasks are sorted by target date (ties keep emission order: sites in
    input order, batteries before scheduled events within a site) and then
    split into due and future lists.
    """
    skipped: List[SkippedRecord] = []
    tasks = []
    for site in sites:
        tasks.extend(_planner_tasks(site, now, skipped))

    due, future = partition_due(sort_by_date(tasks))
    return PlannerResult(due=due, future=future, skipped=skipped)


# =============================================================================
# Calendar projection
# =============================================================================


def _revision_events(
    site: Site, catalog: TemplateCatalog, skipped: List[SkippedRecord]
) -> List[CalendarEvent]:
    """
    Next-revision dates recorded in log entries of revision templates.

    Kept for entries written before scheduled events existed.
    """
    events = []
    for entry in site.log_entries:
        if not catalog.is_revision(entry.template_id):
            continue
        event_id = f"r-{entry.id}"
        try:
            date_field, note_field = catalog.revision_fields(entry.template_id)
        except MissingTemplateMapping as exc:
            _skip(skipped, SkipReason.MISSING_TEMPLATE_MAPPING, site, event_id, exc)
            continue

        raw = entry.data.get(date_field)
        if not raw:
            continue
        target = _try_parse(raw, site, event_id, skipped)
        if target is None:
            continue
        note = entry.data.get(note_field, "") if note_field else ""
        events.append(
            CalendarEvent(
                id=event_id,
                kind=EventKind.REVISION,
                date=target,
                title=f"Revision: {site.name}",
                site=site,
                note=note or "",
            )
        )
    return events


def _calendar_events(
    site: Site, catalog: TemplateCatalog, skipped: List[SkippedRecord]
) -> List[CalendarEvent]:
    events = []
    for tech, battery in site.iter_batteries():
        event_id = f"b-{battery.id}"
        target = _try_parse(battery.next_replacement_date, site, event_id, skipped)
        if target is None:
            continue
        events.append(
            CalendarEvent(
                id=event_id,
                kind=EventKind.BATTERY,
                date=target,
                title=f"Replacement: {tech.name}",
                site=site,
                note=battery.notes or "",
            )
        )

    for scheduled in site.scheduled_events:
        event_id = f"se-{scheduled.id}"
        target = _try_parse(scheduled.next_date, site, event_id, skipped)
        if target is None:
            continue
        events.append(
            CalendarEvent(
                id=event_id,
                kind=EventKind.SCHEDULED,
                date=target,
                title=scheduled.title,
                site=site,
                note=scheduled.future_notes or "",
            )
        )

    events.extend(_revision_events(site, catalog, skipped))
    return events


def build_calendar(sites: Iterable[Site], catalog: TemplateCatalog) -> CalendarResult:
    """
    Collect battery replacements, scheduled events and legacy revision
    dates from all sites and bucket them by calendar day.

    Events on the same day stay in emission order and are never merged.
    """
    skipped: List[SkippedRecord] = []
    events = []
    for site in sites:
        events.extend(_calendar_events(site, catalog, skipped))

    return CalendarResult(events=events, days=group_by_day(events), skipped=skipped)
