"""Enums for battery state, recurrence intervals and derived item kinds."""

from enum import Enum
from typing import Optional


class BatteryStatus(Enum):
    """Condition of a backup battery as recorded by the technician."""

    HEALTHY = "HEALTHY"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"
    REPLACED = "REPLACED"


class RecurrenceInterval(Enum):
    """How often a scheduled event repeats. Value is the display label."""

    ONCE = "once"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMI_ANNUALLY = "semi-annually"
    ANNUALLY = "annually"
    BI_ANNUALLY = "every 2 years"
    QUADRENNIALLY = "every 4 years"

    @property
    def label(self) -> str:
        return self.value

    @property
    def months(self) -> Optional[int]:
        """Length of one period in months, None for one-off events."""
        return _INTERVAL_MONTHS[self]


_INTERVAL_MONTHS = {
    RecurrenceInterval.ONCE: None,
    RecurrenceInterval.MONTHLY: 1,
    RecurrenceInterval.QUARTERLY: 3,
    RecurrenceInterval.SEMI_ANNUALLY: 6,
    RecurrenceInterval.ANNUALLY: 12,
    RecurrenceInterval.BI_ANNUALLY: 24,
    RecurrenceInterval.QUADRENNIALLY: 48,
}


class TaskKind(Enum):
    """Source of a maintenance planner task."""

    BATTERY = "battery"
    SCHEDULED = "scheduled"


class EventKind(Enum):
    """Source of a calendar event."""

    BATTERY = "battery"
    SCHEDULED = "scheduled"
    REVISION = "revision"  # Legacy: next date recorded in a log entry


class SkipReason(Enum):
    """Why a record was left out of an aggregation."""

    INVALID_DATE = "InvalidDate"
    MISSING_TEMPLATE_MAPPING = "MissingTemplateMapping"
