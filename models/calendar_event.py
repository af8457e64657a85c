"""CalendarEvent dataclass for the calendar view."""

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from .status import EventKind

if TYPE_CHECKING:
    from .site import Site


@dataclass
class CalendarEvent:
    """Something happening at a site on a given day."""

    id: str
    kind: EventKind
    date: date
    title: str
    site: "Site"
    note: str = ""
