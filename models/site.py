"""Site class - the aggregate for everything tracked at one location."""

from typing import Iterable, Iterator, List, Optional, Tuple

from .battery import Battery
from .contact import Contact
from .log_entry import LogEntry
from .scheduled_event import ScheduledEvent
from .technology import Technology


class Site:
    """A building or location with its technologies, events and log."""

    def __init__(
        self,
        id: str,
        name: str,
        address: str = "",
        description: str = "",
        technologies: Optional[List[Technology]] = None,
        scheduled_events: Optional[List[ScheduledEvent]] = None,
        log_entries: Optional[List[LogEntry]] = None,
        contacts: Optional[List[Contact]] = None,
        internal_notes: Optional[str] = None,
        group_id: Optional[str] = None,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
    ):
        self.id = str(id)
        self.name = name
        self.address = address
        self.description = description
        self.technologies = technologies or []
        self.scheduled_events = scheduled_events or []
        self.log_entries = log_entries or []
        self.contacts = contacts or []
        self.internal_notes = internal_notes
        self.group_id = group_id
        self.lat = lat
        self.lng = lng

    def iter_batteries(self) -> Iterator[Tuple[Technology, Battery]]:
        """Yield (technology, battery) pairs in stored order."""
        for tech in self.technologies:
            for battery in tech.batteries:
                yield tech, battery

    @property
    def battery_count(self) -> int:
        return sum(len(t.batteries) for t in self.technologies)

    def get_battery(self, battery_id: str) -> Optional[Battery]:
        """Find a battery by id across all technologies."""
        for _, battery in self.iter_batteries():
            if battery.id == battery_id:
                return battery
        return None

    def get_event(self, event_id: str) -> Optional[ScheduledEvent]:
        """Find a scheduled event by id."""
        for event in self.scheduled_events:
            if event.id == event_id:
                return event
        return None

    def get_log_sorted(self, reverse: bool = True) -> List[LogEntry]:
        """Log entries sorted by timestamp, newest first by default."""
        return sorted(self.log_entries, key=lambda e: e.date, reverse=reverse)


def find_site(sites: Iterable[Site], site_id: str) -> Optional[Site]:
    """Find a site by id."""
    for site in sites:
        if site.id == site_id:
            return site
    return None
