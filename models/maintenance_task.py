"""MaintenanceTask dataclass for the maintenance planner."""

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from .status import TaskKind

if TYPE_CHECKING:
    from .site import Site


@dataclass
class MaintenanceTask:
    """A battery replacement or scheduled event, evaluated as of one instant."""

    id: str
    kind: TaskKind
    site: "Site"
    label: str
    date: date
    is_due: bool
    info: str
    note: str = ""
    precision_on_day: bool = True

    @property
    def display_date(self) -> str:
        """Exact day, or just the month when precision is monthly."""
        if self.precision_on_day:
            return self.date.isoformat()
        return self.date.strftime("%Y-%m")
