"""ScheduledEvent class for recurring maintenance not tied to a battery."""
from typing import Optional, Union

from .status import RecurrenceInterval


class ScheduledEvent:
    """
    A maintenance event with a stored next occurrence.

    precision_on_day=True means next_date is an exact day; False means only
    its month and year matter. The interval is informational: next_date is
    only moved by an explicit edit.
    """

    def __init__(
            self,
            id: str,
            title: str,
            start_date: str,
            next_date: str,
            interval: Union[RecurrenceInterval, str] = RecurrenceInterval.ANNUALLY,
            description: Optional[str] = None,
            future_notes: Optional[str] = None,
            is_active: bool = True,
            precision_on_day: bool = True,
    ):
        self.id = str(id)
        self.title = title
        self.start_date = start_date
        self.next_date = next_date
        self.interval = _as_interval(interval)
        self.description = description
        self.future_notes = future_notes
        self.is_active = is_active
        self.precision_on_day = precision_on_day


def _as_interval(value: Union[RecurrenceInterval, str]) -> RecurrenceInterval:
    """Accept an enum member, its label or its name."""
    if isinstance(value, RecurrenceInterval):
        return value
    try:
        return RecurrenceInterval(value)
    except ValueError:
        pass
    try:
        return RecurrenceInterval[str(value).upper().replace("-", "_")]
    except KeyError:
        raise ValueError(f"{value!r} is not a valid RecurrenceInterval") from None
