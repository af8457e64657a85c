"""LogEntry class for free-form site log records."""
from typing import Dict, Optional


class LogEntry:
    """A log record whose data is shaped by a form template."""

    def __init__(
            self,
            id: str,
            template_id: str,
            date: str,
            author: str,
            data: Optional[Dict[str, str]] = None,
            template_name: Optional[str] = None,
    ):
        self.id = str(id)
        self.template_id = template_id
        self.template_name = template_name
        self.date = date
        self.author = author
        self.data = data or {}
