"""Exceptions raised while reading site records."""


class InvalidDate(ValueError):
    """A date field holds a value that cannot be parsed as a calendar date."""

    def __init__(self, value):
        super().__init__(f"Invalid date: {value!r}")
        self.value = value


class MissingTemplateMapping(KeyError):
    """A revision template has no configured next-date field."""

    def __init__(self, template_id: str):
        super().__init__(template_id)
        self.template_id = template_id

    def __str__(self) -> str:
        return f"Template '{self.template_id}' has no next-date field mapping"


class InvalidRecord(ValueError):
    """A stored record holds a value outside its allowed set."""

    def __init__(self, kind: str, record_id, reason: str):
        super().__init__(f"{kind} '{record_id}': {reason}")
        self.kind = kind
        self.record_id = record_id
