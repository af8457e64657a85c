"""Form templates for log entries and the catalog that looks them up."""

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import MissingTemplateMapping

REVISION = "revision"


class FormField:
    """A single input in a form template."""

    def __init__(
            self,
            id: str,
            label: str,
            type: str = "text",
            required: bool = False,
            options: Optional[List[str]] = None,
    ):
        self.id = id
        self.label = label
        self.type = type
        self.required = required
        self.options = options


class FormTemplate:
    """
    Shape of a log entry's data mapping.

    Templates with category 'revision' describe periodic inspections; their
    date_field holds the next inspection date and note_field a note for it.
    """

    def __init__(
            self,
            id: str,
            name: str,
            fields: Optional[List[FormField]] = None,
            icon: Optional[str] = None,
            category: Optional[str] = None,
            date_field: Optional[str] = None,
            note_field: Optional[str] = None,
    ):
        self.id = id
        self.name = name
        self.icon = icon
        self.fields = fields or []
        self.category = category
        self.date_field = date_field
        self.note_field = note_field

    @property
    def is_revision(self) -> bool:
        return self.category == REVISION

    def get_field(self, field_id: str) -> Optional[FormField]:
        for f in self.fields:
            if f.id == field_id:
                return f
        return None


class TemplateCatalog:
    """Ordered collection of form templates keyed by id."""

    def __init__(self, templates: Iterable[FormTemplate]):
        self._templates: Dict[str, FormTemplate] = {}
        for template in templates:
            self._templates[template.id] = template

    def __iter__(self) -> Iterator[FormTemplate]:
        return iter(self._templates.values())

    def __len__(self) -> int:
        return len(self._templates)

    def get(self, template_id: str) -> Optional[FormTemplate]:
        return self._templates.get(template_id)

    def is_revision(self, template_id: str) -> bool:
        """True if the template is known and classified as a revision."""
        template = self.get(template_id)
        return template is not None and template.is_revision

    def revision_fields(self, template_id: str) -> Tuple[str, Optional[str]]:
        """
        Return (date_field, note_field) for a revision template.

        Raises MissingTemplateMapping when the template is not a revision
        template or has no date field configured.
        """
        template = self.get(template_id)
        if template is None or not template.is_revision or not template.date_field:
            raise MissingTemplateMapping(template_id)
        return template.date_field, template.note_field


def default_catalog() -> TemplateCatalog:
    """Catalog used when no templates file is configured."""
    return TemplateCatalog(
        [
            FormTemplate(
                "t-service",
                "Service intervention",
                icon="Wrench",
                fields=[
                    FormField("f1", "Work description", "textarea", required=True),
                    FormField("f2", "Material used", "text"),
                    FormField("f3", "Time spent (h)", "number", required=True),
                    FormField("f9", "Note for the next revision", "textarea"),
                ],
            ),
            FormTemplate(
                "t-fault",
                "Fault report",
                icon="AlertTriangle",
                fields=[
                    FormField("f4", "Symptoms", "textarea", required=True),
                    FormField("f5", "Priority", "text", required=True),
                ],
            ),
            FormTemplate(
                "t-revision",
                "Periodic revision",
                icon="ClipboardCheck",
                category=REVISION,
                date_field="f7",
                note_field="f9",
                fields=[
                    FormField(
                        "f6",
                        "Revision result",
                        "select",
                        required=True,
                        options=["Pass", "Pass with reservations", "Fail"],
                    ),
                    FormField("f7", "Next date", "date", required=True),
                    FormField("f9", "Note for the next revision", "textarea"),
                    FormField("f8", "Inspector note (current state)", "textarea"),
                ],
            ),
        ]
    )
