"""YAML loading and saving utilities for site and template data."""

import json
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .battery import Battery
from .contact import Contact
from .errors import InvalidRecord
from .group import ObjectGroup
from .log_entry import LogEntry
from .scheduled_event import ScheduledEvent
from .site import Site
from .status import BatteryStatus
from .technology import Technology
from .template import FormField, FormTemplate, TemplateCatalog, default_catalog


def _parse_object(dct: Dict[str, Any]) -> Any:
    """Parse dictionary into appropriate object type."""
    # Battery object (inside a technology)
    if "capacityAh" in dct and "nextReplacementDate" in dct:
        try:
            return Battery(
                dct["id"],
                dct["capacityAh"],
                dct["voltageV"],
                dct.get("installDate"),
                dct["nextReplacementDate"],
                dct.get("status", BatteryStatus.HEALTHY.value),
                dct.get("lastCheckDate"),
                dct.get("serialNumber"),
                dct.get("manufactureDate"),
                dct.get("notes"),
            )
        except ValueError as exc:
            raise InvalidRecord("Battery", dct["id"], str(exc)) from None
    # Technology object
    elif "batteries" in dct:
        return Technology(
            dct["id"],
            dct["name"],
            dct.get("location", ""),
            dct.get("type"),
            dct["batteries"],
        )
    # Scheduled event
    elif "nextDate" in dct and "title" in dct:
        try:
            return ScheduledEvent(
                dct["id"],
                dct["title"],
                dct.get("startDate"),
                dct["nextDate"],
                dct.get("interval", "annually"),
                dct.get("description"),
                dct.get("futureNotes"),
                dct.get("isActive", True),
                dct.get("precisionOnDay", True),
            )
        except ValueError as exc:
            raise InvalidRecord("Event", dct["id"], str(exc)) from None
    # Log entry
    elif "templateId" in dct:
        return LogEntry(
            dct["id"],
            dct["templateId"],
            dct["date"],
            dct.get("author", ""),
            dct.get("data"),
            dct.get("templateName"),
        )
    # Top-level site object
    elif "technologies" in dct and "name" in dct:
        return Site(
            dct["id"],
            dct["name"],
            dct.get("address", ""),
            dct.get("description", ""),
            dct["technologies"],
            dct.get("scheduledEvents"),
            dct.get("logEntries"),
            dct.get("contacts"),
            dct.get("internalNotes"),
            dct.get("groupId"),
            dct.get("lat"),
            dct.get("lng"),
        )
    # Contact
    elif "role" in dct and "name" in dct:
        return Contact(
            dct["id"],
            dct["name"],
            dct.get("role", ""),
            dct.get("phone", ""),
            dct.get("email", ""),
        )
    # Site group
    elif "color" in dct and "name" in dct:
        return ObjectGroup(dct["id"], dct["name"], dct["color"])
    # Form template
    elif "fields" in dct and "name" in dct:
        return FormTemplate(
            dct["id"],
            dct["name"],
            dct["fields"],
            dct.get("icon"),
            dct.get("category"),
            dct.get("dateField"),
            dct.get("noteField"),
        )
    # Template field
    elif "label" in dct and "type" in dct:
        return FormField(
            dct["id"],
            dct["label"],
            dct["type"],
            dct.get("required", False),
            dct.get("options"),
        )
    else:
        # Return dict as-is for unknown structures (like log entry data)
        return dct


def _read_yaml(filename: Union[str, Path]) -> Any:
    with open(filename, "r") as fp:
        return yaml.load(fp, Loader=yaml.SafeLoader)


def _write_yaml(filename: Union[str, Path], data: Any) -> None:
    with open(filename, "w") as fp:
        yaml.dump(
            data,
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )


def _hydrate(data: Any) -> Any:
    """Turn plain YAML/JSON data into model objects."""
    # Unquoted YAML dates come back as date objects; keep them as ISO strings
    json_data = json.dumps(data, default=str)
    return json.loads(json_data, object_hook=_parse_object)


def sites_from_data(data: Any) -> List[Site]:
    """Build sites from a list of site dicts or a {'sites': [...]} mapping."""
    if isinstance(data, dict):
        data = data.get("sites")
    return _hydrate(data or [])


def load_sites(filename: Union[str, Path]) -> List[Site]:
    """Load all sites from a YAML file."""
    return sites_from_data(_read_yaml(filename))


def groups_from_data(data: Any) -> List[ObjectGroup]:
    """Build groups from a list of group dicts or a {'groups': [...]} mapping."""
    if isinstance(data, dict):
        data = data.get("groups")
    return _hydrate(data or [])


def load_groups(filename: Union[str, Path]) -> List[ObjectGroup]:
    """Load the site groups listed under 'groups:' in a sites YAML file."""
    data = _read_yaml(filename)
    return groups_from_data(data if isinstance(data, dict) else None)


def load_templates(filename: Optional[Union[str, Path]] = None) -> TemplateCatalog:
    """
    Load form templates from a YAML file.

    Falls back to the built-in catalog when no file is given or it does not
    exist yet.
    """
    if filename is None or not Path(filename).exists():
        return default_catalog()
    data = _read_yaml(filename) or {}
    return TemplateCatalog(_hydrate(data.get("templates") or []))


# =============================================================================
# Serialization
# =============================================================================


def _drop_none(d: Dict[str, Any]) -> Dict[str, Any]:
    """Omit None values for cleaner YAML."""
    return {k: v for k, v in d.items() if v is not None}


def _iso(value: Any) -> Any:
    return value.isoformat() if isinstance(value, date) else value


def _battery_to_dict(battery: Battery) -> Dict[str, Any]:
    return _drop_none({
        "id": battery.id,
        "capacityAh": battery.capacity_ah,
        "voltageV": battery.voltage_v,
        "installDate": battery.install_date,
        "lastCheckDate": battery.last_check_date,
        "nextReplacementDate": _iso(battery.next_replacement_date),
        "status": battery.status.value,
        "serialNumber": battery.serial_number,
        "manufactureDate": battery.manufacture_date,
        "notes": battery.notes,
    })


def _technology_to_dict(tech: Technology) -> Dict[str, Any]:
    return _drop_none({
        "id": tech.id,
        "name": tech.name,
        "type": tech.type,
        "location": tech.location,
        "batteries": [_battery_to_dict(b) for b in tech.batteries],
    })


def _event_to_dict(event: ScheduledEvent) -> Dict[str, Any]:
    return _drop_none({
        "id": event.id,
        "title": event.title,
        "startDate": event.start_date,
        "nextDate": _iso(event.next_date),
        "interval": event.interval.label,
        "description": event.description,
        "futureNotes": event.future_notes,
        "isActive": event.is_active,
        "precisionOnDay": event.precision_on_day,
    })


def _log_entry_to_dict(entry: LogEntry) -> Dict[str, Any]:
    return _drop_none({
        "id": entry.id,
        "templateId": entry.template_id,
        "templateName": entry.template_name,
        "date": entry.date,
        "author": entry.author,
        "data": dict(entry.data),
    })


def _contact_to_dict(contact: Contact) -> Dict[str, Any]:
    return {
        "id": contact.id,
        "name": contact.name,
        "role": contact.role,
        "phone": contact.phone,
        "email": contact.email,
    }


def group_to_dict(group: ObjectGroup) -> Dict[str, Any]:
    return {"id": group.id, "name": group.name, "color": group.color}


def site_to_dict(site: Site) -> Dict[str, Any]:
    """Serialize a Site to the camelCase dict format used on disk and on the wire."""
    return _drop_none({
        "id": site.id,
        "name": site.name,
        "address": site.address,
        "description": site.description,
        "internalNotes": site.internal_notes,
        "groupId": site.group_id,
        "lat": site.lat,
        "lng": site.lng,
        "contacts": [_contact_to_dict(c) for c in site.contacts],
        "technologies": [_technology_to_dict(t) for t in site.technologies],
        "scheduledEvents": [_event_to_dict(e) for e in site.scheduled_events],
        "logEntries": [_log_entry_to_dict(e) for e in site.log_entries],
    })


def sites_to_dicts(sites: List[Site]) -> List[Dict[str, Any]]:
    return [site_to_dict(s) for s in sites]


def save_sites(
    filename: Union[str, Path], sites: List[Site], groups: Optional[List[ObjectGroup]] = None
) -> None:
    """
    Write all sites to a YAML file, replacing its site list.

    Groups are replaced when given; otherwise the file's existing groups
    section is kept.
    """
    data: Dict[str, Any] = {}
    if groups is not None:
        data["groups"] = [group_to_dict(g) for g in groups]
    elif Path(filename).exists():
        existing = _read_yaml(filename)
        if isinstance(existing, dict) and existing.get("groups"):
            data["groups"] = existing["groups"]
    data["sites"] = sites_to_dicts(sites)
    _write_yaml(filename, data)


# =============================================================================
# In-place edits
# =============================================================================


def _find_by_id(items: List[Dict[str, Any]], item_id: str, what: str) -> Dict[str, Any]:
    for item in items:
        if str(item.get("id")) == item_id:
            return item
    raise KeyError(f"{what} '{item_id}' not found")


def add_log_entry(filename: Union[str, Path], site_id: str, entry: LogEntry) -> None:
    """
    Append a log entry to a site in a sites YAML file.

    Loads the raw YAML, appends the entry to the site's log,
    and writes back to the file.
    """
    data = _read_yaml(filename)
    site = _find_by_id(data.get("sites") or [], site_id, "Site")

    # Ensure log list exists
    if site.get("logEntries") is None:
        site["logEntries"] = []

    site["logEntries"].append(_log_entry_to_dict(entry))
    _write_yaml(filename, data)


def update_battery_status(
    filename: Union[str, Path],
    site_id: str,
    battery_id: str,
    status: Optional[BatteryStatus] = None,
    next_replacement_date: Optional[str] = None,
) -> None:
    """
    Set a battery's status and/or its next replacement date.

    Only the given fields change. Leaves other keys unchanged.
    """
    data = _read_yaml(filename)
    site = _find_by_id(data.get("sites") or [], site_id, "Site")

    batteries = [
        b for tech in site.get("technologies") or [] for b in tech.get("batteries") or []
    ]
    battery = _find_by_id(batteries, battery_id, "Battery")
    if status is not None:
        battery["status"] = status.value
    if next_replacement_date is not None:
        battery["nextReplacementDate"] = next_replacement_date

    _write_yaml(filename, data)


def update_event_next_date(
    filename: Union[str, Path], site_id: str, event_id: str, next_date: str
) -> None:
    """Move a scheduled event to a new next date."""
    data = _read_yaml(filename)
    site = _find_by_id(data.get("sites") or [], site_id, "Site")
    event = _find_by_id(site.get("scheduledEvents") or [], event_id, "Event")
    event["nextDate"] = next_date
    _write_yaml(filename, data)
