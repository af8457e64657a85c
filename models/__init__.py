"""
Battery and maintenance tracking models.

This package provides data models for tracking backup batteries and
maintenance across sites:
- BatteryStatus, RecurrenceInterval: recorded states and repeat intervals
- Site, Technology, Battery, ScheduledEvent, LogEntry, Contact: stored data
- ObjectGroup, filter_sites: site groups and list filtering
- FormTemplate, TemplateCatalog: log entry shapes
- is_due, battery_is_due: due-date evaluation
- build_planner, build_calendar: projections for the planner and calendar
- SiteStore: local YAML or remote HTTP storage
"""

from .status import BatteryStatus, RecurrenceInterval, TaskKind, EventKind, SkipReason
from .errors import InvalidDate, InvalidRecord, MissingTemplateMapping
from .battery import Battery
from .technology import Technology
from .scheduled_event import ScheduledEvent
from .log_entry import LogEntry
from .contact import Contact
from .site import Site, find_site
from .group import ObjectGroup, NO_GROUP_COLOR, NO_GROUP_NAME, find_group, filter_sites, sites_per_group
from .template import FormField, FormTemplate, TemplateCatalog, default_catalog
from .maintenance_task import MaintenanceTask
from .calendar_event import CalendarEvent
from .calculations import (
    parse_date,
    is_due,
    battery_is_due,
    calc_next_date,
    sort_by_date,
    partition_due,
    group_by_day,
    month_grid,
)
from .timeline import (
    SkippedRecord,
    PlannerResult,
    CalendarResult,
    build_planner,
    build_calendar,
)
from .stats import battery_status_counts, batteries_per_site
from .loader import (
    load_sites,
    load_groups,
    load_templates,
    groups_from_data,
    group_to_dict,
    save_sites,
    sites_from_data,
    sites_to_dicts,
    add_log_entry,
    update_battery_status,
    update_event_next_date,
)
from .api_client import ApiClient, ApiError
from .store import SiteStore, FileSiteStore, RemoteSiteStore, get_store

__all__ = [
    "BatteryStatus",
    "RecurrenceInterval",
    "TaskKind",
    "EventKind",
    "SkipReason",
    "InvalidDate",
    "InvalidRecord",
    "MissingTemplateMapping",
    "Battery",
    "Technology",
    "ScheduledEvent",
    "LogEntry",
    "Contact",
    "Site",
    "find_site",
    "ObjectGroup",
    "NO_GROUP_COLOR",
    "NO_GROUP_NAME",
    "find_group",
    "filter_sites",
    "sites_per_group",
    "FormField",
    "FormTemplate",
    "TemplateCatalog",
    "default_catalog",
    "MaintenanceTask",
    "CalendarEvent",
    "parse_date",
    "is_due",
    "battery_is_due",
    "calc_next_date",
    "sort_by_date",
    "partition_due",
    "group_by_day",
    "month_grid",
    "SkippedRecord",
    "PlannerResult",
    "CalendarResult",
    "build_planner",
    "build_calendar",
    "battery_status_counts",
    "batteries_per_site",
    "load_sites",
    "load_groups",
    "load_templates",
    "groups_from_data",
    "group_to_dict",
    "save_sites",
    "sites_from_data",
    "sites_to_dicts",
    "add_log_entry",
    "update_battery_status",
    "update_event_next_date",
    "ApiClient",
    "ApiError",
    "SiteStore",
    "FileSiteStore",
    "RemoteSiteStore",
    "get_store",
]
