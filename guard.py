#!/usr/bin/env python3
"""
Unified CLI for battery and maintenance tracking.

Commands:
  planner     - Show maintenance that is due and what is coming up
  calendar    - Show events for a month
  sites       - List sites, optionally filtered by group or search text
  groups      - List site groups
  site        - Show technologies, batteries, events and log of one site
  log         - Add a log entry to a site
  battery     - Update a battery's status or replacement date
  reschedule  - Move a scheduled event to its next occurrence
  stats       - Battery status totals
  templates   - List log entry templates
"""

import argparse
import logging
import sys
import uuid
from datetime import date
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from config import load_config, setup_logging
from models import (
    NO_GROUP_NAME,
    ApiError,
    BatteryStatus,
    CalendarEvent,
    FileSiteStore,
    InvalidDate,
    LogEntry,
    MaintenanceTask,
    SkippedRecord,
    add_log_entry,
    batteries_per_site,
    battery_status_counts,
    build_calendar,
    build_planner,
    calc_next_date,
    filter_sites,
    find_group,
    find_site,
    get_store,
    load_templates,
    month_grid,
    parse_date,
    sites_per_group,
    update_battery_status,
    update_event_next_date,
)

logger = logging.getLogger("guard")

# =============================================================================
# Formatting helpers
# =============================================================================


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if not text:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def format_days_left(task: MaintenanceTask, today: date) -> str:
    """Days until the target date (e.g. '12d' or '-3d')."""
    if not task.precision_on_day:
        return "-"
    return f"{(task.date - today).days}d"


def make_task_table(tasks: List[MaintenanceTask], today: date) -> List[List[str]]:
    """Convert planner tasks to table rows."""
    rows = []
    for task in tasks:
        rows.append(
            [
                task.display_date,
                format_days_left(task, today),
                task.site.name,
                task.label,
                task.info,
                truncate(task.note),
            ]
        )
    return rows


def make_event_table(events: List[CalendarEvent]) -> List[List[str]]:
    """Convert calendar events to table rows."""
    return [
        [
            event.date.isoformat(),
            event.kind.value,
            event.title,
            event.site.name,
            truncate(event.note),
        ]
        for event in events
    ]


def make_grid_table(result, year: int, month: int) -> List[List[str]]:
    """Month grid with event counts, e.g. '15 (2)'."""
    rows = []
    for week in month_grid(year, month):
        row = []
        for day in week:
            if day is None:
                row.append("")
                continue
            count = len(result.events_on(day))
            row.append(f"{day.day} ({count})" if count else str(day.day))
        rows.append(row)
    return rows


def print_skipped(skipped: List[SkippedRecord]) -> None:
    if not skipped:
        return
    print(f"SKIPPED ({len(skipped)} record(s) could not be read):")
    for record in skipped:
        print(f"  [{record.site_id}] {record.record_id}: {record.message}")
    print()


def error_message(exc: Exception) -> str:
    """KeyError wraps its message in quotes; unwrap it."""
    if type(exc) is KeyError and exc.args:
        return str(exc.args[0])
    return str(exc)


def parse_month(value: str) -> date:
    """Parse YYYY-MM into the first day of that month."""
    try:
        year, month = value.split("-")
        return date(int(year), int(month), 1)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid month '{value}' (expected YYYY-MM)")


def parse_day(value: str) -> date:
    try:
        return parse_date(value)
    except InvalidDate as exc:
        raise argparse.ArgumentTypeError(str(exc))


# =============================================================================
# Planner command
# =============================================================================


def cmd_planner(args, store, catalog):
    """Show maintenance that is due and what is coming up."""
    today = args.as_of or date.today()
    sites = store.get_sites()
    result = build_planner(sites, today)

    print(f"Sites: {len(sites)}")
    print(f"As of: {today.isoformat()}")
    print()

    headers = ["Date", "Left", "Site", "Task", "Info", "Note"]

    print("DUE:")
    if result.due:
        print(tabulate(make_task_table(result.due, today), headers=headers, tablefmt="simple"))
    else:
        print("  All tasks are currently in order.")
    print()

    if not args.due_only:
        print("UPCOMING:")
        if result.future:
            print(tabulate(make_task_table(result.future, today), headers=headers, tablefmt="simple"))
        else:
            print("  No upcoming tasks.")
        print()

    print_skipped(result.skipped)
    return 0


# =============================================================================
# Calendar command
# =============================================================================


def cmd_calendar(args, store, catalog):
    """Show events for a month."""
    month = args.month or date.today().replace(day=1)
    result = build_calendar(store.get_sites(), catalog)
    events = result.events_in_month(month.year, month.month)

    print(f"Month: {month.strftime('%Y-%m')}")
    print(f"Events: {len(events)}")
    print()

    if args.grid:
        headers = ["Mo", "Tu", "We", "Th", "Fr", "Sa", "Su"]
        print(tabulate(make_grid_table(result, month.year, month.month), headers=headers, tablefmt="simple"))
        print()

    if events:
        headers = ["Date", "Type", "Title", "Site", "Note"]
        print(tabulate(make_event_table(events), headers=headers, tablefmt="simple"))
        print()
    else:
        print("No events this month.")
        print()

    print_skipped(result.skipped)
    return 0


# =============================================================================
# Sites commands
# =============================================================================


def group_label(group) -> str:
    """Group name with its colour, e.g. 'Head office (#00539b)'."""
    if group is None:
        return NO_GROUP_NAME
    return f"{group.name} ({group.color})"


def cmd_sites(args, store, catalog):
    """List sites, optionally filtered by group or search text."""
    groups = store.get_groups()
    if args.group not in (None, "all", "none") and find_group(groups, args.group) is None:
        print(f"Error: Unknown group '{args.group}'")
        return 1

    sites = filter_sites(store.get_sites(), args.group, args.search)
    if not sites:
        print("No sites match.")
        return 0

    rows = [
        [
            site.id,
            site.name,
            truncate(site.address, 40),
            group_label(find_group(groups, site.group_id)),
            len(site.technologies),
            site.battery_count,
            len(site.scheduled_events),
        ]
        for site in sites
    ]
    headers = ["ID", "Name", "Address", "Group", "Technologies", "Batteries", "Events"]
    print(tabulate(rows, headers=headers, tablefmt="simple"))
    return 0


def cmd_groups(args, store, catalog):
    """List site groups."""
    counts = sites_per_group(store.get_sites(), store.get_groups())
    if not counts:
        print("No groups defined.")
        return 0
    rows = [[group.id, group.name, group.color, count] for group, count in counts]
    print(tabulate(rows, headers=["ID", "Name", "Color", "Sites"], tablefmt="simple"))
    return 0


def cmd_site(args, store, catalog):
    """Show technologies, batteries, events and log of one site."""
    site = find_site(store.get_sites(), args.site_id)
    if site is None:
        print(f"Error: Unknown site '{args.site_id}'")
        return 1

    print(f"Site: {site.name}")
    if site.address:
        print(f"Address: {site.address}")
    if site.group_id:
        print(f"Group: {group_label(find_group(store.get_groups(), site.group_id))}")
    if site.description:
        print(site.description)
    print()

    battery_rows = [
        [
            tech.name,
            truncate(tech.location, 25),
            battery.id,
            battery.rating,
            battery.status.value,
            battery.next_replacement_date,
            truncate(battery.notes),
        ]
        for tech, battery in site.iter_batteries()
    ]
    if battery_rows:
        print("BATTERIES:")
        headers = ["Technology", "Location", "ID", "Rating", "Status", "Replace by", "Notes"]
        print(tabulate(battery_rows, headers=headers, tablefmt="simple"))
        print()

    if site.scheduled_events:
        print("SCHEDULED EVENTS:")
        rows = [
            [
                e.id,
                e.title,
                e.next_date,
                e.interval.label,
                "day" if e.precision_on_day else "month",
                "yes" if e.is_active else "no",
            ]
            for e in site.scheduled_events
        ]
        headers = ["ID", "Title", "Next", "Interval", "Precision", "Active"]
        print(tabulate(rows, headers=headers, tablefmt="simple"))
        print()

    if site.contacts:
        print("CONTACTS:")
        rows = [[c.name, c.role, c.phone, c.email] for c in site.contacts]
        print(tabulate(rows, headers=["Name", "Role", "Phone", "Email"], tablefmt="simple"))
        print()

    if site.log_entries:
        print("LOG:")
        rows = []
        for entry in site.get_log_sorted():
            template = catalog.get(entry.template_id)
            name = template.name if template else (entry.template_name or entry.template_id)
            summary = "; ".join(f"{k}={v}" for k, v in entry.data.items())
            rows.append([entry.date, name, entry.author, truncate(summary, 50)])
        print(tabulate(rows, headers=["Date", "Template", "Author", "Data"], tablefmt="simple"))
        print()

    return 0


# =============================================================================
# Log command
# =============================================================================


def parse_fields(values: List[str]) -> dict:
    """Turn ['f1=text', 'f3=2'] into {'f1': 'text', 'f3': '2'}."""
    data = {}
    for value in values or []:
        key, sep, text = value.partition("=")
        if not sep:
            raise ValueError(f"Field '{value}' must look like id=value")
        data[key.strip()] = text
    return data


def cmd_log(args, store, catalog):
    """Add a log entry to a site."""
    template = catalog.get(args.template_id)
    if template is None:
        print(f"Error: Unknown template '{args.template_id}'")
        print("\nAvailable templates:")
        for t in catalog:
            print(f"  {t.id}: {t.name}")
        return 1

    try:
        data = parse_fields(args.field)
    except ValueError as exc:
        print(f"Error: {exc}")
        return 1

    missing = [f.id for f in template.fields if f.required and not data.get(f.id)]
    if missing:
        print(f"Error: Missing required field(s): {', '.join(missing)}")
        for f in template.fields:
            print(f"  {f.id}: {f.label}{' (required)' if f.required else ''}")
        return 1

    entry = LogEntry(
        id=args.entry_id or f"l-{uuid.uuid4().hex[:8]}",
        template_id=template.id,
        template_name=template.name,
        date=args.date or date.today().isoformat(),
        author=args.author or "",
        data=data,
    )

    # Show what will be added
    print(f"Adding log entry to site {args.site_id}:")
    print(f"  Template: {template.name}")
    print(f"  Date:     {entry.date}")
    if entry.author:
        print(f"  Author:   {entry.author}")
    for key, value in entry.data.items():
        field = template.get_field(key)
        print(f"  {field.label if field else key}: {value}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    add_log_entry(store.path, args.site_id, entry)
    print("Entry saved.")
    return 0


# =============================================================================
# Battery / reschedule commands
# =============================================================================


def cmd_battery(args, store, catalog):
    """Update a battery's status or replacement date."""
    if args.status is None and args.next_date is None:
        print("Error: Nothing to update (pass --status and/or --next-date)")
        return 1

    next_date = args.next_date.isoformat() if args.next_date else None
    print(f"Battery {args.battery_id} at site {args.site_id}:")
    if args.status is not None:
        print(f"  Status:     {args.status.value}")
    if next_date:
        print(f"  Replace by: {next_date}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    update_battery_status(store.path, args.site_id, args.battery_id, args.status, next_date)
    print("Battery updated.")
    return 0


def cmd_reschedule(args, store, catalog):
    """Move a scheduled event to its next occurrence."""
    site = find_site(store.get_sites(), args.site_id)
    event = site.get_event(args.event_id) if site else None
    if event is None:
        print(f"Error: Unknown event '{args.event_id}' at site '{args.site_id}'")
        return 1

    new_date = args.date
    if new_date is None:
        new_date = calc_next_date(parse_date(event.next_date), event.interval)
        if new_date is None:
            print(f"Error: '{event.title}' is a one-off event; pass --date")
            return 1

    print(f"Event: {event.title}")
    print(f"Current next date: {event.next_date}")
    print(f"New next date:     {new_date.isoformat()}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    update_event_next_date(store.path, args.site_id, args.event_id, new_date.isoformat())
    print("Event rescheduled.")
    return 0


# =============================================================================
# Stats / templates commands
# =============================================================================


def cmd_stats(args, store, catalog):
    """Battery status totals."""
    sites = store.get_sites()
    counts = battery_status_counts(sites)

    print(f"Sites: {len(sites)}")
    print(f"Batteries: {sum(counts.values())}")
    print()
    print(tabulate([[s.value, n] for s, n in counts.items()], headers=["Status", "Count"], tablefmt="simple"))
    print()
    print(tabulate(batteries_per_site(sites), headers=["Site", "Batteries"], tablefmt="simple"))
    return 0


def cmd_templates(args, store, catalog):
    """List log entry templates."""
    rows = []
    for template in catalog:
        fields = ", ".join(f"{f.id}{'*' if f.required else ''}" for f in template.fields)
        rows.append([template.id, template.name, template.category or "-", fields])
    print(tabulate(rows, headers=["ID", "Name", "Category", "Fields"], tablefmt="simple"))
    return 0


# =============================================================================
# Main
# =============================================================================

WRITE_COMMANDS = ("log", "battery", "reschedule")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Battery and maintenance tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s planner
  %(prog)s planner --as-of 2025-05-10 --due-only
  %(prog)s -f data/sites.yaml calendar --month 2024-03 --grid
  %(prog)s sites --group g1 --search office
  %(prog)s site 1
  %(prog)s log 1 t-revision --field f6=Pass --field f7=2026-03-15 --author "Jan"
  %(prog)s battery 1 b1 --status REPLACED --next-date 2028-05-10
  %(prog)s reschedule 1 se1
""",
    )
    parser.add_argument(
        "-f",
        "--file",
        type=Path,
        help="Path to sites YAML file (default: GUARD_SITES_FILE)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    planner_parser = subparsers.add_parser("planner", help="Show due and upcoming maintenance")
    planner_parser.add_argument("--as-of", type=parse_day, help="Evaluate as of date (default: today)")
    planner_parser.add_argument("--due-only", action="store_true", help="Only show due tasks")

    calendar_parser = subparsers.add_parser("calendar", help="Show events for a month")
    calendar_parser.add_argument("--month", type=parse_month, help="Month as YYYY-MM (default: current)")
    calendar_parser.add_argument("--grid", action="store_true", help="Also print a month grid")

    sites_parser = subparsers.add_parser("sites", help="List sites")
    sites_parser.add_argument("--group", type=str, help="Group ID, 'none' for ungrouped sites")
    sites_parser.add_argument("--search", type=str, help="Match site name or address")

    subparsers.add_parser("groups", help="List site groups")

    site_parser = subparsers.add_parser("site", help="Show one site")
    site_parser.add_argument("site_id", type=str, help="Site ID")

    log_parser = subparsers.add_parser("log", help="Add a log entry")
    log_parser.add_argument("site_id", type=str, help="Site ID")
    log_parser.add_argument("template_id", type=str, help="Template ID (e.g. 't-revision')")
    log_parser.add_argument("--field", action="append", help="Field value as id=value (repeatable)")
    log_parser.add_argument("--author", type=str, help="Who wrote the entry")
    log_parser.add_argument("--date", type=str, help="Entry timestamp (default: today)")
    log_parser.add_argument("--entry-id", type=str, help="Entry ID (default: generated)")
    log_parser.add_argument("--dry-run", action="store_true", help="Show what would be added without saving")

    battery_parser = subparsers.add_parser("battery", help="Update a battery")
    battery_parser.add_argument("site_id", type=str, help="Site ID")
    battery_parser.add_argument("battery_id", type=str, help="Battery ID")
    battery_parser.add_argument(
        "--status",
        type=lambda s: BatteryStatus(s.upper()),
        help="HEALTHY, WARNING, CRITICAL or REPLACED (default: unchanged)",
    )
    battery_parser.add_argument("--next-date", type=parse_day, help="New replacement date")
    battery_parser.add_argument("--dry-run", action="store_true", help="Show what would be updated without saving")

    reschedule_parser = subparsers.add_parser("reschedule", help="Move an event to its next occurrence")
    reschedule_parser.add_argument("site_id", type=str, help="Site ID")
    reschedule_parser.add_argument("event_id", type=str, help="Scheduled event ID")
    reschedule_parser.add_argument("--date", type=parse_day, help="Explicit next date (default: advance by interval)")
    reschedule_parser.add_argument("--dry-run", action="store_true", help="Show what would be updated without saving")

    subparsers.add_parser("stats", help="Battery status totals")
    subparsers.add_parser("templates", help="List log entry templates")

    return parser


COMMANDS = {
    "planner": cmd_planner,
    "calendar": cmd_calendar,
    "sites": cmd_sites,
    "groups": cmd_groups,
    "site": cmd_site,
    "log": cmd_log,
    "battery": cmd_battery,
    "reschedule": cmd_reschedule,
    "stats": cmd_stats,
    "templates": cmd_templates,
}


def main(argv=None):
    args = build_parser().parse_args(argv)
    config = load_config()
    setup_logging(config.log_level)

    if args.file is not None:
        store = FileSiteStore(args.file)
    else:
        store = get_store(config)

    if isinstance(store, FileSiteStore) and not store.path.exists():
        print(f"Error: File not found: {store.path}")
        return 1

    if args.command in WRITE_COMMANDS and not isinstance(store, FileSiteStore):
        print(f"Error: '{args.command}' needs a local sites file (use --file)")
        return 1

    catalog = load_templates(config.templates_file)
    try:
        return COMMANDS[args.command](args, store, catalog)
    except (KeyError, ValueError, ApiError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {error_message(exc)}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
