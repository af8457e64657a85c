"""Flask web application for battery and maintenance tracking."""

import logging
from datetime import date, timedelta
from pathlib import Path

from flask import Flask, abort, flash, jsonify, redirect, render_template, request, url_for

# Add parent directory to path for model imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import load_config, setup_logging
from validate_yaml import load_schema, schema_errors
from models import (
    NO_GROUP_COLOR,
    ApiError,
    BatteryStatus,
    EventKind,
    InvalidDate,
    InvalidRecord,
    Site,
    TaskKind,
    batteries_per_site,
    battery_status_counts,
    build_calendar,
    build_planner,
    filter_sites,
    find_group,
    find_site,
    get_store,
    group_to_dict,
    load_templates,
    month_grid,
    parse_date,
    sites_from_data,
    sites_per_group,
    sites_to_dicts,
)

CONFIG = load_config()
setup_logging(CONFIG.log_level)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = CONFIG.secret_key
app.config["STORE"] = get_store(CONFIG)
app.config["CATALOG"] = load_templates(CONFIG.templates_file)
app.config["SCHEMA"] = load_schema()

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
DAY_NAMES = ["Mo", "Tu", "We", "Th", "Fr", "Sa", "Su"]


def get_sites():
    return app.config["STORE"].get_sites()


def get_today() -> date:
    """Reference date for due evaluation: ?as_of=YYYY-MM-DD or today."""
    as_of = request.args.get("as_of")
    if as_of:
        try:
            return parse_date(as_of)
        except InvalidDate:
            flash(f"Invalid date '{as_of}', using today", "error")
    return date.today()


def group_color(group) -> str:
    return group.color if group else NO_GROUP_COLOR


def battery_status_color(status: BatteryStatus) -> str:
    """Get Tailwind color classes for a battery status badge."""
    colors = {
        BatteryStatus.HEALTHY: "bg-green-100 text-green-800",
        BatteryStatus.WARNING: "bg-yellow-100 text-yellow-800",
        BatteryStatus.CRITICAL: "bg-red-100 text-red-800",
        BatteryStatus.REPLACED: "bg-gray-100 text-gray-600",
    }
    return colors.get(status, "bg-gray-100 text-gray-800")


def event_kind_color(kind) -> str:
    """Get Tailwind color classes for a calendar chip."""
    colors = {
        EventKind.BATTERY: "bg-orange-100 text-orange-800",
        EventKind.SCHEDULED: "bg-indigo-100 text-indigo-800",
        EventKind.REVISION: "bg-blue-100 text-blue-800",
        TaskKind.BATTERY: "bg-orange-100 text-orange-800",
        TaskKind.SCHEDULED: "bg-indigo-100 text-indigo-800",
    }
    return colors.get(kind, "bg-gray-100 text-gray-800")


def task_date(task) -> str:
    """Exact day, or month name and year for month-precision tasks."""
    if task.precision_on_day:
        return task.date.isoformat()
    return f"{MONTH_NAMES[task.date.month - 1]} {task.date.year}"


# Register template filters
app.jinja_env.filters["battery_status_color"] = battery_status_color
app.jinja_env.filters["event_kind_color"] = event_kind_color
app.jinja_env.filters["task_date"] = task_date
app.jinja_env.filters["group_color"] = group_color


@app.errorhandler(ApiError)
def handle_api_error(exc):
    logger.error("Backend request failed: %s", exc)
    return render_template("error.html", message=str(exc)), 502


@app.errorhandler(InvalidRecord)
def handle_invalid_record(exc):
    logger.error("Stored sites could not be loaded: %s", exc)
    return render_template("error.html", title="Unreadable site data", message=str(exc)), 500


@app.route("/")
def index():
    """Dashboard with battery totals and what needs attention."""
    sites = get_sites()
    groups = app.config["STORE"].get_groups()
    today = get_today()
    planner = build_planner(sites, today)
    counts = battery_status_counts(sites)
    selected_group = request.args.get("group", "all")
    search = request.args.get("q", "")

    return render_template(
        "index.html",
        sites=sites,
        listed_sites=filter_sites(sites, selected_group, search),
        groups=groups,
        group_counts=sites_per_group(sites, groups),
        find_group=find_group,
        selected_group=selected_group,
        search=search,
        counts=counts,
        total_batteries=sum(counts.values()),
        per_site=batteries_per_site(sites),
        due_count=len(planner.due),
        skipped=planner.skipped,
        BatteryStatus=BatteryStatus,
    )


@app.route("/planner")
def planner():
    """Maintenance planner: due tasks first, then upcoming ones."""
    today = get_today()
    result = build_planner(get_sites(), today)
    return render_template(
        "planner.html",
        due=result.due,
        future=result.future,
        skipped=result.skipped,
        today=today,
        active_tab="planner",
    )


@app.route("/calendar")
def calendar_view():
    """Month calendar of battery replacements, events and revisions."""
    today = date.today()
    try:
        year = int(request.args.get("year", today.year))
        month = int(request.args.get("month", today.month))
        first = date(year, month, 1)
    except ValueError:
        abort(400)

    result = build_calendar(get_sites(), app.config["CATALOG"])

    prev_month = (first - timedelta(days=1)).replace(day=1)
    next_month = date(year + month // 12, month % 12 + 1, 1)

    return render_template(
        "calendar.html",
        weeks=month_grid(year, month),
        result=result,
        year=year,
        month=month,
        month_name=MONTH_NAMES[month - 1],
        day_names=DAY_NAMES,
        prev_month=prev_month,
        next_month=next_month,
        today=today,
        skipped=result.skipped,
        active_tab="calendar",
    )


@app.route("/site/<site_id>")
def site_detail(site_id: str):
    """Site detail page with technologies, batteries, events and log."""
    site = find_site(get_sites(), site_id)
    if site is None:
        flash(f"Site '{site_id}' not found", "error")
        return redirect(url_for("index"))

    catalog = app.config["CATALOG"]
    result = build_planner([site], get_today())
    due_ids = {task.id for task in result.due}

    return render_template(
        "site.html",
        site=site,
        due_ids=due_ids,
        log=site.get_log_sorted(),
        catalog=catalog,
        skipped=result.skipped,
    )


# =============================================================================
# JSON API (consumed by RemoteSiteStore)
# =============================================================================


@app.route("/objects", methods=["GET"])
def get_objects():
    return jsonify(sites_to_dicts(get_sites()))


@app.route("/groups", methods=["GET"])
def get_groups():
    return jsonify([group_to_dict(g) for g in app.config["STORE"].get_groups()])


@app.route("/objects", methods=["POST"])
def save_objects():
    payload = request.get_json(silent=True)
    if not isinstance(payload, list):
        return jsonify({"error": "Expected a JSON list of sites"}), 400

    errors = schema_errors({"sites": payload}, app.config["SCHEMA"])
    if errors:
        logger.warning("Rejected site payload: %s", errors[0])
        return jsonify({"error": "Invalid site data", "details": errors}), 400

    try:
        sites = sites_from_data(payload)
    except (KeyError, ValueError) as exc:
        logger.warning("Rejected site payload: %s", exc)
        return jsonify({"error": f"Invalid site data: {exc}"}), 400

    if not all(isinstance(s, Site) for s in sites):
        return jsonify({"error": "Every site needs id, name and technologies"}), 400

    app.config["STORE"].save_sites(sites)
    return jsonify({"saved": len(sites)})


if __name__ == "__main__":
    # Run with debug mode for development
    # Using 5001 to avoid conflict with macOS AirPlay Receiver on 5000
    app.run(debug=True, host="0.0.0.0", port=5001)
