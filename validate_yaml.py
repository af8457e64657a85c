#!/usr/bin/env python3
"""
Check sites YAML files before the tracker reads them.

Each file is checked against schema.yaml first. Files that pass are then
scanned for date values the planner could not read, since the schema only
knows that they are strings.
"""
import sys
from pathlib import Path
from typing import Any, Iterator, List, Tuple

import yaml
from jsonschema import Draft7Validator

from models import InvalidDate, parse_date

BATTERY_DATE_KEYS = ("installDate", "lastCheckDate", "nextReplacementDate", "manufactureDate")
EVENT_DATE_KEYS = ("startDate", "nextDate")


def load_schema() -> dict:
    """Load the JSON schema from schema.yaml."""
    schema_path = Path(__file__).parent / "schema.yaml"
    with open(schema_path) as f:
        return yaml.safe_load(f)


def _format_path(path) -> str:
    return ".".join(str(p) for p in path)


def _date_values(data: Any) -> Iterator[Tuple[str, Any]]:
    """Yield (path, value) for every stored battery and event date."""
    for i, site in enumerate(data.get("sites") or []):
        for j, tech in enumerate(site.get("technologies") or []):
            for k, battery in enumerate(tech.get("batteries") or []):
                for key in BATTERY_DATE_KEYS:
                    if key in battery:
                        yield f"sites.{i}.technologies.{j}.batteries.{k}.{key}", battery[key]
        for j, event in enumerate(site.get("scheduledEvents") or []):
            for key in EVENT_DATE_KEYS:
                if key in event:
                    yield f"sites.{i}.scheduledEvents.{j}.{key}", event[key]


def schema_errors(data: Any, schema: dict) -> List[str]:
    """Every schema violation in data, ordered by path."""
    errors = []
    validator = Draft7Validator(schema)
    for error in sorted(validator.iter_errors(data), key=lambda e: _format_path(e.path)):
        errors.append(f"Schema validation error: {error.message}")
        if error.path:
            errors.append(f"  at path: {_format_path(error.path)}")
    return errors


def validate_sites_file(filepath: Path, schema: dict) -> List[str]:
    """Validate a single sites YAML file. Returns list of errors."""
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        return [f"YAML parse error: {e}"]
    except OSError as e:
        return [f"Error: {e}"]

    errors = schema_errors(data, schema)
    if errors:
        return errors

    for path, value in _date_values(data):
        try:
            parse_date(value)
        except InvalidDate as e:
            errors.append(str(e))
            errors.append(f"  at path: {path}")
    return errors


def main(argv=None):
    """Validate the given files, or every YAML file in data/."""
    schema = load_schema()
    paths = [Path(p) for p in (sys.argv[1:] if argv is None else argv)]

    if not paths:
        data_dir = Path(__file__).parent / "data"
        if not data_dir.exists():
            print(f"Error: data directory not found: {data_dir}")
            return 1
        paths = sorted(data_dir.glob("*.y*ml"))

    if not paths:
        print("Warning: No YAML files found")
        return 0

    failed = 0
    for filepath in paths:
        errors = validate_sites_file(filepath, schema)
        print(f"{'FAIL' if errors else 'OK'}: {filepath.name}")
        for error in errors:
            print(f"  {error}")
        failed += bool(errors)

    if failed:
        print(f"\n{failed} of {len(paths)} file(s) failed")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
