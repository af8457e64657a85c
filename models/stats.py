"""Dashboard summary numbers across all sites."""

from typing import Dict, Iterable, List, Tuple

from .site import Site
from .status import BatteryStatus


def battery_status_counts(sites: Iterable[Site]) -> Dict[BatteryStatus, int]:
    """Number of batteries in each status. Every status is present."""
    counts = {status: 0 for status in BatteryStatus}
    for site in sites:
        for _, battery in site.iter_batteries():
            counts[battery.status] += 1
    return counts


def batteries_per_site(sites: Iterable[Site]) -> List[Tuple[str, int]]:
    """(site name, battery count) in input order."""
    return [(site.name, site.battery_count) for site in sites]
