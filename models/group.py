"""Site groups (customers or segments) and site list filtering."""

from typing import Iterable, List, Optional, Tuple

from .site import Site

NO_GROUP_NAME = "No group"
NO_GROUP_COLOR = "#94a3b8"


class ObjectGroup:
    """A named, coloured segment that sites can be assigned to."""

    def __init__(self, id: str, name: str, color: str = NO_GROUP_COLOR):
        self.id = str(id)
        self.name = name
        self.color = color


def find_group(groups: Iterable[ObjectGroup], group_id: Optional[str]) -> Optional[ObjectGroup]:
    """Find a group by id."""
    for group in groups:
        if group.id == group_id:
            return group
    return None


def filter_sites(
    sites: Iterable[Site], group_id: Optional[str] = None, search: Optional[str] = None
) -> List[Site]:
    """
    Sites matching a group and a search text, in input order.

    - group_id None (or "all") keeps every group; "none" keeps ungrouped sites
    - search matches name or address, case-insensitively
    """
    needle = (search or "").strip().lower()
    result = []
    for site in sites:
        if group_id == "none":
            if site.group_id:
                continue
        elif group_id not in (None, "", "all") and site.group_id != group_id:
            continue
        if needle and needle not in site.name.lower() and needle not in (site.address or "").lower():
            continue
        result.append(site)
    return result


def sites_per_group(sites: Iterable[Site], groups: Iterable[ObjectGroup]) -> List[Tuple[ObjectGroup, int]]:
    """(group, site count) for every group, in group order."""
    sites = list(sites)
    return [(g, sum(1 for s in sites if s.group_id == g.id)) for g in groups]
