"""
Site storage backends.

FileSiteStore keeps sites in a local YAML file; RemoteSiteStore talks to an
HTTP backend. Both return fully built Site objects.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Union

from .api_client import ApiClient
from .group import ObjectGroup
from .loader import groups_from_data, load_groups, load_sites, save_sites, sites_from_data, sites_to_dicts
from .site import Site

logger = logging.getLogger(__name__)

REMOTE = "REMOTE"


class SiteStore(ABC):
    """Where sites and their groups are read from and written to."""

    @abstractmethod
    def get_sites(self) -> List[Site]:
        ...

    @abstractmethod
    def get_groups(self) -> List[ObjectGroup]:
        ...

    @abstractmethod
    def save_sites(self, sites: List[Site]) -> None:
        ...


class FileSiteStore(SiteStore):
    """Sites stored in a YAML file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def get_sites(self) -> List[Site]:
        if not self.path.exists():
            logger.info("Sites file %s does not exist yet", self.path)
            return []
        return load_sites(self.path)

    def get_groups(self) -> List[ObjectGroup]:
        if not self.path.exists():
            return []
        return load_groups(self.path)

    def save_sites(self, sites: List[Site]) -> None:
        save_sites(self.path, sites)
        logger.info("Saved %d site(s) to %s", len(sites), self.path)


class RemoteSiteStore(SiteStore):
    """Sites served by a remote backend."""

    def __init__(self, client: ApiClient):
        self.client = client

    def get_sites(self) -> List[Site]:
        return sites_from_data(self.client.get_objects())

    def get_groups(self) -> List[ObjectGroup]:
        return groups_from_data(self.client.get_groups())

    def save_sites(self, sites: List[Site]) -> None:
        self.client.save_objects(sites_to_dicts(sites))
        logger.info("Sent %d site(s) to %s", len(sites), self.client.base_url)


def get_store(config) -> SiteStore:
    """Pick the backend configured by config.api_mode."""
    if config.api_mode.upper() == REMOTE:
        if not config.api_base_url:
            raise ValueError("GUARD_API_BASE_URL is required in REMOTE mode")
        logger.debug("Using remote store at %s", config.api_base_url)
        return RemoteSiteStore(ApiClient(config.api_base_url, timeout=config.api_timeout))
    return FileSiteStore(config.sites_file)
