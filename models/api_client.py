"""HTTP client for a remote sites backend."""

from typing import Any, Optional
from urllib.parse import urljoin

import requests


class ApiError(RuntimeError):
    """Failure talking to the remote backend."""

    def __init__(self, message: str, response: Optional[requests.Response] = None):
        super().__init__(message)
        self.response = response


class ApiClient:
    """Thin wrapper around requests for the /objects endpoint."""

    def __init__(self, base_url: str, timeout: float = 15, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = urljoin(self.base_url, path.lstrip("/"))
        kwargs.setdefault("timeout", self.timeout)
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as exc:
            raise ApiError(f"Request to {url} failed: {exc}") from exc

        if response.status_code >= 400:
            raise ApiError(f"API error {response.status_code}: {response.text}", response=response)

        if response.headers.get("Content-Type", "").startswith("application/json"):
            return response.json()
        return None

    def get_objects(self) -> Any:
        """Raw site list as returned by the backend."""
        return self._request("GET", "/objects") or []

    def get_groups(self) -> Any:
        """Raw group list as returned by the backend."""
        return self._request("GET", "/groups") or []

    def save_objects(self, objects: Any) -> None:
        self._request("POST", "/objects", json=objects)
