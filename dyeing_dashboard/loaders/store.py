"""
Record store collaborators.

The dashboard keeps every collection as a mapping of id -> record under a
slash-separated path. Subscribers receive the whole collection snapshot on
each change and replace their in-memory copy with it (last write wins).
"""

import copy
import logging
from typing import Any, Callable

import requests

from ..config import HTTP_TIMEOUT, STORE_TOKEN, STORE_URL
from ..errors import StoreError

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]


def _split(path: str) -> list[str]:
    return [part for part in path.strip("/").split("/") if part]


class RecordStore:
    """Minimal key-value document store interface."""

    def __init__(self):
        self._listeners: dict[str, list[Listener]] = {}

    def get(self, path: str) -> Any:
        raise NotImplementedError

    def set(self, path: str, value: Any) -> None:
        raise NotImplementedError

    def remove(self, path: str) -> None:
        raise NotImplementedError

    def subscribe(self, path: str, callback: Listener) -> Callable[[], None]:
        """Register callback for snapshots of path; returns an unsubscribe function.

        The callback is invoked immediately with the current snapshot.
        """
        key = "/".join(_split(path))
        self._listeners.setdefault(key, []).append(callback)
        callback(self.get(key))

        def unsubscribe():
            listeners = self._listeners.get(key, [])
            if callback in listeners:
                listeners.remove(callback)

        return unsubscribe

    def _notify(self, changed_path: str) -> None:
        changed = _split(changed_path)
        for key, listeners in list(self._listeners.items()):
            watched = _split(key)
            # a change under or above a watched path affects its snapshot
            if changed[: len(watched)] == watched or watched[: len(changed)] == changed:
                snapshot = self.get(key)
                for callback in list(listeners):
                    callback(snapshot)


class InMemoryStore(RecordStore):
    """Nested-dict store used for tests, the simulator and offline runs."""

    def __init__(self, data: dict | None = None):
        super().__init__()
        self._data: dict = copy.deepcopy(data) if data else {}

    def get(self, path: str) -> Any:
        node: Any = self._data
        for part in _split(path):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return copy.deepcopy(node)

    def set(self, path: str, value: Any) -> None:
        parts = _split(path)
        if not parts:
            raise StoreError("Cannot overwrite the store root")
        node = self._data
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = copy.deepcopy(value)
        self._notify(path)

    def remove(self, path: str) -> None:
        parts = _split(path)
        node: Any = self._data
        for part in parts[:-1]:
            if not isinstance(node, dict) or part not in node:
                return
            node = node[part]
        if isinstance(node, dict) and parts:
            node.pop(parts[-1], None)
        self._notify(path)


class FirebaseRestStore(RecordStore):
    """Realtime-database REST backend (<url>/<path>.json?auth=<token>).

    Snapshots are pushed to subscribers after every local write and on an
    explicit refresh(); there is no server-sent event stream.
    """

    def __init__(
        self,
        base_url: str = STORE_URL,
        token: str = STORE_TOKEN,
        timeout: float = HTTP_TIMEOUT,
        session: requests.Session | None = None,
    ):
        super().__init__()
        if not base_url:
            raise StoreError("DASHBOARD_STORE_URL is not configured")
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{'/'.join(_split(path))}.json"

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        params = {"auth": self.token} if self.token else None
        try:
            response = self.session.request(
                method, self._url(path), params=params, timeout=self.timeout, **kwargs
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise StoreError(f"{method} {path} failed: {exc}") from exc
        return response

    def get(self, path: str) -> Any:
        try:
            return self._request("GET", path).json()
        except ValueError as exc:
            raise StoreError(f"GET {path} returned invalid JSON") from exc

    def set(self, path: str, value: Any) -> None:
        self._request("PUT", path, json=value)
        self._notify(path)

    def remove(self, path: str) -> None:
        self._request("DELETE", path)
        self._notify(path)

    def refresh(self) -> None:
        """Re-fetch every subscribed path and push the snapshots."""
        for key, listeners in list(self._listeners.items()):
            snapshot = self.get(key)
            for callback in list(listeners):
                callback(snapshot)
        logger.info("Refreshed %d subscribed paths", len(self._listeners))
