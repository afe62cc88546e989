"""Snapshot repositories: where the report engine reads its collections from.

The report API never reaches for global state; callers pass one of these
repositories (or a ready ``Snapshot``) explicitly:

- ``InMemoryRepository``: raw collections or a Snapshot held in memory
- ``JsonFileRepository``: the offline mode, a JSON document on disk
- ``ApiRepository``: read-only GETs against the POS REST API

Environment (ApiRepository only):
  POS_API_BASE: Base URL of the POS API, e.g. https://pos.example.com/api
  POS_API_TIMEOUT=30   # seconds
  POS_API_RETRIES=2

Authentication is not handled here: pass a session that already carries the
credentials the API expects.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Mapping, Protocol

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from pos_recap.data.models import Snapshot
from pos_recap.data.normalize import normalize_snapshot
from pos_recap.exceptions import ConfigError, RepositoryError

if TYPE_CHECKING:
    from pos_recap.config import DataPaths

logger = logging.getLogger(__name__)

# Collections served by the POS API, one endpoint each
API_COLLECTIONS = ("customers", "products", "channels", "payments", "admins", "sales")

DEFAULT_TIMEOUT = float(os.environ.get("POS_API_TIMEOUT", "30"))
DEFAULT_RETRIES = int(os.environ.get("POS_API_RETRIES", "2"))
# Pause before retry n is RETRY_BACKOFF * 2 ** (n - 1) seconds
RETRY_BACKOFF = 0.5
RETRY_STATUSES = (429, 500, 502, 503, 504)


class SnapshotRepository(Protocol):
    """Anything that can produce a fresh ``Snapshot`` on demand."""

    def load_snapshot(self) -> Snapshot:
        ...


class InMemoryRepository:
    """Repository over collections already in memory.

    Example:
        >>> repo = InMemoryRepository({"sales": [], "channels": []})
        >>> repo.load_snapshot().sales
        ()

    """

    def __init__(self, data: Mapping[str, Any] | Snapshot) -> None:
        self._data = data

    def load_snapshot(self) -> Snapshot:
        if isinstance(self._data, Snapshot):
            return self._data
        return normalize_snapshot(self._data)


class JsonFileRepository:
    """Repository over a JSON snapshot document.

    The document is an object with the collections ``sales``, ``customers``,
    ``products``, ``channels``, ``payments`` and ``admins``. It is re-read on
    every ``load_snapshot`` call.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    @classmethod
    def from_paths(cls, paths: DataPaths) -> JsonFileRepository:
        return cls(paths.snapshot_file)

    def load_snapshot(self) -> Snapshot:
        """Read and normalize the snapshot document.

        Raises:
            RepositoryError: If the file is missing or is not valid JSON.
            DataQualityError: If the document does not hold the expected collections.
        """
        if not self.path.exists():
            raise RepositoryError(f"Snapshot file not found: {self.path}")

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise RepositoryError(f"Could not read snapshot file {self.path}: {e}") from e

        logger.info("Loaded snapshot from %s", self.path)
        return normalize_snapshot(raw)


def make_session(
    timeout: float = DEFAULT_TIMEOUT, retries: int = DEFAULT_RETRIES
) -> requests.Session:
    """Build the HTTP session ``ApiRepository`` reads collections through.

    The API is only ever read, so only GET and HEAD are retried; a flaky
    endpoint (rate limit or 5xx answer, dropped connection) is tried again
    up to ``retries`` times with a growing pause. Every call that does not
    pass its own ``timeout`` gets the session-wide one.

    Args:
        timeout: Seconds to wait for the API (``POS_API_TIMEOUT``, default 30).
        retries: Extra attempts per request (``POS_API_RETRIES``, default 2).
    """
    session = requests.Session()
    session.headers["Accept"] = "application/json"

    adapter = HTTPAdapter(
        max_retries=Retry(
            total=retries,
            connect=retries,
            read=retries,
            status=retries,
            backoff_factor=RETRY_BACKOFF,
            status_forcelist=RETRY_STATUSES,
            allowed_methods=frozenset({"GET", "HEAD"}),
            # hand the last response back so fetch_collection can report its status
            raise_on_status=False,
        )
    )
    for scheme in ("http://", "https://"):
        session.mount(scheme, adapter)

    send = session.request

    def request_with_timeout(method: str, url: str, **kwargs: Any) -> requests.Response:
        kwargs.setdefault("timeout", timeout)
        return send(method, url, **kwargs)

    session.request = request_with_timeout  # type: ignore[method-assign,assignment]
    return session


class ApiRepository:
    """Read-only repository over the POS REST API.

    Example:
        >>> repo = ApiRepository("https://pos.example.com/api")
        >>> snapshot = repo.load_snapshot()  # GET /customers, /products, ...

    """

    def __init__(self, base_url: str, session: requests.Session | None = None) -> None:
        if not base_url:
            raise ConfigError("POS API base URL must not be empty")
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else make_session()

    @classmethod
    def from_env(cls, session: requests.Session | None = None) -> ApiRepository:
        """Build a repository from POS_API_BASE.

        Raises:
            ConfigError: If POS_API_BASE is not set.
        """
        base_url = os.environ.get("POS_API_BASE", "").strip().strip('"').strip("'")
        if not base_url:
            raise ConfigError("POS_API_BASE environment variable must be set to read from the POS API.")
        return cls(base_url, session=session)

    def fetch_collection(self, name: str) -> list[Any]:
        """GET one collection.

        A ``null`` body is an empty collection. Bodies wrapped as
        ``{"data": [...]}`` are unwrapped.

        Raises:
            RepositoryError: On transport errors, non-2xx statuses, or bodies
                that are not a JSON list.
        """
        url = f"{self.base_url}/{name}"
        logger.debug("GET %s", url)
        try:
            response = self.session.get(url)
        except requests.RequestException as e:
            logger.error("Request to %s failed: %s", url, e)
            raise RepositoryError(f"Could not reach POS API at {url}: {e}") from e

        if not response.ok:
            raise RepositoryError(f"GET {url} failed with status {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise RepositoryError(f"GET {url} did not return JSON") from e

        if body is None:
            return []
        if isinstance(body, Mapping) and isinstance(body.get("data"), list):
            body = body["data"]
        if not isinstance(body, list):
            raise RepositoryError(f"GET {url} returned {type(body).__name__}, expected a list")
        return body

    def load_snapshot(self) -> Snapshot:
        raw = {name: self.fetch_collection(name) for name in API_COLLECTIONS}
        logger.info(
            "Fetched %d sales from %s",
            len(raw["sales"]),
            self.base_url,
        )
        return normalize_snapshot(raw)
