"""Tests for snapshot repositories.

HTTP is replaced by a fake session; the live test at the bottom reads from a
real POS API and is skipped unless POS_API_BASE is set.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import pytest
import requests

from pos_recap.config import DataPaths
from pos_recap.data.models import Snapshot
from pos_recap.data.repository import (
    API_COLLECTIONS,
    RETRY_BACKOFF,
    RETRY_STATUSES,
    ApiRepository,
    InMemoryRepository,
    JsonFileRepository,
    make_session,
)
from pos_recap.exceptions import ConfigError, DataQualityError, RepositoryError
from tests.test_utils import raw_snapshot


class FakeResponse:
    def __init__(self, body: Any, status_code: int = 200, invalid_json: bool = False) -> None:
        self._body = body
        self.status_code = status_code
        self._invalid_json = invalid_json

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self) -> Any:
        if self._invalid_json:
            raise ValueError("Expecting value")
        return self._body


class FakeSession:
    """Serves one canned response per collection and records requested URLs."""

    def __init__(self, responses: dict[str, Any]) -> None:
        self.responses = responses
        self.requested: list[str] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.requested.append(url)
        name = url.rsplit("/", 1)[-1]
        response = self.responses.get(name, FakeResponse([]))
        if isinstance(response, Exception):
            raise response
        return response


def test_in_memory_repository_normalizes_raw_data() -> None:
    snapshot = InMemoryRepository(raw_snapshot()).load_snapshot()
    assert len(snapshot.sales) == 5
    assert snapshot.sales[0].channel.name == "Shopee"


def test_in_memory_repository_passes_snapshot_through() -> None:
    snapshot = Snapshot()
    assert InMemoryRepository(snapshot).load_snapshot() is snapshot


def test_json_file_repository_reads_fresh_data_each_time(tmp_path: Path) -> None:
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(raw_snapshot()), encoding="utf-8")
    repo = JsonFileRepository(path)
    assert len(repo.load_snapshot().sales) == 5

    data = raw_snapshot()
    data["sales"] = data["sales"][:2]
    path.write_text(json.dumps(data), encoding="utf-8")
    assert len(repo.load_snapshot().sales) == 2


def test_json_file_repository_from_paths(tmp_path: Path) -> None:
    paths = DataPaths.from_root(tmp_path)
    assert JsonFileRepository.from_paths(paths).path == tmp_path / "snapshot.json"


def test_json_file_repository_missing_file(tmp_path: Path) -> None:
    with pytest.raises(RepositoryError, match="not found"):
        JsonFileRepository(tmp_path / "nope.json").load_snapshot()


def test_json_file_repository_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "snapshot.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(RepositoryError):
        JsonFileRepository(path).load_snapshot()


def test_json_file_repository_wrong_shape(tmp_path: Path) -> None:
    path = tmp_path / "snapshot.json"
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(DataQualityError):
        JsonFileRepository(path).load_snapshot()


def test_api_repository_fetches_every_collection() -> None:
    data = raw_snapshot()
    session = FakeSession({name: FakeResponse(data[name]) for name in API_COLLECTIONS})
    repo = ApiRepository("https://pos.example.com/api/", session=session)

    snapshot = repo.load_snapshot()

    assert session.requested == [f"https://pos.example.com/api/{name}" for name in API_COLLECTIONS]
    assert len(snapshot.sales) == 5
    assert snapshot.sales[1].customer.name == "Sari"


def test_api_repository_unwraps_data_envelope_and_null_body() -> None:
    session = FakeSession(
        {
            "channels": FakeResponse({"data": [{"id": "ch1", "name": "Shopee"}]}),
            "sales": FakeResponse({"data": [{"id": "s1", "channel": {"id": "ch1", "name": "Lama"}}]}),
            "admins": FakeResponse(None),
        }
    )
    snapshot = ApiRepository("https://pos.example.com/api", session=session).load_snapshot()
    assert snapshot.sales[0].channel.name == "Shopee"
    assert snapshot.admins == ()


def test_api_repository_http_error_status() -> None:
    session = FakeSession({"sales": FakeResponse({"message": "boom"}, status_code=500)})
    with pytest.raises(RepositoryError, match="500"):
        ApiRepository("https://pos.example.com/api", session=session).load_snapshot()


def test_api_repository_transport_error() -> None:
    session = FakeSession({"customers": requests.ConnectionError("refused")})
    with pytest.raises(RepositoryError, match="Could not reach"):
        ApiRepository("https://pos.example.com/api", session=session).load_snapshot()


def test_api_repository_non_json_body() -> None:
    session = FakeSession({"products": FakeResponse(None, invalid_json=True)})
    with pytest.raises(RepositoryError, match="JSON"):
        ApiRepository("https://pos.example.com/api", session=session).fetch_collection("products")


def test_api_repository_non_list_body() -> None:
    session = FakeSession({"products": FakeResponse({"id": "p1"})})
    with pytest.raises(RepositoryError, match="expected a list"):
        ApiRepository("https://pos.example.com/api", session=session).fetch_collection("products")


def test_api_repository_requires_base_url() -> None:
    with pytest.raises(ConfigError):
        ApiRepository("")


def test_api_repository_from_env_strips_quotes(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("POS_API_BASE", '"https://pos.example.com/api"')
    repo = ApiRepository.from_env(session=FakeSession({}))
    assert repo.base_url == "https://pos.example.com/api"


def test_api_repository_from_env_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("POS_API_BASE", raising=False)
    with pytest.raises(ConfigError, match="POS_API_BASE"):
        ApiRepository.from_env()


def test_make_session_sets_default_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, Any] = {}

    def fake_request(self: requests.Session, method: str, url: str, **kwargs: Any) -> str:
        captured.update(kwargs)
        return "ok"

    monkeypatch.setattr(requests.Session, "request", fake_request)
    session = make_session(timeout=5, retries=1)

    assert session.request("GET", "https://pos.example.com/api/sales") == "ok"
    assert captured["timeout"] == 5
    assert session.headers["Accept"] == "application/json"
    assert session.get_adapter("https://pos.example.com").max_retries.total == 1


def test_make_session_retries_only_reads() -> None:
    retry = make_session(timeout=5, retries=3).get_adapter("http://localhost").max_retries

    assert retry.total == 3
    assert retry.status_forcelist == RETRY_STATUSES
    assert retry.backoff_factor == RETRY_BACKOFF
    assert retry.allowed_methods == frozenset({"GET", "HEAD"})
    assert not retry.raise_on_status


@pytest.mark.live
def test_api_repository_live() -> None:
    """Read a real snapshot from the POS API named by POS_API_BASE."""
    if not os.environ.get("POS_API_BASE"):
        pytest.skip("Live test skipped: POS_API_BASE environment variable required")

    snapshot = ApiRepository.from_env().load_snapshot()
    assert isinstance(snapshot, Snapshot)
    for sale in snapshot.sales:
        assert sale.price >= 0
