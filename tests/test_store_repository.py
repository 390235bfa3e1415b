import logging

import pytest
import requests

from conftest import make_production
from dyeing_dashboard.authorization import AllowAll, PasskeyAuthorizer, RoleAuthorizer
from dyeing_dashboard.errors import AuthorizationError, StoreError
from dyeing_dashboard.loaders.store import FirebaseRestStore, InMemoryStore
from dyeing_dashboard.repository import DashboardRepository, snapshot_to_records


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=None):
        self.payload = payload
        self.status_code = status_code
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self.text is not None:
            raise ValueError("not json")
        return self.payload


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class BrokenStore(InMemoryStore):
    def set(self, path, value):
        raise StoreError(f"write to {path} refused")


def _production(record_id="p-1"):
    return make_production("05 Mar 2026", (18000, 15000, 3000, []), (12000, 10000, 2000, []), record_id)


# ---------------------------------------------------------------------------
# InMemoryStore
# ---------------------------------------------------------------------------
def test_subscribe_gets_snapshot_now_and_on_change():
    store = InMemoryStore({"rft_records": {"a": {"date": "01/03/2026"}}})
    seen = []
    unsubscribe = store.subscribe("rft_records", seen.append)
    assert seen == [{"a": {"date": "01/03/2026"}}]

    store.set("rft_records/b", {"date": "02/03/2026"})
    assert set(seen[-1]) == {"a", "b"}

    unsubscribe()
    store.remove("rft_records/a")
    assert len(seen) == 2
    assert store.get("rft_records") == {"b": {"date": "02/03/2026"}}


def test_unrelated_writes_do_not_notify():
    store = InMemoryStore()
    seen = []
    store.subscribe("rft_records", seen.append)
    store.set("production_records/x", {"date": "01 Mar 2026"})
    assert seen == [None]


def test_store_returns_copies():
    store = InMemoryStore()
    record = {"entries": [1]}
    store.set("rft_records/a", record)
    record["entries"].append(2)
    store.get("rft_records/a")["entries"].append(3)
    assert store.get("rft_records/a") == {"entries": [1]}
    with pytest.raises(StoreError):
        store.set("/", {})


def test_snapshot_to_records():
    assert snapshot_to_records(None) == []
    assert snapshot_to_records({"a": {"date": "x"}, "b": "junk"}) == [{"id": "a", "date": "x"}]
    assert snapshot_to_records([None, {"id": "c"}]) == [{"id": "c"}]


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------
def test_passkey_gate():
    repo = DashboardRepository(InMemoryStore(), PasskeyAuthorizer("s3cret"))
    with pytest.raises(AuthorizationError, match="Not authorized to save"):
        repo.save_production(_production(), "wrong")
    saved = repo.save_production(_production(), "s3cret")
    assert repo.load("production") == [saved]


def test_empty_passkey_denies_everything():
    gate = PasskeyAuthorizer("")
    assert not gate.allows("", "save")
    assert not gate.allows(None, "delete")


def test_role_grants():
    gate = RoleAuthorizer({"planner": {"save", "upload"}, "viewer": set()})
    assert gate.allows("planner", "upload")
    assert not gate.allows("planner", "delete")
    assert not gate.allows("viewer", "save")
    assert not gate.allows("stranger", "save")
    with pytest.raises(ValueError):
        RoleAuthorizer({"planner": {"publish"}})
    with pytest.raises(ValueError):
        gate.require("planner", "publish")


def test_delete_requires_delete_capability():
    store = InMemoryStore()
    repo = DashboardRepository(store, RoleAuthorizer({"planner": {"save"}, "admin": {"delete"}}))
    repo.save_production(_production(), "planner")
    with pytest.raises(AuthorizationError):
        repo.delete("production", "p-1", "planner")
    repo.delete("production", "p-1", "admin")
    assert repo.load("production") == []


# ---------------------------------------------------------------------------
# Repository writes
# ---------------------------------------------------------------------------
def test_save_production_stamps_and_totals():
    repo = DashboardRepository(InMemoryStore(), AllowAll())
    record = _production(record_id=None)
    del record["id"]
    record["totalProduction"] = 1
    saved = repo.save_production(record, None)
    assert saved["id"]
    assert saved["createdAt"] == "2026-01-01T00:00:00Z"
    assert saved["totalProduction"] == 30000


def test_save_production_with_replace_id_overwrites():
    repo = DashboardRepository(InMemoryStore(), AllowAll())
    repo.save_production(_production("p-1"), None)
    repo.save_production(_production("other"), None, replace_id="p-1")
    assert [r["id"] for r in repo.load("production")] == ["p-1"]


def test_save_rft_refreshes_cached_performance(rft_record):
    repo = DashboardRepository(InMemoryStore(), AllowAll())
    saved = repo.save_rft(rft_record, None)
    assert saved["bulkRftPercent"] == pytest.approx(66.67)
    assert saved["shiftPerformance"]["humayun"] == 5040


def test_rft_uses_configured_supervisors(rft_record):
    store = InMemoryStore({"app_settings": {"supervisors": {"supervisorA": "KARIM"}}})
    repo = DashboardRepository(store, AllowAll())
    assert repo.supervisors() == ("KARIM", "HUMAYUN")
    saved = repo.save_rft(rft_record, None)
    assert saved["shiftPerformance"] == {"karim": 0, "humayun": 5040}


def test_save_supervisor_settings_upper_cases_names():
    repo = DashboardRepository(InMemoryStore(), PasskeyAuthorizer("k"))
    with pytest.raises(AuthorizationError):
        repo.save_supervisor_settings({"supervisorA": "rahim"}, "nope")
    settings = repo.save_supervisor_settings({"supervisorA": " rahim "}, "k")
    assert settings["supervisorA"] == "RAHIM"
    assert repo.supervisor_settings()["supervisorB"] == "HUMAYUN"
    assert repo.supervisor_settings()["totalShifts"] == 2


def test_store_failure_is_logged_and_reraised(caplog):
    repo = DashboardRepository(BrokenStore(), AllowAll())
    with caplog.at_level(logging.ERROR, logger="dyeing_dashboard.repository"):
        with pytest.raises(StoreError, match="refused"):
            repo.save_production(_production(), None)
    assert "Failed to write production_records/p-1" in caplog.text


def test_watch_delivers_record_lists():
    repo = DashboardRepository(InMemoryStore(), AllowAll())
    seen = []
    repo.watch("production", seen.append)
    repo.save_production(_production(), None)
    assert seen[0] == []
    assert seen[-1][0]["id"] == "p-1"


def test_unknown_collection():
    repo = DashboardRepository(InMemoryStore(), AllowAll())
    with pytest.raises(ValueError):
        repo.load("invoices")


# ---------------------------------------------------------------------------
# FirebaseRestStore
# ---------------------------------------------------------------------------
def test_rest_store_requires_url():
    with pytest.raises(StoreError):
        FirebaseRestStore(base_url="")


def test_rest_store_get_and_set():
    session = FakeSession(FakeResponse({"a": {"date": "x"}}), FakeResponse(None), FakeResponse({"a": {}}))
    store = FirebaseRestStore("https://db.example.com/", token="tok", session=session)
    assert store.get("rft_records") == {"a": {"date": "x"}}

    method, url, kwargs = session.calls[0]
    assert method == "GET"
    assert url == "https://db.example.com/rft_records.json"
    assert kwargs["params"] == {"auth": "tok"}

    store.set("/rft_records/a/", {"date": "y"})
    method, url, kwargs = session.calls[1]
    assert (method, url, kwargs["json"]) == ("PUT", "https://db.example.com/rft_records/a.json", {"date": "y"})


def test_rest_store_errors_become_store_errors():
    session = FakeSession(
        FakeResponse(status_code=401),
        requests.ConnectionError("down"),
        FakeResponse(text="<html>"),
    )
    store = FirebaseRestStore("https://db.example.com", token="", session=session)
    for _ in range(3):
        with pytest.raises(StoreError):
            store.get("rft_records")
    assert session.calls[0][2]["params"] is None


def test_rest_store_refresh_pushes_snapshots():
    session = FakeSession(FakeResponse({"a": {}}), FakeResponse({"a": {}, "b": {}}))
    store = FirebaseRestStore("https://db.example.com", session=session)
    seen = []
    store.subscribe("rft_records", seen.append)
    store.refresh()
    assert seen == [{"a": {}}, {"a": {}, "b": {}}]


# ---------------------------------------------------------------------------
# Uploads
# ---------------------------------------------------------------------------
class FakeExtractionClient:
    def __init__(self, extracted):
        self.extracted = extracted
        self.calls = []

    def extract_file(self, kind, path):
        self.calls.append((kind, path))
        return self.extracted


def test_upload_production_needs_upload_and_save():
    client = FakeExtractionClient({
        "date": "05 Mar 2026",
        "lantabur": {"total": 1000, "inhouse": 800, "subContract": 200, "colorGroups": []},
        "taqwa": {"total": 500, "inhouse": 500, "subContract": 0},
    })
    repo = DashboardRepository(InMemoryStore(), RoleAuthorizer({
        "planner": {"save"},
        "admin": {"save", "upload"},
    }))
    with pytest.raises(AuthorizationError, match="upload"):
        repo.upload_production(client, "report.png", "planner")
    assert client.calls == []

    saved = repo.upload_production(client, "report.png", "admin")
    assert client.calls == [("production", "report.png")]
    assert saved["lantabur"]["name"] == "Lantabur"
    assert saved["taqwa"]["name"] == "Taqwa"
    assert saved["totalProduction"] == 1500
    assert repo.load("production")[0]["date"] == "05 Mar 2026"


def test_upload_rft_merges_into_base_record(rft_record):
    client = FakeExtractionClient({"isSuccess": True, "entries": rft_record["entries"]})
    repo = DashboardRepository(InMemoryStore(), AllowAll())
    saved = repo.upload_rft(client, "rft.pdf", None, base=rft_record)
    assert saved["id"] == "r-1"
    assert saved["shiftPerformance"] == {"yousuf": 12250, "humayun": 5040}


def test_upload_program_uses_active_brand():
    client = FakeExtractionClient({"date": "05-Mar-26", "entries": [{"inhouse": 100, "subcontact": 25}]})
    repo = DashboardRepository(InMemoryStore(), AllowAll())
    saved = repo.upload_program(client, "program.pdf", None, "taqwa")
    assert saved["industry"] == "taqwa"
    assert saved["grandTotal"] == 125
    assert repo.load("dyeing_program")[0]["id"] == saved["id"]
