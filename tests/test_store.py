import pytest
import requests

from kasirku.errors import BackendError
from kasirku.store import MemoryStore, RestStore


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status_code = status
        self.content = b"x" if payload is not None else b""

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.payload


class FakeSession(requests.Session):
    def __init__(self, responses):
        super().__init__()
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def test_rest_select_builds_postgrest_query():
    session = FakeSession([FakeResponse([{"id": "1"}])])
    store = RestStore("https://db.example/", "key", timeout=3, session=session)
    rows = store.select(
        "transaksi", eq={"user_id": "u1"}, gte={"tanggal": "2025-01-01"}, lte={"tanggal": "2025-01-31"},
        branch_scope="b1", order=("tanggal", False),
    )

    assert rows == [{"id": "1"}]
    method, url, kwargs = session.calls[0]
    assert method == "GET"
    assert url == "https://db.example/rest/v1/transaksi"
    assert kwargs["timeout"] == 3
    assert kwargs["params"] == {
        "select": "*",
        "user_id": "eq.u1",
        "tanggal": ["gte.2025-01-01", "lte.2025-01-31"],
        "or": "(branch_id.eq.b1,branch_id.is.null)",
        "order": "tanggal.desc",
    }
    assert session.headers["apikey"] == "key"
    assert session.headers["Authorization"] == "Bearer key"


def test_rest_insert_and_update_return_first_row():
    session = FakeSession([FakeResponse([{"id": "9", "a": 1}]), FakeResponse([{"id": "9", "a": 2}])])
    store = RestStore("https://db.example", session=session)

    assert store.insert("invoice", {"a": 1}) == {"id": "9", "a": 1}
    assert store.update("invoice", "9", {"a": 2}) == {"id": "9", "a": 2}
    assert session.calls[1][0] == "PATCH"
    assert session.calls[1][2]["params"] == {"id": "eq.9"}


def test_rest_http_error_becomes_backend_error():
    store = RestStore("https://db.example", session=FakeSession([FakeResponse({"message": "no"}, status=500)]))
    with pytest.raises(BackendError) as exc:
        store.select("invoice")
    assert exc.value.collection == "invoice"


def test_rest_connection_error_becomes_backend_error():
    store = RestStore("https://db.example", session=FakeSession([requests.ConnectionError("down")]))
    with pytest.raises(BackendError):
        store.insert("invoice", {})


def test_rest_update_missing_record():
    store = RestStore("https://db.example", session=FakeSession([FakeResponse([])]))
    with pytest.raises(BackendError):
        store.update("invoice", "x", {"status": "Lunas"})


def test_memory_store_insert_assigns_id_and_timestamps():
    store = MemoryStore()
    row = store.insert("invoice", {"nominal": 1})
    assert row["id"]
    assert row["created_at"]
    assert store.select("invoice") == [row]


def test_memory_store_filters_and_order():
    store = MemoryStore({"transaksi": [
        {"id": "1", "user_id": "u1", "tanggal": "2025-01-01", "branch_id": None},
        {"id": "2", "user_id": "u1", "tanggal": "2025-02-01", "branch_id": "b1"},
        {"id": "3", "user_id": "u1", "tanggal": "2025-03-01", "branch_id": "b2"},
        {"id": "4", "user_id": "u2", "tanggal": "2025-02-10", "branch_id": "b1"},
        {"id": "5", "user_id": "u1", "tanggal": "2024-12-31", "branch_id": "b1"},
    ]})
    rows = store.select(
        "transaksi", eq={"user_id": "u1"}, gte={"tanggal": "2025-01-01"}, lte={"tanggal": "2025-12-31"},
        branch_scope="b1", order=("tanggal", False),
    )
    assert [r["id"] for r in rows] == ["2", "1"]


def test_memory_store_update_and_missing():
    store = MemoryStore()
    row = store.insert("invoice", {"status": "Belum Dibayar"})
    assert store.update("invoice", row["id"], {"status": "Lunas"})["status"] == "Lunas"
    with pytest.raises(BackendError):
        store.update("invoice", "nope", {"status": "Lunas"})


def test_memory_store_returns_copies():
    store = MemoryStore()
    row = store.insert("invoice", {"nominal": 1})
    row["nominal"] = 99
    assert store.select("invoice")[0]["nominal"] == 1
