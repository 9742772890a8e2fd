from __future__ import annotations

from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient

from canews.api.app import create_app, get_store
from canews.config.settings import settings
from canews.normalization.normalizer import NormalizationError, Normalizer
from canews.storage.supabase_client import RecordNotFoundError, SupabaseDocumentStore


class FakeStore:
    """In-memory stand-in for SupabaseDocumentStore."""

    def __init__(self, tables: Dict[str, List[Dict[str, Any]]]):
        self.tables = tables
        self.inserted: List[Dict[str, Any]] = []

    async def fetch_documents(self, table_name: str) -> List[Dict[str, Any]]:
        return self.tables.get(table_name, [])

    async def fetch_document(self, table_name: str, doc_id: str) -> Dict[str, Any]:
        for document in self.tables.get(table_name, []):
            if str(document.get("id")) == doc_id:
                return document
        raise RecordNotFoundError(f"{doc_id} not found in {table_name}")

    async def insert_document(self, table_name: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.inserted.append(payload)
        return {**payload, "id": 101}


@pytest.fixture()
def store() -> FakeStore:
    return FakeStore(
        {
            "sports": [
                {
                    "id": 7,
                    "title": "Homecoming Game",
                    "sport": "Football",
                    "date": "2025-10-03",
                    "upcoming_events": [
                        {"date": "2025-08-05", "event": "Basketball (JV Boys)", "venue": "Main Gym"}
                    ],
                }
            ],
            "academic": [
                {"_id": "a1", "events": [{"event": "Winter Break", "date": "02-14 to 02-16"}]}
            ],
            "roster": [{"_id": "r1", "sport": "Tennis", "players": ["Jane Doe"]}],
        }
    )


@pytest.fixture()
def client(normalizer: Normalizer, store: FakeStore) -> TestClient:
    app = create_app(normalizer=normalizer, connect_store=False)
    app.dependency_overrides[get_store] = lambda: store
    return TestClient(app)


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "message": "Backend API is running"}


def test_list_sports(client: TestClient) -> None:
    response = client.get("/api/sports")

    assert response.status_code == 200
    (event,) = response.json()
    assert event["id"] == "7_0"
    assert event["sport"] == "Basketball"
    assert event["team"] == "JV Boys"
    assert event["venue"] == "Main Gym"
    assert "imageName" in event
    assert "_id" not in event


def test_list_academic_uses_camel_case_keys(client: TestClient) -> None:
    (event,) = client.get("/api/academic").json()
    assert event["dateRange"] == "02-14 to 02-16"
    assert event["date"] == "2026-02-14T00:00:00.000Z"


def test_list_roster_and_empty_collection(client: TestClient) -> None:
    assert client.get("/api/roster").json() == [
        {"sport": "Tennis", "season": None, "coaches": [], "players": [{"name": "Jane Doe"}]}
    ]
    assert client.get("/api/results").json() == []
    assert client.get("/api/general").json() == []


def test_get_sport_by_id(client: TestClient) -> None:
    response = client.get("/api/sports/7")

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == "7"
    assert body["title"] == "Homecoming Game"


def test_unknown_sport_id_is_404(client: TestClient) -> None:
    response = client.get("/api/sports/999")
    assert response.status_code == 404
    assert response.json() == {"error": "Event not found"}


def test_create_sport_stores_payload_verbatim(client: TestClient, store: FakeStore) -> None:
    payload = {"title": "Senior Night", "sport": "Volleyball", "date": "2025-10-20"}
    response = client.post("/api/sports", json=payload)

    assert response.status_code == 201
    assert response.json() == {**payload, "id": "101"}
    assert store.inserted == [payload]


def test_store_not_connected_is_503(normalizer: Normalizer) -> None:
    app = create_app(normalizer=normalizer, connect_store=False)
    app.dependency_overrides[get_store] = lambda: SupabaseDocumentStore(None)
    client = TestClient(app)

    for path in ("/api/sports", "/api/roster", "/api/sports/7"):
        response = client.get(path)
        assert response.status_code == 503
        assert response.json() == {"error": "Database not connected"}


def test_normalization_failure_is_500(store: FakeStore) -> None:
    class BrokenNormalizer(Normalizer):
        def normalize(self, domain, documents):
            raise NormalizationError("bad batch")

    app = create_app(normalizer=BrokenNormalizer(), connect_store=False)
    app.dependency_overrides[get_store] = lambda: store
    response = TestClient(app).get("/api/general")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to process /api/general", "details": "bad batch"}


def test_unexpected_error_is_500(store: FakeStore) -> None:
    class CrashingNormalizer(Normalizer):
        def normalize(self, domain, documents):
            raise RuntimeError("boom")

    app = create_app(normalizer=CrashingNormalizer(), connect_store=False)
    app.dependency_overrides[get_store] = lambda: store
    response = TestClient(app, raise_server_exceptions=False).get("/api/results")

    assert response.status_code == 500
    assert response.json()["details"] == "boom"


def test_create_sport_without_stored_id_reports_null(normalizer: Normalizer) -> None:
    class NoIdStore(FakeStore):
        async def insert_document(self, table_name, payload):
            self.inserted.append(payload)
            return dict(payload)

    app = create_app(normalizer=normalizer, connect_store=False)
    app.dependency_overrides[get_store] = lambda: NoIdStore({})
    response = TestClient(app).post("/api/sports", json={"title": "Senior Night"})

    assert response.status_code == 201
    assert response.json() == {"title": "Senior Night", "id": None}


def test_default_normalizer_follows_settings() -> None:
    app = create_app(connect_store=False)

    assert isinstance(app.state.normalizer, Normalizer)
    assert app.state.normalizer.sports_policy == settings.sports_date_policy
    assert app.state.normalizer.window_days == settings.assumed_year_window_days
