"""Tests for the FastAPI application using TestClient and in-memory backends."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from gridrecon.api.app import create_app
from gridrecon.catalog.builtin import builtin_catalog
from gridrecon.core.config import AppSettings
from gridrecon.services.project_service import ProjectReconciliationService
from tests.fakes import MemoryCommitLock, MemoryMappingStore, MemorySnapshotStore

BUS_HEADERS = ["Bus Name", "Base kV", "Area"]


@pytest.fixture
def lock():
    return MemoryCommitLock()


@pytest.fixture
def client(lock):
    service = ProjectReconciliationService(
        settings=AppSettings(backend="memory"),
        catalog=builtin_catalog(),
        mapping_store=MemoryMappingStore(),
        snapshot_store=MemorySnapshotStore(),
        commit_lock=lock,
    )
    with TestClient(create_app(service)) as client:
        yield client


def _accept_bus_mapping(client: TestClient, project_id: str = "p1") -> dict:
    proposed = client.post("/mapping/propose", json={"category": "Bus", "headers": BUS_HEADERS})
    assert proposed.status_code == 200
    accepted = client.post(f"/projects/{project_id}/mapping/accept", json=proposed.json()["proposal"])
    assert accepted.status_code == 200
    return accepted.json()


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_ready_includes_service_health(self, client):
        body = client.get("/ready").json()
        assert body["status"] == "ready"
        assert body["backend"] == "memory"


class TestCatalog:
    def test_list_categories(self, client):
        assert "Bus" in client.get("/catalog").json()["categories"]

    def test_category_detail(self, client):
        body = client.get("/catalog/arcflash").json()
        assert body["name"] == "ArcFlash"
        assert body["key_properties"] == ["Bus", "Scenario"]

    def test_unknown_category_is_404(self, client):
        resp = client.get("/catalog/Switchgear")
        assert resp.status_code == 404
        assert resp.json()["error"] == "UnknownCategoryError"


class TestMapping:
    def test_propose(self, client):
        resp = client.post("/mapping/propose", json={"category": "Bus", "headers": BUS_HEADERS})
        body = resp.json()
        confirmed = {c["column"]: c["property_name"] for c in body["proposal"]["candidates"] if c["tier"] == "Confirmed"}
        assert confirmed == {"Bus Name": "Name", "Base kV": "BaseKV", "Area": "Area"}
        assert body["needs_review"] is False

    def test_propose_duplicate_headers_is_422(self, client):
        resp = client.post("/mapping/propose", json={"category": "Bus", "headers": ["Name", "Name"]})
        assert resp.status_code == 422
        assert resp.json()["error"] == "SchemaError"

    def test_accept_and_read_back(self, client):
        body = _accept_bus_mapping(client)
        assert body["missing_required"] == {}
        assert body["status"]["Bus"] == "Complete"
        stored = client.get("/projects/p1/mapping").json()
        assert len(stored["configuration"]["entries"]) == 3

    def test_empty_project_mapping(self, client):
        body = client.get("/projects/empty/mapping").json()
        assert body["configuration"]["entries"] == []


class TestDiffAndCommit:
    def test_diff_commit_rediff(self, client):
        _accept_bus_mapping(client)
        tables = {"Bus": [
            {"Bus Name": "MCC-1", "Base kV": 0.48, "Area": "North"},
            {"Bus Name": "SWGR-2", "Base kV": 13.8, "Area": "South"},
        ]}
        diff = client.post("/projects/p1/diff", json={"tables": tables}).json()
        assert diff["summary"]["Bus"]["added"] == 2
        assert "+ MCC-1" in diff["report"]

        committed = client.post("/projects/p1/commit", json={"change_set": diff["change_set"]})
        assert committed.status_code == 200
        assert committed.json()["record_counts"] == {"Bus": 2}

        again = client.post("/projects/p1/diff", json={"tables": tables}).json()
        assert again["summary"]["Bus"]["unchanged"] == 2
        assert again["report"].startswith("Bus: 0 added, 0 removed, 0 modified, 2 unchanged")

    def test_snapshot_after_commit(self, client):
        _accept_bus_mapping(client)
        diff = client.post("/projects/p1/diff", json={"tables": {"Bus": [{"Bus Name": "MCC-1", "Base kV": "0.48"}]}})
        client.post("/projects/p1/commit", json={"change_set": diff.json()["change_set"]})
        snapshot = client.get("/projects/p1/snapshot").json()
        record = snapshot["categories"]["Bus"]["mcc-1"]
        assert record["values"]["BaseKV"] == "0.48"

    def test_malformed_record_commit_is_422(self, client):
        change_set = {"categories": {"Bus": {
            "category": "Bus",
            "added": {"x": {"category": "Bus", "key_fields": ["Name"], "values": {"BaseKV": "4.16"}}},
        }}}
        resp = client.post("/projects/p1/commit", json={"change_set": change_set})
        assert resp.status_code == 422
        assert resp.json()["error"] == "CommitError"

    def test_commit_conflict_is_409(self, client, lock):
        with lock.hold("p1"):
            resp = client.post("/projects/p1/commit", json={"change_set": {"categories": {}}})
        assert resp.status_code == 409
