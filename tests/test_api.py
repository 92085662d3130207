"""Tests for the read-only HTTP API."""
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from affairs_core.api.main import create_app
from affairs_core.models import RiskSeverity
from affairs_core.schemas import DeadlineCreate, DocumentCreate, ProjectUpdate, RiskCreate, TaskCreate

from .conftest import FIXED_NOW


def day_offset(days: int) -> str:
    return (FIXED_NOW + timedelta(days=days)).strftime("%Y-%m-%d")


@pytest.fixture
def client(store, settings):
    store.upsert_project("p1", ProjectUpdate(name="Acme Deal"))
    store.add_document("p1", DocumentCreate(title="Acme NDA"))
    store.add_task("p1", TaskCreate(description="Draft NDA", deadline=day_offset(2)))
    store.add_risk("p1", RiskCreate(title="Uncapped indemnity", severity=RiskSeverity.CRITICAL))
    store.add_deadline(DeadlineCreate(description="Board filing", date=day_offset(-1)))
    store.add_deadline(DeadlineCreate(description="Renewal", date=day_offset(20)))
    return TestClient(create_app(store, settings))


class TestHealth:
    """Test the health endpoint."""

    def test_health(self, client, settings):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["service"] == settings.service_name
        assert body["version"] == settings.version


class TestProjects:
    """Test project endpoints."""

    def test_list_projects(self, client):
        response = client.get("/api/projects/")

        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == ["p1"]

    def test_get_project(self, client):
        response = client.get("/api/projects/p1")

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Acme Deal"
        assert body["documents"][0]["title"] == "Acme NDA"

    def test_get_unknown_project(self, client):
        response = client.get("/api/projects/ghost")

        assert response.status_code == 404
        assert response.json()["detail"] == "Project not found"

    def test_project_summary(self, client):
        response = client.get("/api/projects/p1/summary")

        assert response.status_code == 200
        body = response.json()
        assert body["stats"]["tasks"] == 1
        assert body["stats"]["active_risks"] == 1
        assert body["deadlines"] == 1

    def test_unknown_project_summary(self, client):
        assert client.get("/api/projects/ghost/summary").status_code == 404


class TestDeadlinesAndIssues:
    """Test deadline and issue endpoints."""

    def test_default_window_is_thirty_days(self, client):
        response = client.get("/api/deadlines")

        assert [d["description"] for d in response.json()] == ["Draft NDA", "Renewal"]

    def test_custom_window(self, client):
        response = client.get("/api/deadlines", params={"days": 7})

        assert [d["description"] for d in response.json()] == ["Draft NDA"]

    def test_negative_window_rejected(self, client):
        assert client.get("/api/deadlines", params={"days": -1}).status_code == 422

    def test_oversized_window_rejected(self, client):
        assert client.get("/api/deadlines", params={"days": 100000}).status_code == 422

    def test_all_deadlines_include_undated(self, client, store):
        store.add_deadline(DeadlineCreate(description="Send redlines", date="Friday"))

        response = client.get("/api/deadlines/all")

        assert response.status_code == 200
        assert [d["description"] for d in response.json()] == [
            "Draft NDA", "Board filing", "Renewal", "Send redlines"
        ]

    def test_overdue(self, client):
        response = client.get("/api/overdue")

        assert [d["description"] for d in response.json()] == ["Board filing"]

    def test_issues(self, client):
        response = client.get("/api/issues")

        issues = response.json()
        assert len(issues) == 1
        assert issues[0]["title"] == "Uncapped indemnity"
        assert issues[0]["project_id"] == "p1"


class TestDashboardAndSearch:
    """Test dashboard and search endpoints."""

    def test_dashboard(self, client):
        response = client.get("/api/dashboard")

        assert response.status_code == 200
        body = response.json()
        assert body["projects"]["total"] == 1
        assert body["risks"]["active"] == 1
        assert body["deadlines"] == {"upcoming": 1, "overdue": 1}
        assert len(body["recent_activity"]) == 4

    def test_search(self, client):
        response = client.get("/api/search", params={"q": "nda"})

        assert response.status_code == 200
        assert [r["type"] for r in response.json()] == ["document", "task"]

    @pytest.mark.parametrize("params", [{}, {"q": "   "}])
    def test_search_requires_query(self, client, params):
        response = client.get("/api/search", params=params)

        assert response.status_code == 400
        assert response.json()["detail"] == 'Query parameter "q" is required'
