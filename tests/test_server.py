"""Tests for server wiring: the HTTP API shares the MCP server's store."""
from fastapi.testclient import TestClient

from affairs_core.config import Settings
from affairs_core.schemas import ProjectUpdate
from affairs_mcp.dispatcher import Dispatcher, build_registry
from affairs_mcp.server import create_http_server


class TestHttpServer:
    """Test the uvicorn server built next to the stdio server."""

    def test_config_follows_settings(self, store):
        settings = Settings(_env_file=None, http_host="0.0.0.0", http_port=9123, log_level="WARNING")

        server = create_http_server(store, settings)

        assert server.config.host == "0.0.0.0"
        assert server.config.port == 9123
        assert server.config.app.state.store is store
        assert server.config.app.state.settings is settings

    async def test_writes_through_tools_are_visible_over_http(self, store, settings):
        dispatcher = Dispatcher(build_registry(), store, settings)
        client = TestClient(create_http_server(store, settings).config.app)

        store.upsert_project("p1", ProjectUpdate(name="Acme Deal"))
        result = await dispatcher.handle("add_note", {"projectId": "p1", "text": "Kickoff call went well"})
        assert not result.isError

        response = client.get("/api/projects/p1")

        assert response.status_code == 200
        assert response.json()["notes"][0]["text"] == "Kickoff call went well"

    def test_http_disabled_by_default(self):
        assert Settings(_env_file=None).http_enabled is False
