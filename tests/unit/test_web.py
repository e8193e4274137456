"""Tests for the FastAPI web API."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from linkpulse.config import LinkPulseConfig, SettingsStore
from linkpulse.session.models import NetworkType
from linkpulse.web.app import create_app


@pytest.fixture
def config(tmp_path: Path) -> LinkPulseConfig:
    return LinkPulseConfig(data_dir=tmp_path / "data", config_dir=tmp_path / "conf")


@pytest.fixture
def client(config, fake_prober_cls, fake_network, notifier):
    app = create_app(
        config,
        settings_store=SettingsStore(config.settings_path),
        prober=fake_prober_cls([12.0, 14.0]),
        network_source=fake_network,
        notifier=notifier,
    )
    with TestClient(app) as test_client:
        yield test_client


class TestMonitorApi:
    def test_idle_status(self, client):
        response = client.get("/api/monitor")
        assert response.status_code == 200
        data = response.json()
        assert data["is_monitoring"] is False
        assert data["host"] == "8.8.8.8"
        assert data["network_type"] == "WiFi"

    def test_start_and_stop_saves_session(self, client):
        response = client.post("/api/monitor/start")
        assert response.status_code == 200
        assert response.json()["is_monitoring"] is True

        response = client.post("/api/monitor/stop")
        data = response.json()
        assert data["status"] == "stopped"
        assert data["saved"] is True

        sessions = client.get("/api/sessions").json()
        assert [s["id"] for s in sessions] == [data["session_id"]]

    def test_start_refused_by_policy(self, client, fake_network):
        fake_network.network_type = NetworkType.CELLULAR
        client.put("/api/settings", json={"monitoring_policy": "wifi_only"})
        response = client.post("/api/monitor/start")
        assert response.status_code == 409

    def test_update_host(self, client, config):
        response = client.put("/api/monitor/host", json={"host": " example.org "})
        assert response.status_code == 200
        assert response.json()["host"] == "example.org"
        assert SettingsStore(config.settings_path).load().target_host == "example.org"

    def test_update_host_invalid(self, client):
        response = client.put("/api/monitor/host", json={"host": "not a host"})
        assert response.status_code == 422
        assert client.get("/api/monitor").json()["host"] == "8.8.8.8"

    def test_update_interval_below_floor(self, client):
        response = client.put("/api/monitor/interval", json={"seconds": 0.1})
        assert response.status_code == 422

    def test_update_interval(self, client):
        response = client.put("/api/monitor/interval", json={"seconds": 2})
        assert response.status_code == 200
        assert client.get("/api/settings").json()["probe_interval"] == 2.0

    def test_websocket_streams_snapshot(self, client):
        with client.websocket_connect("/api/ws/monitor") as ws:
            message = ws.receive_json()
        assert message["type"] == "snapshot"
        assert message["data"]["is_monitoring"] is False


class TestSessionsApi:
    def _record(self, client) -> str:
        client.post("/api/monitor/start")
        return client.post("/api/monitor/stop").json()["session_id"]

    def test_get_session(self, client):
        session_id = self._record(client)
        response = client.get(f"/api/sessions/{session_id}")
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == session_id
        assert data["host"] == "8.8.8.8"
        assert isinstance(data["samples"], list)

    def test_get_missing_session(self, client):
        response = client.get("/api/sessions/nonexistent")
        assert response.status_code == 404

    def test_delete_session(self, client):
        session_id = self._record(client)
        assert client.delete(f"/api/sessions/{session_id}").status_code == 200
        assert client.delete(f"/api/sessions/{session_id}").status_code == 404

    def test_delete_all(self, client):
        self._record(client)
        self._record(client)
        response = client.delete("/api/sessions")
        assert response.json()["count"] == 2
        assert client.get("/api/sessions").json() == []


class TestSettingsApi:
    def test_get_defaults(self, client):
        data = client.get("/api/settings").json()
        assert data["target_host"] == "8.8.8.8"
        assert data["monitoring_policy"] == "auto"

    def test_partial_update(self, client):
        response = client.put("/api/settings", json={"alerts_enabled": True})
        assert response.status_code == 200
        data = response.json()
        assert data["alerts_enabled"] is True
        assert data["target_host"] == "8.8.8.8"

    def test_invalid_policy(self, client):
        response = client.put("/api/settings", json={"monitoring_policy": "sometimes"})
        assert response.status_code == 422


class TestInsightsApi:
    def test_empty_history(self, client):
        data = client.get("/api/insights").json()
        assert data["session_count"] == 0
        assert data["insights"] == []
        assert len(data["time_of_day"]) == 4
        assert data["activities"] == []
