"""Tests for the REST API."""

import base64
from datetime import UTC, datetime, timedelta
from pathlib import Path
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient
from pydantic import ValidationError

from linkwatch.api.routes import get_basic_auth, get_geoip
from linkwatch.geo.geoip import GeoIpClient
from linkwatch.geo.traceroute import TracerouteHop
from linkwatch.main import restart_monitoring
from linkwatch.monitoring.events import AlertEvent, Severity
from linkwatch.probes.base import (
    ConnectionStatus,
    MonitoringSnapshot,
    PingResult,
    PingTarget,
    WifiSnapshot,
)


def _now() -> datetime:
    return datetime.now(UTC)


def _seed_snapshot(client: TestClient, ts: datetime | None = None) -> MonitoringSnapshot:
    snapshot = MonitoringSnapshot(
        timestamp=ts or _now() - timedelta(minutes=5),
        wifi=WifiSnapshot(is_connected=True, ssid="Home", bssid="AA:BB:CC:00:00:01", signal_quality=80),
        ping_results=(
            PingResult(
                target="192.168.1.1",
                target_label=PingTarget.gateway,
                is_success=True,
                latency_ms=4.0,
                status="Success",
            ),
            PingResult(target="8.8.8.8", target_label=PingTarget.dns1, is_success=False, status="TimedOut"),
        ),
        overall_status=ConnectionStatus.excellent,
    )
    client.app.state.repository.save_snapshot(snapshot)
    return snapshot


def _seed_alert(client: TestClient, ts: datetime | None = None) -> int:
    record = client.app.state.repository.save_alert(
        AlertEvent(
            alert_type="SignalLow",
            severity=Severity.warning,
            message="Wi-Fi signal is low: 20%",
            timestamp=ts or _now() - timedelta(minutes=1),
        )
    )
    return record.id


def test_health(client: TestClient):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_security_headers(client: TestClient):
    resp = client.get("/health")
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "DENY"


class TestStatus:
    def test_before_first_cycle(self, client: TestClient):
        resp = client.get("/api/status")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "Unknown"
        assert body["running"] is True
        assert body["snapshot"] is None

    def test_latest_snapshot(self, client: TestClient):
        snapshot = _seed_snapshot(client)
        client.app.state.orchestrator.latest = snapshot

        body = client.get("/api/status").json()
        assert body["status"] == "Excellent"
        assert body["snapshot"]["wifi"]["ssid"] == "Home"
        assert body["snapshot"]["ping_results"][1]["latency_ms"] is None


class TestHistory:
    def test_pings_default_window(self, client: TestClient):
        _seed_snapshot(client)
        _seed_snapshot(client, ts=_now() - timedelta(days=3))
        resp = client.get("/api/pings")
        assert resp.status_code == 200
        assert len(resp.json()) == 2

    def test_pings_by_label(self, client: TestClient):
        _seed_snapshot(client)
        body = client.get("/api/pings", params={"target_label": "Gateway"}).json()
        assert [p["target_label"] for p in body] == ["Gateway"]

    def test_explicit_window(self, client: TestClient):
        _seed_snapshot(client, ts=_now() - timedelta(days=3))
        start = (_now() - timedelta(days=4)).isoformat()
        end = (_now() - timedelta(days=2)).isoformat()
        body = client.get("/api/wifi", params={"start": start, "end": end}).json()
        assert len(body) == 1

    def test_inverted_window_is_rejected(self, client: TestClient):
        resp = client.get(
            "/api/alerts",
            params={"start": _now().isoformat(), "end": (_now() - timedelta(hours=1)).isoformat()},
        )
        assert resp.status_code == 400

    def test_dns_and_roaming_empty(self, client: TestClient):
        assert client.get("/api/dns").json() == []
        assert client.get("/api/roaming").json() == []


class TestAlerts:
    def test_list_and_acknowledge(self, client: TestClient):
        alert_id = _seed_alert(client)
        alerts = client.get("/api/alerts").json()
        assert [a["alert_type"] for a in alerts] == ["SignalLow"]
        assert alerts[0]["is_acknowledged"] is False

        resp = client.post(f"/api/alerts/{alert_id}/ack")
        assert resp.status_code == 200
        assert resp.json() == {"id": alert_id, "acknowledged": True}
        assert client.get("/api/alerts").json()[0]["is_acknowledged"] is True

    def test_acknowledge_missing(self, client: TestClient):
        assert client.post("/api/alerts/9999/ack").status_code == 404


class TestDiagnostics:
    def test_geo(self, client: TestClient):
        body = client.get("/api/geo", params={"hostname": "snjsca04.covad.net"}).json()
        assert body["city"] == "San Jose"
        assert body["region"] == "CA"

    def test_geo_no_match(self, client: TestClient):
        assert client.get("/api/geo", params={"hostname": "*"}).status_code == 404

    def test_traceroute(self, client: TestClient):
        async def fake_run(target, max_hops, timeout_ms):
            yield TracerouteHop(hop=1, address="192.168.1.1", hostname="_gateway", latency_ms=1.0, is_timeout=False)
            yield TracerouteHop(hop=2, address="*", hostname="*", latency_ms=None, is_timeout=True)

        with patch("linkwatch.api.routes.run_traceroute", new=fake_run):
            resp = client.get("/api/traceroute/example.com", params={"max_hops": 5})
        assert resp.status_code == 200
        assert [h["hop"] for h in resp.json()] == [1, 2]
        assert resp.json()[1]["is_timeout"] is True

    def test_traceroute_bad_target(self, client: TestClient):
        assert client.get("/api/traceroute/-rf").status_code == 400

    def test_traceroute_falls_back_to_geoip(self, client: TestClient):
        async def fake_run(target, max_hops, timeout_ms):
            yield TracerouteHop(hop=1, address="4.2.2.2", hostname="4.2.2.2", latency_ms=9.0, is_timeout=False)

        def responder(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json=[{"query": "4.2.2.2", "status": "success", "city": "Dallas", "lat": 32.78, "lon": -96.8}],
            )

        geoip = GeoIpClient("http://geo.test/batch", transport=httpx.MockTransport(responder))
        client.app.dependency_overrides[get_geoip] = lambda: geoip
        try:
            with patch("linkwatch.api.routes.run_traceroute", new=fake_run):
                resp = client.get("/api/traceroute/example.com")
        finally:
            client.app.dependency_overrides.clear()

        hop = resp.json()[0]
        assert hop["source"] == "geoip"
        assert hop["location"]["city"] == "Dallas"

    def test_traceroute_without_geoip(self, client: TestClient):
        async def fake_run(target, max_hops, timeout_ms):
            yield TracerouteHop(hop=1, address="4.2.2.2", hostname="4.2.2.2", latency_ms=9.0, is_timeout=False)

        client.app.dependency_overrides[get_geoip] = lambda: None
        try:
            with patch("linkwatch.api.routes.run_traceroute", new=fake_run):
                resp = client.get("/api/traceroute/example.com")
        finally:
            client.app.dependency_overrides.clear()

        assert resp.json()[0]["location"] is None


class TestLiveUpdates:
    def test_streams_alerts_and_snapshots(self, client: TestClient):
        state = client.app.state
        alert = AlertEvent(alert_type="NoInternet", severity=Severity.warning, message="No internet", timestamp=_now())
        snapshot = MonitoringSnapshot(timestamp=_now(), overall_status=ConnectionStatus.good)

        with client.websocket_connect("/api/ws") as ws:
            client.portal.call(state.alerts.publish, alert)
            first = ws.receive_json()
            client.portal.call(state.snapshots.publish, snapshot)
            second = ws.receive_json()

        assert first["type"] == "alert"
        assert first["data"]["alert_type"] == "NoInternet"
        assert second["type"] == "snapshot"
        assert second["data"]["overall_status"] == "Good"

    def test_requires_credentials_when_auth_enabled(self, client: TestClient):
        client.app.dependency_overrides[get_basic_auth] = lambda: ("admin", "secret")
        try:
            with pytest.raises(WebSocketDisconnect) as excinfo:
                with client.websocket_connect("/api/ws") as ws:
                    ws.receive_json()
            assert excinfo.value.code == 1008

            token = base64.b64encode(b"admin:secret").decode()
            with client.websocket_connect("/api/ws", headers={"Authorization": f"Basic {token}"}):
                assert client.app.state.alerts.subscriber_count >= 1
        finally:
            client.app.dependency_overrides.clear()


class TestExport:
    def test_csv(self, client: TestClient):
        _seed_snapshot(client)
        resp = client.get("/api/export/pings")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert "ping_data.csv" in resp.headers["content-disposition"]
        assert resp.text.splitlines()[0].startswith("Timestamp,Target")

    def test_json(self, client: TestClient):
        _seed_alert(client)
        resp = client.get("/api/export/all")
        assert resp.status_code == 200
        assert resp.json()["alerts"][0]["alert_type"] == "SignalLow"

    def test_unknown_kind(self, client: TestClient):
        assert client.get("/api/export/bogus").status_code == 404


class TestSettings:
    def test_read(self, client: TestClient):
        body = client.get("/api/settings").json()
        assert body["probe_mode"] == "mock"
        assert body["alert_cooldown_seconds"] == 60

    def test_update_saves_and_restarts(self, client: TestClient, env_file: Path):
        with patch("linkwatch.main.restart_monitoring", new_callable=AsyncMock) as restart:
            resp = client.put("/api/settings", json={"alert_cooldown_seconds": 120})
        assert resp.status_code == 200
        assert resp.json()["alert_cooldown_seconds"] == 120
        assert "LINKWATCH_ALERT_COOLDOWN_SECONDS=120" in env_file.read_text()
        restart.assert_awaited_once()

    def test_update_rejects_unknown_keys(self, client: TestClient, env_file: Path):
        resp = client.put("/api/settings", json={"nope": 1})
        assert resp.status_code == 400
        assert not env_file.exists()

    def test_invalid_value_keeps_monitoring_running(self, client: TestClient, env_file: Path):
        orchestrator = client.app.state.orchestrator
        resp = client.put("/api/settings", json={"polling_interval_seconds": "soon"})
        assert resp.status_code == 400
        assert any("polling_interval_seconds" in msg for msg in resp.json()["detail"])
        assert not env_file.exists()
        assert client.app.state.orchestrator is orchestrator
        assert orchestrator.running

    def test_invalid_env_file_does_not_stop_running_services(self, client: TestClient, env_file: Path):
        orchestrator = client.app.state.orchestrator
        env_file.write_text("LINKWATCH_POLLING_INTERVAL_SECONDS=soon\n")
        with pytest.raises(ValidationError):
            client.portal.call(restart_monitoring, client.app)
        assert client.app.state.orchestrator is orchestrator
        assert orchestrator.running
