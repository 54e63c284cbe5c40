"""Tests for history persistence, queries and retention."""

from datetime import UTC, datetime, timedelta, timezone

from sqlmodel import Session, select

from linkwatch.history.models import AlertRecord, NetworkSample, PingSample, WifiSample
from linkwatch.history.repository import HistoryRepository, snapshot_rows, to_naive_utc
from linkwatch.monitoring.events import AlertEvent, RoamingEvent, Severity
from linkwatch.probes.base import (
    DnsResult,
    HttpProbeResult,
    MonitoringSnapshot,
    NetworkSnapshot,
    PingResult,
    PingTarget,
    WifiSnapshot,
)

T0 = datetime(2024, 6, 1, 12, 0, 0, tzinfo=UTC)


def _snapshot(ts: datetime, gateway_latency: float = 4.0) -> MonitoringSnapshot:
    return MonitoringSnapshot(
        timestamp=ts,
        wifi=WifiSnapshot(is_connected=True, ssid="Home", bssid="AA:BB:CC:00:00:01", signal_quality=80),
        network=NetworkSnapshot(is_connected=True, local_ip="192.168.1.42", dns_servers=("1.1.1.1", "8.8.8.8")),
        ping_results=(
            PingResult(
                target="192.168.1.1",
                target_label=PingTarget.gateway,
                is_success=True,
                latency_ms=gateway_latency,
                status="Success",
            ),
            PingResult(target="8.8.8.8", target_label=PingTarget.dns1, is_success=False, status="TimedOut"),
        ),
        dns_results=(DnsResult(dns_server="8.8.8.8", query_name="google.com", is_success=True, latency_ms=9.0),),
        http_probe=HttpProbeResult(url="http://check", is_success=True, latency_ms=30.0, status_code=200),
    )


def _alert(ts: datetime, alert_type: str = "HighLatency") -> AlertEvent:
    return AlertEvent(alert_type=alert_type, severity=Severity.warning, message="m", timestamp=ts)


class TestSnapshotRows:
    def test_rows_share_snapshot_timestamp(self):
        rows = snapshot_rows(_snapshot(T0))
        assert len(rows) == 6
        assert {r.timestamp for r in rows} == {T0.replace(tzinfo=None)}

    def test_dns_servers_joined(self):
        network = next(r for r in snapshot_rows(_snapshot(T0)) if isinstance(r, NetworkSample))
        assert network.dns_servers == "1.1.1.1,8.8.8.8"

    def test_empty_snapshot_has_no_rows(self):
        assert snapshot_rows(MonitoringSnapshot(timestamp=T0)) == []

    def test_to_naive_utc(self):
        aware = datetime(2024, 6, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        assert to_naive_utc(aware) == datetime(2024, 6, 1, 12, 0)


class TestQueries:
    def test_ping_results_ascending_and_filtered(self, repository: HistoryRepository):
        for minutes in (10, 0, 5):
            repository.save_snapshot(_snapshot(T0 + timedelta(minutes=minutes)))

        results = repository.get_ping_results(T0, T0 + timedelta(hours=1))
        stamps = [r.timestamp for r in results]
        assert stamps == sorted(stamps)
        assert len(results) == 6

        gateway = repository.get_ping_results(T0, T0 + timedelta(hours=1), target_label="Gateway")
        assert len(gateway) == 3
        assert all(r.target_label == "Gateway" for r in gateway)

    def test_failed_ping_stored_without_latency(self, repository: HistoryRepository):
        repository.save_snapshot(_snapshot(T0))
        failed = repository.get_ping_results(T0, T0, target_label="DNS1")
        assert failed[0].latency_ms is None
        assert failed[0].status == "TimedOut"

    def test_range_is_inclusive(self, repository: HistoryRepository):
        repository.save_snapshot(_snapshot(T0))
        assert len(repository.get_wifi_snapshots(T0, T0)) == 1
        assert repository.get_wifi_snapshots(T0 + timedelta(seconds=1), T0 + timedelta(hours=1)) == []

    def test_wifi_and_dns_ascending(self, repository: HistoryRepository):
        repository.save_snapshot(_snapshot(T0 + timedelta(minutes=2)))
        repository.save_snapshot(_snapshot(T0))
        wifi = repository.get_wifi_snapshots(T0, T0 + timedelta(hours=1))
        assert wifi[0].timestamp < wifi[1].timestamp
        dns = repository.get_dns_results(T0, T0 + timedelta(hours=1))
        assert dns[0].timestamp < dns[1].timestamp

    def test_alerts_descending(self, repository: HistoryRepository):
        repository.save_alert(_alert(T0))
        repository.save_alert(_alert(T0 + timedelta(minutes=5), "SignalLow"))
        alerts = repository.get_alerts(T0, T0 + timedelta(hours=1))
        assert [a.alert_type for a in alerts] == ["SignalLow", "HighLatency"]

    def test_roaming_descending(self, repository: HistoryRepository):
        for minutes, new in ((0, "B"), (3, "C")):
            repository.save_roaming_event(
                RoamingEvent(
                    previous_bssid="A",
                    new_bssid=new,
                    ssid="Home",
                    previous_signal_quality=70,
                    new_signal_quality=60,
                    previous_channel=36,
                    new_channel=6,
                    timestamp=T0 + timedelta(minutes=minutes),
                )
            )
        events = repository.get_roaming_events(T0, T0 + timedelta(hours=1))
        assert [e.new_bssid for e in events] == ["C", "B"]


class TestAcknowledge:
    def test_acknowledge(self, repository: HistoryRepository, session: Session):
        record = repository.save_alert(_alert(T0))
        assert record.id is not None
        assert repository.acknowledge_alert(record.id) is True

        stored = session.exec(select(AlertRecord)).one()
        assert stored.is_acknowledged

    def test_acknowledge_missing(self, repository: HistoryRepository):
        assert repository.acknowledge_alert(9999) is False


class TestCleanup:
    def test_removes_only_aged_rows(self, repository: HistoryRepository, session: Session):
        now = T0
        repository.save_snapshot(_snapshot(now - timedelta(days=8)))
        repository.save_snapshot(_snapshot(now - timedelta(days=1)))
        repository.save_alert(_alert(now - timedelta(days=8)))
        repository.save_alert(_alert(now - timedelta(days=400)))

        removed = repository.cleanup_old_data(raw_retention_days=7, alert_retention_days=365, now=now)

        # One aged snapshot is 6 rows, plus one aged alert
        assert removed == 7
        assert len(session.exec(select(WifiSample)).all()) == 1
        assert len(session.exec(select(PingSample)).all()) == 2
        alerts = session.exec(select(AlertRecord)).all()
        assert len(alerts) == 1
        assert alerts[0].timestamp == (now - timedelta(days=8)).replace(tzinfo=None)

    def test_nothing_to_remove(self, repository: HistoryRepository):
        repository.save_snapshot(_snapshot(T0))
        assert repository.cleanup_old_data(7, 365, now=T0) == 0
