"""CSV and JSON exports of stored history."""

import csv
import io
import json
from datetime import UTC, datetime

from linkwatch.history.repository import HistoryRepository

PING_COLUMNS = ("Timestamp", "Target", "TargetLabel", "LatencyMs", "IsSuccess", "Status", "Ttl")
WIFI_COLUMNS = (
    "Timestamp",
    "SSID",
    "BSSID",
    "SignalQuality",
    "RssiDbm",
    "LinkSpeedMbps",
    "Channel",
    "FrequencyGHz",
    "Band",
    "PhyType",
)
ALERT_COLUMNS = ("Timestamp", "AlertType", "Severity", "Message", "Details")


def _write_csv(header: tuple[str, ...], rows: list[list[object]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buf.getvalue()


def ping_csv(repository: HistoryRepository, start: datetime, end: datetime) -> str:
    rows: list[list[object]] = [
        [
            r.timestamp.isoformat(),
            r.target,
            r.target_label,
            "" if r.latency_ms is None else r.latency_ms,
            r.is_success,
            r.status,
            r.ttl,
        ]
        for r in repository.get_ping_results(start, end)
    ]
    return _write_csv(PING_COLUMNS, rows)


def wifi_csv(repository: HistoryRepository, start: datetime, end: datetime) -> str:
    rows: list[list[object]] = [
        [
            w.timestamp.isoformat(),
            w.ssid,
            w.bssid,
            w.signal_quality,
            w.rssi_dbm,
            w.link_speed_mbps,
            w.channel,
            f"{w.frequency_ghz:.3f}",
            w.band,
            w.phy_type,
        ]
        for w in repository.get_wifi_snapshots(start, end)
    ]
    return _write_csv(WIFI_COLUMNS, rows)


def alerts_csv(repository: HistoryRepository, start: datetime, end: datetime) -> str:
    rows: list[list[object]] = [
        [a.timestamp.isoformat(), a.alert_type, a.severity, a.message, a.details]
        for a in repository.get_alerts(start, end)
    ]
    return _write_csv(ALERT_COLUMNS, rows)


def all_json(repository: HistoryRepository, start: datetime, end: datetime) -> str:
    """Everything in the window as one indented JSON document."""
    doc = {
        "exported_at": datetime.now(UTC).isoformat(),
        "period": {"from": start.isoformat(), "to": end.isoformat()},
        "wifi_snapshots": [w.model_dump(mode="json") for w in repository.get_wifi_snapshots(start, end)],
        "ping_results": [p.model_dump(mode="json") for p in repository.get_ping_results(start, end)],
        "dns_results": [d.model_dump(mode="json") for d in repository.get_dns_results(start, end)],
        "alerts": [a.model_dump(mode="json") for a in repository.get_alerts(start, end)],
    }
    return json.dumps(doc, indent=2)


EXPORTERS = {
    "pings": (ping_csv, "text/csv", "ping_data.csv"),
    "wifi": (wifi_csv, "text/csv", "wifi_data.csv"),
    "alerts": (alerts_csv, "text/csv", "alerts.csv"),
    "all": (all_json, "application/json", "linkwatch_export.json"),
}
