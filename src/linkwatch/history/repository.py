"""Persistence of snapshots, alerts and roaming events, plus history queries."""

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import Engine, delete
from sqlalchemy.orm import Session as OrmSession
from sqlmodel import Session, select

from linkwatch.history.models import (
    AlertRecord,
    DnsSample,
    HttpSample,
    NetworkSample,
    PingSample,
    RoamingRecord,
    WifiSample,
)
from linkwatch.monitoring.events import AlertEvent, RoamingEvent
from linkwatch.probes.base import MonitoringSnapshot

logger = logging.getLogger(__name__)


def to_naive_utc(value: datetime) -> datetime:
    """SQLite stores naive datetimes; convert aware values to naive UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def snapshot_rows(snapshot: MonitoringSnapshot) -> list[object]:
    """Flatten a snapshot into table rows sharing the snapshot's timestamp."""
    ts = to_naive_utc(snapshot.timestamp)
    rows: list[object] = []

    if snapshot.wifi is not None:
        w = snapshot.wifi
        rows.append(
            WifiSample(
                timestamp=ts,
                ssid=w.ssid,
                bssid=w.bssid,
                signal_quality=w.signal_quality,
                rssi_dbm=w.rssi_dbm,
                link_speed_mbps=w.link_speed_mbps,
                channel=w.channel,
                frequency_ghz=w.frequency_ghz,
                band=w.band,
                phy_type=w.phy_type,
                is_connected=w.is_connected,
            )
        )

    if snapshot.network is not None:
        n = snapshot.network
        rows.append(
            NetworkSample(
                timestamp=ts,
                local_ip=n.local_ip,
                subnet_mask=n.subnet_mask,
                gateway=n.gateway,
                dns_servers=",".join(n.dns_servers),
                mac_address=n.mac_address,
                adapter_name=n.adapter_name,
                bytes_sent=n.bytes_sent,
                bytes_received=n.bytes_received,
                is_connected=n.is_connected,
            )
        )

    for p in snapshot.ping_results:
        rows.append(
            PingSample(
                timestamp=ts,
                target=p.target,
                target_label=str(p.target_label),
                latency_ms=p.latency_ms,
                is_success=p.is_success,
                status=p.status,
                ttl=p.ttl,
            )
        )

    for d in snapshot.dns_results:
        rows.append(
            DnsSample(
                timestamp=ts,
                dns_server=d.dns_server,
                query_name=d.query_name,
                latency_ms=d.latency_ms,
                is_success=d.is_success,
                error=d.error,
            )
        )

    if snapshot.http_probe is not None:
        h = snapshot.http_probe
        rows.append(
            HttpSample(
                timestamp=ts,
                url=h.url,
                latency_ms=h.latency_ms,
                status_code=h.status_code,
                is_success=h.is_success,
                is_captive_portal=h.is_captive_portal,
                error=h.error,
            )
        )

    return rows


class HistoryRepository:
    """SQLModel-backed store. Every call opens and commits its own session."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    # --- Writes ---

    def save_snapshot(self, snapshot: MonitoringSnapshot) -> None:
        rows = snapshot_rows(snapshot)
        if not rows:
            return
        with Session(self.engine) as session:
            session.add_all(rows)
            session.commit()

    def save_alert(self, alert: AlertEvent) -> AlertRecord:
        record = AlertRecord(
            timestamp=to_naive_utc(alert.timestamp),
            alert_type=alert.alert_type,
            severity=str(alert.severity),
            message=alert.message,
            details=alert.details,
            is_acknowledged=alert.acknowledged,
        )
        with Session(self.engine) as session:
            session.add(record)
            session.commit()
            session.refresh(record)
        return record

    def save_roaming_event(self, event: RoamingEvent) -> RoamingRecord:
        record = RoamingRecord(
            timestamp=to_naive_utc(event.timestamp),
            previous_bssid=event.previous_bssid,
            new_bssid=event.new_bssid,
            ssid=event.ssid,
            previous_signal_quality=event.previous_signal_quality,
            new_signal_quality=event.new_signal_quality,
            previous_channel=event.previous_channel,
            new_channel=event.new_channel,
        )
        with Session(self.engine) as session:
            session.add(record)
            session.commit()
            session.refresh(record)
        return record

    def acknowledge_alert(self, alert_id: int) -> bool:
        """Mark an alert acknowledged. Return False if not found."""
        with Session(self.engine) as session:
            record = session.get(AlertRecord, alert_id)
            if record is None:
                return False
            record.is_acknowledged = True
            session.commit()
        return True

    # --- Time-range queries ---

    def get_ping_results(
        self, start: datetime, end: datetime, target_label: str | None = None
    ) -> list[PingSample]:
        stmt = select(PingSample).where(
            PingSample.timestamp >= to_naive_utc(start),
            PingSample.timestamp <= to_naive_utc(end),
        )
        if target_label is not None:
            stmt = stmt.where(PingSample.target_label == target_label)
        stmt = stmt.order_by(PingSample.timestamp)  # type: ignore[arg-type]
        with Session(self.engine) as session:
            return list(session.exec(stmt).all())

    def get_wifi_snapshots(self, start: datetime, end: datetime) -> list[WifiSample]:
        stmt = (
            select(WifiSample)
            .where(WifiSample.timestamp >= to_naive_utc(start))
            .where(WifiSample.timestamp <= to_naive_utc(end))
            .order_by(WifiSample.timestamp)  # type: ignore[arg-type]
        )
        with Session(self.engine) as session:
            return list(session.exec(stmt).all())

    def get_dns_results(self, start: datetime, end: datetime) -> list[DnsSample]:
        stmt = (
            select(DnsSample)
            .where(DnsSample.timestamp >= to_naive_utc(start))
            .where(DnsSample.timestamp <= to_naive_utc(end))
            .order_by(DnsSample.timestamp)  # type: ignore[arg-type]
        )
        with Session(self.engine) as session:
            return list(session.exec(stmt).all())

    def get_alerts(self, start: datetime, end: datetime) -> list[AlertRecord]:
        stmt = (
            select(AlertRecord)
            .where(AlertRecord.timestamp >= to_naive_utc(start))
            .where(AlertRecord.timestamp <= to_naive_utc(end))
            .order_by(AlertRecord.timestamp.desc())  # type: ignore[attr-defined]
        )
        with Session(self.engine) as session:
            return list(session.exec(stmt).all())

    def get_roaming_events(self, start: datetime, end: datetime) -> list[RoamingRecord]:
        stmt = (
            select(RoamingRecord)
            .where(RoamingRecord.timestamp >= to_naive_utc(start))
            .where(RoamingRecord.timestamp <= to_naive_utc(end))
            .order_by(RoamingRecord.timestamp.desc())  # type: ignore[attr-defined]
        )
        with Session(self.engine) as session:
            return list(session.exec(stmt).all())

    # --- Retention ---

    def cleanup_old_data(
        self,
        raw_retention_days: int,
        alert_retention_days: int,
        now: datetime | None = None,
    ) -> int:
        """Delete rows older than their retention window. Return rows removed."""
        now = to_naive_utc(now or datetime.now(UTC))
        raw_cutoff = now - timedelta(days=raw_retention_days)
        alert_cutoff = now - timedelta(days=alert_retention_days)

        removed = 0
        # Bulk DELETE goes through the plain ORM session
        with OrmSession(self.engine) as session:
            for model in (WifiSample, NetworkSample, PingSample, DnsSample, HttpSample, RoamingRecord):
                result = session.execute(delete(model).where(model.timestamp < raw_cutoff))  # type: ignore[attr-defined]
                removed += result.rowcount
            result = session.execute(delete(AlertRecord).where(AlertRecord.timestamp < alert_cutoff))  # type: ignore[arg-type]
            removed += result.rowcount
            session.commit()
        logger.debug("Purged rows older than %s (alerts older than %s)", raw_cutoff, alert_cutoff)
        return removed
