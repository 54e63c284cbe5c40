"""Threshold alerting with per-type cooldown."""

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime

from linkwatch.config import Settings
from linkwatch.events import Broadcaster
from linkwatch.history.repository import HistoryRepository
from linkwatch.monitoring.events import AlertEvent, Severity
from linkwatch.notify import Notifier
from linkwatch.probes.base import MonitoringSnapshot, PingTarget

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AlertEngine:
    """Turns snapshot facts into rate-limited alerts.

    The cooldown clock is keyed by alert type only, so two differently worded
    alerts of the same type share one window. Cooldowns live in memory and
    reset on restart.
    """

    def __init__(
        self,
        config: Settings,
        repository: HistoryRepository,
        notifier: Notifier,
        broadcaster: Broadcaster[AlertEvent],
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.config = config
        self.repository = repository
        self.notifier = notifier
        self.broadcaster = broadcaster
        self.clock = clock
        self._last_fired: dict[str, datetime] = {}

    async def evaluate(self, snapshot: MonitoringSnapshot) -> list[AlertEvent]:
        """Apply every rule to the snapshot. Return the alerts that fired."""
        fired: list[AlertEvent] = []
        wifi = snapshot.wifi

        async def _fire(alert_type: str, severity: Severity, message: str, details: str) -> None:
            alert = await self.fire(alert_type, severity, message, details)
            if alert is not None:
                fired.append(alert)

        if (
            wifi is not None
            and wifi.is_connected
            and 0 < wifi.signal_quality < self.config.alert_signal_low_threshold
        ):
            await _fire(
                "SignalLow",
                Severity.warning,
                f"Wi-Fi signal is low: {wifi.signal_quality}%",
                f"SSID: {wifi.ssid}, RSSI: {wifi.rssi_dbm} dBm",
            )

        if wifi is not None and not wifi.is_connected:
            await _fire(
                "Disconnected", Severity.critical, "Wi-Fi disconnected", "No Wi-Fi connection detected"
            )

        gateway = snapshot.ping_for(PingTarget.gateway)
        if gateway is not None:
            if not gateway.is_success:
                await _fire(
                    "GatewayUnreachable",
                    Severity.critical,
                    "Gateway is unreachable",
                    f"Target: {gateway.target}",
                )
            elif gateway.latency_ms is not None and gateway.latency_ms > self.config.alert_latency_high_ms:
                await _fire(
                    "HighLatency",
                    Severity.warning,
                    f"High gateway latency: {gateway.latency_ms:.0f}ms",
                    f"Threshold: {self.config.alert_latency_high_ms}ms",
                )

        http = snapshot.http_probe
        if http is not None and not http.is_success and wifi is not None and wifi.is_connected:
            await _fire("NoInternet", Severity.warning, "Internet connectivity lost", http.error)

        if http is not None and http.is_captive_portal:
            await _fire(
                "CaptivePortal",
                Severity.info,
                "Captive portal detected",
                "You may need to authenticate with the network",
            )

        return fired

    def in_cooldown(self, alert_type: str, now: datetime | None = None) -> bool:
        last = self._last_fired.get(alert_type)
        if last is None:
            return False
        now = now or self.clock()
        return (now - last).total_seconds() < self.config.alert_cooldown_seconds

    async def fire(
        self, alert_type: str, severity: Severity, message: str, details: str = ""
    ) -> AlertEvent | None:
        """Emit an alert unless its type is cooling down. Return it if emitted."""
        now = self.clock()
        if self.in_cooldown(alert_type, now):
            logger.debug("Alert %s suppressed by cooldown", alert_type)
            return None

        # Advance the clock first so a failing store cannot cause an alert storm
        self._last_fired[alert_type] = now

        alert = AlertEvent(
            alert_type=alert_type,
            severity=severity,
            message=message,
            details=details,
            timestamp=now,
        )
        logger.info("Alert: [%s] %s", severity, message)

        try:
            await asyncio.to_thread(self.repository.save_alert, alert)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Failed to persist alert %s", alert_type)

        self.broadcaster.publish(alert)

        if self.config.show_notifications:
            try:
                await self.notifier.show(str(severity), message)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Notification failed for alert %s", alert_type)

        return alert

    def reset(self) -> None:
        """Forget all cooldowns."""
        self._last_fired.clear()
