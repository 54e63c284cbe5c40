"""Access point handoff detection."""

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TypeVar

from linkwatch.events import Broadcaster
from linkwatch.history.repository import HistoryRepository
from linkwatch.monitoring.events import AlertEvent, RoamingEvent, Severity
from linkwatch.probes.base import WifiSnapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RoamingDetector:
    """Compares each Wi-Fi reading with the previous one for a BSSID change.

    Only the last observation is kept. Every change is reported; roaming
    alerts have no cooldown.
    """

    def __init__(
        self,
        repository: HistoryRepository,
        broadcaster: Broadcaster[AlertEvent],
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self.repository = repository
        self.broadcaster = broadcaster
        self.clock = clock
        self.last_bssid = ""
        self.last_signal = 0
        self.last_channel = 0

    async def check(self, current: WifiSnapshot | None) -> RoamingEvent | None:
        if current is None or not current.is_connected or not current.bssid:
            return None

        event: RoamingEvent | None = None
        if self.last_bssid and self.last_bssid != current.bssid:
            now = self.clock()
            event = RoamingEvent(
                previous_bssid=self.last_bssid,
                new_bssid=current.bssid,
                ssid=current.ssid,
                previous_signal_quality=self.last_signal,
                new_signal_quality=current.signal_quality,
                previous_channel=self.last_channel,
                new_channel=current.channel,
                timestamp=now,
            )
            alert = AlertEvent(
                alert_type="Roaming",
                severity=Severity.info,
                message=f"Roamed from {self.last_bssid} to {current.bssid}",
                details=(
                    f"Ch {self.last_channel} -> Ch {current.channel}, "
                    f"Signal {self.last_signal}% -> {current.signal_quality}%"
                ),
                timestamp=now,
            )
            logger.info(
                "Roaming detected: %s -> %s (signal: %d%% -> %d%%)",
                self.last_bssid,
                current.bssid,
                self.last_signal,
                current.signal_quality,
            )

        # Remember this reading whether or not it was a handoff
        self.last_bssid = current.bssid
        self.last_signal = current.signal_quality
        self.last_channel = current.channel

        if event is not None:
            await self._persist(self.repository.save_roaming_event, event, "roaming event")
            await self._persist(self.repository.save_alert, alert, "roaming alert")
            self.broadcaster.publish(alert)
        return event

    @staticmethod
    async def _persist(save: Callable[[T], object], item: T, what: str) -> None:
        try:
            await asyncio.to_thread(save, item)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Failed to persist %s", what)
