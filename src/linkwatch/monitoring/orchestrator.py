"""Periodic monitoring loop: probe, classify, publish, persist, evaluate."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import UTC, datetime
from typing import TypeVar

from linkwatch.config import Settings
from linkwatch.events import Broadcaster
from linkwatch.history.repository import HistoryRepository
from linkwatch.monitoring.alerts import AlertEngine
from linkwatch.monitoring.roaming import RoamingDetector
from linkwatch.probes.base import (
    ConnectionStatus,
    DnsProbe,
    DnsResult,
    HttpProbe,
    HttpProbeResult,
    MonitoringSnapshot,
    NetworkProvider,
    PingProbe,
    PingResult,
    PingTarget,
    WifiProvider,
    WifiSnapshot,
)
from linkwatch.probes.ping import build_targets

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Slack on top of a probe's own timeout before the orchestrator gives up on it
_PROBE_GRACE_SECONDS = 2.0


def determine_status(
    wifi: WifiSnapshot | None,
    ping_results: Sequence[PingResult],
    http_probe: HttpProbeResult | None,
) -> ConnectionStatus:
    """Classify one cycle's measurements."""
    if wifi is None or not wifi.is_connected:
        return ConnectionStatus.disconnected

    gateway = next((p for p in ping_results if p.target_label == PingTarget.gateway), None)
    if gateway is not None and not gateway.is_success:
        return ConnectionStatus.disconnected

    # Reachability of the configured resolvers, judged by their pings
    dns_pings = [p for p in ping_results if p.target_label in (PingTarget.dns1, PingTarget.dns2)]
    any_dns_success = any(p.is_success for p in dns_pings)
    if not any_dns_success and http_probe is not None and not http_probe.is_success:
        return ConnectionStatus.no_internet

    latencies = [p.latency_ms for p in ping_results if p.is_success and p.latency_ms is not None]
    # No successful pings counts as zero latency, not as a bad link
    avg_latency = sum(latencies) / len(latencies) if latencies else 0.0
    signal = wifi.signal_quality

    if signal >= 70 and avg_latency < 30:
        return ConnectionStatus.excellent
    if signal >= 50 and avg_latency < 60:
        return ConnectionStatus.good
    if signal >= 30 and avg_latency < 100:
        return ConnectionStatus.fair
    return ConnectionStatus.poor


class MonitoringOrchestrator:
    """Runs one poll cycle every ``polling_interval_seconds`` until stopped.

    Within a cycle only the ping, DNS and HTTP probes run concurrently;
    publication, persistence and evaluation follow strictly in order, and
    the next cycle starts only after the previous one has finished.
    """

    def __init__(
        self,
        config: Settings,
        wifi_provider: WifiProvider,
        network_provider: NetworkProvider,
        ping_probe: PingProbe,
        dns_probe: DnsProbe,
        http_probe: HttpProbe,
        repository: HistoryRepository,
        alert_engine: AlertEngine,
        roaming_detector: RoamingDetector,
        snapshots: Broadcaster[MonitoringSnapshot],
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self.config = config
        self.wifi_provider = wifi_provider
        self.network_provider = network_provider
        self.ping_probe = ping_probe
        self.dns_probe = dns_probe
        self.http_probe = http_probe
        self.repository = repository
        self.alert_engine = alert_engine
        self.roaming_detector = roaming_detector
        self.snapshots = snapshots
        self.clock = clock
        self.latest: MonitoringSnapshot | None = None
        self.cycle_count = 0
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        logger.info(
            "Starting monitoring orchestrator (interval=%ds)", self.config.polling_interval_seconds
        )
        self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        logger.info("Stopping monitoring orchestrator")
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self) -> None:
        """Loop forever; only cancellation ends it."""
        try:
            # Let the rest of the app finish starting
            await asyncio.sleep(self.config.initial_delay_seconds)
            while True:
                try:
                    await self.run_cycle()
                except asyncio.CancelledError:
                    raise
                except Exception:
                    logger.exception("Error in monitoring cycle")
                await asyncio.sleep(self.config.polling_interval_seconds)
        finally:
            logger.info("Monitoring orchestrator stopped")

    async def run_cycle(self) -> MonitoringSnapshot:
        snapshot = await self.collect_snapshot()
        self.latest = snapshot
        self.cycle_count += 1

        # Publish first so subscribers update even if the store is down
        self.snapshots.publish(snapshot)

        try:
            await asyncio.to_thread(self.repository.save_snapshot, snapshot)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Failed to persist snapshot")

        try:
            await self.alert_engine.evaluate(snapshot)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.warning("Alert evaluation failed", exc_info=True)

        try:
            await self.roaming_detector.check(snapshot.wifi)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.warning("Roaming evaluation failed", exc_info=True)

        return snapshot

    async def collect_snapshot(self) -> MonitoringSnapshot:
        timestamp = self.clock()
        cfg = self.config

        # Local OS reads, no network I/O; nmcli can take seconds so keep it off the loop
        wifi = await self._read_local("Wi-Fi", self.wifi_provider.snapshot)
        network = await self._read_local("network", self.network_provider.snapshot)

        gateway = network.gateway if network and network.gateway else None

        async with asyncio.TaskGroup() as tg:
            ping_task = tg.create_task(
                self._contained(
                    "ping",
                    self.ping_probe.ping_all(cfg),
                    cfg.ping_timeout_ms / 1000,
                    lambda reason: [
                        PingResult(target=target, target_label=label, is_success=False, status=reason)
                        for target, label in build_targets(cfg, gateway)
                    ],
                )
            )
            dns_task = tg.create_task(
                self._contained(
                    "dns",
                    self.dns_probe.query_all(cfg),
                    cfg.dns_timeout_seconds,
                    lambda reason: [
                        DnsResult(
                            dns_server=server,
                            query_name=cfg.dns_query_name,
                            is_success=False,
                            error=reason,
                        )
                        for server in cfg.dns_servers()
                    ],
                )
            )
            http_task = tg.create_task(
                self._contained(
                    "http",
                    self.http_probe.check(cfg),
                    cfg.http_timeout_ms / 1000,
                    lambda reason: HttpProbeResult(
                        url=cfg.http_probe_url, is_success=False, error=reason
                    ),
                )
            )

        pings = tuple(ping_task.result())
        dns_results = tuple(dns_task.result())
        http = http_task.result()

        return MonitoringSnapshot(
            timestamp=timestamp,
            wifi=wifi,
            network=network,
            ping_results=pings,
            dns_results=dns_results,
            http_probe=http,
            overall_status=determine_status(wifi, pings, http),
        )

    @staticmethod
    async def _read_local(name: str, read: Callable[[], T | None]) -> T | None:
        try:
            return await asyncio.to_thread(read)
        except Exception:
            logger.exception("%s provider failed", name)
            return None

    @staticmethod
    async def _contained(
        name: str,
        probe: Awaitable[T],
        timeout: float,
        on_failure: Callable[[str], T],
    ) -> T:
        """Await a probe, turning a crash or overrun into failure results."""
        try:
            async with asyncio.timeout(timeout + _PROBE_GRACE_SECONDS):
                return await probe
        except TimeoutError:
            logger.warning("%s probe overran its timeout", name)
            return on_failure("Timeout")
        except Exception as e:
            logger.exception("%s probe crashed", name)
            return on_failure(f"Error: {e}")
