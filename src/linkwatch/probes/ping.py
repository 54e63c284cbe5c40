"""ICMP reachability probe using the system ping binary."""

import asyncio
import logging
import math
import re

from linkwatch.config import Settings
from linkwatch.netutil import default_gateway
from linkwatch.probes.base import PingProbe, PingResult, PingTarget

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(r"time[=<]\s*([\d.]+)\s*ms")
_TTL_RE = re.compile(r"ttl=(\d+)", re.IGNORECASE)


def parse_ping_output(output: str) -> tuple[float | None, int]:
    """Extract (latency_ms, ttl) from the output of a single echo request."""
    time_match = _TIME_RE.search(output)
    ttl_match = _TTL_RE.search(output)
    latency = float(time_match.group(1)) if time_match else None
    ttl = int(ttl_match.group(1)) if ttl_match else 0
    return latency, ttl


def build_targets(config: Settings, gateway: str | None) -> list[tuple[str, PingTarget]]:
    """Ordered probe targets: gateway (if known), both resolvers, then customs."""
    targets: list[tuple[str, PingTarget]] = []
    if gateway:
        targets.append((gateway, PingTarget.gateway))
    targets.append((config.primary_dns, PingTarget.dns1))
    targets.append((config.secondary_dns, PingTarget.dns2))
    for custom in config.custom_ping_targets:
        targets.append((custom, PingTarget.custom))
    return targets


class SystemPingProbe(PingProbe):
    """Sends one echo request per target, all targets concurrently."""

    def __init__(self, ping_binary: str = "ping") -> None:
        self.ping_binary = ping_binary

    async def ping_all(self, config: Settings) -> list[PingResult]:
        targets = build_targets(config, default_gateway())
        return list(
            await asyncio.gather(
                *(self._ping(address, label, config.ping_timeout_ms) for address, label in targets)
            )
        )

    async def _ping(self, target: str, label: PingTarget, timeout_ms: int) -> PingResult:
        # ping -W takes whole seconds
        wait_seconds = max(1, math.ceil(timeout_ms / 1000))
        try:
            proc = await asyncio.create_subprocess_exec(
                self.ping_binary,
                "-n",
                "-c",
                "1",
                "-W",
                str(wait_seconds),
                target,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            logger.debug("Ping failed for %s", target, exc_info=True)
            return PingResult(target=target, target_label=label, is_success=False, status=f"Error: {e}")

        try:
            stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=timeout_ms / 1000 + 1)
        except TimeoutError:
            proc.kill()
            await proc.wait()
            return PingResult(target=target, target_label=label, is_success=False, status="TimedOut")
        except asyncio.CancelledError:
            proc.kill()
            raise

        latency, ttl = parse_ping_output(stdout.decode("utf-8", errors="ignore"))
        if proc.returncode != 0 or latency is None:
            # ping exits 1 when no reply arrived, 2 on any other error
            status = "TimedOut" if proc.returncode == 1 else "Error"
            return PingResult(target=target, target_label=label, is_success=False, status=status)

        return PingResult(
            target=target,
            target_label=label,
            is_success=True,
            latency_ms=latency,
            status="Success",
            ttl=ttl,
        )
