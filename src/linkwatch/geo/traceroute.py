"""Route discovery via the system traceroute binary.

Each hop is decorated with the location its hostname hints at. Hops whose
hostname says nothing can be located afterwards by IP with ``locate_hops``.
"""

import asyncio
import logging
import re
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass, replace

import httpx

from linkwatch.geo.geoip import GeoIpClient
from linkwatch.geo.hostname import ParsedLocation, parse

logger = logging.getLogger(__name__)

_VALID_TARGET_RE = re.compile(r"^[A-Za-z0-9.:-]+$")
# " 3  host.example.net (192.0.2.1)  10.512 ms" or " 3  192.0.2.1  10.512 ms"
_HOP_RE = re.compile(
    r"^\s*(?P<hop>\d+)\s+"
    r"(?:(?P<host>\S+)\s+\((?P<addr>[^)]+)\)|(?P<bare>[0-9a-fA-F.:]+))"
    r"\s+(?P<rtt>[\d.]+)\s*ms"
)
_TIMEOUT_RE = re.compile(r"^\s*(?P<hop>\d+)\s+\*")


@dataclass(frozen=True)
class TracerouteHop:
    hop: int
    address: str
    hostname: str
    latency_ms: float | None
    is_timeout: bool
    location: ParsedLocation | None = None
    source: str | None = None  # "hostname" or "geoip"
    isp: str | None = None


def validate_target(target: str) -> str:
    """Reject anything that is not a plain hostname or IP address."""
    if not target or len(target) > 253 or target.startswith("-") or not _VALID_TARGET_RE.match(target):
        raise ValueError(f"Invalid traceroute target: {target!r}")
    return target


def parse_hop_line(line: str) -> TracerouteHop | None:
    """Parse one hop line of traceroute output; None for headers and noise."""
    m = _HOP_RE.match(line)
    if m:
        address = m.group("addr") or m.group("bare")
        hostname = m.group("host") or address
        location = parse(hostname)
        return TracerouteHop(
            hop=int(m.group("hop")),
            address=address,
            hostname=hostname,
            latency_ms=float(m.group("rtt")),
            is_timeout=False,
            location=location,
            source="hostname" if location else None,
        )
    m = _TIMEOUT_RE.match(line)
    if m:
        return TracerouteHop(hop=int(m.group("hop")), address="*", hostname="*", latency_ms=None, is_timeout=True)
    return None


async def run_traceroute(
    target: str,
    max_hops: int = 30,
    timeout_ms: int = 3000,
    binary: str = "traceroute",
) -> AsyncIterator[TracerouteHop]:
    """Yield hops as traceroute reports them."""
    validate_target(target)
    wait_seconds = max(1, timeout_ms // 1000)
    proc = await asyncio.create_subprocess_exec(
        binary,
        "-q",
        "1",
        "-w",
        str(wait_seconds),
        "-m",
        str(max_hops),
        target,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.DEVNULL,
    )
    stdout = proc.stdout
    if stdout is None:
        raise OSError("traceroute output pipe was not opened")
    try:
        async for raw in stdout:
            hop = parse_hop_line(raw.decode("utf-8", errors="ignore"))
            if hop is not None:
                yield hop
        await proc.wait()
    finally:
        if proc.returncode is None:
            proc.kill()
            await proc.wait()
    if proc.returncode:
        logger.warning("traceroute to %s exited with %d", target, proc.returncode)


async def locate_hops(hops: Sequence[TracerouteHop], geoip: GeoIpClient) -> list[TracerouteHop]:
    """Fill in IP-based locations where the hostname gave none.

    A hostname match wins over the IP lookup; the lookup still supplies the
    ISP. A failed lookup leaves the hops as they were.
    """
    try:
        results = await geoip.lookup_batch(h.address for h in hops if not h.is_timeout)
    except httpx.HTTPError as e:
        logger.warning("GeoIP lookup failed: %s", e)
        return list(hops)

    by_address = {r.query: r for r in results if r.located}
    located: list[TracerouteHop] = []
    for hop in hops:
        geo = by_address.get(hop.address)
        if geo is None:
            located.append(hop)
        elif hop.location is not None:
            located.append(replace(hop, isp=geo.isp))
        else:
            location = ParsedLocation(
                city=geo.city or "Unknown",
                region=geo.region_name or "",
                country=geo.country or "Unknown",
                latitude=geo.lat,
                longitude=geo.lon,
            )
            located.append(replace(hop, location=location, source="geoip", isp=geo.isp))
    return located
