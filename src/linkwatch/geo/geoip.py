"""IP address geolocation through the ip-api.com batch endpoint.

Used for traceroute hops whose hostname carries no location hint. Only
public IPv4 addresses are sent; the service locates nothing else.
"""

import ipaddress
import logging
from collections.abc import Iterable
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BATCH_URL = "http://ip-api.com/batch"

# The batch endpoint accepts at most this many queries per request
_MAX_BATCH = 100

_LOCAL_NETWORKS = [
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("169.254.0.0/16"),
]


@dataclass(frozen=True)
class GeoIpResult:
    query: str
    status: str
    country: str | None = None
    region_name: str | None = None
    city: str | None = None
    lat: float | None = None
    lon: float | None = None
    isp: str | None = None
    org: str | None = None

    @property
    def located(self) -> bool:
        return self.status == "success" and self.lat is not None and self.lon is not None

    @classmethod
    def from_json(cls, data: dict) -> "GeoIpResult":
        return cls(
            query=data.get("query", ""),
            status=data.get("status", ""),
            country=data.get("country"),
            region_name=data.get("regionName"),
            city=data.get("city"),
            lat=data.get("lat"),
            lon=data.get("lon"),
            isp=data.get("isp"),
            org=data.get("org"),
        )


def is_private_or_local(ip: str) -> bool:
    """True for anything not worth a lookup: blanks, '*', IPv6, private ranges."""
    if not ip or not ip.strip() or ip == "*":
        return True
    try:
        addr = ipaddress.ip_address(ip.strip())
    except ValueError:
        return True
    if addr.version != 4:
        return True
    return any(addr in net for net in _LOCAL_NETWORKS)


def public_addresses(ips: Iterable[str]) -> list[str]:
    """Deduplicated public IPv4 addresses in first-seen order, capped per batch."""
    seen: list[str] = []
    for ip in ips:
        if not is_private_or_local(ip) and ip not in seen:
            seen.append(ip)
    return seen[:_MAX_BATCH]


class GeoIpClient:
    """POSTs a JSON list of addresses and returns one result per address.

    HTTP errors propagate as ``httpx.HTTPError``; callers decide whether a
    failed lookup matters.
    """

    def __init__(
        self,
        url: str = DEFAULT_BATCH_URL,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def lookup_batch(self, ips: Iterable[str]) -> list[GeoIpResult]:
        queries = public_addresses(ips)
        if not queries:
            return []
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(self.url, json=queries)
            response.raise_for_status()
        results = [GeoIpResult.from_json(item) for item in response.json() or []]
        logger.debug("GeoIP lookup: %d queried, %d located", len(queries), sum(r.located for r in results))
        return results
