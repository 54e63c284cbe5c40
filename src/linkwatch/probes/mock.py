"""Mock probes for development and testing.

Produce plausible readings with jitter: a home network with two access
points on the same SSID (so roaming shows up now and then), occasional
latency spikes, and rare probe failures.
"""

import asyncio
import random

from linkwatch.config import Settings
from linkwatch.netutil import frequency_to_band, frequency_to_channel, rssi_to_signal_quality
from linkwatch.probes.base import (
    DnsProbe,
    DnsResult,
    HttpProbe,
    HttpProbeResult,
    NetworkProvider,
    NetworkSnapshot,
    PingProbe,
    PingResult,
    PingTarget,
    WifiProvider,
    WifiSnapshot,
)
from linkwatch.probes.ping import build_targets

_MOCK_GATEWAY = "192.168.1.1"

# (bssid, frequency kHz, typical RSSI dBm)
_ACCESS_POINTS = [
    ("AA:BB:CC:11:22:33", 5_180_000, -61),
    ("AA:BB:CC:44:55:66", 2_437_000, -72),
]


class MockWifiProvider(WifiProvider):
    def __init__(self, roam_probability: float = 0.05) -> None:
        self.roam_probability = roam_probability
        self._ap = 0

    def snapshot(self) -> WifiSnapshot | None:
        if random.random() < self.roam_probability:
            self._ap = (self._ap + 1) % len(_ACCESS_POINTS)
        bssid, freq, base = _ACCESS_POINTS[self._ap]
        rssi = base + random.randint(-4, 4)
        return WifiSnapshot(
            is_connected=True,
            ssid="HomeNetwork",
            bssid=bssid,
            signal_quality=rssi_to_signal_quality(rssi),
            rssi_dbm=rssi,
            channel=frequency_to_channel(freq),
            frequency_ghz=freq / 1_000_000,
            band=frequency_to_band(freq),
            phy_type="802.11ax",
            link_speed_mbps=random.choice([433, 866, 1201]),
            interface="wlan0",
        )


class MockNetworkProvider(NetworkProvider):
    def __init__(self) -> None:
        self._sent = 0
        self._received = 0

    def snapshot(self) -> NetworkSnapshot | None:
        self._sent += random.randint(10_000, 200_000)
        self._received += random.randint(50_000, 2_000_000)
        return NetworkSnapshot(
            is_connected=True,
            local_ip="192.168.1.42",
            subnet_mask="255.255.255.0",
            gateway=_MOCK_GATEWAY,
            dns_servers=(_MOCK_GATEWAY,),
            mac_address="DE:AD:BE:EF:00:01",
            adapter_name="wlan0",
            bytes_sent=self._sent,
            bytes_received=self._received,
        )


class MockPingProbe(PingProbe):
    def __init__(self, failure_rate: float = 0.02) -> None:
        self.failure_rate = failure_rate

    async def ping_all(self, config: Settings) -> list[PingResult]:
        await asyncio.sleep(0.01)
        results = []
        for target, label in build_targets(config, _MOCK_GATEWAY):
            if random.random() < self.failure_rate:
                results.append(
                    PingResult(target=target, target_label=label, is_success=False, status="TimedOut")
                )
                continue
            base = 3.0 if label == PingTarget.gateway else 18.0
            spike = random.random() < 0.05
            latency = base + random.uniform(0, 6) + (random.uniform(80, 200) if spike else 0)
            results.append(
                PingResult(
                    target=target,
                    target_label=label,
                    is_success=True,
                    latency_ms=round(latency, 1),
                    status="Success",
                    ttl=64 if label == PingTarget.gateway else 117,
                )
            )
        return results


class MockDnsProbe(DnsProbe):
    async def query_all(self, config: Settings) -> list[DnsResult]:
        await asyncio.sleep(0.01)
        return [
            DnsResult(
                dns_server=server,
                query_name=config.dns_query_name,
                is_success=True,
                latency_ms=round(random.uniform(8, 40), 1),
            )
            for server in config.dns_servers()
        ]


class MockHttpProbe(HttpProbe):
    async def check(self, config: Settings) -> HttpProbeResult:
        await asyncio.sleep(0.01)
        return HttpProbeResult(
            url=config.http_probe_url,
            is_success=True,
            latency_ms=round(random.uniform(30, 120), 1),
            status_code=200,
        )
