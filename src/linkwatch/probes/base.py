"""Measurement types and the interfaces every probe backend implements."""

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime

from linkwatch.config import Settings
from linkwatch.netutil import SignalQuality, classify_signal


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ConnectionStatus(enum.StrEnum):
    unknown = "Unknown"
    excellent = "Excellent"
    good = "Good"
    fair = "Fair"
    poor = "Poor"
    disconnected = "Disconnected"
    no_internet = "NoInternet"


class PingTarget(enum.StrEnum):
    gateway = "Gateway"
    dns1 = "DNS1"
    dns2 = "DNS2"
    custom = "Custom"


@dataclass(frozen=True)
class WifiSnapshot:
    """Current association of the wireless interface."""

    is_connected: bool
    ssid: str = ""
    bssid: str = ""
    signal_quality: int = 0  # 0-100
    rssi_dbm: int = -100
    channel: int = 0
    frequency_ghz: float = 0.0
    band: str = ""
    phy_type: str = ""
    link_speed_mbps: int = 0
    interface: str = ""
    timestamp: datetime = field(default_factory=_utcnow)

    @property
    def signal_level(self) -> SignalQuality:
        return classify_signal(self.signal_quality)


@dataclass(frozen=True)
class NetworkSnapshot:
    """IP configuration and counters of the active adapter."""

    is_connected: bool
    local_ip: str = ""
    subnet_mask: str = ""
    gateway: str = ""
    dns_servers: tuple[str, ...] = ()
    mac_address: str = ""
    adapter_name: str = ""
    bytes_sent: int = 0
    bytes_received: int = 0
    timestamp: datetime = field(default_factory=_utcnow)


def _check_latency(is_success: bool, latency_ms: float | None) -> None:
    if not is_success and latency_ms is not None:
        raise ValueError("failed probe results cannot carry a latency")


@dataclass(frozen=True)
class PingResult:
    target: str
    target_label: PingTarget
    is_success: bool
    latency_ms: float | None = None
    status: str = ""  # "Success", "TimedOut", "Unreachable", "Error", ...
    ttl: int = 0
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        _check_latency(self.is_success, self.latency_ms)


@dataclass(frozen=True)
class DnsResult:
    dns_server: str
    query_name: str
    is_success: bool
    latency_ms: float | None = None
    error: str = ""
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        _check_latency(self.is_success, self.latency_ms)


@dataclass(frozen=True)
class HttpProbeResult:
    url: str
    is_success: bool
    latency_ms: float | None = None
    status_code: int = 0
    is_captive_portal: bool = False
    error: str = ""
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        _check_latency(self.is_success, self.latency_ms)


@dataclass(frozen=True)
class MonitoringSnapshot:
    """All measurements from a single poll cycle."""

    wifi: WifiSnapshot | None = None
    network: NetworkSnapshot | None = None
    ping_results: tuple[PingResult, ...] = ()
    dns_results: tuple[DnsResult, ...] = ()
    http_probe: HttpProbeResult | None = None
    overall_status: ConnectionStatus = ConnectionStatus.unknown
    timestamp: datetime = field(default_factory=_utcnow)

    def ping_for(self, label: PingTarget) -> PingResult | None:
        """Return the first ping result with the given label, if any."""
        return next((p for p in self.ping_results if p.target_label == label), None)


class WifiProvider(ABC):
    """Local-only source of Wi-Fi association data."""

    @abstractmethod
    def snapshot(self) -> WifiSnapshot | None:
        """Return the current reading. Must not raise or touch the network."""


class NetworkProvider(ABC):
    @abstractmethod
    def snapshot(self) -> NetworkSnapshot | None:
        """Return the current adapter reading. Must not raise or touch the network."""


class PingProbe(ABC):
    @abstractmethod
    async def ping_all(self, config: Settings) -> list[PingResult]:
        """Ping gateway, both resolvers and custom targets; one result per target."""


class DnsProbe(ABC):
    @abstractmethod
    async def query_all(self, config: Settings) -> list[DnsResult]:
        """Resolve the configured name against each configured resolver."""


class HttpProbe(ABC):
    @abstractmethod
    async def check(self, config: Settings) -> HttpProbeResult:
        """Fetch the connectivity-check URL."""
