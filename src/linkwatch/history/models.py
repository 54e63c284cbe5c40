"""Time-series tables for measurements, alerts and roaming events.

Timestamps are stored as naive UTC (SQLite drops tzinfo).
"""

from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


def _utcnow_naive() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class WifiSample(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    timestamp: datetime = Field(default_factory=_utcnow_naive, index=True)
    ssid: str = Field(default="", index=True)
    bssid: str = ""
    signal_quality: int = 0
    rssi_dbm: int = -100
    link_speed_mbps: int = 0
    channel: int = 0
    frequency_ghz: float = 0.0
    band: str = ""
    phy_type: str = ""
    is_connected: bool = False


class NetworkSample(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    timestamp: datetime = Field(default_factory=_utcnow_naive, index=True)
    local_ip: str = ""
    subnet_mask: str = ""
    gateway: str = ""
    dns_servers: str = ""  # comma-separated
    mac_address: str = ""
    adapter_name: str = ""
    bytes_sent: int = 0
    bytes_received: int = 0
    is_connected: bool = False


class PingSample(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    timestamp: datetime = Field(default_factory=_utcnow_naive, index=True)
    target: str = ""
    target_label: str = Field(default="", index=True)
    latency_ms: float | None = None
    is_success: bool = False
    status: str = ""
    ttl: int = 0


class DnsSample(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    timestamp: datetime = Field(default_factory=_utcnow_naive, index=True)
    dns_server: str = ""
    query_name: str = ""
    latency_ms: float | None = None
    is_success: bool = False
    error: str = ""


class HttpSample(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    timestamp: datetime = Field(default_factory=_utcnow_naive, index=True)
    url: str = ""
    latency_ms: float | None = None
    status_code: int = 0
    is_success: bool = False
    is_captive_portal: bool = False
    error: str = ""


class AlertRecord(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    timestamp: datetime = Field(default_factory=_utcnow_naive, index=True)
    alert_type: str = Field(index=True)
    severity: str
    message: str
    details: str = ""
    is_acknowledged: bool = False


class RoamingRecord(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    timestamp: datetime = Field(default_factory=_utcnow_naive, index=True)
    previous_bssid: str
    new_bssid: str
    ssid: str = ""
    previous_signal_quality: int = 0
    new_signal_quality: int = 0
    previous_channel: int = 0
    new_channel: int = 0
