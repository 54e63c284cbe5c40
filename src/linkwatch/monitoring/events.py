"""Alert and roaming event types emitted by the monitoring core."""

import enum
from dataclasses import dataclass, field
from datetime import UTC, datetime


class Severity(enum.StrEnum):
    info = "Info"
    warning = "Warning"
    critical = "Critical"


@dataclass(frozen=True)
class AlertEvent:
    alert_type: str  # "SignalLow", "HighLatency", "Disconnected", "Roaming", ...
    severity: Severity
    message: str
    details: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    acknowledged: bool = False


@dataclass(frozen=True)
class RoamingEvent:
    """An access point handoff within the same connection."""

    previous_bssid: str
    new_bssid: str
    ssid: str
    previous_signal_quality: int
    new_signal_quality: int
    previous_channel: int
    new_channel: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
