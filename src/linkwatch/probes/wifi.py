"""Wi-Fi association reading via NetworkManager's nmcli.

Only reads cached scan results (``--rescan no``) so a snapshot never
triggers radio or network activity.
"""

import logging
import re
import subprocess

from linkwatch.netutil import (
    frequency_to_band,
    frequency_to_channel,
    normalize_mac,
    signal_quality_to_rssi,
)
from linkwatch.probes.base import WifiProvider, WifiSnapshot

logger = logging.getLogger(__name__)

_FIELDS = "ACTIVE,SSID,BSSID,SIGNAL,CHAN,FREQ,RATE,DEVICE"
_VALID_INTERFACE_RE = re.compile(r"^[a-zA-Z0-9_.-]+$")
_UNESCAPED_COLON_RE = re.compile(r"(?<!\\):")
_LEADING_INT_RE = re.compile(r"^\s*(\d+)")


def _validate_interface_name(name: str) -> str:
    """Validate interface name before it reaches a command line."""
    if not name or len(name) > 15 or not _VALID_INTERFACE_RE.match(name):
        raise ValueError(f"Invalid interface name: {name!r}")
    return name


def _leading_int(value: str) -> int:
    m = _LEADING_INT_RE.match(value)
    return int(m.group(1)) if m else 0


def _split_terse(line: str) -> list[str]:
    """Split an nmcli terse line on unescaped colons."""
    return [part.replace("\\:", ":").replace("\\\\", "\\") for part in _UNESCAPED_COLON_RE.split(line)]


def parse_nmcli_wifi(output: str) -> WifiSnapshot:
    """Build a snapshot from ``nmcli -t -f ACTIVE,SSID,...`` output."""
    for line in output.splitlines():
        fields = _split_terse(line)
        if len(fields) < 8 or fields[0] != "yes":
            continue
        _active, ssid, bssid, signal, channel, freq, rate, device = fields[:8]
        quality = max(0, min(100, _leading_int(signal)))
        frequency_khz = _leading_int(freq) * 1000
        return WifiSnapshot(
            is_connected=True,
            ssid=ssid,
            bssid=normalize_mac(bssid) if bssid else "",
            signal_quality=quality,
            rssi_dbm=signal_quality_to_rssi(quality),
            channel=frequency_to_channel(frequency_khz) or _leading_int(channel),
            frequency_ghz=frequency_khz / 1_000_000,
            band=frequency_to_band(frequency_khz),
            link_speed_mbps=_leading_int(rate),
            interface=device,
        )
    return WifiSnapshot(is_connected=False)


class NmcliWifiProvider(WifiProvider):
    def __init__(self, interface: str | None = None, timeout: float = 2.0) -> None:
        self.interface = _validate_interface_name(interface) if interface else None
        self.timeout = timeout

    def snapshot(self) -> WifiSnapshot | None:
        cmd = ["nmcli", "-t", "-f", _FIELDS, "device", "wifi", "list", "--rescan", "no"]
        if self.interface:
            cmd += ["ifname", self.interface]
        try:
            proc = subprocess.run(
                cmd, capture_output=True, text=True, timeout=self.timeout, check=False
            )
        except (OSError, subprocess.TimeoutExpired):
            logger.exception("Failed to get Wi-Fi metrics")
            return None

        if proc.returncode != 0:
            logger.debug("nmcli exited %d: %s", proc.returncode, proc.stderr.strip())
            return WifiSnapshot(is_connected=False)

        snapshot = parse_nmcli_wifi(proc.stdout)
        if not snapshot.is_connected:
            logger.debug("No connected Wi-Fi network found")
        return snapshot
