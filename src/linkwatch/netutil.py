"""Radio and addressing helpers shared by the probes."""

import enum
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# Patch in tests to point at fixture files
_ROUTE_FILE: Path = Path("/proc/net/route")
_RESOLV_CONF: Path = Path("/etc/resolv.conf")


class SignalQuality(enum.StrEnum):
    excellent = "Excellent"
    good = "Good"
    fair = "Fair"
    poor = "Poor"
    very_poor = "VeryPoor"


def frequency_to_channel(frequency_khz: int) -> int:
    """Map a centre frequency in kHz to its 802.11 channel number (0 if unknown)."""
    mhz = frequency_khz // 1000
    if 2412 <= mhz <= 2484:
        # Channel 14 sits outside the 5 MHz raster
        if mhz == 2484:
            return 14
        return (mhz - 2412) // 5 + 1
    if 5180 <= mhz <= 5825:
        return (mhz - 5000) // 5
    if 5955 <= mhz <= 7115:
        return (mhz - 5950) // 5
    return 0


def frequency_to_band(frequency_khz: int) -> str:
    """Return the band label for a frequency in kHz."""
    mhz = frequency_khz // 1000
    if 2400 <= mhz <= 2500:
        return "2.4 GHz"
    if 5100 <= mhz <= 5900:
        return "5 GHz"
    if 5925 <= mhz <= 7125:
        return "6 GHz"
    return "Unknown"


def signal_quality_to_rssi(quality: int) -> int:
    """Convert 0-100 signal quality to dBm (100 -> -50, 0 -> -100)."""
    return quality // 2 - 100


def rssi_to_signal_quality(rssi_dbm: int) -> int:
    """Inverse of signal_quality_to_rssi, clamped to 0-100."""
    return max(0, min(100, 2 * (rssi_dbm + 100)))


def classify_signal(quality: int) -> SignalQuality:
    """Bucket a signal quality percentage. Lower bounds are inclusive."""
    if quality >= 80:
        return SignalQuality.excellent
    if quality >= 60:
        return SignalQuality.good
    if quality >= 40:
        return SignalQuality.fair
    if quality >= 20:
        return SignalQuality.poor
    return SignalQuality.very_poor


def normalize_mac(mac: str) -> str:
    """Normalize a MAC address to uppercase colon-separated format."""
    cleaned = mac.upper().replace("-", ":").replace(".", "")
    # Handle bare hex (e.g. "AABBCCDDEEFF")
    if ":" not in cleaned and len(cleaned) == 12:
        cleaned = ":".join(cleaned[i : i + 2] for i in range(0, 12, 2))
    return cleaned


def _hex_to_ipv4(value: str) -> str:
    """Decode a little-endian hex IPv4 address as written in /proc/net/route."""
    raw = bytes.fromhex(value)
    return ".".join(str(b) for b in reversed(raw))


def default_gateway() -> str | None:
    """Return the IPv4 default gateway from the kernel routing table."""
    try:
        lines = _ROUTE_FILE.read_text().splitlines()
    except OSError:
        logger.debug("Routing table not readable at %s", _ROUTE_FILE)
        return None

    for line in lines[1:]:
        fields = line.split()
        if len(fields) < 4:
            continue
        destination, gateway, flags = fields[1], fields[2], int(fields[3], 16)
        # RTF_UP | RTF_GATEWAY
        if destination == "00000000" and flags & 0x3 == 0x3:
            address = _hex_to_ipv4(gateway)
            if address != "0.0.0.0":
                return address
    return None


def system_dns_servers() -> list[str]:
    """Return the IPv4 nameservers listed in resolv.conf."""
    try:
        text = _RESOLV_CONF.read_text()
    except OSError:
        return []

    servers = []
    for line in text.splitlines():
        parts = line.split()
        if len(parts) >= 2 and parts[0] == "nameserver" and ":" not in parts[1]:
            servers.append(parts[1])
    return servers
