"""Adapter and IP configuration reading via psutil."""

import logging
import socket

import psutil

from linkwatch.netutil import default_gateway, normalize_mac, system_dns_servers
from linkwatch.probes.base import NetworkProvider, NetworkSnapshot

logger = logging.getLogger(__name__)


def _pick_adapter(stats: dict, addrs: dict, preferred: str | None) -> str | None:
    """Choose the adapter to report: the configured one, else the first up wireless, else any up."""
    if preferred:
        return preferred if preferred in stats else None

    candidates = [
        name
        for name, st in stats.items()
        if st.isup
        and name != "lo"
        and any(a.family == socket.AF_INET for a in addrs.get(name, []))
    ]
    wireless = [n for n in candidates if n.startswith(("wl", "wifi"))]
    if wireless:
        return wireless[0]
    return candidates[0] if candidates else None


class PsutilNetworkProvider(NetworkProvider):
    def __init__(self, interface: str | None = None) -> None:
        self.interface = interface

    def snapshot(self) -> NetworkSnapshot | None:
        try:
            stats = psutil.net_if_stats()
            addrs = psutil.net_if_addrs()
            name = _pick_adapter(stats, addrs, self.interface)
            if name is None or not stats[name].isup:
                logger.debug("No active network adapter found")
                return NetworkSnapshot(is_connected=False, adapter_name=name or "")

            ipv4 = next((a for a in addrs[name] if a.family == socket.AF_INET), None)
            link = next((a for a in addrs[name] if a.family == psutil.AF_LINK), None)
            counters = psutil.net_io_counters(pernic=True).get(name)

            return NetworkSnapshot(
                is_connected=ipv4 is not None,
                local_ip=ipv4.address if ipv4 else "",
                subnet_mask=(ipv4.netmask or "") if ipv4 else "",
                gateway=default_gateway() or "",
                dns_servers=tuple(system_dns_servers()),
                mac_address=normalize_mac(link.address) if link else "",
                adapter_name=name,
                bytes_sent=counters.bytes_sent if counters else 0,
                bytes_received=counters.bytes_recv if counters else 0,
            )
        except Exception:
            logger.exception("Failed to get network interface info")
            return None
