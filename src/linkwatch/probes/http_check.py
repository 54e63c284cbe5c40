"""HTTP connectivity check with captive portal detection."""

import logging
import time

import httpx

from linkwatch.config import Settings
from linkwatch.probes.base import HttpProbe, HttpProbeResult

logger = logging.getLogger(__name__)

_REDIRECT_CODES = {301, 302, 303, 307, 308}


class HttpxProbe(HttpProbe):
    """GETs the connectivity-check URL without following redirects.

    A portal either redirects the request or answers it with its own login
    page, so a non-empty 2xx body missing the expected marker also counts.
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport

    async def check(self, config: Settings) -> HttpProbeResult:
        url = config.http_probe_url
        try:
            async with httpx.AsyncClient(
                timeout=config.http_timeout_ms / 1000,
                follow_redirects=False,
                transport=self._transport,
            ) as client:
                start = time.perf_counter()
                response = await client.get(url)
                latency = (time.perf_counter() - start) * 1000
        except httpx.TimeoutException:
            return HttpProbeResult(url=url, is_success=False, error="Timeout")
        except httpx.HTTPError as e:
            logger.debug("HTTP probe failed", exc_info=True)
            return HttpProbeResult(url=url, is_success=False, error=str(e) or type(e).__name__)

        if response.is_success:
            body = response.text
            captive = bool(body) and config.http_probe_marker.lower() not in body.lower()
            return HttpProbeResult(
                url=url,
                is_success=True,
                latency_ms=latency,
                status_code=response.status_code,
                is_captive_portal=captive,
            )

        return HttpProbeResult(
            url=url,
            is_success=False,
            status_code=response.status_code,
            is_captive_portal=response.status_code in _REDIRECT_CODES,
            error=f"HTTP {response.status_code}",
        )
