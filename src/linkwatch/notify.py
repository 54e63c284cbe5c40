"""User-facing alert notification backends.

Delivery is best-effort: backends log and swallow their own failures.
"""

import logging
from abc import ABC, abstractmethod
from datetime import UTC, datetime

import httpx

from linkwatch.config import Settings

logger = logging.getLogger(__name__)


class Notifier(ABC):
    @abstractmethod
    async def show(self, severity: str, message: str) -> None:
        """Present a notification. Never raises."""


class LogNotifier(Notifier):
    async def show(self, severity: str, message: str) -> None:
        level = logging.WARNING if severity in ("Warning", "Critical") else logging.INFO
        logger.log(level, "[%s] %s", severity, message)


class WebhookNotifier(Notifier):
    """POSTs each notification as JSON to a webhook URL."""

    def __init__(
        self, url: str, timeout: float = 5.0, transport: httpx.AsyncBaseTransport | None = None
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def show(self, severity: str, message: str) -> None:
        payload = {
            "event": "alert",
            "severity": severity,
            "message": message,
            "timestamp": datetime.now(UTC).isoformat(),
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=payload)
            if response.is_success:
                logger.info("Webhook delivered: %s → %s (HTTP %d)", severity, self.url, response.status_code)
            else:
                logger.warning("Webhook failed: %s → %s (HTTP %d)", severity, self.url, response.status_code)
        except Exception as e:
            logger.error("Webhook dispatch error: %s → %s: %s", severity, self.url, e)


def create_notifier(cfg: Settings) -> Notifier:
    """Factory: webhook delivery when a URL is configured, else the log."""
    if cfg.webhook_url:
        return WebhookNotifier(cfg.webhook_url)
    return LogNotifier()
