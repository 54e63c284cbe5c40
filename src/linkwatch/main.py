"""LinkWatch application entrypoint."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from linkwatch import database
from linkwatch.api.auth import credentials_match
from linkwatch.config import Settings, load_config, settings
from linkwatch.events import Broadcaster
from linkwatch.history.repository import HistoryRepository
from linkwatch.monitoring.alerts import AlertEngine
from linkwatch.monitoring.events import AlertEvent
from linkwatch.monitoring.orchestrator import MonitoringOrchestrator
from linkwatch.monitoring.retention import DataRetentionService
from linkwatch.monitoring.roaming import RoamingDetector
from linkwatch.notify import create_notifier
from linkwatch.probes.base import (
    DnsProbe,
    HttpProbe,
    MonitoringSnapshot,
    NetworkProvider,
    PingProbe,
    WifiProvider,
)

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)


@dataclass
class ProbeSet:
    wifi: WifiProvider
    network: NetworkProvider
    ping: PingProbe
    dns: DnsProbe
    http: HttpProbe


def _create_probes(mode: str, cfg: Settings) -> ProbeSet:
    """Factory: instantiate the configured probe backend."""
    if mode == "mock":
        from linkwatch.probes.mock import (
            MockDnsProbe,
            MockHttpProbe,
            MockNetworkProvider,
            MockPingProbe,
            MockWifiProvider,
        )

        return ProbeSet(
            wifi=MockWifiProvider(),
            network=MockNetworkProvider(),
            ping=MockPingProbe(),
            dns=MockDnsProbe(),
            http=MockHttpProbe(),
        )
    if mode != "system":
        logger.warning("Unknown probe mode '%s', using system probes", mode)

    from linkwatch.probes.http_check import HttpxProbe
    from linkwatch.probes.network import PsutilNetworkProvider
    from linkwatch.probes.ping import SystemPingProbe
    from linkwatch.probes.resolver import ResolverDnsProbe
    from linkwatch.probes.wifi import NmcliWifiProvider

    return ProbeSet(
        wifi=NmcliWifiProvider(interface=cfg.wifi_interface),
        network=PsutilNetworkProvider(interface=cfg.wifi_interface),
        ping=SystemPingProbe(),
        dns=ResolverDnsProbe(),
        http=HttpxProbe(),
    )


def build_orchestrator(cfg: Settings, repository: HistoryRepository, app: FastAPI) -> MonitoringOrchestrator:
    """Wire one orchestrator with its own alert engine and roaming detector."""
    probes = _create_probes(cfg.probe_mode, cfg)
    alerts: Broadcaster[AlertEvent] = app.state.alerts
    return MonitoringOrchestrator(
        config=cfg,
        wifi_provider=probes.wifi,
        network_provider=probes.network,
        ping_probe=probes.ping,
        dns_probe=probes.dns,
        http_probe=probes.http,
        repository=repository,
        alert_engine=AlertEngine(cfg, repository, create_notifier(cfg), alerts),
        roaming_detector=RoamingDetector(repository, alerts),
        snapshots=app.state.snapshots,
    )


async def _start_services(app: FastAPI, cfg: Settings | None = None) -> None:
    cfg = cfg or load_config()
    repository: HistoryRepository = app.state.repository

    orchestrator = build_orchestrator(cfg, repository, app)
    await orchestrator.start()
    retention = DataRetentionService(cfg, repository)
    await retention.start()

    app.state.orchestrator = orchestrator
    app.state.retention = retention
    logger.info("Monitoring started (mode=%s)", cfg.probe_mode)


async def _stop_services(app: FastAPI) -> None:
    if getattr(app.state, "orchestrator", None):
        await app.state.orchestrator.stop()
    if getattr(app.state, "retention", None):
        await app.state.retention.stop()


async def restart_monitoring(app: FastAPI) -> None:
    """Restart monitoring with fresh configuration.

    The configuration is loaded before anything is stopped, so an invalid
    .env leaves the running services untouched.
    """
    cfg = load_config()
    await _stop_services(app)
    await _start_services(app, cfg)
    logger.info("Monitoring restarted")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application startup/shutdown lifecycle."""
    # Import models to register them with SQLModel before init_db()
    import linkwatch.history.models  # noqa: F401

    database.init_db()
    logger.info("Database initialized")

    app.state.repository = HistoryRepository(database.engine)
    app.state.snapshots = Broadcaster[MonitoringSnapshot]("snapshots")
    app.state.alerts = Broadcaster[AlertEvent]("alerts")

    await _start_services(app)

    yield

    await _stop_services(app)
    logger.info("Monitoring stopped")


app = FastAPI(
    title="LinkWatch",
    description="Home Wi-Fi and internet link monitoring",
    version="0.1.0",
    lifespan=lifespan,
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Content-Security-Policy"] = "default-src 'none'"
        return response


class BasicAuthMiddleware(BaseHTTPMiddleware):
    """HTTP Basic Authentication for everything except /health."""

    def __init__(self, app, username: str, password: str):
        super().__init__(app)
        self.username = username
        self.password = password

    async def dispatch(self, request, call_next):
        if request.url.path == "/health":
            return await call_next(request)

        auth_header = request.headers.get("Authorization", "")
        if not credentials_match(auth_header, self.username, self.password):
            return self._unauthorized_response()

        return await call_next(request)

    def _unauthorized_response(self) -> Response:
        return Response(
            content="Unauthorized",
            status_code=401,
            headers={"WWW-Authenticate": 'Basic realm="LinkWatch"'},
        )


app.add_middleware(SecurityHeadersMiddleware)

if settings.auth_password:
    app.add_middleware(
        BasicAuthMiddleware, username=settings.auth_username, password=settings.auth_password
    )
    logger.info("HTTP Basic Auth enabled")


from linkwatch.api.routes import router as api_router  # noqa: E402

app.include_router(api_router)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


def main() -> None:
    import uvicorn

    logger.info("Starting LinkWatch on %s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
