"""REST API endpoints and the live update websocket."""

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, WebSocket, WebSocketDisconnect, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import Response
from pydantic import ValidationError

from linkwatch.api.auth import credentials_match
from linkwatch.config import Settings, load_config, save_config, settings
from linkwatch.events import Subscription
from linkwatch.geo.geoip import GeoIpClient
from linkwatch.geo.hostname import ParsedLocation, parse
from linkwatch.geo.traceroute import TracerouteHop, locate_hops, run_traceroute, validate_target
from linkwatch.history.export import EXPORTERS
from linkwatch.history.models import (
    AlertRecord,
    DnsSample,
    PingSample,
    RoamingRecord,
    WifiSample,
)
from linkwatch.history.repository import HistoryRepository
from linkwatch.monitoring.orchestrator import MonitoringOrchestrator
from linkwatch.probes.base import ConnectionStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

_DEFAULT_WINDOW = timedelta(hours=24)


def get_repository(request: Request) -> HistoryRepository:
    return request.app.state.repository


def get_orchestrator(request: Request) -> MonitoringOrchestrator | None:
    return getattr(request.app.state, "orchestrator", None)


def time_range(start: datetime | None = None, end: datetime | None = None) -> tuple[datetime, datetime]:
    """Resolve optional query bounds; defaults to the last 24 hours."""
    end = end or datetime.now(UTC)
    start = start or end - _DEFAULT_WINDOW
    # Compare naive values as UTC
    if start.tzinfo is None:
        start = start.replace(tzinfo=UTC)
    if end.tzinfo is None:
        end = end.replace(tzinfo=UTC)
    if start > end:
        raise HTTPException(status_code=400, detail="start must not be after end")
    return start, end


# --- Live status ---


@router.get("/status")
def current_status(
    orchestrator: MonitoringOrchestrator | None = Depends(get_orchestrator),
) -> dict[str, Any]:
    snapshot = orchestrator.latest if orchestrator else None
    return {
        "status": snapshot.overall_status if snapshot else ConnectionStatus.unknown,
        "running": orchestrator.running if orchestrator else False,
        "cycle_count": orchestrator.cycle_count if orchestrator else 0,
        "snapshot": snapshot,
    }


# --- History ---


@router.get("/pings")
def ping_history(
    target_label: str | None = None,
    window: tuple[datetime, datetime] = Depends(time_range),
    repository: HistoryRepository = Depends(get_repository),
) -> list[PingSample]:
    return repository.get_ping_results(*window, target_label=target_label)


@router.get("/wifi")
def wifi_history(
    window: tuple[datetime, datetime] = Depends(time_range),
    repository: HistoryRepository = Depends(get_repository),
) -> list[WifiSample]:
    return repository.get_wifi_snapshots(*window)


@router.get("/dns")
def dns_history(
    window: tuple[datetime, datetime] = Depends(time_range),
    repository: HistoryRepository = Depends(get_repository),
) -> list[DnsSample]:
    return repository.get_dns_results(*window)


@router.get("/alerts")
def alert_history(
    window: tuple[datetime, datetime] = Depends(time_range),
    repository: HistoryRepository = Depends(get_repository),
) -> list[AlertRecord]:
    return repository.get_alerts(*window)


@router.post("/alerts/{alert_id}/ack")
def acknowledge(
    alert_id: int,
    repository: HistoryRepository = Depends(get_repository),
) -> dict[str, int | bool]:
    if not repository.acknowledge_alert(alert_id):
        raise HTTPException(status_code=404, detail="Alert not found")
    return {"id": alert_id, "acknowledged": True}


@router.get("/roaming")
def roaming_history(
    window: tuple[datetime, datetime] = Depends(time_range),
    repository: HistoryRepository = Depends(get_repository),
) -> list[RoamingRecord]:
    return repository.get_roaming_events(*window)


# --- Diagnostics ---


@router.get("/geo")
def geolocate(hostname: str) -> ParsedLocation:
    location = parse(hostname)
    if location is None:
        raise HTTPException(status_code=404, detail="No location found in hostname")
    return location


def get_geoip() -> GeoIpClient | None:
    cfg = load_config()
    return GeoIpClient(cfg.geoip_url) if cfg.geoip_enabled else None


@router.get("/traceroute/{target}")
async def traceroute(
    target: str,
    max_hops: int = Query(30, ge=1, le=64),
    timeout_ms: int = Query(3000, ge=500, le=10000),
    geoip: GeoIpClient | None = Depends(get_geoip),
) -> list[TracerouteHop]:
    try:
        validate_target(target)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    try:
        hops = [hop async for hop in run_traceroute(target, max_hops=max_hops, timeout_ms=timeout_ms)]
    except OSError as e:
        raise HTTPException(status_code=503, detail=f"traceroute unavailable: {e}") from e
    if geoip is not None:
        hops = await locate_hops(hops, geoip)
    return hops


# --- Export ---


@router.get("/export/{kind}")
def export(
    kind: str,
    window: tuple[datetime, datetime] = Depends(time_range),
    repository: HistoryRepository = Depends(get_repository),
) -> Response:
    if kind not in EXPORTERS:
        raise HTTPException(status_code=404, detail=f"Unknown export kind: {kind}")
    render, media_type, filename = EXPORTERS[kind]
    return Response(
        content=render(repository, *window),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# --- Settings ---


def _public_settings() -> dict[str, Any]:
    return load_config().model_dump(mode="json", exclude={"auth_password"})


@router.get("/settings")
def read_settings() -> dict[str, Any]:
    return _public_settings()


@router.put("/settings")
async def update_settings(values: dict[str, Any], request: Request) -> dict[str, Any]:
    unknown = set(values) - set(Settings.model_fields)
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown settings: {sorted(unknown)}")

    # Validate the merged result before touching .env or the running loop
    try:
        Settings(**{**load_config().model_dump(), **values})
    except ValidationError as e:
        errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        raise HTTPException(status_code=400, detail=errors) from e
    save_config(values)

    # Avoid circular import: main imports routes
    from linkwatch.main import restart_monitoring

    await restart_monitoring(request.app)
    return _public_settings()


# --- Live updates ---


def get_basic_auth() -> tuple[str, str] | None:
    """Credentials the websocket must present; None when auth is off."""
    if not settings.auth_password:
        return None
    return settings.auth_username, settings.auth_password


async def _forward(websocket: WebSocket, kind: str, subscription: Subscription[Any]) -> None:
    async for item in subscription:
        await websocket.send_json({"type": kind, "data": jsonable_encoder(item)})


async def _until_closed(websocket: WebSocket) -> None:
    # Clients only listen; reading surfaces the disconnect
    while True:
        await websocket.receive_text()


@router.websocket("/ws")
async def live_updates(
    websocket: WebSocket,
    credentials: tuple[str, str] | None = Depends(get_basic_auth),
) -> None:
    """Push every published snapshot and alert to the client as JSON.

    The HTTP middleware does not see websocket handshakes, so Basic Auth is
    checked here.
    """
    if credentials is not None and not credentials_match(
        websocket.headers.get("authorization", ""), *credentials
    ):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    # Subscribe before accepting so nothing published after the handshake is missed
    state = websocket.app.state
    snapshots = state.snapshots.subscribe()
    alerts = state.alerts.subscribe()
    tasks: list[asyncio.Task[None]] = []
    try:
        await websocket.accept()
        logger.info("Live update client connected")
        tasks = [
            asyncio.create_task(_forward(websocket, "snapshot", snapshots)),
            asyncio.create_task(_forward(websocket, "alert", alerts)),
            asyncio.create_task(_until_closed(websocket)),
        ]
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                logger.warning("Live update stream ended: %s", exc)
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        snapshots.close()
        alerts.close()
        logger.info("Live update client disconnected")
