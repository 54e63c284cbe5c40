"""Tests for the periodic retention purge."""

import asyncio
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from linkwatch.config import Settings
from linkwatch.history.repository import HistoryRepository
from linkwatch.monitoring.events import AlertEvent, Severity
from linkwatch.monitoring.retention import DataRetentionService


@pytest.mark.asyncio
async def test_purge_once_uses_configured_windows():
    repository = MagicMock(spec=HistoryRepository)
    repository.cleanup_old_data.return_value = 12
    cfg = Settings(raw_data_retention_days=3, alert_retention_days=30)

    removed = await DataRetentionService(cfg, repository).purge_once()

    assert removed == 12
    repository.cleanup_old_data.assert_called_once_with(3, 30)


@pytest.mark.asyncio
async def test_purge_removes_old_alerts(repository: HistoryRepository):
    old = datetime.now(UTC) - timedelta(days=400)
    repository.save_alert(AlertEvent(alert_type="SignalLow", severity=Severity.warning, message="m", timestamp=old))
    cfg = Settings(alert_retention_days=365)

    assert await DataRetentionService(cfg, repository).purge_once() == 1


@pytest.mark.asyncio
async def test_loop_survives_errors_and_stops():
    repository = MagicMock(spec=HistoryRepository)
    calls = 0

    def cleanup(raw_days: int, alert_days: int) -> int:
        nonlocal calls
        calls += 1
        if calls == 1:
            raise RuntimeError("locked")
        return 0

    repository.cleanup_old_data.side_effect = cleanup
    cfg = Settings(retention_interval_seconds=0)
    service = DataRetentionService(cfg, repository, initial_delay=0)

    await service.start()
    for _ in range(100):
        if repository.cleanup_old_data.call_count >= 2:
            break
        await asyncio.sleep(0.01)
    await service.stop()

    assert repository.cleanup_old_data.call_count >= 2
