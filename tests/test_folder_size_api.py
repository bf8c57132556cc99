"""
Tests for the HTTP endpoints, called directly with their dependencies.
"""

from datetime import datetime
from unittest.mock import Mock

import pytest

from folder_size_agent.api.folder_size import get_folder_size, router
from folder_size_agent.main import app, health, root
from folder_size_agent.models import RunOutcome, RunReport, SizeMeasurement
from folder_size_agent.services.folder_size.result_cache import ResultCache
from folder_size_agent.services.folder_size.scheduler import FolderSizeScheduler

TB = 1024**4


@pytest.mark.asyncio
async def test_folder_size_before_first_run_is_empty():
    assert await get_folder_size(result_cache=ResultCache()) == {}


@pytest.mark.asyncio
async def test_folder_size_serves_latest_measurement():
    cache = ResultCache()
    cache.publish(SizeMeasurement.from_total_size(1_000_000_000_000, 6 * TB))

    payload = await get_folder_size(result_cache=cache)

    assert set(payload) == {"current_size_bytes", "max_size_bytes", "used_percentage"}
    assert payload["current_size_bytes"] == 1_000_000_000_000
    assert payload["max_size_bytes"] == 6 * TB
    assert payload["used_percentage"] == pytest.approx(15.16, abs=0.01)


@pytest.mark.asyncio
async def test_failed_run_keeps_serving_last_measurement():
    cache = ResultCache()
    cache.publish(SizeMeasurement.from_total_size(500, 1000))
    cache.record_run(RunReport(outcome=RunOutcome.FAILED, started_at=datetime.now(), error="TransportError: x"))

    payload = await get_folder_size(result_cache=cache)

    assert payload["used_percentage"] == pytest.approx(50.0)


@pytest.mark.asyncio
async def test_health_reports_last_run():
    cache = ResultCache()
    cache.record_run(RunReport(outcome=RunOutcome.FAILED, started_at=datetime.now(), error="AuthenticationError: x"))
    scheduler = Mock(spec=FolderSizeScheduler)
    scheduler.is_running = True
    scheduler.run_in_progress = False

    result = await health(result_cache=cache, scheduler=scheduler)

    assert result["status"] == "healthy"
    assert result["scheduler_running"] is True
    assert result["run_in_progress"] is False
    assert result["has_measurement"] is False
    assert result["last_run"]["outcome"] == RunOutcome.FAILED


@pytest.mark.asyncio
async def test_root():
    assert (await root())["status"] == "ok"


def test_routes_are_registered():
    assert app.url_path_for("get_folder_size") == "/api/folder-size"
    assert app.url_path_for("health") == "/health"
    assert app.url_path_for("root") == "/"
    assert router.prefix == "/api"
