import pytest
from conftest import FakeAdapter

from modelcheck.core.config import Settings
from modelcheck.models.enums import Provider
from modelcheck.services.catalog_cache import InMemoryCatalogCache
from modelcheck.services.catalog_service import CatalogService
from modelcheck.workers import catalog_sync


@pytest.mark.asyncio
async def test_refresh_job_forces_a_fetch(monkeypatch):
    openai = FakeAdapter(Provider.OPENAI, ["gpt-4o"])
    catalog = CatalogService(
        adapters={Provider.OPENAI: openai, Provider.ANTHROPIC: FakeAdapter(Provider.ANTHROPIC)},
        cache=InMemoryCatalogCache(),
    )
    monkeypatch.setattr(catalog_sync, "get_settings", lambda: Settings(openai_api_key="sk", anthropic_api_key=""))

    first = await catalog_sync.refresh_catalog_job({"catalog": catalog})
    second = await catalog_sync.refresh_catalog_job({"catalog": catalog})

    assert len(openai.calls) == 2
    assert first == {"ok": True, "total_models": 1, "errors": [], "skipped": {"anthropic": "no credential"}}
    assert second["total_models"] == 1


def test_worker_runs_refresh_hourly():
    assert catalog_sync.WorkerSettings.functions == [catalog_sync.refresh_catalog_job]
    assert len(catalog_sync.WorkerSettings.cron_jobs) == 1
