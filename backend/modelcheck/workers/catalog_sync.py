from __future__ import annotations

from arq import cron
from arq.connections import RedisSettings

from modelcheck.core.config import get_settings
from modelcheck.services.catalog_service import CatalogService, get_catalog_service

settings = get_settings()


async def refresh_catalog_job(ctx: dict) -> dict:
    catalog: CatalogService = ctx.get("catalog") or get_catalog_service()
    snapshot = await catalog.discover_all(get_settings().api_keys, force_refresh=True)
    return {
        "ok": not snapshot.errors,
        "total_models": snapshot.total_models,
        "errors": snapshot.errors,
        "skipped": {provider.value: reason for provider, reason in snapshot.skipped.items()},
    }


class WorkerSettings:
    redis_settings = RedisSettings.from_dsn(settings.redis_url)
    functions = [refresh_catalog_job]
    cron_jobs = [cron(refresh_catalog_job, minute=0, run_at_startup=True)]
    max_jobs = 4
