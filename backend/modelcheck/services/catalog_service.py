from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterable, Mapping
from dataclasses import replace
from datetime import UTC, datetime
from functools import lru_cache

from modelcheck.core.best_effort import best_effort
from modelcheck.core.config import get_settings
from modelcheck.models.enums import Provider
from modelcheck.services.catalog_cache import CatalogCache, DiscoveryResults, build_catalog_cache, cache_key
from modelcheck.services.provider_service import provider_registry
from modelcheck.services.providers_base import DiscoveryAdapter, ProviderDiscoveryResult

log = logging.getLogger(__name__)

NO_CREDENTIAL = "no credential"
NO_API_KEY_CONFIGURED = "No API key configured"


def _for_caller(snapshot: DiscoveryResults, skipped: dict[Provider, str]) -> DiscoveryResults:
    # Callers get their own containers; the cached snapshot is shared.
    return replace(
        snapshot,
        results=[replace(result, models=list(result.models)) for result in snapshot.results],
        errors=list(snapshot.errors),
        skipped=dict(skipped),
    )


class CatalogService:
    """Fans discovery out over every configured provider and caches the merged snapshot.

    Snapshots are cached per attempted provider set. Concurrent misses for the
    same set share one in-flight fetch; ``force_refresh`` always fetches and
    overwrites the cached entry.
    """

    def __init__(
        self,
        adapters: Mapping[Provider, DiscoveryAdapter] | None = None,
        cache: CatalogCache | None = None,
        ttl_seconds: int | None = None,
    ) -> None:
        settings = get_settings()
        self._adapters = dict(adapters) if adapters is not None else dict(provider_registry.adapters)
        self._cache = cache if cache is not None else build_catalog_cache(settings)
        self._ttl_seconds = settings.catalog_cache_seconds if ttl_seconds is None else ttl_seconds
        self._inflight: dict[str, asyncio.Task[DiscoveryResults]] = {}

    @property
    def providers(self) -> list[Provider]:
        return list(self._adapters)

    def needs_credential(self, provider: Provider) -> bool:
        adapter = self._adapters.get(provider)
        return adapter is None or adapter.requires_credential

    async def discover_all(
        self,
        keys_by_provider: Mapping[Provider, str],
        *,
        providers: Iterable[Provider] | None = None,
        force_refresh: bool = False,
    ) -> DiscoveryResults:
        scope = list(providers) if providers is not None else self.providers
        attempted: dict[Provider, str | None] = {}
        skipped: dict[Provider, str] = {}
        for provider in scope:
            adapter = self._adapters.get(provider)
            if adapter is None:
                skipped[provider] = "discovery not supported"
                continue
            api_key = keys_by_provider.get(provider) or None
            if api_key is None and adapter.requires_credential:
                skipped[provider] = NO_CREDENTIAL
                continue
            attempted[provider] = api_key

        key = cache_key(attempted)
        if force_refresh:
            snapshot = await self._fetch(key, attempted)
            return _for_caller(snapshot, skipped)

        cached = await best_effort(self._cache.get(key), what="catalog cache read")
        if cached is not None:
            return _for_caller(cached, skipped)

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.create_task(self._fetch(key, attempted))
            self._inflight[key] = task
            task.add_done_callback(lambda done, k=key: self._forget(k, done))
        snapshot = await asyncio.shield(task)
        return _for_caller(snapshot, skipped)

    def _forget(self, key: str, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    async def _fetch(self, key: str, attempted: Mapping[Provider, str | None]) -> DiscoveryResults:
        started = time.perf_counter()
        timestamp = datetime.now(UTC)
        providers = list(attempted)
        outcomes = await asyncio.gather(
            *(self._adapters[provider].discover(attempted[provider]) for provider in providers),
            return_exceptions=True,
        )

        results: list[ProviderDiscoveryResult] = []
        for provider, outcome in zip(providers, outcomes):
            if isinstance(outcome, ProviderDiscoveryResult):
                results.append(outcome)
            elif isinstance(outcome, Exception):
                log.exception("[Discovery] %s adapter raised", provider.value, exc_info=outcome)
                results.append(ProviderDiscoveryResult.failure(provider, str(outcome) or type(outcome).__name__))
            else:
                raise outcome

        total_models = sum(len(result.models) for result in results if result.success)
        errors = [f"{result.provider.value}: {result.error}" for result in results if not result.success and result.error]
        snapshot = DiscoveryResults(results=results, total_models=total_models, errors=errors, timestamp=timestamp)

        log.info(
            "[Discovery] found %d models from %d providers in %dms",
            total_models,
            len(providers),
            round((time.perf_counter() - started) * 1000),
        )
        if errors:
            log.warning("[Discovery] errors: %s", "; ".join(errors))

        await best_effort(self._cache.set(key, snapshot, self._ttl_seconds), what="catalog cache write")
        return snapshot

    async def discover_provider_models(self, provider: Provider, api_key: str | None) -> ProviderDiscoveryResult:
        adapter = self._adapters.get(provider)
        if adapter is None:
            return ProviderDiscoveryResult.failure(provider, f"Discovery not supported for provider: {provider.value}")
        if not api_key and adapter.requires_credential:
            return ProviderDiscoveryResult.failure(provider, NO_API_KEY_CONFIGURED)
        try:
            return await adapter.discover(api_key or None)
        except Exception as exc:
            log.exception("[Discovery] %s adapter raised", provider.value)
            return ProviderDiscoveryResult.failure(provider, str(exc) or type(exc).__name__)

    async def verify_model(self, provider: Provider, model_id: str, api_key: str | None) -> bool:
        adapter = self._adapters.get(provider)
        if adapter is None:
            return False
        return await adapter.verify(api_key, model_id)


@lru_cache
def get_catalog_service() -> CatalogService:
    return CatalogService()
