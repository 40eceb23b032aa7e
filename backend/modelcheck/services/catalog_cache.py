from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from pydantic import TypeAdapter
from redis import asyncio as aioredis

from modelcheck.core.config import Settings
from modelcheck.models.enums import Provider
from modelcheck.services.providers_base import ProviderDiscoveryResult

log = logging.getLogger(__name__)


@dataclass
class DiscoveryResults:
    results: list[ProviderDiscoveryResult] = field(default_factory=list)
    total_models: int = 0
    errors: list[str] = field(default_factory=list)
    skipped: dict[Provider, str] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def result_for(self, provider: Provider) -> ProviderDiscoveryResult | None:
        for result in self.results:
            if result.provider == provider:
                return result
        return None


_snapshot_adapter = TypeAdapter(DiscoveryResults)


def cache_key(providers: Iterable[Provider]) -> str:
    return "modelcheck:catalog:" + ",".join(sorted(p.value for p in providers))


class CatalogCache(Protocol):
    async def get(self, key: str) -> DiscoveryResults | None: ...

    async def set(self, key: str, snapshot: DiscoveryResults, ttl_seconds: int) -> None: ...


class InMemoryCatalogCache:
    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[float, DiscoveryResults]] = {}

    async def get(self, key: str) -> DiscoveryResults | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, snapshot = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return snapshot

    async def set(self, key: str, snapshot: DiscoveryResults, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            self._entries.pop(key, None)
            return
        self._entries[key] = (self._clock() + ttl_seconds, snapshot)


class RedisCatalogCache:
    """Shares snapshots between API workers and the arq refresh job."""

    def __init__(self, redis_url: str) -> None:
        self._redis = aioredis.from_url(redis_url)

    async def get(self, key: str) -> DiscoveryResults | None:
        raw = await self._redis.get(key)
        if raw is None:
            return None
        return _snapshot_adapter.validate_json(raw)

    async def set(self, key: str, snapshot: DiscoveryResults, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            return
        await self._redis.setex(key, ttl_seconds, _snapshot_adapter.dump_json(snapshot))


def build_catalog_cache(settings: Settings) -> CatalogCache:
    if settings.catalog_cache_backend == "redis":
        log.info("Using Redis catalog cache")
        return RedisCatalogCache(settings.redis_url)
    return InMemoryCatalogCache()
