from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime

import httpx

from modelcheck.core.config import get_settings
from modelcheck.models.enums import ModelType, Provider

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiscoveredModel:
    id: str
    provider: Provider
    display_name: str
    model_type: ModelType = ModelType.UNKNOWN
    created: datetime | None = None
    owned_by: str | None = None


@dataclass
class ProviderDiscoveryResult:
    provider: Provider
    success: bool
    models: list[DiscoveredModel] = field(default_factory=list)
    error: str | None = None
    discovered_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def failure(cls, provider: Provider, error: str, discovered_at: datetime | None = None) -> ProviderDiscoveryResult:
        return cls(
            provider=provider,
            success=False,
            models=[],
            error=error,
            discovered_at=discovered_at or datetime.now(UTC),
        )


class DiscoveryError(Exception):
    """Raised inside an adapter when a listing cannot be retrieved or parsed."""


class DiscoveryAdapter(ABC):
    """Lists one provider's models and converts them to DiscoveredModel.

    Subclasses supply the paging loop (``fetch_all``), the raw-item accessors
    and the type inference; ``discover`` owns the fetch -> filter -> map
    ordering and turns every failure into a failed result.
    """

    provider: Provider
    include_prefixes: tuple[str, ...] = ()
    exclude_patterns: tuple[re.Pattern[str], ...] = ()
    requires_credential: bool = True

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport
        self._settings = get_settings()

    def _client(self, timeout: float | None = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout or self._settings.discovery_timeout_seconds,
            transport=self._transport,
        )

    @abstractmethod
    def headers(self, api_key: str | None) -> dict[str, str]:
        raise NotImplementedError

    @abstractmethod
    async def fetch_all(self, client: httpx.AsyncClient, api_key: str | None) -> list[dict]:
        """Return every raw listing entry, following the provider's pagination."""
        raise NotImplementedError

    @abstractmethod
    def model_id(self, item: dict) -> str | None:
        raise NotImplementedError

    @abstractmethod
    def to_model(self, model_id: str, item: dict) -> DiscoveredModel:
        raise NotImplementedError

    @abstractmethod
    def model_url(self, model_id: str) -> str:
        raise NotImplementedError

    def is_included(self, model_id: str) -> bool:
        lowered = model_id.lower()
        if self.include_prefixes and not lowered.startswith(self.include_prefixes):
            return False
        return not any(pattern.search(model_id) for pattern in self.exclude_patterns)

    def _remember_cursor(self, seen: set[str], cursor: str) -> None:
        # A provider that hands back a cursor twice would page forever.
        if cursor in seen:
            raise DiscoveryError(f"{self.provider.label} API pagination cursor repeated: {cursor}")
        seen.add(cursor)

    async def _get_json(self, client: httpx.AsyncClient, url: str, api_key: str | None, params=None) -> dict:
        response = await client.get(url, headers=self.headers(api_key), params=params)
        if response.status_code >= 400:
            raise DiscoveryError(
                f"{self.provider.label} API error: {response.status_code} - {response.text[:500]}"
            )
        payload = response.json()
        if not isinstance(payload, dict):
            raise DiscoveryError(f"{self.provider.label} API returned an unexpected payload")
        return payload

    async def discover(self, api_key: str | None) -> ProviderDiscoveryResult:
        discovered_at = datetime.now(UTC)
        try:
            async with self._client() as client:
                raw_items = await self.fetch_all(client, api_key)

            models: list[DiscoveredModel] = []
            for item in raw_items:
                model_id = self.model_id(item)
                if not model_id or not self.is_included(model_id):
                    continue
                models.append(self.to_model(model_id, item))
        except DiscoveryError as exc:
            log.warning("[%s discovery] %s", self.provider.label, exc)
            return ProviderDiscoveryResult.failure(self.provider, str(exc), discovered_at)
        except httpx.HTTPError as exc:
            log.warning("[%s discovery] transport error: %r", self.provider.label, exc)
            return ProviderDiscoveryResult.failure(
                self.provider, f"Could not reach the {self.provider.label} API", discovered_at
            )
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            log.warning("[%s discovery] malformed listing: %r", self.provider.label, exc)
            return ProviderDiscoveryResult.failure(
                self.provider, f"{self.provider.label} API returned a malformed model listing", discovered_at
            )

        models.sort(key=lambda m: m.id, reverse=True)
        log.info("[%s discovery] found %d models", self.provider.label, len(models))
        return ProviderDiscoveryResult(
            provider=self.provider,
            success=True,
            models=models,
            discovered_at=discovered_at,
        )

    async def verify(self, api_key: str | None, model_id: str) -> bool:
        """Return False only when the provider reports the model as not found."""
        try:
            async with self._client() as client:
                response = await client.get(self.model_url(model_id), headers=self.headers(api_key))
        except httpx.HTTPError as exc:
            log.warning("[%s verify] %s: transport error %r, assuming it exists", self.provider.label, model_id, exc)
            return True
        return response.status_code != 404


def parse_unix_timestamp(value) -> datetime | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return None
    return datetime.fromtimestamp(value, tz=UTC)


def parse_iso_timestamp(value) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
