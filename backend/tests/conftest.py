import os

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("CATALOG_CACHE_BACKEND", "memory")
os.environ.setdefault("SENTRY_DSN", "")

from modelcheck.main import app
from modelcheck.models.enums import ModelType, Provider
from modelcheck.services.providers_base import DiscoveredModel, ProviderDiscoveryResult


class FakeAdapter:
    """Stands in for a DiscoveryAdapter; counts calls and can be told to fail."""

    def __init__(
        self,
        provider: Provider,
        model_ids: list[str] | None = None,
        *,
        error: str | None = None,
        raises: Exception | None = None,
        requires_credential: bool = True,
        missing: set[str] | None = None,
    ) -> None:
        self.provider = provider
        self.model_ids = model_ids or []
        self.error = error
        self.raises = raises
        self.requires_credential = requires_credential
        self.missing = missing or set()
        self.calls: list[str | None] = []

    async def discover(self, api_key: str | None) -> ProviderDiscoveryResult:
        self.calls.append(api_key)
        if self.raises is not None:
            raise self.raises
        if self.error is not None:
            return ProviderDiscoveryResult.failure(self.provider, self.error)
        return ProviderDiscoveryResult(
            provider=self.provider,
            success=True,
            models=[
                DiscoveredModel(id=model_id, provider=self.provider, display_name=model_id, model_type=ModelType.CHAT)
                for model_id in self.model_ids
            ],
        )

    async def verify(self, api_key: str | None, model_id: str) -> bool:
        return model_id not in self.missing


@pytest.fixture()
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
