from __future__ import annotations

from collections.abc import Mapping

import httpx

from modelcheck.models.enums import Provider
from modelcheck.services.anthropic_adapter import AnthropicAdapter
from modelcheck.services.gemini_adapter import GeminiAdapter
from modelcheck.services.openai_adapter import OpenAIAdapter
from modelcheck.services.openrouter_adapter import OpenRouterAdapter
from modelcheck.services.providers_base import DiscoveryAdapter

ALL_PROVIDERS = [Provider.OPENAI, Provider.ANTHROPIC, Provider.GEMINI, Provider.OPENROUTER]


class ProviderRegistry:
    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._adapters: dict[Provider, DiscoveryAdapter] = {
            Provider.OPENAI: OpenAIAdapter(transport),
            Provider.ANTHROPIC: AnthropicAdapter(transport),
            Provider.GEMINI: GeminiAdapter(transport),
            Provider.OPENROUTER: OpenRouterAdapter(transport),
        }

    @property
    def adapters(self) -> dict[Provider, DiscoveryAdapter]:
        return self._adapters


def discoverable_providers() -> list[Provider]:
    return list(ALL_PROVIDERS)


def providers_with_keys(keys: Mapping[Provider, str]) -> list[Provider]:
    return [provider for provider in ALL_PROVIDERS if keys.get(provider)]


provider_registry = ProviderRegistry()
