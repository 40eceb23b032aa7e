from __future__ import annotations

import re

import httpx

from modelcheck.models.enums import ModelType, Provider
from modelcheck.services.providers_base import DiscoveredModel, DiscoveryAdapter, parse_unix_timestamp

# Router meta-models (openrouter/auto) are not callable models in their own right.
EXCLUDE_PATTERNS = (re.compile(r"^openrouter/"),)


def infer_model_type(model_id: str, architecture: dict) -> ModelType:
    outputs = architecture.get("output_modalities") or []
    if not outputs:
        modality = architecture.get("modality") or ""
        if "->" in modality:
            outputs = modality.split("->", 1)[1].split("+")
    if "image" in outputs:
        return ModelType.IMAGE
    if "audio" in outputs and "text" not in outputs:
        return ModelType.TTS
    if "text" in outputs:
        return ModelType.CHAT

    lowered = model_id.lower()
    if "embedding" in lowered:
        return ModelType.EMBEDDING
    if "image" in lowered:
        return ModelType.IMAGE
    return ModelType.UNKNOWN


class OpenRouterAdapter(DiscoveryAdapter):
    provider = Provider.OPENROUTER
    exclude_patterns = EXCLUDE_PATTERNS
    requires_credential = False

    def headers(self, api_key: str | None) -> dict[str, str]:
        return {"Authorization": f"Bearer {api_key}"} if api_key else {}

    def model_url(self, model_id: str) -> str:
        return f"{self._settings.openrouter_base_url}/models/{model_id}/endpoints"

    async def fetch_all(self, client: httpx.AsyncClient, api_key: str | None) -> list[dict]:
        # Single page: the public listing returns the whole catalogue.
        payload = await self._get_json(client, f"{self._settings.openrouter_base_url}/models", api_key)
        return payload.get("data") or []

    def model_id(self, item: dict) -> str | None:
        return item.get("id")

    def to_model(self, model_id: str, item: dict) -> DiscoveredModel:
        return DiscoveredModel(
            id=model_id,
            provider=self.provider,
            display_name=item.get("name") or model_id,
            model_type=infer_model_type(model_id, item.get("architecture") or {}),
            created=parse_unix_timestamp(item.get("created")),
            owned_by=model_id.split("/", 1)[0] if "/" in model_id else None,
        )
