from __future__ import annotations

import re

import httpx

from modelcheck.models.enums import ModelType, Provider
from modelcheck.services.providers_base import DiscoveredModel, DiscoveryAdapter

INCLUDE_PREFIXES = ("gemini-", "imagen-")

EXCLUDE_PATTERNS = (
    re.compile(r"gemma", re.IGNORECASE),
    re.compile(r"^text-"),
    re.compile(r"^embedding-"),
    re.compile(r"^aqa", re.IGNORECASE),
)


def strip_model_prefix(name: str) -> str:
    """models/gemini-1.5-pro -> gemini-1.5-pro"""
    return name.removeprefix("models/")


def infer_model_type(model_id: str, methods: list[str]) -> ModelType:
    # generateContent is served by chat, tts and image-preview models alike,
    # so only the narrower methods are decisive before the id heuristics.
    if "predict" in methods or "generateImage" in methods:
        return ModelType.IMAGE
    if "embedContent" in methods or "embedText" in methods:
        return ModelType.EMBEDDING
    if "bidiGenerateContent" in methods and "generateContent" not in methods:
        return ModelType.REALTIME

    lowered = model_id.lower()
    if lowered.startswith("imagen-") or "image-generation" in lowered or "-image" in lowered:
        return ModelType.IMAGE
    if "embedding" in lowered:
        return ModelType.EMBEDDING
    if "tts" in lowered:
        return ModelType.TTS
    if "native-audio" in lowered or "live" in lowered:
        return ModelType.REALTIME
    if "generateContent" in methods:
        return ModelType.CHAT
    return ModelType.UNKNOWN


class GeminiAdapter(DiscoveryAdapter):
    provider = Provider.GEMINI
    include_prefixes = INCLUDE_PREFIXES
    exclude_patterns = EXCLUDE_PATTERNS

    def headers(self, api_key: str | None) -> dict[str, str]:
        return {"x-goog-api-key": api_key or ""}

    def model_url(self, model_id: str) -> str:
        return f"{self._settings.gemini_base_url}/models/{strip_model_prefix(model_id)}"

    async def fetch_all(self, client: httpx.AsyncClient, api_key: str | None) -> list[dict]:
        url = f"{self._settings.gemini_base_url}/models"
        items: list[dict] = []
        page_token: str | None = None
        seen: set[str] = set()
        while True:
            params = {"pageSize": str(self._settings.discovery_page_size)}
            if page_token:
                params["pageToken"] = page_token
            payload = await self._get_json(client, url, api_key, params=params)
            items.extend(payload.get("models") or [])
            page_token = payload.get("nextPageToken")
            if not page_token:
                break
            self._remember_cursor(seen, page_token)
        return items

    def model_id(self, item: dict) -> str | None:
        name = item.get("name")
        return strip_model_prefix(name) if name else None

    def to_model(self, model_id: str, item: dict) -> DiscoveredModel:
        return DiscoveredModel(
            id=model_id,
            provider=self.provider,
            display_name=item.get("displayName") or model_id,
            model_type=infer_model_type(model_id, item.get("supportedGenerationMethods") or []),
            owned_by="Google",
        )
