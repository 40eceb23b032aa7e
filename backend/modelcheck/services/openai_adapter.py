from __future__ import annotations

import re

import httpx

from modelcheck.models.enums import ModelType, Provider
from modelcheck.services.providers_base import DiscoveredModel, DiscoveryAdapter, parse_unix_timestamp

# Production model families; fine-tunes and internal snapshots are left out.
INCLUDE_PREFIXES = (
    "gpt-",
    "o1",
    "o3",
    "o4-",
    "dall-e-",
    "gpt-image",
    "chatgpt-",
    "text-",
    "whisper-",
    "tts-",
)

EXCLUDE_PATTERNS = (
    re.compile(r"^ft:"),
    re.compile(r"^ft-"),
    re.compile(r"^davinci"),
    re.compile(r"^curie"),
    re.compile(r"^babbage"),
    re.compile(r"^ada"),
    re.compile(r"moderation", re.IGNORECASE),
    re.compile(r"-instruct$"),
)

_REASONING_ID = re.compile(r"^o\d(?:-|$)")


def infer_model_type(model_id: str) -> ModelType:
    # The listing carries no capability field, so the id is all there is.
    lowered = model_id.lower()
    if "dall-e" in lowered or "gpt-image" in lowered:
        return ModelType.IMAGE
    if "realtime" in lowered:
        return ModelType.REALTIME
    if "embedding" in lowered:
        return ModelType.EMBEDDING
    if "whisper" in lowered or "transcribe" in lowered:
        return ModelType.AUDIO
    if "tts" in lowered:
        return ModelType.TTS
    if _REASONING_ID.match(lowered):
        return ModelType.RESPONSES
    if lowered.startswith(("gpt-", "chatgpt-")):
        return ModelType.CHAT
    return ModelType.UNKNOWN


class OpenAIAdapter(DiscoveryAdapter):
    provider = Provider.OPENAI
    include_prefixes = INCLUDE_PREFIXES
    exclude_patterns = EXCLUDE_PATTERNS

    def headers(self, api_key: str | None) -> dict[str, str]:
        return {"Authorization": f"Bearer {api_key}"}

    def model_url(self, model_id: str) -> str:
        return f"{self._settings.openai_base_url}/models/{model_id}"

    async def fetch_all(self, client: httpx.AsyncClient, api_key: str | None) -> list[dict]:
        url = f"{self._settings.openai_base_url}/models"
        items: list[dict] = []
        params: dict[str, str] = {}
        seen: set[str] = set()
        while True:
            payload = await self._get_json(client, url, api_key, params=params or None)
            page = payload.get("data") or []
            items.extend(page)
            # The endpoint usually answers in one page; honour the cursor when present.
            if not payload.get("has_more") or not page:
                break
            last_id = payload.get("last_id") or page[-1].get("id")
            if not last_id:
                break
            self._remember_cursor(seen, last_id)
            params = {"after": last_id}
        return items

    def model_id(self, item: dict) -> str | None:
        return item.get("id")

    def to_model(self, model_id: str, item: dict) -> DiscoveredModel:
        return DiscoveredModel(
            id=model_id,
            provider=self.provider,
            display_name=model_id,
            model_type=infer_model_type(model_id),
            created=parse_unix_timestamp(item.get("created")),
            owned_by=item.get("owned_by"),
        )
