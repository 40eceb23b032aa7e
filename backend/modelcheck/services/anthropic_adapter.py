from __future__ import annotations

import re
from datetime import UTC, datetime

import httpx

from modelcheck.models.enums import ModelType, Provider
from modelcheck.services.providers_base import DiscoveredModel, DiscoveryAdapter, parse_iso_timestamp

# Retired families the API may still list.
EXCLUDE_PATTERNS = (
    re.compile(r"^claude-2"),
    re.compile(r"^claude-instant"),
)

_DATE_SUFFIX = re.compile(r"^(.+)-(\d{8})$")


def extract_base_model_name(model_id: str) -> str:
    """claude-sonnet-4-20250514 -> claude-sonnet-4"""
    match = _DATE_SUFFIX.match(model_id)
    return match.group(1) if match else model_id


def extract_date_suffix(model_id: str) -> str | None:
    """claude-sonnet-4-20250514 -> 20250514"""
    match = _DATE_SUFFIX.match(model_id)
    return match.group(2) if match else None


def release_date(model_id: str) -> datetime | None:
    suffix = extract_date_suffix(model_id)
    if suffix is None:
        return None
    try:
        return datetime.strptime(suffix, "%Y%m%d").replace(tzinfo=UTC)
    except ValueError:
        return None


class AnthropicAdapter(DiscoveryAdapter):
    provider = Provider.ANTHROPIC
    exclude_patterns = EXCLUDE_PATTERNS

    def headers(self, api_key: str | None) -> dict[str, str]:
        return {
            "x-api-key": api_key or "",
            "anthropic-version": self._settings.anthropic_version,
        }

    def model_url(self, model_id: str) -> str:
        return f"{self._settings.anthropic_base_url}/models/{model_id}"

    async def fetch_all(self, client: httpx.AsyncClient, api_key: str | None) -> list[dict]:
        url = f"{self._settings.anthropic_base_url}/models"
        items: list[dict] = []
        after_id: str | None = None
        seen: set[str] = set()
        while True:
            params = {"limit": str(self._settings.discovery_page_size)}
            if after_id:
                params["after_id"] = after_id
            payload = await self._get_json(client, url, api_key, params=params)
            items.extend(payload.get("data") or [])
            after_id = payload.get("last_id")
            if not payload.get("has_more") or not after_id:
                break
            self._remember_cursor(seen, after_id)
        return items

    def model_id(self, item: dict) -> str | None:
        return item.get("id")

    def to_model(self, model_id: str, item: dict) -> DiscoveredModel:
        # Anthropic only serves messages models. Older listings omit the
        # display name and creation time; the dated id still carries both.
        return DiscoveredModel(
            id=model_id,
            provider=self.provider,
            display_name=item.get("display_name") or extract_base_model_name(model_id),
            model_type=ModelType.CHAT,
            created=parse_iso_timestamp(item.get("created_at")) or release_date(model_id),
            owned_by="Anthropic",
        )
