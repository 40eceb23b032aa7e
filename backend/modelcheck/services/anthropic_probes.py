from __future__ import annotations

from modelcheck.models.enums import Provider
from modelcheck.services.probes_base import ProbeContext, raise_for_provider_error


async def probe_chat(ctx: ProbeContext, api_key: str, model: str) -> None:
    response = await ctx.http.post(
        f"{ctx.settings.anthropic_base_url}/messages",
        headers={
            "x-api-key": api_key,
            "anthropic-version": ctx.settings.anthropic_version,
            "content-type": "application/json",
        },
        json={"model": model, "max_tokens": 1, "messages": [{"role": "user", "content": "Hi"}]},
    )
    raise_for_provider_error(Provider.ANTHROPIC, response)
