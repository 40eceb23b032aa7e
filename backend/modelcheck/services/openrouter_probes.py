from __future__ import annotations

from modelcheck.models.enums import Provider
from modelcheck.services.probes_base import ProbeContext, raise_for_provider_error


async def probe_chat(ctx: ProbeContext, api_key: str, model: str) -> None:
    response = await ctx.http.post(
        f"{ctx.settings.openrouter_base_url}/chat/completions",
        headers={
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "X-Title": "modelcheck",
        },
        json={"model": model, "messages": [{"role": "user", "content": "Hi"}], "max_tokens": 1},
    )
    raise_for_provider_error(Provider.OPENROUTER, response)
