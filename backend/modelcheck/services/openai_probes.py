from __future__ import annotations

from modelcheck.models.enums import Provider
from modelcheck.services.audio import silent_wav
from modelcheck.services.probes_base import ProbeContext, raise_for_provider_error

PROVIDER = Provider.OPENAI


def _headers(api_key: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {api_key}"}


async def _post_json(ctx: ProbeContext, api_key: str, path: str, body: dict) -> None:
    response = await ctx.http.post(f"{ctx.settings.openai_base_url}{path}", headers=_headers(api_key), json=body)
    raise_for_provider_error(PROVIDER, response)


async def probe_chat(ctx: ProbeContext, api_key: str, model: str) -> None:
    await _post_json(
        ctx,
        api_key,
        "/chat/completions",
        {"model": model, "messages": [{"role": "user", "content": "Hi"}], "max_completion_tokens": 1},
    )


async def probe_responses(ctx: ProbeContext, api_key: str, model: str) -> None:
    # Reasoning models reject output budgets below 16 tokens.
    await _post_json(ctx, api_key, "/responses", {"model": model, "input": "Hi", "max_output_tokens": 16})


async def probe_image(ctx: ProbeContext, api_key: str, model: str) -> None:
    # 1024x1024 is the smallest size every image model accepts.
    await _post_json(
        ctx,
        api_key,
        "/images/generations",
        {"model": model, "prompt": "A single white pixel", "size": "1024x1024", "n": 1},
    )


async def probe_embedding(ctx: ProbeContext, api_key: str, model: str) -> None:
    await _post_json(ctx, api_key, "/embeddings", {"model": model, "input": "test"})


async def probe_tts(ctx: ProbeContext, api_key: str, model: str) -> None:
    await _post_json(ctx, api_key, "/audio/speech", {"model": model, "voice": "alloy", "input": "Hi"})


async def probe_transcription(ctx: ProbeContext, api_key: str, model: str) -> None:
    response = await ctx.http.post(
        f"{ctx.settings.openai_base_url}/audio/transcriptions",
        headers=_headers(api_key),
        data={"model": model},
        files={"file": ("test.wav", silent_wav(), "audio/wav")},
    )
    raise_for_provider_error(PROVIDER, response)
