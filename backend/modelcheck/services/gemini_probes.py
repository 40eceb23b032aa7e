from __future__ import annotations

from modelcheck.models.enums import Provider
from modelcheck.services.gemini_adapter import strip_model_prefix
from modelcheck.services.probes_base import ProbeContext, UntestableModelError, raise_for_provider_error

PROVIDER = Provider.GEMINI


async def _call(ctx: ProbeContext, api_key: str, model: str, method: str, body: dict) -> None:
    url = f"{ctx.settings.gemini_base_url}/models/{strip_model_prefix(model)}:{method}"
    response = await ctx.http.post(url, headers={"x-goog-api-key": api_key}, json=body)
    raise_for_provider_error(PROVIDER, response)


async def probe_chat(ctx: ProbeContext, api_key: str, model: str) -> None:
    await _call(
        ctx,
        api_key,
        model,
        "generateContent",
        {"contents": [{"parts": [{"text": "Hi"}]}], "generationConfig": {"maxOutputTokens": 1}},
    )


async def probe_image(ctx: ProbeContext, api_key: str, model: str) -> None:
    if strip_model_prefix(model).lower().startswith("imagen"):
        await _call(
            ctx,
            api_key,
            model,
            "predict",
            {"instances": [{"prompt": "A white pixel"}], "parameters": {"sampleCount": 1}},
        )
        return
    # Gemini image models generate through generateContent with an image modality.
    await _call(
        ctx,
        api_key,
        model,
        "generateContent",
        {
            "contents": [{"parts": [{"text": "A white pixel"}]}],
            "generationConfig": {"responseModalities": ["TEXT", "IMAGE"]},
        },
    )


async def probe_embedding(ctx: ProbeContext, api_key: str, model: str) -> None:
    await _call(ctx, api_key, model, "embedContent", {"content": {"parts": [{"text": "test"}]}})


async def probe_tts(ctx: ProbeContext, api_key: str, model: str) -> None:
    await _call(
        ctx,
        api_key,
        model,
        "generateContent",
        {
            "contents": [{"parts": [{"text": "Hi"}]}],
            "generationConfig": {
                "responseModalities": ["AUDIO"],
                "speechConfig": {"voiceConfig": {"prebuiltVoiceConfig": {"voiceName": "Kore"}}},
            },
        },
    )


async def probe_live(ctx: ProbeContext, api_key: str, model: str) -> None:
    """Live API models only speak bidirectional streaming; confirm the id and stop there."""
    response = await ctx.http.get(
        f"{ctx.settings.gemini_base_url}/models/{strip_model_prefix(model)}",
        headers={"x-goog-api-key": api_key},
    )
    raise_for_provider_error(PROVIDER, response)
    raise UntestableModelError(
        PROVIDER,
        "model exists but Live API sessions are not probed",
        status_code=response.status_code,
    )
