from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from typing import Any

import httpx
from websockets.asyncio.client import connect as ws_connect

from modelcheck.core.config import Settings, get_settings
from modelcheck.models.enums import Modality, Provider, TestStatus
from modelcheck.services import anthropic_probes, gemini_probes, openai_probes, openrouter_probes
from modelcheck.services.probes_base import ERROR_RULES, ErrorRules, Probe, ProbeContext
from modelcheck.services.realtime_probe import probe_realtime


def default_probes(settings: Settings) -> list[Probe]:
    rest = settings.probe_timeout_seconds
    return [
        Probe(Provider.OPENAI, Modality.CHAT, openai_probes.probe_chat, rest),
        Probe(Provider.OPENAI, Modality.RESPONSES, openai_probes.probe_responses, rest),
        Probe(Provider.OPENAI, Modality.IMAGE, openai_probes.probe_image, rest),
        Probe(Provider.OPENAI, Modality.EMBEDDING, openai_probes.probe_embedding, rest),
        Probe(Provider.OPENAI, Modality.AUDIO, openai_probes.probe_transcription, rest),
        Probe(Provider.OPENAI, Modality.TTS, openai_probes.probe_tts, rest),
        Probe(Provider.OPENAI, Modality.REALTIME, probe_realtime, settings.realtime_probe_timeout_seconds),
        Probe(Provider.ANTHROPIC, Modality.CHAT, anthropic_probes.probe_chat, rest),
        Probe(Provider.GEMINI, Modality.CHAT, gemini_probes.probe_chat, rest),
        Probe(Provider.GEMINI, Modality.IMAGE, gemini_probes.probe_image, rest),
        Probe(Provider.GEMINI, Modality.EMBEDDING, gemini_probes.probe_embedding, rest),
        Probe(Provider.GEMINI, Modality.TTS, gemini_probes.probe_tts, rest),
        Probe(Provider.GEMINI, Modality.REALTIME, gemini_probes.probe_live, rest),
        Probe(Provider.OPENROUTER, Modality.CHAT, openrouter_probes.probe_chat, rest),
    ]


class ProbeRegistry:
    """Probes keyed by (provider, modality), plus the per-provider rules that
    turn a probe failure into a test status."""

    def __init__(
        self,
        probes: Iterable[Probe] | None = None,
        rules: dict[Provider, ErrorRules] | None = None,
        *,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        connect: Callable[..., Awaitable[Any]] = ws_connect,
    ) -> None:
        self._settings = settings or get_settings()
        self._transport = transport
        self._connect = connect
        self._probes: dict[tuple[Provider, Modality], Probe] = {}
        self._rules = dict(ERROR_RULES)
        if rules:
            self._rules.update(rules)
        for probe in default_probes(self._settings) if probes is None else probes:
            self.register(probe)

    def register(self, probe: Probe) -> None:
        self._probes[(probe.provider, probe.modality)] = probe

    def get(self, provider: Provider, modality: Modality) -> Probe | None:
        return self._probes.get((provider, modality))

    def rules_for(self, provider: Provider) -> ErrorRules:
        return self._rules.get(provider, ErrorRules())

    def classify(self, provider: Provider, exc: BaseException) -> tuple[TestStatus, str]:
        return self.rules_for(provider).classify(provider, exc)

    async def run(self, probe: Probe, api_key: str, model: str) -> None:
        async with httpx.AsyncClient(timeout=probe.timeout, transport=self._transport) as client:
            ctx = ProbeContext(http=client, settings=self._settings, ws_connect=self._connect)
            await probe.run(ctx, api_key, model)
