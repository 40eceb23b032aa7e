from __future__ import annotations

import asyncio
import logging
import re
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from functools import lru_cache

from modelcheck.core.config import get_settings
from modelcheck.models.enums import Modality, Provider, TestMode, TestStatus
from modelcheck.services.probe_registry import ProbeRegistry

log = logging.getLogger(__name__)

NO_API_KEY_CONFIGURED = "No API key configured"

_OPENAI_REASONING_ID = re.compile(r"^o[13](?:-|$)")


@dataclass(frozen=True)
class ModelToTest:
    provider: Provider
    model: str
    modality: Modality = Modality.CHAT
    label: str = ""

    @classmethod
    def from_request(cls, provider: Provider, model: str, model_type: str | None, label: str | None = None) -> ModelToTest:
        modality = Modality.from_type(model_type)
        # o1/o3 reasoning models only answer on the responses endpoint.
        if provider is Provider.OPENAI and modality is Modality.CHAT and _OPENAI_REASONING_ID.match(model):
            modality = Modality.RESPONSES
        return cls(provider=provider, model=model, modality=modality, label=label or model)

    @property
    def key(self) -> str:
        return f"{self.provider.value}:{self.model}"


@dataclass
class TestResult:
    __test__ = False

    provider: Provider
    model: str
    label: str
    modality: Modality
    status: TestStatus
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    latency: int | None = None
    error: str | None = None


@dataclass
class TestSummary:
    __test__ = False

    total: int = 0
    passed: int = 0
    failed: int = 0
    untested: int = 0
    skipped: int = 0
    avg_latency: int = 0


def summarize(results: Iterable[TestResult]) -> TestSummary:
    summary = TestSummary()
    latencies: list[int] = []
    for result in results:
        summary.total += 1
        if result.status is TestStatus.SUCCESS:
            summary.passed += 1
            if result.latency is not None:
                latencies.append(result.latency)
        elif result.status is TestStatus.FAILED:
            summary.failed += 1
        elif result.status is TestStatus.UNTESTED:
            summary.untested += 1
        else:
            summary.skipped += 1
    if latencies:
        summary.avg_latency = round(sum(latencies) / len(latencies))
    return summary


def select_models(
    mode: TestMode,
    models: list[ModelToTest],
    selected: set[str] | None = None,
    quick_models: Mapping[Provider, str] | None = None,
) -> list[ModelToTest]:
    """quick: one configured model per provider; full: everything; individual: selected provider:model keys."""
    if mode is TestMode.FULL:
        return list(models)
    if mode is TestMode.QUICK:
        picked: list[ModelToTest] = []
        for provider, model_id in (quick_models or {}).items():
            match = next((m for m in models if m.provider == provider and m.model == model_id), None)
            if match:
                picked.append(match)
        return picked
    chosen = selected or set()
    return [m for m in models if m.key in chosen]


class ValidationService:
    def __init__(
        self,
        registry: ProbeRegistry | None = None,
        keys: Mapping[Provider, str] | None = None,
        concurrency: int | None = None,
    ) -> None:
        settings = get_settings()
        self._registry = registry or ProbeRegistry(settings=settings)
        self._keys = dict(settings.api_keys if keys is None else keys)
        self._concurrency = concurrency or settings.validation_concurrency

    @property
    def concurrency(self) -> int:
        return self._concurrency

    async def run_tests(self, models: Iterable[ModelToTest]) -> list[TestResult]:
        """Probe every model, at most ``concurrency`` at a time, preserving input order."""
        semaphore = asyncio.Semaphore(self._concurrency)

        async def bounded(item: ModelToTest) -> TestResult:
            async with semaphore:
                return await self.test_model(item)

        return list(await asyncio.gather(*(bounded(item) for item in models)))

    async def test_model(self, item: ModelToTest) -> TestResult:
        timestamp = datetime.now(UTC)
        api_key = self._keys.get(item.provider)
        if not api_key:
            return self._result(item, TestStatus.FAILED, timestamp, error=NO_API_KEY_CONFIGURED)

        probe = self._registry.get(item.provider, item.modality)
        if probe is None:
            return self._result(
                item,
                TestStatus.SKIPPED,
                timestamp,
                error=f"{item.provider.label} has no {item.modality.value} probe",
            )

        started = time.perf_counter()
        try:
            await asyncio.wait_for(self._registry.run(probe, api_key, item.model), timeout=probe.timeout)
        except TimeoutError:
            status, error = TestStatus.FAILED, f"Request timeout ({probe.timeout:g}s)"
        except Exception as exc:
            status, error = self._registry.classify(item.provider, exc)
        else:
            status, error = TestStatus.SUCCESS, None
        latency = round((time.perf_counter() - started) * 1000)

        if status is TestStatus.SUCCESS:
            log.info("[validation] %s %s ok in %dms", item.key, item.modality.value, latency)
        else:
            log.warning("[validation] %s %s %s: %s", item.key, item.modality.value, status.value, error)
        return self._result(item, status, timestamp, latency=latency, error=error)

    @staticmethod
    def _result(
        item: ModelToTest,
        status: TestStatus,
        timestamp: datetime,
        latency: int | None = None,
        error: str | None = None,
    ) -> TestResult:
        return TestResult(
            provider=item.provider,
            model=item.model,
            label=item.label or item.model,
            modality=item.modality,
            status=status,
            timestamp=timestamp,
            latency=latency,
            error=error,
        )


@lru_cache
def get_validation_service() -> ValidationService:
    return ValidationService()
