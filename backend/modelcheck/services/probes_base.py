from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import httpx

from modelcheck.core.config import Settings
from modelcheck.models.enums import Modality, Provider, TestStatus

UNTESTED_MARKERS = ("untestable", "model exists but")


class ProbeError(Exception):
    """A probe failure carrying the provider's own status and error type."""

    def __init__(
        self,
        provider: Provider,
        message: str,
        *,
        status_code: int | None = None,
        error_type: str | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.error_type = error_type


class ModelUnavailableError(ProbeError):
    """The provider does not serve this model (or not for this capability)."""

    def __init__(self, provider: Provider, *, status_code: int | None = None, error_type: str | None = None, detail: str = "") -> None:
        super().__init__(provider, unavailable_message(provider), status_code=status_code, error_type=error_type)
        self.detail = detail


class UntestableModelError(ProbeError):
    """The model id was accepted but the capability could not be exercised."""


def unavailable_message(provider: Provider) -> str:
    if provider is Provider.OPENROUTER:
        return "This model is not available through OpenRouter."
    return (
        f"This model is not available through {provider.label}'s direct API. "
        "Try using the OpenRouter provider instead."
    )


@dataclass(frozen=True)
class ErrorRules:
    not_found_markers: tuple[str, ...] = ()
    untested_markers: tuple[str, ...] = UNTESTED_MARKERS

    def is_not_found(self, text: str) -> bool:
        lowered = text.lower()
        return any(marker in lowered for marker in self.not_found_markers)

    def is_untested(self, text: str) -> bool:
        lowered = text.lower()
        return any(marker in lowered for marker in self.untested_markers)

    def classify(self, provider: Provider, exc: BaseException) -> tuple[TestStatus, str]:
        if isinstance(exc, UntestableModelError):
            return TestStatus.UNTESTED, str(exc)
        if isinstance(exc, ModelUnavailableError):
            return TestStatus.FAILED, str(exc)
        if isinstance(exc, httpx.TimeoutException):
            return TestStatus.FAILED, f"Timed out waiting for the {provider.label} API"
        if isinstance(exc, httpx.TransportError):
            return TestStatus.FAILED, f"Network error contacting the {provider.label} API"
        message = str(exc) or type(exc).__name__
        if self.is_untested(message):
            return TestStatus.UNTESTED, message
        if self.is_not_found(message):
            return TestStatus.FAILED, unavailable_message(provider)
        return TestStatus.FAILED, message


# Provider wording for "no such model". Kept here so upstream wording
# changes only touch this table.
ERROR_RULES: dict[Provider, ErrorRules] = {
    Provider.OPENAI: ErrorRules(
        not_found_markers=("model_not_found", "does not exist or you do not have access"),
        untested_markers=UNTESTED_MARKERS + ("must be verified",),
    ),
    Provider.ANTHROPIC: ErrorRules(not_found_markers=("not_found_error",)),
    Provider.GEMINI: ErrorRules(
        not_found_markers=("not_found", "is not found for api version", "is not supported for"),
    ),
    Provider.OPENROUTER: ErrorRules(
        not_found_markers=("not a valid model id", "no endpoints found"),
    ),
}


def parse_error_body(response: httpx.Response) -> tuple[str | None, str]:
    """Pull (error type, message) out of the usual provider error envelopes."""
    try:
        payload = response.json()
    except ValueError:
        return None, response.text[:500] or response.reason_phrase

    if isinstance(payload, dict):
        error = payload.get("error", payload)
        if isinstance(error, str):
            return None, error
        if isinstance(error, dict):
            error_type = error.get("type") or error.get("status") or error.get("code")
            message = error.get("message") or payload.get("message") or response.text[:500]
            return (str(error_type) if error_type is not None else None), str(message)
    return None, response.text[:500]


def raise_for_provider_error(provider: Provider, response: httpx.Response) -> None:
    if response.status_code < 400:
        return
    error_type, message = parse_error_body(response)
    rules = ERROR_RULES[provider]
    text = f"{error_type or ''} {message}"
    if response.status_code == 404 or rules.is_not_found(text):
        raise ModelUnavailableError(
            provider, status_code=response.status_code, error_type=error_type, detail=message
        )
    if rules.is_untested(text):
        raise UntestableModelError(
            provider,
            f"model exists but {provider.label} rejected the probe: {message}",
            status_code=response.status_code,
            error_type=error_type,
        )
    raise ProbeError(
        provider,
        f"{provider.label} API error: {response.status_code} - {message}",
        status_code=response.status_code,
        error_type=error_type,
    )


@dataclass
class ProbeContext:
    http: httpx.AsyncClient
    settings: Settings
    ws_connect: Callable[..., Awaitable[Any]]


ProbeFn = Callable[[ProbeContext, str, str], Awaitable[None]]


@dataclass(frozen=True)
class Probe:
    provider: Provider
    modality: Modality
    run: ProbeFn
    timeout: float
