"""Explicitly best-effort side effects.

Cache reads and writes are conveniences: a broken cache backend must
degrade to an uncached fetch, never to a failed request. Call sites wrap
such operations in :func:`best_effort` instead of scattering try/except
blocks, so the "failure is logged but not returned" contract stays visible.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import TypeVar

import sentry_sdk

log = logging.getLogger(__name__)

T = TypeVar("T")


async def best_effort(operation: Awaitable[T], *, what: str, default: T | None = None) -> T | None:
    try:
        return await operation
    except Exception as exc:
        log.warning("Best-effort %s failed: %s", what, exc)
        sentry_sdk.capture_exception(exc)
        return default
