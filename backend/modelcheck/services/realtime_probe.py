"""Realtime (WebSocket) probe for OpenAI realtime models.

Unlike the REST probes this one holds a live connection. It opens the
socket under a hard handshake deadline, then gives the server a short
window to send its first event:

* any ordinary event, a normal close, or silence means the model answered;
* an ``error`` event fails the probe (model-not-found becomes unavailable);
* an abnormal close after a successful handshake is reported as untestable,
  because the id got past the handshake but the session never settled.

The socket is closed exactly once, by the ``finally`` block, whichever of
those paths fires.
"""

from __future__ import annotations

import asyncio
import json
from urllib.parse import quote

from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidStatus

from modelcheck.models.enums import Provider
from modelcheck.services.probes_base import (
    ERROR_RULES,
    ModelUnavailableError,
    ProbeContext,
    ProbeError,
    UntestableModelError,
)

PROVIDER = Provider.OPENAI
NORMAL_CLOSE_CODES = {1000, 1005}
FIRST_EVENT_GRACE_SECONDS = 2.0


async def probe_realtime(ctx: ProbeContext, api_key: str, model: str) -> None:
    url = f"{ctx.settings.openai_realtime_url}?model={quote(model, safe='')}"
    headers = {"Authorization": f"Bearer {api_key}", "OpenAI-Beta": "realtime=v1"}
    loop = asyncio.get_running_loop()
    deadline = loop.time() + ctx.settings.realtime_handshake_timeout_seconds

    connection = None
    try:
        try:
            async with asyncio.timeout_at(deadline):
                connection = await ctx.ws_connect(url, additional_headers=headers, open_timeout=None)
        except TimeoutError as exc:
            raise ProbeError(PROVIDER, "WebSocket connection timeout") from exc
        except InvalidStatus as exc:
            raise _handshake_rejected(exc.response.status_code, exc.response.body) from exc
        except (InvalidHandshake, OSError) as exc:
            raise ProbeError(PROVIDER, f"WebSocket error: {exc}") from exc

        grace = min(FIRST_EVENT_GRACE_SECONDS, max(0.0, deadline - loop.time()))
        await _await_first_event(connection, grace)
    finally:
        if connection is not None:
            await connection.close()


async def _await_first_event(connection, grace: float) -> None:
    try:
        async with asyncio.timeout(grace):
            message = await connection.recv()
    except TimeoutError:
        return
    except ConnectionClosed as exc:
        code = exc.rcvd.code if exc.rcvd is not None else 1006
        if code in NORMAL_CLOSE_CODES:
            return
        reason = exc.rcvd.reason if exc.rcvd is not None else ""
        raise UntestableModelError(
            PROVIDER, f"model exists but the realtime session closed: {code} {reason}".strip()
        ) from exc
    _raise_for_error_event(message)


def _raise_for_error_event(message) -> None:
    if not isinstance(message, str):
        return
    try:
        event = json.loads(message)
    except ValueError:
        return
    if not isinstance(event, dict) or event.get("type") != "error":
        return

    error = event.get("error")
    if isinstance(error, str):
        error = {"message": error}
    elif not isinstance(error, dict):
        error = {}
    error_type = error.get("code") or error.get("type")
    detail = error.get("message") or "unknown error"
    if ERROR_RULES[PROVIDER].is_not_found(f"{error_type or ''} {detail}"):
        raise ModelUnavailableError(PROVIDER, error_type=error_type, detail=detail)
    raise ProbeError(PROVIDER, f"Realtime error: {detail}", error_type=error_type)


def _handshake_rejected(status_code: int, body: bytes | None) -> ProbeError:
    detail = (body or b"").decode("utf-8", errors="replace")[:500]
    if status_code == 404 or ERROR_RULES[PROVIDER].is_not_found(detail):
        return ModelUnavailableError(PROVIDER, status_code=status_code, detail=detail)
    return ProbeError(
        PROVIDER,
        f"WebSocket handshake rejected: {status_code} {detail}".strip(),
        status_code=status_code,
    )
