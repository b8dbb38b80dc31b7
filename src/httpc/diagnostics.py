"""Raw frame dumps and per-request log lines."""

from __future__ import annotations

import logging
import uuid

import httpx

from .constants import ContextKey
from .context import Context

_RULE = "-" * 40


def resolve_request_id(ctx: Context) -> str:
    """Return the request id carried by ``ctx`` or a freshly generated one."""
    value = ctx.value(ContextKey.REQUEST_ID)
    if isinstance(value, str):
        return value
    return str(uuid.uuid4())


def _render_headers(raw: list[tuple[bytes, bytes]]) -> list[str]:
    return [f"{k.decode('latin-1')}: {v.decode('latin-1')}" for k, v in raw]


def render_request(request: httpx.Request) -> str:
    target = request.url.raw_path.decode("ascii")
    lines = [f"{request.method} {target} HTTP/1.1"]
    lines.extend(_render_headers(request.headers.raw))
    lines.append("")
    lines.append(request.content.decode("utf-8", errors="replace"))
    return "\n".join(lines)


def render_response(response: httpx.Response, body: bytes) -> str:
    lines = [f"{response.http_version} {response.status_code} {response.reason_phrase}"]
    lines.extend(_render_headers(response.headers.raw))
    lines.append("")
    lines.append(body.decode("utf-8", errors="replace"))
    return "\n".join(lines)


def log_dump_request(log: logging.Logger, request: httpx.Request, request_id: str) -> None:
    try:
        dump = render_request(request)
    except (httpx.StreamError, UnicodeError) as exc:
        log.warning("Unable to dump request. Error = %s", exc, extra={"request_id": request_id})
        return
    log.debug(
        "\n---------- HTTP Request Dump -----------\n(RequestId=%s)\n%s\n%s",
        request_id,
        dump,
        _RULE,
        extra={"request_id": request_id},
    )


def log_dump_response(log: logging.Logger, response: httpx.Response, body: bytes, request_id: str) -> None:
    try:
        dump = render_response(response, body)
    except (httpx.StreamError, UnicodeError) as exc:
        log.warning("Unable to dump response. Error = %s", exc, extra={"request_id": request_id})
        return
    log.debug(
        "\n---------- HTTP Response Dump ----------\n(RequestId=%s)\n%s\n%s",
        request_id,
        dump,
        _RULE,
        extra={"request_id": request_id},
    )


def log_summary(
    log: logging.Logger,
    request: httpx.Request,
    response: httpx.Response,
    request_id: str,
    elapsed: float,
) -> None:
    log.debug(
        'HTTP Request  (Id=%s) URL="%s %s" ResponseStatus="%s %s" TimeElapsed="%.3fms"',
        request_id,
        request.method,
        request.url,
        response.status_code,
        response.reason_phrase,
        elapsed * 1000,
        extra={"request_id": request_id},
    )
