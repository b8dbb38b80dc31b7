"""Request body composition driven by the declared content type."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel

from .constants import MIME_TYPE_JSON, MIME_TYPE_URL_ENCODED_FORM, NO_BODY_METHODS
from .exceptions import EncodingError
from .request_options import RequestOptions


@dataclass(frozen=True)
class RawJSON:
    """A pre-serialized JSON fragment sent as-is once it parses."""

    data: str | bytes


def encode_values(values: Mapping[str, Any] | httpx.QueryParams) -> str:
    """Percent-encode a multi-valued mapping as ``key=value&key=value``."""
    if isinstance(values, httpx.QueryParams):
        return urlencode(values.multi_items())
    items: list[tuple[str, str]] = []
    for key, value in values.items():
        if isinstance(value, str):
            items.append((key, value))
            continue
        items.extend((key, v) for v in value)
    return urlencode(items)


def _is_form(body: Any) -> bool:
    if isinstance(body, httpx.QueryParams):
        return True
    if not isinstance(body, Mapping):
        return False
    for key, value in body.items():
        if not isinstance(key, str):
            return False
        if isinstance(value, str):
            continue
        if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
            return False
    return True


def _encode_json(body: Any, content_type: str) -> bytes:
    try:
        if isinstance(body, RawJSON):
            raw = body.data.encode() if isinstance(body.data, str) else bytes(body.data)
            json.loads(raw)
            return raw
        if isinstance(body, BaseModel):
            body = body.model_dump(mode="json")
        return json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode()
    except (TypeError, ValueError) as exc:
        raise EncodingError(
            f"Failed to compose request body. ContentType = {content_type}, Error = {exc}",
            content_type=content_type,
            cause=exc,
        ) from exc


def _pass_through(body: Any) -> bytes | None:
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body)
    return None


def compose_request_body(method: str, options: RequestOptions, log: logging.Logger) -> bytes:
    if method.upper() in NO_BODY_METHODS or options.body is None:
        return b""
    raw = _pass_through(options.body)
    if raw is not None:
        return raw

    content_type = options.content_type() or ""
    mime = content_type.split(";", 1)[0].strip().lower()
    if mime == MIME_TYPE_JSON:
        return _encode_json(options.body, content_type)
    if mime == MIME_TYPE_URL_ENCODED_FORM:
        if not _is_form(options.body):
            raise EncodingError(
                "Unable to compose URL-Encoded Form, body is not a form values mapping. "
                f"Type = {type(options.body).__name__}",
                content_type=content_type,
            )
        return encode_values(options.body).encode()

    log.warning("Unsupported Content-Type %r in request body", content_type)
    return b""
