"""Per-request options and the option functions that build them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Sequence

import httpx

from .constants import DEFAULT_TIMEOUT_MS, HEADER_CONTENT_TYPE, MIME_TYPE_JSON, MIME_TYPE_URL_ENCODED_FORM
from .exceptions import UsageError

PreRequestFn = Callable[[httpx.Request, bytes], None]
FormValues = Mapping[str, Sequence[str]] | httpx.QueryParams


@dataclass
class RequestOptions:
    headers: dict[str, str] = field(default_factory=dict)
    query: dict[str, list[str]] = field(default_factory=dict)
    body: Any = None
    timeout: int = DEFAULT_TIMEOUT_MS
    pre_request: PreRequestFn | None = None
    canonical_header: bool = True

    def content_type(self) -> str | None:
        for key, value in self.headers.items():
            if key.lower() == HEADER_CONTENT_TYPE.lower():
                return value
        return None

    def set_header(self, key: str, value: str) -> None:
        """Set a header, replacing any earlier value whose name differs only in case."""
        for existing in [k for k in self.headers if k.lower() == key.lower()]:
            del self.headers[existing]
        self.headers[key] = value


SetRequestOptionFn = Callable[[RequestOptions], None]


def _pairs(name: str, args: Sequence[object]) -> list[tuple[str, str]]:
    count = len(args)
    if count == 0 or count % 2 == 1:
        raise UsageError(f"Invalid {name}() args count must >= 2 and even")
    return [(str(args[i]), str(args[i + 1])) for i in range(0, count, 2)]


def add_header(*args: str) -> SetRequestOptionFn:
    """Set headers from ``name, value`` pairs. Later values overwrite earlier ones."""
    pairs = _pairs("add_header", args)

    def apply(o: RequestOptions) -> None:
        for key, value in pairs:
            o.set_header(key, value)

    return apply


def add_query(*args: str) -> SetRequestOptionFn:
    """Append query parameters from ``key, value`` pairs."""
    pairs = _pairs("add_query", args)

    def apply(o: RequestOptions) -> None:
        for key, value in pairs:
            o.query.setdefault(key, []).append(value)

    return apply


def set_body(body: Any) -> SetRequestOptionFn:
    def apply(o: RequestOptions) -> None:
        if body is None:
            return
        o.body = body

    return apply


def set_json_body(body: Any) -> SetRequestOptionFn:
    def apply(o: RequestOptions) -> None:
        if body is None:
            return
        o.set_header(HEADER_CONTENT_TYPE, MIME_TYPE_JSON)
        o.body = body

    return apply


def set_url_encoded_form_body(body: FormValues | None) -> SetRequestOptionFn:
    def apply(o: RequestOptions) -> None:
        if body is None:
            return
        o.set_header(HEADER_CONTENT_TYPE, MIME_TYPE_URL_ENCODED_FORM)
        o.body = body

    return apply


def timeout(ms: int) -> SetRequestOptionFn:
    """Bound the request to ``ms`` milliseconds. Zero or less inherits the context deadline."""

    def apply(o: RequestOptions) -> None:
        o.timeout = ms

    return apply


def pre_request(fn: PreRequestFn) -> SetRequestOptionFn:
    def apply(o: RequestOptions) -> None:
        o.pre_request = fn

    return apply


def disable_canonical_header() -> SetRequestOptionFn:
    """Send header names exactly as given instead of canonicalising them."""

    def apply(o: RequestOptions) -> None:
        o.canonical_header = False

    return apply


def evaluate_request_options(args: Iterable[SetRequestOptionFn]) -> RequestOptions:
    o = RequestOptions()
    for fn in args:
        fn(o)
    return o
