"""Client construction options."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

import httpx

from .constants import DEFAULT_NAMESPACE


@dataclass
class ClientOptions:
    namespace: str = DEFAULT_NAMESPACE
    log_dump: bool = False
    disable_http2: bool = False
    follow_redirects: bool = True
    transport: httpx.BaseTransport | httpx.AsyncBaseTransport | None = None


SetClientOptionsFn = Callable[[ClientOptions], None]


def namespace(name: str) -> SetClientOptionsFn:
    """Override the logger namespace of the client."""

    def apply(o: ClientOptions) -> None:
        o.namespace = name

    return apply


def log_dump(enable: bool = True) -> SetClientOptionsFn:
    """Log full request and response dumps at debug level."""

    def apply(o: ClientOptions) -> None:
        o.log_dump = enable

    return apply


def disable_http2() -> SetClientOptionsFn:
    """Force HTTP/1.1 on the default transport."""

    def apply(o: ClientOptions) -> None:
        o.disable_http2 = True

    return apply


def follow_redirects(enable: bool) -> SetClientOptionsFn:
    def apply(o: ClientOptions) -> None:
        o.follow_redirects = enable

    return apply


def transport(t: httpx.BaseTransport | httpx.AsyncBaseTransport) -> SetClientOptionsFn:
    """Use ``t`` as the base transport instead of the default connection pool."""

    def apply(o: ClientOptions) -> None:
        o.transport = t

    return apply


def evaluate_client_options(args: Iterable[SetClientOptionsFn]) -> ClientOptions:
    o = ClientOptions()
    for fn in args:
        fn(o)
    return o
