"""Process-wide transport instrumentation and override registry.

The instrumentation mode is read from the environment once at import and can
be re-read with :func:`load_env` or set explicitly with
:func:`set_instrumentation`. Both settings apply to every client constructed
afterwards; clients that already exist keep the transport they were built with.
"""

from __future__ import annotations

import enum
import logging
import os
import threading
from typing import Callable, Union

import httpx
from opentelemetry.instrumentation.httpx import AsyncOpenTelemetryTransport, SyncOpenTelemetryTransport

logger = logging.getLogger(__name__)

ENV_OTEL_TRACE_HTTPC = "OTEL_TRACE_HTTPC"
ENV_HTTPC_INSTRUMENTATION = "HTTPC_INSTRUMENTATION"

AnyTransport = Union[httpx.BaseTransport, httpx.AsyncBaseTransport]
TransportOverrider = Callable[[AnyTransport], AnyTransport]


class Instrumentation(str, enum.Enum):
    NONE = ""
    OPENTELEMETRY = "opentelemetry"


class _Registry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._instrumentation = Instrumentation.NONE
        self._overrider: TransportOverrider | None = None

    @property
    def instrumentation(self) -> Instrumentation:
        with self._lock:
            return self._instrumentation

    @instrumentation.setter
    def instrumentation(self, mode: Instrumentation) -> None:
        with self._lock:
            self._instrumentation = mode

    @property
    def overrider(self) -> TransportOverrider | None:
        with self._lock:
            return self._overrider

    @overrider.setter
    def overrider(self, fn: TransportOverrider | None) -> None:
        with self._lock:
            self._overrider = fn

    def reset(self) -> None:
        with self._lock:
            self._instrumentation = Instrumentation.NONE
            self._overrider = None


_registry = _Registry()


def load_env() -> Instrumentation:
    """Select the instrumentation mode from the environment."""
    mode = Instrumentation.NONE
    if os.getenv(ENV_OTEL_TRACE_HTTPC, "").strip().lower() == "true":
        mode = Instrumentation.OPENTELEMETRY
    elif os.getenv(ENV_HTTPC_INSTRUMENTATION, "").strip().lower() == Instrumentation.OPENTELEMETRY.value:
        mode = Instrumentation.OPENTELEMETRY
    _registry.instrumentation = mode
    if mode is not Instrumentation.NONE:
        logger.debug("Transport instrumentation enabled: %s", mode.value)
    return mode


def set_instrumentation(mode: Instrumentation | str) -> None:
    _registry.instrumentation = Instrumentation(mode)


def get_instrumentation() -> Instrumentation:
    return _registry.instrumentation


def set_global_transport_overrider(fn: TransportOverrider | None) -> None:
    """Register ``fn(default_transport) -> transport`` for clients built from now on."""
    _registry.overrider = fn


def get_global_transport_overrider() -> TransportOverrider | None:
    return _registry.overrider


def reset_globals() -> None:
    """Clear the overrider and instrumentation mode. Intended for tests."""
    _registry.reset()


def wrap_transport(transport: AnyTransport, *, asynchronous: bool = False) -> AnyTransport:
    overrider = _registry.overrider
    if overrider is not None:
        transport = overrider(transport)
    if _registry.instrumentation is Instrumentation.OPENTELEMETRY:
        if asynchronous:
            return AsyncOpenTelemetryTransport(transport)
        return SyncOpenTelemetryTransport(transport)
    return transport


load_env()
