"""Synchronous and asynchronous HTTP clients."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import socket
import threading
import time
from typing import ContextManager, Iterator

import httpx

from .body import compose_request_body, encode_values
from .client_options import ClientOptions, SetClientOptionsFn, evaluate_client_options
from .context import Context
from .diagnostics import log_dump_request, log_dump_response, log_summary, resolve_request_id
from .exceptions import ContextCancelledError, ContextError, DeadlineExceededError, MissingContextError
from .instrumentation import wrap_transport
from .request_options import RequestOptions, SetRequestOptionFn, evaluate_request_options


def canonical_header_key(key: str) -> str:
    """Return ``key`` in canonical MIME header form, e.g. ``content-type`` -> ``Content-Type``."""
    if not key or any(c in key for c in " \t\r\n:"):
        return key
    return "-".join(part[:1].upper() + part[1:].lower() for part in key.split("-"))


def _require_context(ctx: Context | None) -> Context:
    if ctx is None:
        raise MissingContextError("ctx is required")
    return ctx


def _derive_context(ctx: Context, o: RequestOptions) -> ContextManager[Context]:
    if o.timeout > 0:
        return ctx.with_timeout(o.timeout / 1000)
    return contextlib.nullcontext(ctx)


def _transport_timeout(ctx: Context) -> httpx.Timeout:
    return httpx.Timeout(ctx.remaining())


def _raise_if_done(
    ctx: Context,
    request: httpx.Request,
    request_id: str,
    cause: Exception | None = None,
) -> None:
    if ctx.cancelled:
        raise ContextCancelledError("context canceled", request_id=request_id, cause=cause) from cause
    if ctx.expired:
        raise DeadlineExceededError(
            "context deadline exceeded",
            request=request,
            request_id=request_id,
            cause=cause,
        ) from cause


def _shutdown_stream(response: httpx.Response) -> None:
    """Unblock a pending read on the response's connection."""
    stream = response.extensions.get("network_stream")
    sock = stream.get_extra_info("socket") if stream is not None else None
    if sock is None:
        return
    with contextlib.suppress(OSError):
        sock.shutdown(socket.SHUT_RDWR)


@contextlib.contextmanager
def _abort_when_done(ctx: Context, response: httpx.Response) -> Iterator[None]:
    """Shut the response stream down when ``ctx`` is cancelled or its deadline passes."""
    unregister = ctx.on_cancel(lambda: _shutdown_stream(response))
    timer = None
    remaining = ctx.remaining()
    if remaining is not None:
        timer = threading.Timer(remaining, _shutdown_stream, args=(response,))
        timer.daemon = True
        timer.start()
    try:
        yield
    finally:
        unregister()
        if timer is not None:
            timer.cancel()


class _BaseClient:
    def __init__(self, base_url: str, *args: SetClientOptionsFn) -> None:
        o = evaluate_client_options(args)
        self.base_url = base_url
        self.log = logging.getLogger(o.namespace)
        self.log_dump = o.log_dump
        self._options = o
        if o.disable_http2:
            self.log.debug("HTTP/2 automatic switch is disabled")

    @property
    def options(self) -> ClientOptions:
        return self._options

    def _compose_url(self, path: str, o: RequestOptions) -> str:
        url = self.base_url + path
        if o.query:
            url += "?" + encode_values(o.query)
        return url

    def _build_request(
        self,
        client: httpx.Client | httpx.AsyncClient,
        ctx: Context,
        method: str,
        url: str,
        body: bytes,
        o: RequestOptions,
    ) -> httpx.Request:
        request = client.build_request(method, url, content=body, timeout=_transport_timeout(ctx))
        for key, value in o.headers.items():
            if o.canonical_header:
                request.headers[canonical_header_key(key)] = value
            else:
                request.headers[key] = value
        if o.pre_request is not None:
            o.pre_request(request, body)
        return request

    def _on_transport_error(self, exc: httpx.HTTPError, request_id: str) -> None:
        self.log.error(
            "HTTP Request  (Id=%s) Failed to do request. Error = %s",
            request_id,
            exc,
            exc_info=exc,
            extra={"request_id": request_id},
        )

    def _on_close_error(self, exc: Exception, request_id: str) -> None:
        self.log.warning(
            "HTTP Response (Id=%s) Failed to close Body reader. Error = %s",
            request_id,
            exc,
            extra={"request_id": request_id},
        )

    def _finish(
        self,
        request: httpx.Request,
        response: httpx.Response,
        body: bytes,
        request_id: str,
        started: float,
    ) -> None:
        if self.log_dump:
            log_dump_response(self.log, response, body, request_id)
        log_summary(self.log, request, response, request_id, time.perf_counter() - started)


class Client(_BaseClient):
    """Synchronous client."""

    def __init__(self, base_url: str, *args: SetClientOptionsFn) -> None:
        super().__init__(base_url, *args)
        o = self._options
        base = o.transport or httpx.HTTPTransport(http2=not o.disable_http2)
        self._httpx = httpx.Client(transport=wrap_transport(base), follow_redirects=o.follow_redirects)

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._httpx.close()

    def do_request(
        self,
        ctx: Context | None,
        method: str,
        path: str,
        *args: SetRequestOptionFn,
    ) -> tuple[httpx.Response, bytes]:
        """Send one request and return the response with its fully read body.

        The whole exchange, body included, is bounded by the request timeout
        and the context deadline, and stops when the context is cancelled.
        """
        o = evaluate_request_options(args)
        return self._do_request(ctx, method, path, o)

    def _do_request(
        self,
        ctx: Context | None,
        method: str,
        path: str,
        o: RequestOptions,
    ) -> tuple[httpx.Response, bytes]:
        ctx = _require_context(ctx)
        method = method.upper()
        url = self._compose_url(path, o)
        body = compose_request_body(method, o, self.log)

        with _derive_context(ctx, o) as hctx:
            request = self._build_request(self._httpx, hctx, method, url, body, o)
            request_id = resolve_request_id(ctx)
            started = time.perf_counter()
            if self.log_dump:
                log_dump_request(self.log, request, request_id)
            _raise_if_done(hctx, request, request_id)
            try:
                response = self._httpx.send(request, stream=True)
            except httpx.HTTPError as exc:
                self._on_transport_error(exc, request_id)
                _raise_if_done(hctx, request, request_id, exc)
                raise
            try:
                with _abort_when_done(hctx, response):
                    content = self._read(hctx, request, response, request_id)
            finally:
                try:
                    response.close()
                except (httpx.HTTPError, OSError) as exc:
                    self._on_close_error(exc, request_id)
            self._finish(request, response, content, request_id, started)
            return response, content

    def _read(self, ctx: Context, request: httpx.Request, response: httpx.Response, request_id: str) -> bytes:
        chunks: list[bytes] = []
        try:
            for chunk in response.iter_bytes():
                _raise_if_done(ctx, request, request_id)
                chunks.append(chunk)
        except ContextError:
            raise
        except httpx.HTTPError as exc:
            self._on_transport_error(exc, request_id)
            _raise_if_done(ctx, request, request_id, exc)
            raise
        _raise_if_done(ctx, request, request_id)
        return b"".join(chunks)


class AsyncClient(_BaseClient):
    """Asynchronous client."""

    def __init__(self, base_url: str, *args: SetClientOptionsFn) -> None:
        super().__init__(base_url, *args)
        o = self._options
        base = o.transport or httpx.AsyncHTTPTransport(http2=not o.disable_http2)
        self._httpx = httpx.AsyncClient(transport=wrap_transport(base, asynchronous=True), follow_redirects=o.follow_redirects)

    async def __aenter__(self) -> "AsyncClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._httpx.aclose()

    async def do_request(
        self,
        ctx: Context | None,
        method: str,
        path: str,
        *args: SetRequestOptionFn,
    ) -> tuple[httpx.Response, bytes]:
        o = evaluate_request_options(args)
        return await self._do_request(ctx, method, path, o)

    async def _do_request(
        self,
        ctx: Context | None,
        method: str,
        path: str,
        o: RequestOptions,
    ) -> tuple[httpx.Response, bytes]:
        ctx = _require_context(ctx)
        method = method.upper()
        url = self._compose_url(path, o)
        body = compose_request_body(method, o, self.log)

        with _derive_context(ctx, o) as hctx:
            request = self._build_request(self._httpx, hctx, method, url, body, o)
            request_id = resolve_request_id(ctx)
            started = time.perf_counter()
            if self.log_dump:
                log_dump_request(self.log, request, request_id)
            _raise_if_done(hctx, request, request_id)

            loop = asyncio.get_running_loop()
            task = asyncio.ensure_future(self._send(hctx, request, request_id))

            def interrupt() -> None:
                # The loop may already be closed when a late cancel arrives.
                with contextlib.suppress(RuntimeError):
                    loop.call_soon_threadsafe(task.cancel)

            unregister = hctx.on_cancel(interrupt)
            try:
                response, content = await asyncio.wait_for(task, hctx.remaining())
            except asyncio.TimeoutError as exc:
                raise DeadlineExceededError(
                    "context deadline exceeded",
                    request=request,
                    request_id=request_id,
                    cause=exc,
                ) from exc
            except asyncio.CancelledError:
                if not hctx.cancelled:
                    raise
                raise ContextCancelledError("context canceled", request_id=request_id) from None
            finally:
                unregister()
            self._finish(request, response, content, request_id, started)
            return response, content

    async def _send(self, ctx: Context, request: httpx.Request, request_id: str) -> tuple[httpx.Response, bytes]:
        try:
            response = await self._httpx.send(request, stream=True)
        except httpx.HTTPError as exc:
            self._on_transport_error(exc, request_id)
            _raise_if_done(ctx, request, request_id, exc)
            raise
        chunks: list[bytes] = []
        try:
            async for chunk in response.aiter_bytes():
                _raise_if_done(ctx, request, request_id)
                chunks.append(chunk)
            _raise_if_done(ctx, request, request_id)
        except ContextError:
            raise
        except httpx.HTTPError as exc:
            self._on_transport_error(exc, request_id)
            raise
        finally:
            try:
                await response.aclose()
            except (httpx.HTTPError, OSError) as exc:
                self._on_close_error(exc, request_id)
        return response, b"".join(chunks)
