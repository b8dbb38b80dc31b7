"""Builders for REST style requests that exchange JSON bodies."""

from __future__ import annotations

import uuid
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from .client import AsyncClient, Client
from .constants import HEADER_ACCEPT, MIME_TYPE_JSON, ContextKey
from .context import Context
from .exceptions import DecodingError, MissingContextError
from .request_options import (
    PreRequestFn,
    SetRequestOptionFn,
    add_header,
    add_query,
    pre_request,
    set_json_body,
)

T = TypeVar("T")
_BuilderT = TypeVar("_BuilderT", bound="_BaseRESTRequest")


def _decode(body: bytes, into: Any, request_id: str) -> Any:
    try:
        return TypeAdapter(into).validate_json(body)
    except ValidationError as exc:
        raise DecodingError(str(exc), request_id=request_id, cause=exc) from exc


class _BaseRESTRequest:
    def __init__(self, method: str, path: str, *args: SetRequestOptionFn) -> None:
        self.id = str(uuid.uuid4())
        self.method = method
        self.path = path
        self._args: list[SetRequestOptionFn] = list(args)

    def add_option(self: _BuilderT, *fn: SetRequestOptionFn) -> _BuilderT:
        self._args.extend(fn)
        return self

    def add_header(self: _BuilderT, *args: str) -> _BuilderT:
        self._args.append(add_header(*args))
        return self

    def add_query(self: _BuilderT, *args: str) -> _BuilderT:
        self._args.append(add_query(*args))
        return self

    def body(self: _BuilderT, b: Any) -> _BuilderT:
        self._args.append(set_json_body(b))
        return self

    def pre_request(self: _BuilderT, fn: PreRequestFn) -> _BuilderT:
        self._args.append(pre_request(fn))
        return self

    def _prepare(self, ctx: Context | None) -> tuple[Context, list[SetRequestOptionFn]]:
        if ctx is None:
            raise MissingContextError("ctx is required", request_id=self.id)
        args = [*self._args, add_header(HEADER_ACCEPT, MIME_TYPE_JSON)]
        return ctx.with_value(ContextKey.REQUEST_ID, self.id), args

    def _parse(self, response: httpx.Response, body: bytes, into: Any) -> tuple[httpx.Response, Any]:
        if into is None or not body:
            return response, None
        return response, _decode(body, into, self.id)


class RESTRequest(_BaseRESTRequest):
    """Accumulates request options and executes them as a JSON exchange.

    Every execution sends the same request id so the whole exchange can be
    traced across logs, even when :meth:`do` is called more than once.
    """

    def __init__(self, client: Client, method: str, path: str, *args: SetRequestOptionFn) -> None:
        super().__init__(method, path, *args)
        self.client = client

    def do(self, ctx: Context | None, into: type[T] | Any = None) -> tuple[httpx.Response, T | None]:
        """Send the request and parse a non-empty body into ``into`` when given."""
        rctx, args = self._prepare(ctx)
        response, body = self.client.do_request(rctx, self.method, self.path, *args)
        return self._parse(response, body, into)


class AsyncRESTRequest(_BaseRESTRequest):
    def __init__(self, client: AsyncClient, method: str, path: str, *args: SetRequestOptionFn) -> None:
        super().__init__(method, path, *args)
        self.client = client

    async def do(self, ctx: Context | None, into: type[T] | Any = None) -> tuple[httpx.Response, T | None]:
        rctx, args = self._prepare(ctx)
        response, body = await self.client.do_request(rctx, self.method, self.path, *args)
        return self._parse(response, body, into)


def new_rest_request(client: Client, method: str, path: str, *args: SetRequestOptionFn) -> RESTRequest:
    return RESTRequest(client, method, path, *args)
