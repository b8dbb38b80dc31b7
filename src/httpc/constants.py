"""Shared header names, mime types, HTTP methods and context keys."""

from __future__ import annotations

import enum

HEADER_CONTENT_TYPE = "Content-Type"
HEADER_ACCEPT = "Accept"

MIME_TYPE_JSON = "application/json"
MIME_TYPE_URL_ENCODED_FORM = "application/x-www-form-urlencoded"

METHOD_GET = "GET"
METHOD_HEAD = "HEAD"
METHOD_POST = "POST"
METHOD_PUT = "PUT"
METHOD_PATCH = "PATCH"  # RFC 5789
METHOD_DELETE = "DELETE"
METHOD_CONNECT = "CONNECT"
METHOD_OPTIONS = "OPTIONS"
METHOD_TRACE = "TRACE"

NO_BODY_METHODS = frozenset({METHOD_GET})

DEFAULT_NAMESPACE = "httpc"
DEFAULT_TIMEOUT_MS = 10_000


class ContextKey(enum.Enum):
    REQUEST_ID = 1
