"""Configurable HTTP client with JSON REST helpers."""

from .body import RawJSON
from .client import AsyncClient, Client, canonical_header_key
from .client_options import (
    ClientOptions,
    SetClientOptionsFn,
    disable_http2,
    follow_redirects,
    log_dump,
    namespace,
    transport,
)
from .constants import (
    HEADER_ACCEPT,
    HEADER_CONTENT_TYPE,
    METHOD_CONNECT,
    METHOD_DELETE,
    METHOD_GET,
    METHOD_HEAD,
    METHOD_OPTIONS,
    METHOD_PATCH,
    METHOD_POST,
    METHOD_PUT,
    METHOD_TRACE,
    MIME_TYPE_JSON,
    MIME_TYPE_URL_ENCODED_FORM,
    ContextKey,
)
from .context import Context
from .exceptions import (
    ContextCancelledError,
    ContextError,
    DeadlineExceededError,
    DecodingError,
    EncodingError,
    HttpcError,
    MissingContextError,
    TransportError,
    UsageError,
)
from .instrumentation import (
    Instrumentation,
    get_global_transport_overrider,
    get_instrumentation,
    load_env,
    reset_globals,
    set_global_transport_overrider,
    set_instrumentation,
)
from .request_options import (
    PreRequestFn,
    RequestOptions,
    SetRequestOptionFn,
    add_header,
    add_query,
    disable_canonical_header,
    pre_request,
    set_body,
    set_json_body,
    set_url_encoded_form_body,
    timeout,
)
from .rest_request import AsyncRESTRequest, RESTRequest, new_rest_request

__all__ = [
    "AsyncClient",
    "AsyncRESTRequest",
    "Client",
    "ClientOptions",
    "Context",
    "ContextCancelledError",
    "ContextError",
    "ContextKey",
    "DeadlineExceededError",
    "DecodingError",
    "EncodingError",
    "HEADER_ACCEPT",
    "HEADER_CONTENT_TYPE",
    "HttpcError",
    "Instrumentation",
    "METHOD_CONNECT",
    "METHOD_DELETE",
    "METHOD_GET",
    "METHOD_HEAD",
    "METHOD_OPTIONS",
    "METHOD_PATCH",
    "METHOD_POST",
    "METHOD_PUT",
    "METHOD_TRACE",
    "MIME_TYPE_JSON",
    "MIME_TYPE_URL_ENCODED_FORM",
    "MissingContextError",
    "PreRequestFn",
    "RESTRequest",
    "RawJSON",
    "RequestOptions",
    "SetClientOptionsFn",
    "SetRequestOptionFn",
    "TransportError",
    "UsageError",
    "add_header",
    "add_query",
    "canonical_header_key",
    "disable_canonical_header",
    "disable_http2",
    "follow_redirects",
    "get_global_transport_overrider",
    "get_instrumentation",
    "load_env",
    "log_dump",
    "namespace",
    "new_rest_request",
    "pre_request",
    "reset_globals",
    "set_body",
    "set_global_transport_overrider",
    "set_instrumentation",
    "set_json_body",
    "set_url_encoded_form_body",
    "timeout",
    "transport",
]
