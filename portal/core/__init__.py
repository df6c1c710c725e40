# Core infrastructure
from portal.core.context import (
    clear_context,
    get_context,
    get_request_id,
    get_user_id,
    set_request_id,
    set_trace_id,
    set_user_id,
)
from portal.core.logging import configure_structlog, get_logger
from portal.core.middleware import RequestContextMiddleware
from portal.core.result import (
    PENDING,
    AsyncResult,
    Failed,
    Ok,
    Pending,
    is_pending,
    settle,
    unwrap_or,
)


__all__ = [
    "PENDING",
    "AsyncResult",
    "Failed",
    "Ok",
    "Pending",
    "RequestContextMiddleware",
    "clear_context",
    "configure_structlog",
    "get_context",
    "get_logger",
    "get_request_id",
    "get_user_id",
    "is_pending",
    "set_request_id",
    "set_trace_id",
    "set_user_id",
    "settle",
    "unwrap_or",
]
