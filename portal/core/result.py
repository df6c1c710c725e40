"""Async result type shared by the resolver, the guards and the views.

A remote read is either still ``Pending``, settled ``Ok`` with a value, or
settled ``Failed`` with the error that ended it. Views consume the three states
uniformly instead of juggling separate loading/data/error flags.
"""

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import httpx
import structlog

from portal.api.errors import ApiError


logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Pending:
    """The read has not settled yet."""


@dataclass(frozen=True)
class Ok(Generic[T]):
    """The read settled with a value."""

    value: T


@dataclass(frozen=True)
class Failed:
    """The read settled with an error."""

    error: Exception

    @property
    def message(self) -> str:
        return str(self.error)


AsyncResult = Pending | Ok[Any] | Failed

PENDING = Pending()


def is_pending(result: AsyncResult) -> bool:
    """True while the result has not settled."""
    return isinstance(result, Pending)


def unwrap_or(result: AsyncResult, default: T) -> T:
    """Return the settled value, or ``default`` when pending or failed."""
    if isinstance(result, Ok):
        return result.value
    return default


async def settle(
    awaitable: Awaitable[T],
    *,
    event: str = "remote_read_failed",
) -> Ok[T] | Failed:
    """Await a remote read and capture its outcome.

    ``ApiError`` and httpx transport errors become ``Failed`` and are logged;
    anything else is a programming error and propagates.
    """
    try:
        return Ok(await awaitable)
    except (ApiError, httpx.HTTPError) as e:
        logger.warning(event, error=str(e), error_type=type(e).__name__)
        return Failed(e)
