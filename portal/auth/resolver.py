"""Capability resolver.

A single parameterized resolver covers every guarded capability. It fetches
the viewer's identity from the remote API, reads the role tags and applies the
capability's role predicate. Remote failures fail closed: the capability is
denied and the error is logged, never raised.
"""

from dataclasses import dataclass

import structlog

from portal.api.client import ApiClient
from portal.auth.permissions import Capability, Role, has_capability, parse_roles
from portal.core.context import set_user_id
from portal.core.result import (
    PENDING,
    AsyncResult,
    Failed,
    Ok,
    is_pending,
    settle,
    unwrap_or,
)


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CapabilityCheck:
    """Outcome of one check cycle."""

    flag: bool
    loading: bool


async def resolve_roles(client: ApiClient) -> AsyncResult:
    """Fetch the viewer's role set.

    Returns ``Ok(frozenset())`` without any request when there is no identity,
    ``Ok(roles)`` on success and ``Failed`` on a remote error.
    """
    if not client.session.is_authenticated:
        return Ok(frozenset())

    result = await settle(client.auth.me(), event="role_check_failed")
    if isinstance(result, Failed):
        return result

    identity = result.value or {}
    set_user_id(identity.get("id"))
    return Ok(parse_roles(identity.get("roles") or []))


class CapabilityResolver:
    """Resolves one capability for the viewer bound to ``client``."""

    def __init__(self, client: ApiClient, capability: Capability) -> None:
        self.client = client
        self.capability = capability
        self.state: AsyncResult = PENDING
        self.roles: frozenset[Role] = frozenset()

    @property
    def loading(self) -> bool:
        return is_pending(self.state)

    @property
    def granted(self) -> bool:
        return unwrap_or(self.state, False)

    async def check(self) -> CapabilityCheck:
        """Run one check cycle; settles ``state`` exactly once."""
        self.state = PENDING
        roles_result = await resolve_roles(self.client)

        self.roles = unwrap_or(roles_result, frozenset())
        flag = has_capability(self.roles, self.capability)
        self.state = Ok(flag)

        logger.debug(
            "capability_resolved",
            capability=self.capability.value,
            granted=flag,
            failed=isinstance(roles_result, Failed),
        )
        return CapabilityCheck(flag=self.granted, loading=self.loading)


async def resolve_capability(
    client: ApiClient, capability: Capability
) -> CapabilityCheck:
    """Resolve ``capability`` for the viewer bound to ``client``."""
    return await CapabilityResolver(client, capability).check()
