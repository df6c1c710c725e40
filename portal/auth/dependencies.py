"""FastAPI dependencies for the token slot, the API client and route guards."""

from collections.abc import AsyncGenerator
from typing import Annotated

import httpx
from fastapi import Depends, Request

from portal.api.client import ApiClient
from portal.api.session import AuthSession
from portal.auth.guards import Redirect, Render, RouteGuard
from portal.auth.permissions import Capability
from portal.auth.resolver import CapabilityResolver
from portal.config.settings import Settings, get_settings


class GuardRedirect(Exception):
    """Raised by a guard for an unauthorized viewer.

    The application turns it into a ``303 See Other`` to ``location``.
    """

    def __init__(self, location: str) -> None:
        self.location = location
        super().__init__(location)


def get_auth_session(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthSession:
    """Read the single token slot from the request."""
    return AuthSession.from_request(request, settings.auth_cookie_name)


async def get_api_client(
    request: Request,
    session: Annotated[AuthSession, Depends(get_auth_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AsyncGenerator[ApiClient, None]:
    """API client bound to this request's session.

    Reuses the application's shared ``httpx.AsyncClient`` when the lifespan has
    created one.
    """
    http_client: httpx.AsyncClient | None = getattr(
        request.app.state, "http_client", None
    )
    client = ApiClient(settings.api_url, session, http_client=http_client)
    try:
        yield client
    finally:
        await client.aclose()


def require_capability(capability: Capability, *, with_shell: bool = False):
    """Create a dependency that guards a view on ``capability``.

    Example:
        @router.get("/admin/dashboard")
        async def admin_dashboard(viewer: AdminViewer):
            ...
    """

    async def guard_checker(
        request: Request,
        client: Annotated[ApiClient, Depends(get_api_client)],
        settings: Annotated[Settings, Depends(get_settings)],
    ) -> Render:
        guard = RouteGuard(
            CapabilityResolver(client, capability),
            settings.landing_path,
            with_shell=with_shell,
        )
        await guard.settle()

        decision = guard.decide(current_path=request.url.path)
        if isinstance(decision, Redirect):
            raise GuardRedirect(decision.to)
        return decision

    return guard_checker


# ==============================================================================
# Type Aliases for Cleaner Code
# ==============================================================================

Session = Annotated[AuthSession, Depends(get_auth_session)]
Client = Annotated[ApiClient, Depends(get_api_client)]

AdminViewer = Annotated[
    Render, Depends(require_capability(Capability.ADMIN, with_shell=True))
]
AdminMasterViewer = Annotated[
    Render, Depends(require_capability(Capability.ADMIN_MASTER))
]
EditorViewer = Annotated[Render, Depends(require_capability(Capability.EDITOR))]
LeaderViewer = Annotated[
    Render, Depends(require_capability(Capability.LEADER, with_shell=True))
]
