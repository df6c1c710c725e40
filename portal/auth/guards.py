"""Route guard state machine.

A guard wraps a protected view. It starts LOADING, and once its resolver
settles it is either AUTHORIZED or UNAUTHORIZED for the rest of the request:

- LOADING: show a placeholder, never navigate
- UNAUTHORIZED: replace-navigate to the landing view
- AUTHORIZED: render the children, optionally inside the navigation shell
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from portal.auth.resolver import CapabilityResolver
from portal.layout.sidebar import Sidebar, build_sidebar


class GuardState(str, Enum):
    LOADING = "loading"
    AUTHORIZED = "authorized"
    UNAUTHORIZED = "unauthorized"


@dataclass(frozen=True)
class Placeholder:
    message: str = "Carregando..."


@dataclass(frozen=True)
class Redirect:
    to: str
    replace: bool = True


@dataclass(frozen=True)
class Render:
    children: Any
    shell: Sidebar | None = None


GuardDecision = Placeholder | Redirect | Render


class RouteGuard:
    """Gate a view on one capability."""

    def __init__(
        self,
        resolver: CapabilityResolver,
        landing_path: str,
        *,
        with_shell: bool = False,
    ) -> None:
        self.resolver = resolver
        self.landing_path = landing_path
        self.with_shell = with_shell

    @property
    def state(self) -> GuardState:
        if self.resolver.loading:
            return GuardState.LOADING
        if self.resolver.granted:
            return GuardState.AUTHORIZED
        return GuardState.UNAUTHORIZED

    async def settle(self) -> GuardState:
        """Run the resolver once; later calls keep the settled state."""
        if self.state is GuardState.LOADING:
            await self.resolver.check()
        return self.state

    def decide(self, children: Any = None, current_path: str = "") -> GuardDecision:
        """What to show for the current state."""
        state = self.state
        if state is GuardState.LOADING:
            return Placeholder()
        if state is GuardState.UNAUTHORIZED:
            return Redirect(to=self.landing_path, replace=True)

        shell = (
            build_sidebar(current_path, self.resolver.roles) if self.with_shell else None
        )
        return Render(children=children, shell=shell)
