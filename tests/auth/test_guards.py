"""Tests for the route guard state machine and guarded views."""

import httpx
import pytest
from fastapi.testclient import TestClient

from portal.auth.guards import GuardState, Placeholder, Redirect, Render, RouteGuard
from portal.auth.permissions import Capability
from portal.auth.resolver import CapabilityResolver


def section_labels(render: Render) -> list[str]:
    return [section.label for section in render.shell.sections]


class TestRouteGuard:
    """Tests for RouteGuard."""

    @pytest.mark.asyncio
    async def test_loading_shows_placeholder(self, make_api) -> None:
        """An unsettled guard never navigates."""
        async with make_api("tok") as api:
            guard = RouteGuard(CapabilityResolver(api, Capability.ADMIN), "/dashboard")

            assert guard.state is GuardState.LOADING
            assert guard.decide() == Placeholder(message="Carregando...")

    @pytest.mark.asyncio
    async def test_unauthorized_redirects(self, remote, make_api) -> None:
        remote.on("GET", "/auth/me", {"id": "u1", "roles": ["editor"]})

        async with make_api("tok") as api:
            guard = RouteGuard(CapabilityResolver(api, Capability.ADMIN), "/dashboard")
            state = await guard.settle()

        assert state is GuardState.UNAUTHORIZED
        assert guard.decide() == Redirect(to="/dashboard", replace=True)

    @pytest.mark.asyncio
    async def test_no_identity_redirects(self, remote, make_api) -> None:
        async with make_api() as api:
            guard = RouteGuard(CapabilityResolver(api, Capability.LEADER), "/dashboard")
            await guard.settle()

        assert isinstance(guard.decide(), Redirect)
        assert remote.requests == []

    @pytest.mark.asyncio
    async def test_authorized_renders_children(self, remote, make_api) -> None:
        remote.on("GET", "/auth/me", {"id": "u1", "roles": ["editor"]})

        async with make_api("tok") as api:
            guard = RouteGuard(CapabilityResolver(api, Capability.EDITOR), "/dashboard")
            await guard.settle()

        decision = guard.decide(children="page")
        assert guard.state is GuardState.AUTHORIZED
        assert decision == Render(children="page", shell=None)

    @pytest.mark.asyncio
    async def test_shell_includes_admin_section(self, remote, make_api) -> None:
        remote.on("GET", "/auth/me", {"id": "u1", "roles": ["admin"]})

        async with make_api("tok") as api:
            guard = RouteGuard(
                CapabilityResolver(api, Capability.ADMIN),
                "/dashboard",
                with_shell=True,
            )
            await guard.settle()

        decision = guard.decide(children="page", current_path="/admin/dashboard")
        assert isinstance(decision, Render)
        assert section_labels(decision) == ["Menu Principal", "Administração"]
        assert decision.shell.sections[1].items[0].active is True

    @pytest.mark.asyncio
    async def test_settled_state_is_terminal(self, remote, make_api) -> None:
        """A second settle does not re-check."""
        remote.on("GET", "/auth/me", {"id": "u1", "roles": ["lider"]})

        async with make_api("tok") as api:
            guard = RouteGuard(CapabilityResolver(api, Capability.LEADER), "/dashboard")
            await guard.settle()
            await guard.settle()

        assert guard.state is GuardState.AUTHORIZED
        assert len(remote.calls("GET", "/auth/me")) == 1


class TestGuardedViews:
    """Guarded views through the application."""

    def test_anonymous_redirected_to_landing(
        self, client: TestClient, remote
    ) -> None:
        response = client.get("/admin/dashboard", follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/dashboard"
        assert remote.requests == []

    def test_wrong_role_redirected(self, client: TestClient, remote) -> None:
        remote.on("GET", "/auth/me", {"id": "u1", "roles": ["lider"]})
        client.cookies.set("auth_token", "tok")

        response = client.get("/admin/master", follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/dashboard"

    def test_admin_dashboard_rendered(self, client: TestClient, remote) -> None:
        remote.on("GET", "/auth/me", {"id": "u1", "roles": ["admin"]})
        remote.on("GET", "/courses", [{"id": "c1", "title": "Curso"}])
        remote.on("GET", "/profiles", [{"id": "u1"}, {"id": "u2"}])
        remote.on("GET", "/groups", [], status_code=500)
        client.cookies.set("auth_token", "tok")

        response = client.get("/admin/dashboard")

        assert response.status_code == 200
        data = response.json()
        assert data["data"] == {"courses": 1, "users": 2, "groups": 0}
        labels = [section["label"] for section in data["shell"]["sections"]]
        assert labels == ["Menu Principal", "Administração"]

    def test_editor_view_has_no_shell(self, client: TestClient, remote) -> None:
        remote.on("GET", "/auth/me", {"id": "u1", "roles": ["editor"]})
        remote.on("GET", "/courses", [])
        client.cookies.set("auth_token", "tok")

        response = client.get("/editor")

        assert response.status_code == 200
        assert response.json() == {"shell": None, "data": {"courses": []}}

    def test_leader_group(self, client: TestClient, remote) -> None:
        remote.on("GET", "/auth/me", {"id": "u1", "roles": ["lider"]})
        remote.on("GET", "/groups/led", {"id": "g1", "name": "Equipe"})
        remote.on("GET", "/groups/g1/progress", [{"userId": "u2", "percentage": 50}])
        client.cookies.set("auth_token", "tok")

        response = client.get("/leader/group")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["group"]["id"] == "g1"
        assert data["progress"] == [{"userId": "u2", "percentage": 50}]

    def test_failed_role_check_redirects(self, client: TestClient, remote) -> None:
        remote.on("GET", "/auth/me", {"error": "down"}, status_code=503)
        client.cookies.set("auth_token", "tok")

        response = client.get("/leader/group", follow_redirects=False)

        assert response.status_code == 303

    def test_admin_master_has_no_shell(self, client: TestClient, remote) -> None:
        remote.on("GET", "/auth/me", {"id": "u1", "roles": ["admin_master"]})
        remote.on("GET", "/settings/roles/all", [{"userId": "u2", "role": "editor"}])
        client.cookies.set("auth_token", "tok")

        response = client.get("/admin/master")

        assert response.status_code == 200
        assert response.json() == {
            "shell": None,
            "data": {"roles": [{"userId": "u2", "role": "editor"}]},
        }

    def test_leader_without_group(self, client: TestClient, remote) -> None:
        """An empty answer for the led group renders an empty page."""
        remote.on("GET", "/auth/me", {"id": "u1", "roles": ["lider"]})
        remote.on_call("GET", "/groups/led", lambda _request: httpx.Response(204))
        client.cookies.set("auth_token", "tok")

        response = client.get("/leader/group")

        assert response.status_code == 200
        assert response.json()["data"] == {"group": None, "progress": []}
        assert remote.calls("GET", "/groups/None/progress") == []

    def test_admin_dashboard_empty_answers(self, client: TestClient, remote) -> None:
        remote.on("GET", "/auth/me", {"id": "u1", "roles": ["admin"]})
        for path in ("/courses", "/profiles", "/groups"):
            remote.on_call("GET", path, lambda _request: httpx.Response(204))
        client.cookies.set("auth_token", "tok")

        response = client.get("/admin/dashboard")

        assert response.status_code == 200
        assert response.json()["data"] == {"courses": 0, "users": 0, "groups": 0}
