"""Role-gated dashboards: admin, admin master, editor and group leader."""

import asyncio
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from portal.auth.dependencies import (
    AdminMasterViewer,
    AdminViewer,
    Client,
    EditorViewer,
    LeaderViewer,
)
from portal.core.result import settle, unwrap_or
from portal.courses.service import load_catalog
from portal.layout.sidebar import Sidebar


router = APIRouter(tags=["admin"])


class GuardedPage(BaseModel):
    shell: Sidebar | None = None
    data: dict[str, Any]


@router.get("/admin/dashboard")
async def admin_dashboard(viewer: AdminViewer, client: Client) -> GuardedPage:
    """Platform totals."""
    courses_res, profiles_res, groups_res = await asyncio.gather(
        settle(client.courses.get_all(), event="admin_courses_failed"),
        settle(client.profiles.get_all(), event="admin_profiles_failed"),
        settle(client.groups.get_all(), event="admin_groups_failed"),
    )
    return GuardedPage(
        shell=viewer.shell,
        data={
            "courses": len(unwrap_or(courses_res, None) or []),
            "users": len(unwrap_or(profiles_res, None) or []),
            "groups": len(unwrap_or(groups_res, None) or []),
        },
    )


@router.get("/admin/master")
async def admin_master(viewer: AdminMasterViewer, client: Client) -> GuardedPage:
    """Role assignments, visible to admin masters only."""
    roles = await settle(client.settings.get_roles(), event="admin_roles_failed")
    return GuardedPage(shell=viewer.shell, data={"roles": unwrap_or(roles, [])})


@router.get("/editor")
async def editor(viewer: EditorViewer, client: Client) -> GuardedPage:
    """Courses available for editing."""
    cards = await load_catalog(client)
    return GuardedPage(
        shell=viewer.shell,
        data={"courses": [card.model_dump(mode="json") for card in cards]},
    )


@router.get("/leader/group")
async def leader_group(viewer: LeaderViewer, client: Client) -> GuardedPage:
    """The leader's group and its members' progress."""
    group = unwrap_or(await settle(client.groups.led(), event="led_group_failed"), None)
    if not isinstance(group, dict):
        group = None

    progress: list[Any] = []
    if group and group.get("id"):
        result = await settle(
            client.groups.get_progress(group["id"]), event="group_progress_failed"
        )
        progress = unwrap_or(result, None) or []
    return GuardedPage(
        shell=viewer.shell, data={"group": group, "progress": progress}
    )
