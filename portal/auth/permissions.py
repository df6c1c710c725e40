"""Role-based capabilities for the portal.

Roles are a closed set of tags assigned to an identity by the remote store;
an identity holds zero or more. Guarded views ask for a capability, and each
capability is satisfied by a set of roles:

- ADMIN: admin
- ADMIN_MASTER: admin_master
- EDITOR: admin or editor
- LEADER: lider
"""

from collections.abc import Iterable
from enum import Enum


class Role(str, Enum):
    """Role tags as stored by the remote API."""

    ADMIN = "admin"
    ADMIN_MASTER = "admin_master"
    EDITOR = "editor"
    LEADER = "lider"


class Capability(str, Enum):
    """Access a guarded view can require."""

    ADMIN = "admin"
    ADMIN_MASTER = "admin_master"
    EDITOR = "editor"
    LEADER = "leader"


CAPABILITY_ROLES: dict[Capability, frozenset[Role]] = {
    Capability.ADMIN: frozenset({Role.ADMIN}),
    Capability.ADMIN_MASTER: frozenset({Role.ADMIN_MASTER}),
    Capability.EDITOR: frozenset({Role.ADMIN, Role.EDITOR}),
    Capability.LEADER: frozenset({Role.LEADER}),
}

# Roles that reveal the administration section of the sidebar
ADMIN_MENU_ROLES = frozenset({Role.ADMIN, Role.ADMIN_MASTER})


def parse_roles(values: Iterable[str | Role]) -> frozenset[Role]:
    """Build the role set from raw strings, ignoring unknown tags.

    Examples:
        >>> sorted(parse_roles(["admin", "student"]))
        [<Role.ADMIN: 'admin'>]
    """
    roles: set[Role] = set()
    for value in values:
        try:
            roles.add(Role(value))
        except ValueError:
            continue
    return frozenset(roles)


def has_capability(roles: Iterable[Role], capability: Capability) -> bool:
    """Check whether any of ``roles`` grants ``capability``.

    Examples:
        >>> has_capability({Role.ADMIN}, Capability.EDITOR)
        True
        >>> has_capability({Role.ADMIN}, Capability.LEADER)
        False
    """
    return not CAPABILITY_ROLES[capability].isdisjoint(roles)


def shows_admin_menu(roles: Iterable[Role]) -> bool:
    """Admin and admin_master both see the administration menu."""
    return not ADMIN_MENU_ROLES.isdisjoint(roles)
