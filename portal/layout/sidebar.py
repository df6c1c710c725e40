"""Navigation shell: the sidebar wrapped around guarded views."""

from collections.abc import Iterable

from pydantic import BaseModel

from portal.auth.permissions import Role, shows_admin_menu


class NavItem(BaseModel):
    title: str
    url: str
    icon: str
    active: bool = False


class NavSection(BaseModel):
    label: str
    items: list[NavItem]


class Sidebar(BaseModel):
    sections: list[NavSection]


MAIN_MENU: list[tuple[str, str, str]] = [
    ("Dashboard", "/dashboard", "home"),
    ("Cursos", "/courses", "book-open"),
    ("Meus Cursos", "/my-courses", "graduation-cap"),
    ("Certificados", "/certificates", "award"),
    ("Base de Conhecimento", "/faq", "help-circle"),
    ("Perfil", "/profile", "user"),
]

ADMIN_ENTRY = ("Admin", "/admin/dashboard", "shield")


def build_sidebar(current_path: str, roles: Iterable[Role]) -> Sidebar:
    """Build the sidebar for a viewer at ``current_path``.

    Main entries are active on an exact path match; the admin entry is active
    anywhere under ``/admin`` and only shown to admin or admin_master.
    """
    sections = [
        NavSection(
            label="Menu Principal",
            items=[
                NavItem(title=title, url=url, icon=icon, active=current_path == url)
                for title, url, icon in MAIN_MENU
            ],
        )
    ]

    if shows_admin_menu(roles):
        title, url, icon = ADMIN_ENTRY
        sections.append(
            NavSection(
                label="Administração",
                items=[
                    NavItem(
                        title=title,
                        url=url,
                        icon=icon,
                        active=current_path.startswith("/admin"),
                    )
                ],
            )
        )

    return Sidebar(sections=sections)
