from dataclasses import dataclass

from .models import Role
from .schemas import UserProfile

FINANCIALS = "FINANCIALS"
AI_COPILOT = "AI_COPILOT"

DASHBOARD_PATHS: dict[Role, str] = {
    Role.ADMIN: "/admin/dashboard",
    Role.TEACHER: "/teacher/dashboard",
    Role.PARENT: "/parent/dashboard",
}

ALL_ROLES = frozenset(Role)


@dataclass(frozen=True)
class NavItem:
    path: str
    label: str
    roles: frozenset[Role]
    module_required: str | None = None


NAVIGATION: tuple[NavItem, ...] = (
    NavItem("/dashboard", "Dashboard", ALL_ROLES),
    NavItem("/admin/students", "Students", frozenset({Role.ADMIN})),
    NavItem("/admin/teachers", "Teachers", frozenset({Role.ADMIN})),
    NavItem("/admin/compliance", "Compliance Hub", frozenset({Role.ADMIN})),
    NavItem("/admin/modules", "Modules Marketplace", frozenset({Role.ADMIN})),
    # Premium admin modules
    NavItem("/admin/financials", "Financials", frozenset({Role.ADMIN}), FINANCIALS),
    NavItem("/admin/co-pilot", "AI Co-Pilot", frozenset({Role.ADMIN}), AI_COPILOT),
    NavItem("/teacher/planner", "Curriculum Planner", frozenset({Role.TEACHER})),
    NavItem("/parent/connection", "Connection Hub", frozenset({Role.PARENT})),
    NavItem("/calendar", "Calendar", ALL_ROLES),
    NavItem("/settings", "Settings", ALL_ROLES),
)


def dashboard_path_for(role: Role) -> str:
    return DASHBOARD_PATHS[role]


def visible_navigation(profile: UserProfile) -> list[NavItem]:
    return [
        item
        for item in NAVIGATION
        if profile.role in item.roles
        and (item.module_required is None or profile.has_module(item.module_required))
    ]
