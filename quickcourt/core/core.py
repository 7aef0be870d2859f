from typing import Any, Dict, List

from quickcourt.models.enums import UserRole

# Landing page of each role in the web client
ROLE_HOME_ROUTES: Dict[UserRole, str] = {
    UserRole.USER: "/",
    UserRole.FACILITY_OWNER: "/owner/dashboard",
    UserRole.ADMIN: "/admin/dashboard",
}

_unmapped = set(UserRole) - set(ROLE_HOME_ROUTES)
if _unmapped:
    raise RuntimeError(f"Roles without a home route: {sorted(r.value for r in _unmapped)}")


def home_route_for(role: str) -> str:
    return ROLE_HOME_ROUTES[UserRole(role)]


def allowed_roles(current_user: Any, required_roles: List[UserRole]) -> bool:
    """
    Checks whether the current user's role is among the required roles.

    current_user is the object returned by get_current_user.
    """
    return current_user.role in [r.value for r in required_roles]
