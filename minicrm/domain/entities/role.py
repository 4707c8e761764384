"""Domain entity representing a user role."""

from dataclasses import dataclass

ROLE_SUPER_ADMIN = "super_admin"
ROLE_MANAGER = "manager"
ROLE_EMPLOYEE = "employee"

DEFAULT_ROLES: tuple[tuple[str, str], ...] = (
    (ROLE_SUPER_ADMIN, "Super Administrator"),
    (ROLE_MANAGER, "Manager"),
    (ROLE_EMPLOYEE, "Employee"),
)


@dataclass
class Role:
    """Core attributes describing a role that can be assigned to a user."""

    id: int
    name: str
    alias: str


__all__ = [
    "DEFAULT_ROLES",
    "ROLE_EMPLOYEE",
    "ROLE_MANAGER",
    "ROLE_SUPER_ADMIN",
    "Role",
]
