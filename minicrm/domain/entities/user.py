"""Domain entity representing a user."""

from dataclasses import dataclass
from datetime import datetime

from .role import ROLE_EMPLOYEE, ROLE_MANAGER, ROLE_SUPER_ADMIN, Role


@dataclass
class User:
    """Core attributes describing an application user."""

    id: int | None
    role: Role
    first_name: str
    last_name: str
    email: str
    password: str
    phone: str | None
    avatar: str | None
    company_id: int | None
    is_active: bool
    created_by: int | None
    created_at: datetime | None
    updated_at: datetime | None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def has_role(self, alias: str) -> bool:
        """Return ``True`` when the user's role alias matches ``alias``."""

        return self.role.alias.lower() == alias.lower()

    def is_super_admin(self) -> bool:
        return self.has_role(ROLE_SUPER_ADMIN)

    def is_manager(self) -> bool:
        return self.has_role(ROLE_MANAGER)

    def is_employee(self) -> bool:
        return self.has_role(ROLE_EMPLOYEE)


__all__ = ["User"]
