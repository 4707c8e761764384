"""Use case for creating users."""

from sqlalchemy.orm import Session

from minicrm.domain.entities import ROLE_SUPER_ADMIN, User
from minicrm.infrastructure.repositories import RoleRepository, UserRepository
from minicrm.infrastructure.security import get_password_hash
from minicrm.utils import now_in_app_timezone

from .validators import ensure_valid_email, require_name


def create_user(
    session: Session,
    *,
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    role_alias: str,
    company_id: int | None = None,
    phone: str | None = None,
    avatar: str | None = None,
    created_by: int | None = None,
) -> User:
    """Create a new user ensuring unique email addresses.

    Every role other than ``super_admin`` belongs to a company.
    """

    repository = UserRepository(session)
    normalized_email = ensure_valid_email(email)
    if repository.get_by_email(normalized_email):
        raise ValueError("The email address is already registered")

    role = RoleRepository(session).get_by_alias(role_alias)
    if role is None:
        raise ValueError(f"Role '{role_alias}' not found")

    if role.alias != ROLE_SUPER_ADMIN and company_id is None:
        raise ValueError("A company is required for managers and employees")

    if not password or len(password) < 8:
        raise ValueError("The password must have at least 8 characters")

    user = User(
        id=None,
        role=role,
        first_name=require_name(first_name, "first_name"),
        last_name=require_name(last_name, "last_name"),
        email=normalized_email,
        password=get_password_hash(password),
        phone=(phone or "").strip() or None,
        avatar=(avatar or "").strip() or None,
        company_id=None if role.alias == ROLE_SUPER_ADMIN else company_id,
        is_active=True,
        created_by=created_by,
        created_at=now_in_app_timezone(),
        updated_at=None,
    )
    return repository.create(user)
