"""Persistence layer for user data."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from minicrm.domain.entities import Role, User
from minicrm.infrastructure.models import RoleModel, UserModel
from minicrm.utils import ensure_app_naive_datetime, ensure_app_timezone, now_in_app_timezone


class UserRepository:
    """Provide CRUD operations for user entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> User | None:
        model = self._get_model(id=user_id)
        return self._to_entity(model) if model else None

    def get_by_email(self, email: str) -> User | None:
        model = (
            self.session.query(UserModel)
            .options(joinedload(UserModel.role))
            .filter(func.lower(UserModel.email) == email.strip().lower())
            .first()
        )
        return self._to_entity(model) if model else None

    def create(self, user: User) -> User:
        model = UserModel()
        self._apply_entity_to_model(model, user)
        model.created_by = user.created_by
        model.created_at = ensure_app_naive_datetime(
            user.created_at or now_in_app_timezone()
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        if model.role is None:
            self.session.refresh(model, attribute_names=["role"])
        return self._to_entity(model)

    def list_active_ids_by_role_aliases(
        self, aliases: Sequence[str], *, exclude_ids: Sequence[int] = ()
    ) -> list[int]:
        """Return ids of active users holding any of ``aliases``."""

        if not aliases:
            return []
        query = (
            self.session.query(UserModel.id)
            .join(RoleModel, UserModel.role_id == RoleModel.id)
            .filter(UserModel.is_active.is_(True))
            .filter(func.lower(RoleModel.alias).in_([alias.lower() for alias in aliases]))
        )
        if exclude_ids:
            query = query.filter(UserModel.id.notin_(list(exclude_ids)))
        return [user_id for (user_id,) in query.order_by(UserModel.id.asc()).all()]

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            role=UserRepository._role_to_entity(model.role),
            first_name=model.first_name,
            last_name=model.last_name,
            email=model.email,
            password=model.password,
            phone=model.phone,
            avatar=model.avatar,
            company_id=model.company_id,
            is_active=model.is_active,
            created_by=model.created_by,
            created_at=ensure_app_timezone(model.created_at),
            updated_at=ensure_app_timezone(model.updated_at),
        )

    def _get_model(self, **filters) -> UserModel | None:
        query = self.session.query(UserModel).options(joinedload(UserModel.role))
        return query.filter_by(**filters).first()

    @staticmethod
    def _apply_entity_to_model(model: UserModel, user: User) -> None:
        model.role_id = user.role.id
        model.first_name = user.first_name
        model.last_name = user.last_name
        model.email = user.email
        model.password = user.password
        model.phone = user.phone
        model.avatar = user.avatar
        model.company_id = user.company_id
        model.is_active = user.is_active

    @staticmethod
    def _role_to_entity(model_role) -> Role:
        if model_role is None:
            msg = "User role is not set"
            raise ValueError(msg)
        return Role(id=model_role.id, name=model_role.name, alias=model_role.alias)


__all__ = ["UserRepository"]
