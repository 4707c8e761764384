"""Routes to create users and read the authenticated profile."""

import logging

from anyio import to_thread
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from minicrm.application.use_cases.notifications import notify_users_of_new_user
from minicrm.application.use_cases.users import create_user as create_user_uc
from minicrm.domain.entities import User
from minicrm.infrastructure.database import get_db
from minicrm.interfaces.api.dependencies import get_current_active_user, require_super_admin
from minicrm.interfaces.api.schemas import UserCreate, UserRead

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)


def _to_read_model(user: User) -> UserRead:
    return UserRead.model_validate(user)


@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register_user(
    user_in: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_super_admin),
):
    """Create a user and tell the rest of the team about it."""

    try:
        user = await to_thread.run_sync(
            lambda: create_user_uc(
                db,
                first_name=user_in.first_name,
                last_name=user_in.last_name,
                email=user_in.email,
                password=user_in.password,
                role_alias=user_in.role,
                company_id=user_in.company_id,
                phone=user_in.phone,
                avatar=user_in.avatar,
                created_by=current_user.id,
            )
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    result = await notify_users_of_new_user(db, user)
    if result.failure_count:
        logger.warning(
            "%s realtime pushes failed announcing user %s", result.failure_count, user.id
        )

    return _to_read_model(user)


@router.get("/me", response_model=UserRead)
def read_current_user(current_user: User = Depends(get_current_active_user)):
    """Return the authenticated user."""

    return _to_read_model(current_user)
