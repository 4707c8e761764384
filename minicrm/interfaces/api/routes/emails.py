"""Routes to schedule emails and control their delivery."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from minicrm.application.policies import (
    EmailAccess,
    email_list_scope,
    evaluate_email_access,
)
from minicrm.application.use_cases.emails import (
    EmailPage,
    cancel_scheduled_email,
    create_scheduled_email,
    get_scheduled_email,
    list_scheduled_emails,
    retry_scheduled_email,
)
from minicrm.domain.entities import ScheduledEmail, User
from minicrm.domain.exceptions import (
    EmailNotFoundError,
    EmailTransitionError,
    EmailValidationError,
)
from minicrm.infrastructure.database import get_db
from minicrm.infrastructure.email_templates import list_email_templates
from minicrm.interfaces.api.dependencies import require_email_manager
from minicrm.interfaces.api.schemas import (
    EmailTemplateRead,
    PaginationRead,
    ScheduledEmailCreate,
    ScheduledEmailPage,
    ScheduledEmailRead,
)

router = APIRouter(prefix="/emails", tags=["emails"])


def _to_read_model(email: ScheduledEmail) -> ScheduledEmailRead:
    return ScheduledEmailRead.model_validate(email)


def _to_page(page: EmailPage) -> ScheduledEmailPage:
    return ScheduledEmailPage(
        emails=[_to_read_model(email) for email in page.items],
        pagination=PaginationRead(
            current_page=page.page,
            total_pages=page.total_pages,
            total_items=page.total,
            has_next_page=page.has_next_page,
            has_prev_page=page.has_prev_page,
        ),
    )


def _load_with_access(db: Session, email_id: int, user: User) -> tuple[ScheduledEmail, EmailAccess]:
    try:
        email = get_scheduled_email(db, email_id)
    except EmailNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    access = evaluate_email_access(user, email)
    if not access.can_view:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")
    return email, access


@router.post("/", response_model=ScheduledEmailRead, status_code=status.HTTP_201_CREATED)
def schedule_email(
    email_in: ScheduledEmailCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_email_manager),
):
    """Schedule an email, or queue it for the next sweep when ``send_now`` is set."""

    try:
        email = create_scheduled_email(
            db,
            sender=current_user,
            from_name=email_in.from_name,
            to_name=email_in.to_name,
            to_email=email_in.to_email,
            subject=email_in.subject,
            message=email_in.message,
            template=email_in.template,
            send_now=email_in.send_now,
            scheduled_for=email_in.scheduled_for,
        )
    except EmailValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _to_read_model(email)


@router.get("/", response_model=ScheduledEmailPage)
def list_emails(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: str | None = Query(None, alias="status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_email_manager),
):
    """Return the emails visible to the caller, newest first."""

    try:
        scope = email_list_scope(current_user)
    except PermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc

    try:
        result = list_scheduled_emails(
            db, scope=scope, status=status_filter, page=page, limit=limit
        )
    except EmailValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _to_page(result)


@router.get("/templates", response_model=list[EmailTemplateRead])
def read_email_templates(_: User = Depends(require_email_manager)):
    """Return the templates that can be selected when scheduling an email."""

    return list_email_templates()


@router.get("/{email_id}", response_model=ScheduledEmailRead)
def read_email(
    email_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_email_manager),
):
    email, _ = _load_with_access(db, email_id, current_user)
    return _to_read_model(email)


@router.put("/{email_id}/cancel", response_model=ScheduledEmailRead)
def cancel_email(
    email_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_email_manager),
):
    """Cancel a pending email before it is sent."""

    _, access = _load_with_access(db, email_id, current_user)
    if not access.can_cancel:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")

    try:
        email = cancel_scheduled_email(db, email_id)
    except EmailNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except EmailTransitionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return _to_read_model(email)


@router.put("/{email_id}/retry", response_model=ScheduledEmailRead)
def retry_email(
    email_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_email_manager),
):
    """Queue a failed email again; the next sweep picks it up."""

    _, access = _load_with_access(db, email_id, current_user)
    if not access.can_retry:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")

    try:
        email = retry_scheduled_email(db, email_id)
    except EmailNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except EmailTransitionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return _to_read_model(email)
