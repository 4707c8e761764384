"""Scheduled email schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from minicrm.domain.entities import DEFAULT_EMAIL_TEMPLATE


class ScheduledEmailCreate(BaseModel):
    from_name: str = Field(..., max_length=100)
    to_name: str = Field(..., max_length=100)
    to_email: str = Field(..., max_length=255)
    subject: str = Field(..., max_length=200)
    message: str
    template: str = Field(default=DEFAULT_EMAIL_TEMPLATE, max_length=50)
    send_now: bool = True
    scheduled_for: datetime | None = Field(
        default=None, description="Delivery date, required when send_now is false"
    )


class ScheduledEmailRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    from_name: str
    from_email: str
    to_name: str
    to_email: str
    subject: str
    message: str
    template: str
    send_now: bool
    scheduled_for: datetime | None
    status: str
    created_by: int
    company_id: int | None
    sent_at: datetime | None
    failed_at: datetime | None
    last_error: str | None
    created_at: datetime | None
    updated_at: datetime | None


class PaginationRead(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    has_next_page: bool
    has_prev_page: bool


class ScheduledEmailPage(BaseModel):
    emails: list[ScheduledEmailRead]
    pagination: PaginationRead


class EmailTemplateRead(BaseModel):
    id: str
    name: str
