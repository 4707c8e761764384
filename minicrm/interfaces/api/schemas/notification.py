"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: int
    user_id: int
    batch_id: str
    event_type: str
    title: str
    message: str
    payload: dict[str, Any] = Field(default_factory=dict)
    link: str | None = None
    created_at: datetime
    read_at: datetime | None = None
    is_read: bool


class MarkAllReadResponse(BaseModel):
    updated: int


__all__ = ["MarkAllReadResponse", "NotificationRead"]
