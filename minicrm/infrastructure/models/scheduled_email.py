"""SQLAlchemy model for scheduled emails."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text

from minicrm.infrastructure.database import Base
from minicrm.utils import now_in_app_naive_datetime


class ScheduledEmailModel(Base):
    """Database representation of an email and its delivery status."""

    __tablename__ = "scheduled_email"
    __table_args__ = (
        Index("ix_scheduled_email_status_schedule", "status", "send_now", "scheduled_for"),
    )

    id = Column(Integer, primary_key=True, index=True)
    from_name = Column(String(120), nullable=False)
    from_email = Column(String(120), nullable=False)
    to_name = Column(String(120), nullable=False)
    to_email = Column(String(120), nullable=False)
    subject = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    template = Column(String(50), nullable=False, default="default")
    send_now = Column(Boolean, nullable=False, default=True)
    scheduled_for = Column(DateTime, nullable=True)
    status = Column(String(20), nullable=False, default="pending", index=True)
    sent_at = Column(DateTime, nullable=True)
    failed_at = Column(DateTime, nullable=True)
    last_error = Column(String(500), nullable=True)
    created_by = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    company_id = Column(Integer, nullable=True, index=True)
    created_at = Column(DateTime, nullable=False, default=now_in_app_naive_datetime)
    updated_at = Column(DateTime, nullable=True, onupdate=now_in_app_naive_datetime)


__all__ = ["ScheduledEmailModel"]
