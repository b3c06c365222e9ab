"""Waitlist signup model and schema."""

from datetime import datetime, UTC
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Boolean, DateTime, String, UniqueConstraint, Uuid, false
from sqlalchemy.orm import Mapped, mapped_column

from db import Base
from schemas.signup import EMAIL_MAX_LENGTH, REFERENCE_URL_MAX_LENGTH


class WaitlistSignup(Base):
    """One email on one waitlist. Unique per (waitlist, normalized email)."""

    __tablename__ = "waitlist_signups"
    __table_args__ = (
        UniqueConstraint("waitlist", "email", name="uq_waitlist_signups_waitlist_email"),
    )

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    waitlist: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(EMAIL_MAX_LENGTH), nullable=False, index=True)
    reference_url: Mapped[Optional[str]] = mapped_column(String(REFERENCE_URL_MAX_LENGTH), nullable=True)

    # Delivery tracking: only ever flips false -> true
    notification_sent: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
        index=True,
    )
    notified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )


# Pydantic schemas
class WaitlistSignupResponse(BaseModel):
    """Schema for operator listings."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    waitlist: str
    email: str
    reference_url: Optional[str] = None
    notification_sent: bool
    notified_at: Optional[datetime] = None
    created_at: datetime


class NotificationRetryItem(BaseModel):
    """Outcome of one retried delivery."""

    email: str
    outcome: str
    reason: Optional[str] = None


class NotificationRetryResponse(BaseModel):
    """Summary of an operator-triggered retry run."""

    waitlist: str
    attempted: int
    delivered: int
    failed: int
    results: list[NotificationRetryItem]
