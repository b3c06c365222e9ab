"""Service layer for waitlist signups: record, then optionally notify."""

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

import config
from errors import NotificationDispatchError, PersistenceError
from models.waitlist_signup import WaitlistSignup
from repos import waitlist_repo
from schemas.signup import normalize_email, normalize_reference_url
from services.email_templates import build_lead_magnet_email
from services.notifier import Notifier

logger = logging.getLogger(__name__)


class SignupOutcome(str, enum.Enum):
    """Result of handling one submission."""

    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
    NOTIFIED_NOW = "notified_now"
    ALREADY_NOTIFIED = "already_notified"
    NOTIFY_FAILED = "notify_failed"
    PERSIST_FAILED = "persist_failed"


@dataclass
class SignupResult:
    outcome: SignupOutcome
    email: str
    was_new: bool = False
    record: Optional[WaitlistSignup] = None
    reason: Optional[str] = None

    @property
    def persisted(self) -> bool:
        return self.outcome != SignupOutcome.PERSIST_FAILED


def is_known_waitlist(waitlist: str) -> bool:
    return waitlist in config.settings.WAITLISTS


def waitlist_notifies(waitlist: str) -> bool:
    """Whether signups on this waitlist receive the lead-magnet email."""
    return waitlist in config.settings.NOTIFY_WAITLISTS


async def handle_submission(
    session: AsyncSession,
    *,
    waitlist: str,
    email: str,
    reference_url: Optional[str] = None,
    notifier: Notifier,
    notify: Optional[bool] = None,
) -> SignupResult:
    """
    Record a signup idempotently and deliver its notification at most once.

    A repeated email is not an error: the existing record is used and
    delivery is (re)attempted if it has not succeeded yet. A delivery
    failure never rolls back the stored signup.

    Args:
        session: Database session
        waitlist: Waitlist slug
        email: Submitted email (normalized here)
        reference_url: Optional reference URL, stored unvalidated
        notifier: Notification collaborator
        notify: Override the waitlist's notification variant

    Returns:
        SignupResult describing what happened
    """
    normalized = normalize_email(email)
    reference_url = normalize_reference_url(reference_url)
    if notify is None:
        notify = waitlist_notifies(waitlist)

    try:
        record, was_new = await waitlist_repo.insert_if_absent(
            session,
            waitlist=waitlist,
            email=normalized,
            reference_url=reference_url,
        )
        await session.commit()
    except (SQLAlchemyError, PersistenceError) as e:
        await session.rollback()
        logger.exception("Failed to persist signup for %s on %s", normalized, waitlist)
        return SignupResult(
            outcome=SignupOutcome.PERSIST_FAILED,
            email=normalized,
            reason=str(e),
        )

    if was_new:
        logger.info("New signup %s on %s", normalized, waitlist)

    if not notify:
        return SignupResult(
            outcome=SignupOutcome.CREATED if was_new else SignupOutcome.ALREADY_EXISTS,
            email=normalized,
            was_new=was_new,
            record=record,
        )

    return await notify_record(session, record=record, notifier=notifier, was_new=was_new)


async def notify_record(
    session: AsyncSession,
    *,
    record: WaitlistSignup,
    notifier: Notifier,
    was_new: bool = False,
) -> SignupResult:
    """
    Deliver the notification for one stored signup unless already delivered.

    Returns:
        SignupResult with outcome ALREADY_NOTIFIED, NOTIFIED_NOW or NOTIFY_FAILED
    """
    # A rollback below expires record, so its key is read up front
    email = record.email
    waitlist = record.waitlist

    if record.notification_sent:
        return SignupResult(
            outcome=SignupOutcome.ALREADY_NOTIFIED,
            email=email,
            was_new=was_new,
            record=record,
        )

    content = build_lead_magnet_email(email, waitlist)
    try:
        await notifier.send(email, content)
    except NotificationDispatchError as e:
        logger.warning(
            "Notification to %s on %s failed (ambiguous=%s): %s",
            email,
            waitlist,
            e.ambiguous,
            e.message,
        )
        return SignupResult(
            outcome=SignupOutcome.NOTIFY_FAILED,
            email=email,
            was_new=was_new,
            record=record,
            reason=e.message,
        )

    try:
        flipped = await waitlist_repo.set_notified(
            session,
            waitlist=waitlist,
            email=email,
        )
        await session.commit()
        await session.refresh(record)
    except SQLAlchemyError:
        await session.rollback()
        logger.exception("Email sent to %s on %s but delivery status was not recorded", email, waitlist)
        return SignupResult(
            outcome=SignupOutcome.NOTIFY_FAILED,
            email=email,
            was_new=was_new,
            reason="delivery status not recorded",
        )

    if not flipped:
        logger.warning("Notification for %s was also delivered by a concurrent request", email)

    return SignupResult(
        outcome=SignupOutcome.NOTIFIED_NOW,
        email=email,
        was_new=was_new,
        record=record,
    )


async def notify_by_email(
    session: AsyncSession,
    *,
    waitlist: str,
    email: str,
    notifier: Notifier,
) -> SignupResult | None:
    """
    Deliver the notification for an existing signup.

    Returns:
        SignupResult, or None if no signup exists for the email
    """
    record = await waitlist_repo.get_by_email(
        session,
        waitlist=waitlist,
        email=normalize_email(email),
    )
    if record is None:
        return None
    return await notify_record(session, record=record, notifier=notifier)


async def retry_pending_notifications(
    session: AsyncSession,
    *,
    waitlist: str,
    notifier: Notifier,
    limit: int = 100,
) -> list[SignupResult]:
    """
    Re-attempt delivery for signups whose notification has not succeeded.

    Each record is attempted once per run; failures stay pending.
    """
    pending = await waitlist_repo.list_pending_notification(
        session,
        waitlist=waitlist,
        limit=limit,
    )
    # A failed flag write rolls back and expires every loaded record,
    # so each one is re-read by key before it is attempted
    emails = [record.email for record in pending]
    results = []
    for email in emails:
        record = await waitlist_repo.get_by_email(session, waitlist=waitlist, email=email)
        if record is None:
            continue
        results.append(await notify_record(session, record=record, notifier=notifier))

    delivered = sum(1 for r in results if r.outcome == SignupOutcome.NOTIFIED_NOW)
    logger.info(
        "Retried %d pending notifications on %s: %d delivered",
        len(results),
        waitlist,
        delivered,
    )
    return results
