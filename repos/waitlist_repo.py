"""Repository for WaitlistSignup database operations."""

from datetime import datetime, UTC
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from errors import PersistenceError
from models.waitlist_signup import WaitlistSignup


def _insert_for(session: AsyncSession):
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert
    if dialect == "sqlite":
        return sqlite_insert
    raise NotImplementedError(f"insert_if_absent is not supported on {dialect}")


async def get_by_email(
    session: AsyncSession,
    *,
    waitlist: str,
    email: str,
) -> WaitlistSignup | None:
    """
    Get a signup by its natural key.

    Args:
        session: Database session
        waitlist: Waitlist slug
        email: Normalized email

    Returns:
        WaitlistSignup if found, None otherwise
    """
    query = (
        select(WaitlistSignup)
        .where(
            WaitlistSignup.waitlist == waitlist,
            WaitlistSignup.email == email,
        )
        .execution_options(populate_existing=True)
    )
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def insert_if_absent(
    session: AsyncSession,
    *,
    waitlist: str,
    email: str,
    reference_url: Optional[str] = None,
) -> tuple[WaitlistSignup, bool]:
    """
    Insert a signup unless one already exists for (waitlist, email).

    Uses ON CONFLICT DO NOTHING so a concurrent duplicate insert resolves
    to the existing row instead of an IntegrityError. The existing row is
    not modified.

    Args:
        session: Database session
        waitlist: Waitlist slug
        email: Normalized email
        reference_url: Optional reference URL stored on first insert

    Returns:
        Tuple of (record, was_new)
    """
    insert = _insert_for(session)
    stmt = (
        insert(WaitlistSignup)
        .values(
            waitlist=waitlist,
            email=email,
            reference_url=reference_url,
        )
        .on_conflict_do_nothing(index_elements=["waitlist", "email"])
    )
    result = await session.execute(stmt)
    was_new = result.rowcount == 1

    record = await get_by_email(session, waitlist=waitlist, email=email)
    if record is None:
        # Only possible if the row was deleted between the two statements
        raise PersistenceError(f"signup for {email} on {waitlist} vanished after insert")
    return record, was_new


async def set_notified(
    session: AsyncSession,
    *,
    waitlist: str,
    email: str,
) -> bool:
    """
    Mark a signup as notified.

    Conditional update: only matches rows still at notification_sent = false.

    Returns:
        True if this call flipped the flag, False if it was already set
        or the record does not exist
    """
    stmt = (
        update(WaitlistSignup)
        .where(
            WaitlistSignup.waitlist == waitlist,
            WaitlistSignup.email == email,
            WaitlistSignup.notification_sent.is_(False),
        )
        .values(notification_sent=True, notified_at=datetime.now(UTC))
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    return result.rowcount == 1


async def list_for_waitlist(
    session: AsyncSession,
    *,
    waitlist: str,
    notification_sent: Optional[bool] = None,
    limit: int = 100,
    offset: int = 0,
) -> list[WaitlistSignup]:
    """
    List signups on a waitlist, newest first.

    Args:
        session: Database session
        waitlist: Waitlist slug
        notification_sent: If set, filter on delivery status
        limit: Maximum rows to return
        offset: Rows to skip

    Returns:
        List of signups
    """
    query = select(WaitlistSignup).where(WaitlistSignup.waitlist == waitlist)

    if notification_sent is not None:
        query = query.where(WaitlistSignup.notification_sent.is_(notification_sent))

    query = query.order_by(WaitlistSignup.created_at.desc()).limit(limit).offset(offset)
    result = await session.execute(query)
    return [signup for signup in result.scalars().all()]


async def list_pending_notification(
    session: AsyncSession,
    *,
    waitlist: str,
    limit: int = 100,
) -> list[WaitlistSignup]:
    """List signups still waiting for delivery, oldest first."""
    query = (
        select(WaitlistSignup)
        .where(
            WaitlistSignup.waitlist == waitlist,
            WaitlistSignup.notification_sent.is_(False),
        )
        .order_by(WaitlistSignup.created_at.asc())
        .limit(limit)
    )
    result = await session.execute(query)
    return [signup for signup in result.scalars().all()]
