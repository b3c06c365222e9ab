"""Unit tests for the waitlist repository."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.waitlist_signup import WaitlistSignup
from repos import waitlist_repo


async def _count(session: AsyncSession, waitlist: str, email: str) -> int:
    result = await session.execute(
        select(func.count()).select_from(WaitlistSignup).where(
            WaitlistSignup.waitlist == waitlist,
            WaitlistSignup.email == email,
        )
    )
    return result.scalar_one()


@pytest.mark.asyncio
async def test_insert_if_absent_creates_record(db_session: AsyncSession):
    record, was_new = await waitlist_repo.insert_if_absent(
        db_session,
        waitlist="main",
        email="new@example.com",
        reference_url="https://example.com",
    )
    await db_session.commit()

    assert was_new is True
    assert record.email == "new@example.com"
    assert record.reference_url == "https://example.com"
    assert record.notification_sent is False


@pytest.mark.asyncio
async def test_insert_if_absent_returns_existing_record(db_session: AsyncSession):
    """
    Test: A second insert is a no-op that resolves to the first record.
    """
    first, _ = await waitlist_repo.insert_if_absent(
        db_session, waitlist="main", email="again@example.com", reference_url="https://first.example.com"
    )
    await db_session.commit()

    second, was_new = await waitlist_repo.insert_if_absent(
        db_session, waitlist="main", email="again@example.com", reference_url="https://second.example.com"
    )
    await db_session.commit()

    assert was_new is False
    assert second.id == first.id
    # Existing row is not modified
    assert second.reference_url == "https://first.example.com"
    assert await _count(db_session, "main", "again@example.com") == 1


@pytest.mark.asyncio
async def test_set_notified_flips_flag_once(db_session: AsyncSession):
    record, _ = await waitlist_repo.insert_if_absent(
        db_session, waitlist="automations", email="flag@example.com"
    )
    await db_session.commit()

    assert await waitlist_repo.set_notified(db_session, waitlist="automations", email="flag@example.com") is True
    await db_session.commit()
    assert await waitlist_repo.set_notified(db_session, waitlist="automations", email="flag@example.com") is False
    await db_session.commit()

    await db_session.refresh(record)
    assert record.notification_sent is True
    assert record.notified_at is not None


@pytest.mark.asyncio
async def test_set_notified_unknown_email(db_session: AsyncSession):
    assert await waitlist_repo.set_notified(db_session, waitlist="automations", email="ghost@example.com") is False


@pytest.mark.asyncio
async def test_list_pending_notification(db_session: AsyncSession):
    for email in ("a@example.com", "b@example.com", "c@example.com"):
        await waitlist_repo.insert_if_absent(db_session, waitlist="automations", email=email)
    await waitlist_repo.insert_if_absent(db_session, waitlist="main", email="other@example.com")
    await db_session.commit()
    await waitlist_repo.set_notified(db_session, waitlist="automations", email="b@example.com")
    await db_session.commit()

    pending = await waitlist_repo.list_pending_notification(db_session, waitlist="automations")

    assert sorted(s.email for s in pending) == ["a@example.com", "c@example.com"]


@pytest.mark.asyncio
async def test_list_for_waitlist_filters(db_session: AsyncSession):
    await waitlist_repo.insert_if_absent(db_session, waitlist="automations", email="sent@example.com")
    await waitlist_repo.insert_if_absent(db_session, waitlist="automations", email="unsent@example.com")
    await db_session.commit()
    await waitlist_repo.set_notified(db_session, waitlist="automations", email="sent@example.com")
    await db_session.commit()

    everything = await waitlist_repo.list_for_waitlist(db_session, waitlist="automations")
    sent = await waitlist_repo.list_for_waitlist(db_session, waitlist="automations", notification_sent=True)
    page = await waitlist_repo.list_for_waitlist(db_session, waitlist="automations", limit=1)

    assert len(everything) == 2
    assert [s.email for s in sent] == ["sent@example.com"]
    assert len(page) == 1
