"""DB-backed tests for WaitlistSignup model.

These tests verify model defaults and the (waitlist, email) uniqueness
constraint. All tests use a real database session.
"""

from datetime import datetime

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.waitlist_signup import WaitlistSignup, WaitlistSignupResponse


@pytest.mark.asyncio
async def test_create_signup_minimal(db_session: AsyncSession):
    """
    Test: Only waitlist and email are required; delivery starts as not sent.
    """
    signup = WaitlistSignup(waitlist="main", email="test@example.com")
    db_session.add(signup)
    await db_session.commit()
    await db_session.refresh(signup)

    assert signup.id is not None
    assert signup.reference_url is None
    assert signup.notification_sent is False
    assert signup.notified_at is None
    assert isinstance(signup.created_at, datetime)


@pytest.mark.asyncio
async def test_duplicate_email_on_same_waitlist_rejected(db_session: AsyncSession):
    """
    Test: The unique constraint forbids two rows for one email on one waitlist.
    """
    db_session.add(WaitlistSignup(waitlist="main", email="dup@example.com"))
    await db_session.commit()

    db_session.add(WaitlistSignup(waitlist="main", email="dup@example.com"))
    with pytest.raises(IntegrityError):
        await db_session.commit()
    await db_session.rollback()


@pytest.mark.asyncio
async def test_same_email_allowed_on_different_waitlists(db_session: AsyncSession):
    """
    Test: Uniqueness is scoped to a waitlist.
    """
    db_session.add(WaitlistSignup(waitlist="main", email="both@example.com"))
    db_session.add(WaitlistSignup(waitlist="automations", email="both@example.com"))
    await db_session.commit()

    result = await db_session.execute(
        select(WaitlistSignup).where(WaitlistSignup.email == "both@example.com")
    )
    assert {s.waitlist for s in result.scalars().all()} == {"main", "automations"}


@pytest.mark.asyncio
async def test_response_schema_from_model(db_session: AsyncSession):
    signup = WaitlistSignup(
        waitlist="automations",
        email="schema@example.com",
        reference_url="https://example.com/ref",
    )
    db_session.add(signup)
    await db_session.commit()
    await db_session.refresh(signup)

    response = WaitlistSignupResponse.model_validate(signup)

    assert response.email == "schema@example.com"
    assert response.reference_url == "https://example.com/ref"
    assert response.notification_sent is False
