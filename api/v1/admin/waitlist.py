"""Operator endpoints for inspecting waitlists and retrying deliveries."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_db, get_notifier, require_admin_key
from models.waitlist_signup import (
    NotificationRetryItem,
    NotificationRetryResponse,
    WaitlistSignupResponse,
)
from repos import waitlist_repo
from services import signup_service
from services.notifier import Notifier
from services.signup_service import SignupOutcome

router = APIRouter()


def require_known_waitlist(waitlist: str) -> str:
    if not signup_service.is_known_waitlist(waitlist):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown waitlist: {waitlist}",
        )
    return waitlist


@router.get(
    "/admin/waitlists/{waitlist}/signups",
    response_model=List[WaitlistSignupResponse],
)
async def list_signups(
    waitlist: str = Depends(require_known_waitlist),
    notification_sent: Optional[bool] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    _admin: None = Depends(require_admin_key),
    db: AsyncSession = Depends(get_db),
):
    """
    List signups on a waitlist (operator only).

    Args:
        waitlist: Waitlist slug
        notification_sent: Optional filter on delivery status
        limit: Maximum number of results (1-1000, default 100)
        offset: Number of results to skip (default 0)

    Returns:
        List[WaitlistSignupResponse]: Signups, newest first
    """
    signups = await waitlist_repo.list_for_waitlist(
        db,
        waitlist=waitlist,
        notification_sent=notification_sent,
        limit=limit,
        offset=offset,
    )
    return [WaitlistSignupResponse.model_validate(s) for s in signups]


@router.post(
    "/admin/waitlists/{waitlist}/notifications/retry",
    response_model=NotificationRetryResponse,
)
async def retry_notifications(
    waitlist: str = Depends(require_known_waitlist),
    limit: int = Query(100, ge=1, le=1000),
    _admin: None = Depends(require_admin_key),
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    """Re-attempt delivery for every signup still pending notification."""
    if not signup_service.waitlist_notifies(waitlist):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Waitlist {waitlist} does not send notifications",
        )

    results = await signup_service.retry_pending_notifications(
        db,
        waitlist=waitlist,
        notifier=notifier,
        limit=limit,
    )
    delivered = sum(1 for r in results if r.outcome == SignupOutcome.NOTIFIED_NOW)
    return NotificationRetryResponse(
        waitlist=waitlist,
        attempted=len(results),
        delivered=delivered,
        failed=len(results) - delivered,
        results=[
            NotificationRetryItem(email=r.email, outcome=r.outcome.value, reason=r.reason)
            for r in results
        ],
    )


@router.post(
    "/admin/waitlists/{waitlist}/signups/{email}/notify",
    response_model=NotificationRetryItem,
)
async def notify_signup(
    email: str,
    waitlist: str = Depends(require_known_waitlist),
    _admin: None = Depends(require_admin_key),
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    """
    Deliver the notification for one existing signup.

    Already-delivered signups are not sent again.

    Raises:
        HTTPException: 404 if the email is not on the waitlist,
            502 if delivery failed
    """
    result = await signup_service.notify_by_email(
        db,
        waitlist=waitlist,
        email=email,
        notifier=notifier,
    )
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Signup not found",
        )
    if result.outcome == SignupOutcome.NOTIFY_FAILED:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Delivery failed: {result.reason}",
        )
    return NotificationRetryItem(email=result.email, outcome=result.outcome.value)
