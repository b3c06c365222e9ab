"""Waitlist signup endpoint - public endpoint used by the landing pages."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_db, get_notifier
from schemas.signup import (
    ErrorKind,
    SignupFailureResponse,
    SignupRequest,
    SignupSuccessResponse,
)
from services import signup_service
from services.notifier import Notifier
from services.signup_service import SignupOutcome, SignupResult

logger = logging.getLogger(__name__)

router = APIRouter()

DUPLICATE_MESSAGE = "You're already on the list!"
TRANSIENT_MESSAGE = "Something went wrong saving your signup. Please try again."
NOTIFY_PENDING_MESSAGE = "You're on the list! Your email is on its way shortly, we'll retry delivery."


def build_signup_response(result: SignupResult) -> tuple[int, BaseModel]:
    """
    Map a service result onto the wire response.

    Returns:
        Tuple of (HTTP status code, response body)
    """
    if result.outcome == SignupOutcome.PERSIST_FAILED:
        return status.HTTP_503_SERVICE_UNAVAILABLE, SignupFailureResponse(
            error_kind=ErrorKind.TRANSIENT,
            message=TRANSIENT_MESSAGE,
            email=result.email,
        )

    if not result.was_new:
        # Re-submission: shown to the user as a success
        return status.HTTP_200_OK, SignupFailureResponse(
            error_kind=ErrorKind.DUPLICATE,
            message=DUPLICATE_MESSAGE,
            email=result.email,
        )

    if result.outcome == SignupOutcome.NOTIFY_FAILED:
        return status.HTTP_201_CREATED, SignupSuccessResponse(
            email=result.email,
            outcome=result.outcome.value,
            notification_pending=True,
            message=NOTIFY_PENDING_MESSAGE,
        )

    return status.HTTP_201_CREATED, SignupSuccessResponse(
        email=result.email,
        outcome=result.outcome.value,
    )


@router.post(
    "/waitlists/{waitlist}/signups",
    response_model=SignupSuccessResponse | SignupFailureResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_signup(
    waitlist: str,
    signup_data: SignupRequest,
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    """
    Join a waitlist.

    This is a public endpoint - no authentication required.
    A repeated email answers 200 with errorKind "duplicate", which clients
    render as a success.

    Args:
        waitlist: Waitlist slug
        signup_data: Email and optional reference URL
        db: Database session
        notifier: Notification collaborator

    Returns:
        JSONResponse with the signup result

    Raises:
        HTTPException: 404 if the waitlist is unknown
    """
    if not signup_service.is_known_waitlist(waitlist):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown waitlist: {waitlist}",
        )

    result = await signup_service.handle_submission(
        db,
        waitlist=waitlist,
        email=signup_data.email,
        reference_url=signup_data.reference_url,
        notifier=notifier,
    )
    logger.debug("Signup %s on %s -> %s", result.email, waitlist, result.outcome.value)

    status_code, body = build_signup_response(result)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True),
    )
