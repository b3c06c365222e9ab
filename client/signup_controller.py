"""Client-side submission state machine for the waitlist form.

Presentational code feeds keystrokes through ``update_email`` and
``update_reference_url``, calls ``submit`` and renders ``state``.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from client.api_client import UNEXPECTED_RESPONSE_MESSAGE, WaitlistApiClient
from errors import SignupError, TransientNetworkError, ValidationError
from schemas.signup import (
    ErrorKind,
    email_problem,
    normalize_reference_url,
    reference_url_looks_valid,
)

logger = logging.getLogger(__name__)


class SubmissionStatus(str, enum.Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class SubmissionState:
    """
    Snapshot of one form interaction.

    ``email`` is set for SUCCESS, ``reason`` and ``error_kind`` for FAILED.
    A duplicate signup is a SUCCESS with ``already_registered`` set.
    """

    status: SubmissionStatus = SubmissionStatus.IDLE
    email: Optional[str] = None
    reason: Optional[str] = None
    error_kind: Optional[str] = None
    already_registered: bool = False
    notification_pending: bool = False
    message: Optional[str] = None

    @property
    def retryable(self) -> bool:
        return self.status == SubmissionStatus.FAILED and self.error_kind == TransientNetworkError.kind


class SignupController:
    """
    Drives one waitlist form through IDLE, VALIDATING, SUBMITTING and then
    SUCCESS or FAILED.

    Args:
        api: Client for the signup endpoint
        on_success: Called with the submitted email on success, including
            an already-registered email
        on_error: Called with the FAILED state
    """

    def __init__(
        self,
        api: WaitlistApiClient,
        on_success: Optional[Callable[[str], None]] = None,
        on_error: Optional[Callable[[SubmissionState], None]] = None,
    ):
        self._api = api
        self._on_success = on_success
        self._on_error = on_error
        self.email = ""
        self.reference_url = ""
        self.state = SubmissionState()

    def update_email(self, value: str) -> None:
        self.email = value

    def update_reference_url(self, value: str) -> None:
        self.reference_url = value

    @property
    def reference_url_looks_valid(self) -> bool:
        """Hint for the form; a malformed URL never blocks submission."""
        return reference_url_looks_valid(self.reference_url)

    @property
    def can_submit(self) -> bool:
        return self.state.status in (SubmissionStatus.IDLE, SubmissionStatus.FAILED)

    async def submit(self) -> SubmissionState:
        """
        Validate the form and send at most one signup request.

        Refused (state returned unchanged, nothing sent) unless the
        controller is IDLE or FAILED. Never retries on its own.

        Returns:
            The resulting SubmissionState, also stored on ``state``
        """
        if not self.can_submit:
            logger.debug("Ignoring submit while %s", self.state.status.value)
            return self.state

        self.state = SubmissionState(status=SubmissionStatus.VALIDATING)
        problem = email_problem(self.email)
        if problem:
            return self._fail(ValidationError(problem))

        email = self.email.strip()
        reference_url = normalize_reference_url(self.reference_url)

        self.state = SubmissionState(status=SubmissionStatus.SUBMITTING, email=email)
        try:
            response = await self._api.submit_signup(email, reference_url)
        except TransientNetworkError as e:
            logger.warning("Signup request for %s failed: %s", email, e.__cause__ or e)
            return self._fail(e)
        except Exception:
            # Never leave the form stuck in SUBMITTING
            logger.exception("Signup request for %s raised unexpectedly", email)
            return self._fail(TransientNetworkError(UNEXPECTED_RESPONSE_MESSAGE))

        if response.ok:
            return self._succeed(
                email,
                notification_pending=response.notification_pending,
                message=response.message,
            )
        if response.error_kind == ErrorKind.DUPLICATE:
            return self._succeed(email, already_registered=True, message=response.message)
        if response.error_kind == ErrorKind.VALIDATION:
            return self._fail(ValidationError(response.message))
        return self._fail(TransientNetworkError(response.message))

    def dismiss(self) -> SubmissionState:
        """Close the success or error view and return to IDLE."""
        if self.state.status == SubmissionStatus.SUBMITTING:
            return self.state
        if self.state.status == SubmissionStatus.SUCCESS:
            self.email = ""
            self.reference_url = ""
        self.state = SubmissionState()
        return self.state

    def _succeed(
        self,
        email: str,
        *,
        already_registered: bool = False,
        notification_pending: bool = False,
        message: Optional[str] = None,
    ) -> SubmissionState:
        self.state = SubmissionState(
            status=SubmissionStatus.SUCCESS,
            email=email,
            already_registered=already_registered,
            notification_pending=notification_pending,
            message=message,
        )
        if self._on_success is not None:
            self._on_success(email)
        return self.state

    def _fail(self, error: SignupError) -> SubmissionState:
        # Typed input is left untouched so the user can resubmit
        self.state = SubmissionState(
            status=SubmissionStatus.FAILED,
            reason=error.message,
            error_kind=error.kind,
        )
        if self._on_error is not None:
            self._on_error(self.state)
        return self.state
