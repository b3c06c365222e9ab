"""Signup wire schemas and input rules shared by client and server."""

import re
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

# local@domain.tld, no whitespace, exactly one @
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Best-effort host[:port][/path], scheme optional
REFERENCE_URL_PATTERN = re.compile(
    r"^(https?://)?([\w-]+\.)+[A-Za-z0-9-]{2,}(:\d{1,5})?(/\S*)?$",
    re.IGNORECASE,
)

# Column widths of waitlist_signups
EMAIL_MAX_LENGTH = 320
REFERENCE_URL_MAX_LENGTH = 2048

EMPTY_EMAIL_MESSAGE = "Please enter your email"
INVALID_EMAIL_MESSAGE = "Please enter a valid email"


def normalize_email(email: str) -> str:
    """Trim and lower-case an email so it can be used as the unique key."""
    return email.strip().lower()


def email_problem(email: Optional[str]) -> Optional[str]:
    """
    Check an email against the signup rule.

    Returns:
        A user-facing message if the email is rejected, None if it is valid
    """
    trimmed = (email or "").strip()
    if not trimmed:
        return EMPTY_EMAIL_MESSAGE
    if len(trimmed) > EMAIL_MAX_LENGTH or not EMAIL_PATTERN.match(trimmed):
        return INVALID_EMAIL_MESSAGE
    return None


def normalize_reference_url(value: Optional[str]) -> Optional[str]:
    """Trim a reference URL. Blank or overlong values are dropped to None."""
    trimmed = (value or "").strip()
    if len(trimmed) > REFERENCE_URL_MAX_LENGTH:
        return None
    return trimmed or None


def reference_url_looks_valid(value: Optional[str]) -> bool:
    """Loose format check. An absent URL counts as valid."""
    trimmed = (value or "").strip()
    if not trimmed:
        return True
    if len(trimmed) > REFERENCE_URL_MAX_LENGTH:
        return False
    return REFERENCE_URL_PATTERN.match(trimmed) is not None


class ErrorKind(str, Enum):
    """Failure kinds reported to the client."""

    DUPLICATE = "duplicate"
    VALIDATION = "validation"
    TRANSIENT = "transient"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SignupRequest(CamelModel):
    """Request body for a waitlist signup."""

    email: str
    reference_url: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        problem = email_problem(value)
        if problem:
            raise ValueError(problem)
        return value.strip()

    @field_validator("reference_url")
    @classmethod
    def trim_reference_url(cls, value: Optional[str]) -> Optional[str]:
        # Format is not enforced
        return normalize_reference_url(value)


class SignupSuccessResponse(CamelModel):
    """Signup accepted and a new record was created."""

    ok: Literal[True] = True
    email: str
    outcome: str
    notification_pending: bool = False
    message: Optional[str] = None


class SignupFailureResponse(CamelModel):
    """Signup not created; ``duplicate`` is still a soft success."""

    ok: Literal[False] = False
    error_kind: ErrorKind
    message: str
    email: Optional[str] = None
