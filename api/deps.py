"""FastAPI dependencies for database, notifier and operator access."""

import hmac

from fastapi import Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import get_db as get_db_session
from services.notifier import Notifier


async def get_db() -> AsyncSession:
    """
    Dependency to get database session.
    Reuses the get_db function from db.py.
    """
    async for session in get_db_session():
        yield session


def get_notifier(request: Request) -> Notifier:
    """
    Dependency returning the process-wide notifier built at startup.

    Raises:
        HTTPException: 503 if the application started without one
    """
    notifier = getattr(request.app.state, "notifier", None)
    if notifier is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notification delivery is not initialized",
        )
    return notifier


def require_admin_key(x_admin_key: str | None = Header(None, alias="X-Admin-Key")) -> None:
    """
    Dependency to require the operator API key.

    Raises:
        HTTPException: 403 if no key is configured or the header does not match
    """
    expected = config.settings.ADMIN_API_KEY
    if not expected or not x_admin_key or not hmac.compare_digest(x_admin_key, expected):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This endpoint requires a valid X-Admin-Key header",
        )
