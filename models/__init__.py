"""Database models."""

from db import Base

# Import all models so Alembic can detect them
from models.waitlist_signup import WaitlistSignup

__all__ = [
    "Base",
    "WaitlistSignup",
]
