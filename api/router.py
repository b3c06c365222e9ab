"""Main API router that includes versioned routers."""

from fastapi import APIRouter

from api.v1 import health, waitlist
from api.v1.admin import waitlist as admin_waitlist

# Main API router
api_router = APIRouter()

# Include v1 routers
v1_router = APIRouter(prefix="/v1")
v1_router.include_router(health.router, tags=["health"])
v1_router.include_router(waitlist.router, tags=["waitlist"])
v1_router.include_router(admin_waitlist.router, tags=["admin"])

api_router.include_router(v1_router)
