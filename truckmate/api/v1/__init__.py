"""
API v1 router aggregation.
"""
from fastapi import APIRouter

from truckmate.api.v1.endpoints import admin, auth, dashboard, profile, verification

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(auth.router)
api_router.include_router(auth.admin_router)

api_router.include_router(
    profile.router,
    prefix="/profile",
    tags=["Driver Profile"],
)

api_router.include_router(
    verification.router,
    prefix="/verification",
    tags=["Verification"],
)

api_router.include_router(
    admin.router,
    prefix="/verification",
    tags=["Admin Review"],
)

api_router.include_router(
    dashboard.router,
    prefix="/admin",
    tags=["Admin Dashboard"],
)
