"""
API v1 router initialization and setup.

``api_router`` carries the authenticated account/admin API under ``/api/v1``;
``serving_router`` carries the widget endpoints mounted at the root.
"""
from fastapi import APIRouter
from .endpoints import admin, payments, serving, users, websites

api_router = APIRouter()

api_router.include_router(
    users.router,
    prefix="/users",
    tags=["users"]
)

api_router.include_router(
    websites.router,
    prefix="/websites",
    tags=["websites"]
)

api_router.include_router(
    admin.router,
    prefix="/admin",
    tags=["admin"]
)

api_router.include_router(
    payments.router,
    prefix="/payments",
    tags=["payments"]
)

serving_router = serving.router

__all__ = ["api_router", "serving_router"]
