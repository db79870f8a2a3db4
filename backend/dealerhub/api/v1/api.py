"""API routes for the v1 surface."""

from fastapi import APIRouter

from dealerhub.api.v1.endpoints import (
    admin_feature_flags,
    auth,
    feature_flags,
    organization_feature_flags,
    organizations,
)

api_router = APIRouter()
api_router.include_router(feature_flags.router, prefix="/feature-flags", tags=["feature-flags"])
api_router.include_router(
    admin_feature_flags.router, prefix="/admin/feature-flags", tags=["admin"]
)
api_router.include_router(
    organization_feature_flags.router, prefix="/organizations", tags=["organizations"]
)
api_router.include_router(organizations.router, prefix="/organizations", tags=["organizations"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
