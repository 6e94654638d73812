"""API v1 root router."""

from __future__ import annotations

from fastapi import APIRouter

from app.api.v1.field_access import router as field_access_router


router = APIRouter()
router.include_router(field_access_router, prefix="/permissions", tags=["field-access"])
