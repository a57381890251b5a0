"""
API routes aggregation.
"""

from fastapi import APIRouter

from .features import router as features_router

router = APIRouter()

router.include_router(features_router, prefix="/features", tags=["features"])
