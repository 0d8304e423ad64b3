"""
API v1 Router - FabQuote
"""
from fastapi import APIRouter
from app.api.v1.endpoints import (
    categories,
    processes,
    routings,
)

router = APIRouter()

# Categories for processes and routings
router.include_router(
    categories.router,
    prefix="/categories",
    tags=["categories"]
)

# Process catalog
router.include_router(
    processes.router,
    prefix="/processes",
    tags=["processes"]
)

# Routings, pricing and step editing
router.include_router(
    routings.router,
    prefix="/routings",
    tags=["routings"]
)
