"""
Categories API Endpoints

Categories group processes and routings. Routing create/update resolves
its category by name against this list.
"""
from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.logging_config import get_logger
from app.schemas.category import CATEGORY_TYPE_PATTERN, CategoryCreate, CategoryResponse
from app.schemas.common import ERROR_RESPONSES
from app.services import category_catalog

router = APIRouter()
logger = get_logger(__name__)


@router.get("/", response_model=List[CategoryResponse])
async def list_categories(
    category_type: Optional[str] = Query(None, pattern=CATEGORY_TYPE_PATTERN),
    active_only: bool = True,
    db: Session = Depends(get_db),
):
    """
    List categories.

    - **category_type**: process, routing, material or finish
    - **active_only**: Hide deactivated categories
    """
    return category_catalog.list_categories(db, category_type=category_type, active_only=active_only)


@router.post(
    "/",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_category(request: CategoryCreate, db: Session = Depends(get_db)):
    return category_catalog.create_category(db, request.model_dump())
