"""
Category Pydantic Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

CATEGORY_TYPE_PATTERN = "^(process|routing|material|finish)$"


class CategoryBase(BaseModel):
    """Base category fields"""
    name: str = Field(..., min_length=1, max_length=100)
    category_type: str = Field(..., pattern=CATEGORY_TYPE_PATTERN)
    description: Optional[str] = None
    is_active: bool = True


class CategoryCreate(CategoryBase):
    """Create a new category"""
    pass


class CategoryResponse(CategoryBase):
    """Category response"""
    id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
