"""
Manufacturing Process Pydantic Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal


class ProcessBase(BaseModel):
    """Base process fields"""
    name: str = Field(..., min_length=1, max_length=200)
    category_id: Optional[str] = None
    description: Optional[str] = None
    setup_time_minutes: Decimal = Field(Decimal("0"), ge=0, description="Setup time in minutes")
    hourly_rate: Decimal = Field(Decimal("0"), ge=0, description="Rate per hour")
    minimum_cost: Decimal = Field(Decimal("0"), ge=0, description="Minimum charge for this process")
    complexity_multiplier: Decimal = Field(Decimal("1"), gt=0, description="Runtime cost multiplier")
    equipment_required: Optional[str] = Field(None, max_length=200)
    skill_level: Optional[str] = Field(None, max_length=50)
    is_active: bool = True


class ProcessCreate(ProcessBase):
    """Create a new process"""
    pass


class ProcessUpdate(BaseModel):
    """Update an existing process"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    category_id: Optional[str] = None
    description: Optional[str] = None
    setup_time_minutes: Optional[Decimal] = Field(None, ge=0)
    hourly_rate: Optional[Decimal] = Field(None, ge=0)
    minimum_cost: Optional[Decimal] = Field(None, ge=0)
    complexity_multiplier: Optional[Decimal] = Field(None, gt=0)
    equipment_required: Optional[str] = Field(None, max_length=200)
    skill_level: Optional[str] = Field(None, max_length=50)
    is_active: Optional[bool] = None


class ProcessResponse(ProcessBase):
    """Process response"""
    id: str
    category_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
