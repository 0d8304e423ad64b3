"""
Routing Pydantic Schemas

Multipliers are validated > 0 here; the routing services do not clamp them.
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal


# ============================================================================
# Routing Step Schemas
# ============================================================================

class RoutingStepInput(BaseModel):
    """A step in a create/update request, in routing order"""
    id: Optional[str] = Field(None, description="Existing step id to keep its copied pricing")
    process_id: str = Field(..., description="Process this step performs")
    setup_time_multiplier: Decimal = Field(Decimal("1"), gt=0)
    runtime_multiplier: Decimal = Field(Decimal("1"), gt=0)
    notes: Optional[str] = Field(None, max_length=1000)
    parallel_step: bool = False
    quality_check_required: bool = False


class AddStepRequest(BaseModel):
    """Append a step for a process"""
    process_id: str


class MoveStepRequest(BaseModel):
    """Move a step to a 0-based position"""
    new_index: int


class UpdateStepRequest(BaseModel):
    """Edit the multipliers or notes of a step"""
    setup_time_multiplier: Optional[Decimal] = Field(None, gt=0)
    runtime_multiplier: Optional[Decimal] = Field(None, gt=0)
    notes: Optional[str] = Field(None, max_length=1000)


class RoutingStepResponse(BaseModel):
    """Routing step with its copied process pricing"""
    id: str
    routing_id: Optional[str] = None
    process_id: str
    process_name: str
    sequence: int
    setup_time_multiplier: Decimal
    runtime_multiplier: Decimal
    notes: Optional[str] = None
    setup_time_minutes: Decimal
    hourly_rate: Decimal
    minimum_cost: Decimal
    complexity_multiplier: Decimal
    parallel_step: bool = False
    quality_check_required: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ============================================================================
# Routing Schemas
# ============================================================================

class RoutingBase(BaseModel):
    """Pricing configuration shared by create and response"""
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100, description="Category name")
    category_id: Optional[str] = None
    estimated_lead_time_days: int = Field(0, ge=0)
    active: bool = True
    material_markup_percent: Decimal = Field(Decimal("0"), ge=0)
    finishing_cost_per_area: Decimal = Field(Decimal("0"), ge=0)
    is_primary_pricing_route: bool = False
    default_material_cost: Optional[Decimal] = Field(None, ge=0)
    default_surface_area: Optional[Decimal] = Field(None, ge=0)
    default_runtime_minutes: Optional[Decimal] = Field(None, ge=0)


class RoutingCreate(RoutingBase):
    """Create a routing. A blank name is generated from the steps."""
    name: Optional[str] = Field(None, max_length=500)
    steps: List[RoutingStepInput] = Field(default_factory=list)


class RoutingUpdate(BaseModel):
    """Partial update. `steps`, when given, replaces the whole step list."""
    name: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    category_id: Optional[str] = None
    estimated_lead_time_days: Optional[int] = Field(None, ge=0)
    active: Optional[bool] = None
    material_markup_percent: Optional[Decimal] = Field(None, ge=0)
    finishing_cost_per_area: Optional[Decimal] = Field(None, ge=0)
    is_primary_pricing_route: Optional[bool] = None
    default_material_cost: Optional[Decimal] = Field(None, ge=0)
    default_surface_area: Optional[Decimal] = Field(None, ge=0)
    default_runtime_minutes: Optional[Decimal] = Field(None, ge=0)
    steps: Optional[List[RoutingStepInput]] = None


class RoutingResponse(RoutingBase):
    """Full routing with steps"""
    id: str
    name: str
    description: str
    category: str
    steps: List[RoutingStepResponse] = []
    step_count: int = 0
    total_setup_time: Decimal
    total_cost: Optional[Decimal] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RoutingStatsResponse(BaseModel):
    total_routings: int
    active_routings: int
    average_steps: Decimal


class RoutingListResponse(BaseModel):
    routings: List[RoutingResponse]
    total: int
    stats: RoutingStatsResponse


# ============================================================================
# Cost Schemas
# ============================================================================

class CostPreviewRequest(BaseModel):
    """Price steps that have not been saved yet"""
    steps: List[RoutingStepInput] = Field(default_factory=list)
    quantity: int = Field(1, ge=1)
    material_cost: Optional[Decimal] = Field(None, ge=0)
    surface_area: Optional[Decimal] = Field(None, ge=0)
    assumed_runtime_minutes: Optional[Decimal] = Field(None, ge=0)
    material_markup_percent: Decimal = Field(Decimal("0"), ge=0)
    finishing_cost_per_area: Decimal = Field(Decimal("0"), ge=0)


class CostBreakdownResponse(BaseModel):
    processing_cost: Decimal
    material_cost: Decimal = Field(..., description="Material cost including markup")
    finishing_cost: Decimal
    total_cost: Decimal
    setup_cost: Decimal
    runtime_cost: Decimal
    minimum_cost_floor: Decimal
