"""
Routings API Endpoints

CRUD, pricing and step editing for routings. Handlers stay thin: every
rule lives in the routing services, and domain exceptions are turned into
responses by the handlers registered in app.main.
"""
from fastapi import APIRouter, Depends, Query, Response, status
from typing import Callable, Optional
from decimal import Decimal
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.logging_config import get_logger
from app.exceptions import ValidationError
from app.models.routing import Routing
from app.schemas.common import ERROR_RESPONSES
from app.schemas.routing import (
    AddStepRequest,
    CostBreakdownResponse,
    CostPreviewRequest,
    MoveStepRequest,
    RoutingCreate,
    RoutingListResponse,
    RoutingResponse,
    RoutingStatsResponse,
    RoutingStepResponse,
    RoutingUpdate,
    UpdateStepRequest,
)
from app.services.category_resolver import apply_routing_category
from app.services.process_catalog import make_process_lookup
from app.services.routing_catalog import SORT_PATTERN, RoutingCatalog
from app.services.routing_cost import CostBreakdown, estimate_routing_cost, to_decimal
from app.services.routing_draft import RoutingDraft, generate_routing_name
from app.services.routing_sequencer import RoutingSequencer, StepInput

router = APIRouter()
logger = get_logger(__name__)

# Scalar RoutingUpdate fields copied onto the draft as-is
DRAFT_UPDATE_FIELDS = (
    "description",
    "estimated_lead_time_days",
    "active",
    "material_markup_percent",
    "finishing_cost_per_area",
    "is_primary_pricing_route",
)
DRAFT_DEFAULT_FIELDS = (
    "default_material_cost",
    "default_surface_area",
    "default_runtime_minutes",
)


# ============================================================================
# Helpers
# ============================================================================

def _build_routing_response(routing: Routing) -> RoutingResponse:
    steps = sorted(routing.steps, key=lambda s: s.sequence)
    return RoutingResponse(
        id=routing.id,
        name=routing.name,
        description=routing.description or "",
        category=routing.category or "",
        category_id=routing.category_id,
        steps=[RoutingStepResponse.model_validate(step) for step in steps],
        step_count=len(steps),
        total_setup_time=to_decimal(routing.total_setup_time),
        total_cost=routing.total_cost,
        estimated_lead_time_days=routing.estimated_lead_time_days or 0,
        active=bool(routing.active),
        material_markup_percent=to_decimal(routing.material_markup_percent),
        finishing_cost_per_area=to_decimal(routing.finishing_cost_per_area),
        is_primary_pricing_route=bool(routing.is_primary_pricing_route),
        default_material_cost=routing.default_material_cost,
        default_surface_area=routing.default_surface_area,
        default_runtime_minutes=routing.default_runtime_minutes,
        created_at=routing.created_at,
        updated_at=routing.updated_at,
    )


def _build_cost_response(breakdown: CostBreakdown) -> CostBreakdownResponse:
    return CostBreakdownResponse(**breakdown.to_dict())


def _step_inputs(items) -> list:
    return [StepInput(**item.model_dump()) for item in items]


def _edit_steps(db: Session, routing_id: str, edit: Callable[[RoutingSequencer], object]) -> Routing:
    """Load a routing as a draft, apply one sequencer operation and save it."""
    catalog = RoutingCatalog(db)
    draft = catalog.get_draft(routing_id)
    edit(RoutingSequencer(draft, make_process_lookup(db)))
    return catalog.save(draft)


# ============================================================================
# Routing CRUD
# ============================================================================

@router.get("/", response_model=RoutingListResponse)
async def list_routings(
    search: Optional[str] = None,
    category: Optional[str] = Query(None, description="Category name or id"),
    active: Optional[bool] = None,
    sort: str = Query("name", pattern=SORT_PATTERN),
    order: str = Query("asc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
):
    """
    List routings with catalog statistics.

    - **search**: Match name, description or category
    - **category**: Filter by category name or id
    - **active**: Only active (true) or inactive (false) routings
    - **sort** / **order**: Sort column and direction
    """
    catalog = RoutingCatalog(db)
    routings = catalog.list(search=search, category=category, active=active, sort=sort, order=order)
    stats = catalog.stats()

    return RoutingListResponse(
        routings=[_build_routing_response(r) for r in routings],
        total=len(routings),
        stats=RoutingStatsResponse(
            total_routings=stats.total_routings,
            active_routings=stats.active_routings,
            average_steps=stats.average_steps,
        ),
    )


@router.get("/primary", response_model=Optional[RoutingResponse])
async def get_primary_routing(db: Session = Depends(get_db)):
    """The primary pricing route, or null when none is designated."""
    routing = RoutingCatalog(db).find_primary()
    if routing is None:
        return None
    return _build_routing_response(routing)


@router.post("/cost-preview", response_model=CostBreakdownResponse, responses=ERROR_RESPONSES)
async def preview_cost(request: CostPreviewRequest, db: Session = Depends(get_db)):
    """Price a set of steps without saving a routing."""
    draft = RoutingDraft(
        material_markup_percent=request.material_markup_percent,
        finishing_cost_per_area=request.finishing_cost_per_area,
    )
    RoutingSequencer(draft, make_process_lookup(db)).replace_steps(_step_inputs(request.steps))

    breakdown = estimate_routing_cost(
        draft,
        quantity=request.quantity,
        material_cost=request.material_cost,
        surface_area=request.surface_area,
        assumed_runtime_minutes=request.assumed_runtime_minutes,
    )
    return _build_cost_response(breakdown)


@router.post(
    "/",
    response_model=RoutingResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_routing(request: RoutingCreate, db: Session = Depends(get_db)):
    """
    Create a routing.

    A blank name is generated from the process names of the steps. The
    category may be given by id or by name.
    """
    draft = RoutingDraft(
        name=(request.name or "").strip(),
        description=request.description or "",
        estimated_lead_time_days=request.estimated_lead_time_days,
        active=request.active,
        material_markup_percent=request.material_markup_percent,
        finishing_cost_per_area=request.finishing_cost_per_area,
        is_primary_pricing_route=request.is_primary_pricing_route,
        default_material_cost=to_decimal(request.default_material_cost),
        default_surface_area=to_decimal(request.default_surface_area),
        default_runtime_minutes=to_decimal(request.default_runtime_minutes),
    )
    apply_routing_category(db, draft, category_id=request.category_id, category_name=request.category)
    RoutingSequencer(draft, make_process_lookup(db)).replace_steps(_step_inputs(request.steps))

    routing = RoutingCatalog(db).save(draft)
    return _build_routing_response(routing)


@router.get("/{routing_id}", response_model=RoutingResponse, responses=ERROR_RESPONSES)
async def get_routing(routing_id: str, db: Session = Depends(get_db)):
    return _build_routing_response(RoutingCatalog(db).get(routing_id))


@router.put("/{routing_id}", response_model=RoutingResponse, responses=ERROR_RESPONSES)
async def update_routing(routing_id: str, request: RoutingUpdate, db: Session = Depends(get_db)):
    """
    Update a routing.

    Only fields present in the request change. `steps` replaces the whole
    step list; steps sent back with their id keep their copied pricing.
    """
    catalog = RoutingCatalog(db)
    draft = catalog.get_draft(routing_id)
    update_data = request.model_dump(exclude_unset=True)

    if "name" in update_data:
        draft.name = (update_data["name"] or "").strip()
    for field in DRAFT_UPDATE_FIELDS:
        if field in update_data and update_data[field] is not None:
            setattr(draft, field, update_data[field])
    for field in DRAFT_DEFAULT_FIELDS:
        if field in update_data:
            setattr(draft, field, to_decimal(update_data[field]))

    if "category_id" in update_data or "category" in update_data:
        apply_routing_category(
            db, draft,
            category_id=update_data.get("category_id"),
            category_name=update_data.get("category"),
        )

    if request.steps is not None:
        RoutingSequencer(draft, make_process_lookup(db)).replace_steps(_step_inputs(request.steps))
    if not draft.name:
        draft.name = generate_routing_name(draft.steps)

    routing = catalog.save(draft)
    return _build_routing_response(routing)


@router.delete("/{routing_id}", status_code=status.HTTP_204_NO_CONTENT, responses=ERROR_RESPONSES)
async def delete_routing(routing_id: str, db: Session = Depends(get_db)):
    RoutingCatalog(db).delete(routing_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Catalog Actions
# ============================================================================

@router.post("/{routing_id}/set-primary", response_model=RoutingResponse, responses=ERROR_RESPONSES)
async def set_primary_routing(routing_id: str, db: Session = Depends(get_db)):
    """Make this the primary pricing route; any other primary is cleared."""
    return _build_routing_response(RoutingCatalog(db).set_primary(routing_id))


@router.post(
    "/{routing_id}/duplicate",
    response_model=RoutingResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def duplicate_routing(routing_id: str, db: Session = Depends(get_db)):
    return _build_routing_response(RoutingCatalog(db).duplicate(routing_id))


@router.post("/{routing_id}/toggle-active", response_model=RoutingResponse, responses=ERROR_RESPONSES)
async def toggle_routing_active(routing_id: str, db: Session = Depends(get_db)):
    return _build_routing_response(RoutingCatalog(db).toggle_active(routing_id))


@router.get("/{routing_id}/cost", response_model=CostBreakdownResponse, responses=ERROR_RESPONSES)
async def get_routing_cost(
    routing_id: str,
    quantity: Optional[int] = Query(None, ge=1),
    material_cost: Optional[Decimal] = Query(None, ge=0),
    surface_area: Optional[Decimal] = Query(None, ge=0),
    runtime_minutes: Optional[Decimal] = Query(None, ge=0, description="Assumed runtime per step"),
    db: Session = Depends(get_db),
):
    """
    Cost breakdown for a saved routing.

    Inputs left out come from the routing's defaults, then from settings.
    """
    routing = RoutingCatalog(db).get(routing_id)
    breakdown = estimate_routing_cost(
        routing,
        quantity=quantity,
        material_cost=material_cost,
        surface_area=surface_area,
        assumed_runtime_minutes=runtime_minutes,
    )
    return _build_cost_response(breakdown)


# ============================================================================
# Routing Steps
# ============================================================================

@router.post(
    "/{routing_id}/steps",
    response_model=RoutingResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def add_routing_step(routing_id: str, request: AddStepRequest, db: Session = Depends(get_db)):
    """Append a step for a process, copying the process pricing."""
    routing = _edit_steps(db, routing_id, lambda seq: seq.add_step(request.process_id))
    logger.info(
        f"Added step to routing {routing.name}",
        extra={"routing_id": routing_id, "process_id": request.process_id},
    )
    return _build_routing_response(routing)


@router.delete("/{routing_id}/steps/{step_id}", response_model=RoutingResponse, responses=ERROR_RESPONSES)
async def remove_routing_step(routing_id: str, step_id: str, db: Session = Depends(get_db)):
    """Remove a step. Removing a step that is not there changes nothing."""
    routing = _edit_steps(db, routing_id, lambda seq: seq.remove_step(step_id))
    logger.info(f"Removed step from routing {routing.name}", extra={"routing_id": routing_id, "step_id": step_id})
    return _build_routing_response(routing)


@router.post("/{routing_id}/steps/{step_id}/move", response_model=RoutingResponse, responses=ERROR_RESPONSES)
async def move_routing_step(
    routing_id: str,
    step_id: str,
    request: MoveStepRequest,
    db: Session = Depends(get_db),
):
    """Move a step to a 0-based position; the steps in between shift by one."""
    routing = _edit_steps(db, routing_id, lambda seq: seq.reorder(step_id, request.new_index))
    logger.info(
        f"Moved step in routing {routing.name}",
        extra={"routing_id": routing_id, "step_id": step_id, "new_index": request.new_index},
    )
    return _build_routing_response(routing)


@router.patch("/{routing_id}/steps/{step_id}", response_model=RoutingResponse, responses=ERROR_RESPONSES)
async def update_routing_step(
    routing_id: str,
    step_id: str,
    request: UpdateStepRequest,
    db: Session = Depends(get_db),
):
    update_data = request.model_dump(exclude_unset=True)
    if not update_data:
        raise ValidationError("No step fields to update")

    def apply(sequencer: RoutingSequencer) -> None:
        for field, value in update_data.items():
            if value is None and field != "notes":
                continue
            sequencer.update_step_field(step_id, field, value)

    routing = _edit_steps(db, routing_id, apply)
    logger.info(
        f"Updated step in routing {routing.name}",
        extra={"routing_id": routing_id, "step_id": step_id, "fields": sorted(update_data)},
    )
    return _build_routing_response(routing)
