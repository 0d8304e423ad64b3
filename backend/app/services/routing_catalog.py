"""
Routing Catalog Service

Collection-level operations on routings:
1. Saving drafts (steps merged by id, derived totals recomputed)
2. Primary pricing route - at most one routing carries the flag
3. Duplication with fresh identities
4. Listing, filtering and catalog statistics
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import asc, desc, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.core.settings import get_settings
from app.exceptions import DatabaseError, InvalidReferenceError, ValidationError
from app.logging_config import get_logger
from app.models.routing import Routing, RoutingStep
from app.services.routing_cost import estimate_routing_cost
from app.services.routing_draft import RoutingDraft, new_id

logger = get_logger(__name__)

ROUTING_FIELDS = (
    "name",
    "description",
    "category",
    "category_id",
    "estimated_lead_time_days",
    "active",
    "material_markup_percent",
    "finishing_cost_per_area",
    "is_primary_pricing_route",
    "default_material_cost",
    "default_surface_area",
    "default_runtime_minutes",
)

STEP_FIELDS = (
    "process_id",
    "process_name",
    "sequence",
    "setup_time_multiplier",
    "runtime_multiplier",
    "notes",
    "setup_time_minutes",
    "hourly_rate",
    "minimum_cost",
    "complexity_multiplier",
    "parallel_step",
    "quality_check_required",
)

SORT_COLUMNS = {
    "name": Routing.name,
    "category": Routing.category,
    "created_at": Routing.created_at,
    "updated_at": Routing.updated_at,
    "estimated_lead_time_days": Routing.estimated_lead_time_days,
    "total_setup_time": Routing.total_setup_time,
    "total_cost": Routing.total_cost,
}
SORT_PATTERN = "^(" + "|".join(SORT_COLUMNS) + ")$"


@dataclass
class RoutingStats:
    total_routings: int
    active_routings: int
    average_steps: Decimal


class RoutingCatalog:
    """All routings, backed by a database session."""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, routing_id: str) -> Routing:
        routing = self.db.query(Routing).options(
            selectinload(Routing.steps)
        ).filter(Routing.id == routing_id).first()

        if not routing:
            raise InvalidReferenceError("Routing", routing_id)
        return routing

    def get_draft(self, routing_id: str) -> RoutingDraft:
        return RoutingDraft.from_model(self.get(routing_id))

    def find_primary(self) -> Optional[Routing]:
        """The primary pricing route, or None if none has been designated yet."""
        return self.db.query(Routing).options(
            selectinload(Routing.steps)
        ).filter(Routing.is_primary_pricing_route.is_(True)).first()

    def list(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        active: Optional[bool] = None,
        sort: str = "name",
        order: str = "asc",
    ) -> List[Routing]:
        query = self.db.query(Routing).options(selectinload(Routing.steps))

        if search:
            query = query.filter(
                (Routing.name.ilike(f"%{search}%")) |
                (Routing.description.ilike(f"%{search}%")) |
                (Routing.category.ilike(f"%{search}%"))
            )
        if category:
            query = query.filter(
                (func.lower(Routing.category) == category.lower()) |
                (Routing.category_id == category)
            )
        if active is not None:
            query = query.filter(Routing.active.is_(active))

        if sort not in SORT_COLUMNS:
            raise ValidationError(f"Unknown sort column: {sort}", field="sort", value=sort)
        column = SORT_COLUMNS[sort]
        direction = desc if order == "desc" else asc
        return query.order_by(direction(column), Routing.id).all()

    def stats(self) -> RoutingStats:
        total = self.db.query(func.count(Routing.id)).scalar() or 0
        active = self.db.query(func.count(Routing.id)).filter(Routing.active.is_(True)).scalar() or 0
        step_count = self.db.query(func.count(RoutingStep.id)).scalar() or 0

        average = Decimal("0")
        if total:
            average = (Decimal(step_count) / Decimal(total)).quantize(Decimal("0.01"))

        return RoutingStats(total_routings=total, active_routings=active, average_steps=average)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def save(self, draft: RoutingDraft) -> Routing:
        """
        Persist a draft as a new or existing routing.

        Runs as one transaction. On failure the session is rolled back and
        DatabaseError is raised; the draft itself is never modified, so the
        caller can retry with it.
        """
        draft.validate()

        if draft.id:
            routing = self.get(draft.id)
            created = False
        else:
            routing = Routing(id=new_id(), created_at=datetime.utcnow())
            self.db.add(routing)
            created = True

        try:
            self._apply_draft(routing, draft)
            if draft.is_primary_pricing_route:
                self._clear_primary(except_id=routing.id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                f"Failed to save routing: {e}",
                extra={"routing_id": routing.id, "routing_name": draft.name},
                exc_info=True,
            )
            raise DatabaseError("Failed to save routing", details={"routing_id": routing.id}) from e

        self.db.refresh(routing)
        logger.info(
            f"{'Created' if created else 'Updated'} routing: {routing.name}",
            extra={"routing_id": routing.id, "step_count": len(routing.steps)},
        )
        return routing

    def set_primary(self, routing_id: str) -> Routing:
        """
        Make one routing the primary pricing route.

        Clearing every other primary and setting this one happen in the
        same transaction, so no reader sees zero or two primaries.
        """
        routing = self.get(routing_id)
        try:
            self._clear_primary(except_id=routing.id)
            routing.is_primary_pricing_route = True
            routing.updated_at = datetime.utcnow()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to set primary routing: {e}", extra={"routing_id": routing_id}, exc_info=True)
            raise DatabaseError("Failed to set primary routing", details={"routing_id": routing_id}) from e

        self.db.refresh(routing)
        logger.info(f"Set primary pricing route: {routing.name}", extra={"routing_id": routing.id})
        return routing

    def duplicate(self, routing_id: str) -> Routing:
        """Copy a routing under a new id; the copy is never primary."""
        source = self.get_draft(routing_id)
        copy = source.duplicate(suffix=get_settings().ROUTING_COPY_SUFFIX)
        routing = self.save(copy)
        logger.info(
            f"Duplicated routing {routing_id}",
            extra={"routing_id": routing.id, "source_routing_id": routing_id},
        )
        return routing

    def toggle_active(self, routing_id: str) -> Routing:
        draft = self.get_draft(routing_id)
        draft.toggle_active()
        return self.save(draft)

    def delete(self, routing_id: str) -> None:
        routing = self.get(routing_id)
        try:
            self.db.delete(routing)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete routing: {e}", extra={"routing_id": routing_id}, exc_info=True)
            raise DatabaseError("Failed to delete routing", details={"routing_id": routing_id}) from e

        logger.info(f"Deleted routing: {routing_id}", extra={"routing_id": routing_id})

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _clear_primary(self, except_id: str) -> None:
        self.db.query(Routing).filter(
            Routing.is_primary_pricing_route.is_(True),
            Routing.id != except_id,
        ).update(
            {Routing.is_primary_pricing_route: False, Routing.updated_at: datetime.utcnow()},
            synchronize_session="fetch",
        )

    def _apply_draft(self, routing: Routing, draft: RoutingDraft) -> None:
        for field in ROUTING_FIELDS:
            setattr(routing, field, getattr(draft, field))

        # Merge steps by id so unchanged steps keep their rows
        existing = {step.id: step for step in routing.steps}
        steps = []
        for draft_step in draft.steps:
            step = existing.get(draft_step.id) or RoutingStep(id=draft_step.id)
            for field in STEP_FIELDS:
                setattr(step, field, getattr(draft_step, field))
            steps.append(step)
        routing.steps = steps

        routing.total_setup_time = draft.total_setup_time
        routing.total_cost = estimate_routing_cost(draft).total_cost
        routing.updated_at = datetime.utcnow()
