"""
Routing Models

Routings and their ordered process steps.
"""
import uuid
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Numeric, Boolean, DateTime, Text, ForeignKey
)
from sqlalchemy.orm import relationship

from app.db.base import Base


class Routing(Base):
    """
    A routing is an ordered sequence of process steps used to price a part.

    At most one routing in the catalog is the primary pricing route.
    """
    __tablename__ = "routings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # Unbounded: auto names join all step process names and copies append a suffix
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")

    # Category name is kept alongside the id for display and search
    category = Column(String(100), nullable=False, default="")
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=True, index=True)

    # Calculated from steps
    total_setup_time = Column(Numeric(12, 4), default=0, nullable=False)
    total_cost = Column(Numeric(18, 4), nullable=True)

    estimated_lead_time_days = Column(Integer, default=0, nullable=False)
    active = Column(Boolean, default=True, nullable=False)

    # Pricing configuration
    material_markup_percent = Column(Numeric(8, 4), default=0, nullable=False)
    finishing_cost_per_area = Column(Numeric(18, 4), default=0, nullable=False)
    is_primary_pricing_route = Column(Boolean, default=False, nullable=False, index=True)

    # Inputs used for the persisted cost estimate (0/None -> settings default)
    default_material_cost = Column(Numeric(18, 4), default=0, nullable=True)
    default_surface_area = Column(Numeric(18, 4), default=0, nullable=True)
    default_runtime_minutes = Column(Numeric(10, 2), default=0, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    category_ref = relationship("Category")
    steps = relationship("RoutingStep", back_populates="routing",
                         cascade="all, delete-orphan", order_by="RoutingStep.sequence")

    def __repr__(self):
        return f"<Routing {self.name} ({len(self.steps)} steps)>"


class RoutingStep(Base):
    """
    A single step in a routing.

    Pricing fields are copied from the process when the step is created so
    later process edits don't change historical costs.
    """
    __tablename__ = "routing_steps"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    routing_id = Column(String(36), ForeignKey("routings.id", ondelete="CASCADE"), nullable=False, index=True)
    process_id = Column(String(36), ForeignKey("processes.id"), nullable=False, index=True)

    sequence = Column(Integer, nullable=False)
    setup_time_multiplier = Column(Numeric(8, 4), default=1, nullable=False)
    runtime_multiplier = Column(Numeric(8, 4), default=1, nullable=False)
    notes = Column(Text, nullable=True)

    # Copied from the process at creation time
    process_name = Column(String(200), nullable=False)
    setup_time_minutes = Column(Numeric(10, 2), default=0, nullable=False)
    hourly_rate = Column(Numeric(18, 4), default=0, nullable=False)
    minimum_cost = Column(Numeric(18, 4), default=0, nullable=False)
    complexity_multiplier = Column(Numeric(8, 4), default=1, nullable=False)

    # Stored for the dashboard, not used by costing
    parallel_step = Column(Boolean, default=False, nullable=False)
    quality_check_required = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    routing = relationship("Routing", back_populates="steps")
    process = relationship("Process")

    def __repr__(self):
        return f"<RoutingStep {self.sequence}: {self.process_name}>"
