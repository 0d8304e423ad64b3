"""
Routing drafts

In-memory working copy of a routing while it is being edited. A draft owns
its steps and keeps the derived fields (total setup time, auto-generated
name) in sync on every step change. Drafts are plain dataclasses so a
caller can snapshot one before a save and restore it if the save fails.
"""
import copy
import uuid
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional

from app.core.settings import get_settings
from app.exceptions import ValidationError
from app.services.routing_cost import to_decimal

REQUIRED_FIELDS = ("name", "description", "category")


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class ProcessInfo:
    """Pricing view of a catalog process, as returned by a process lookup"""
    id: str
    name: str
    setup_time_minutes: Decimal
    hourly_rate: Decimal
    minimum_cost: Decimal
    complexity_multiplier: Decimal
    category_id: Optional[str] = None

    @classmethod
    def from_model(cls, process) -> "ProcessInfo":
        return cls(
            id=process.id,
            name=process.name,
            setup_time_minutes=to_decimal(process.setup_time_minutes),
            hourly_rate=to_decimal(process.hourly_rate),
            minimum_cost=to_decimal(process.minimum_cost),
            complexity_multiplier=to_decimal(process.complexity_multiplier),
            category_id=process.category_id,
        )


@dataclass
class DraftStep:
    process_id: str
    process_name: str
    sequence: int
    setup_time_minutes: Decimal
    hourly_rate: Decimal
    minimum_cost: Decimal
    complexity_multiplier: Decimal
    setup_time_multiplier: Decimal = Decimal("1")
    runtime_multiplier: Decimal = Decimal("1")
    notes: Optional[str] = None
    parallel_step: bool = False
    quality_check_required: bool = False
    id: str = field(default_factory=new_id)

    @classmethod
    def from_process(cls, process: ProcessInfo, sequence: int, **options) -> "DraftStep":
        """New step with pricing copied from the process."""
        return cls(
            process_id=process.id,
            process_name=process.name,
            sequence=sequence,
            setup_time_minutes=process.setup_time_minutes,
            hourly_rate=process.hourly_rate,
            minimum_cost=process.minimum_cost,
            complexity_multiplier=process.complexity_multiplier,
            **options,
        )

    @classmethod
    def from_model(cls, step) -> "DraftStep":
        return cls(
            id=step.id,
            process_id=step.process_id,
            process_name=step.process_name,
            sequence=step.sequence,
            setup_time_minutes=to_decimal(step.setup_time_minutes),
            hourly_rate=to_decimal(step.hourly_rate),
            minimum_cost=to_decimal(step.minimum_cost),
            complexity_multiplier=to_decimal(step.complexity_multiplier),
            setup_time_multiplier=to_decimal(step.setup_time_multiplier),
            runtime_multiplier=to_decimal(step.runtime_multiplier),
            notes=step.notes,
            parallel_step=bool(step.parallel_step),
            quality_check_required=bool(step.quality_check_required),
        )

    @property
    def effective_setup_minutes(self) -> Decimal:
        return to_decimal(self.setup_time_minutes) * to_decimal(self.setup_time_multiplier)


def generate_routing_name(steps: Iterable[DraftStep], separator: Optional[str] = None) -> str:
    """Process names in sequence order, e.g. 'Laser Cutting - Bending - Powder Coat'."""
    if separator is None:
        separator = get_settings().ROUTING_NAME_SEPARATOR
    ordered = sorted(steps, key=lambda s: s.sequence)
    return separator.join(step.process_name for step in ordered)


def calculate_total_setup_time(steps: Iterable[DraftStep]) -> Decimal:
    return sum((step.effective_setup_minutes for step in steps), Decimal("0"))


@dataclass
class RoutingDraft:
    name: str = ""
    description: str = ""
    category: str = ""
    category_id: Optional[str] = None
    steps: List[DraftStep] = field(default_factory=list)
    total_setup_time: Decimal = Decimal("0")
    estimated_lead_time_days: int = 0
    active: bool = True
    material_markup_percent: Decimal = Decimal("0")
    finishing_cost_per_area: Decimal = Decimal("0")
    is_primary_pricing_route: bool = False
    default_material_cost: Decimal = Decimal("0")
    default_surface_area: Decimal = Decimal("0")
    default_runtime_minutes: Decimal = Decimal("0")
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.steps = list(self.steps)
        self.total_setup_time = calculate_total_setup_time(self.steps)

    @classmethod
    def from_model(cls, routing) -> "RoutingDraft":
        return cls(
            id=routing.id,
            name=routing.name or "",
            description=routing.description or "",
            category=routing.category or "",
            category_id=routing.category_id,
            steps=[DraftStep.from_model(s) for s in sorted(routing.steps, key=lambda s: s.sequence)],
            estimated_lead_time_days=routing.estimated_lead_time_days or 0,
            active=bool(routing.active),
            material_markup_percent=to_decimal(routing.material_markup_percent),
            finishing_cost_per_area=to_decimal(routing.finishing_cost_per_area),
            is_primary_pricing_route=bool(routing.is_primary_pricing_route),
            default_material_cost=to_decimal(routing.default_material_cost),
            default_surface_area=to_decimal(routing.default_surface_area),
            default_runtime_minutes=to_decimal(routing.default_runtime_minutes),
            created_at=routing.created_at,
            updated_at=routing.updated_at,
        )

    @property
    def step_count(self) -> int:
        return len(self.steps)

    @property
    def is_name_overridden(self) -> bool:
        """True when the name differs from what the steps would generate."""
        return bool(self.name.strip()) and self.name != generate_routing_name(self.steps)

    def set_steps(self, steps: Iterable[DraftStep]) -> None:
        """
        Replace the step list and recompute derived fields.

        The name follows the steps unless the user has typed their own.
        """
        auto_name_before = generate_routing_name(self.steps)
        self.steps = list(steps)
        self.total_setup_time = calculate_total_setup_time(self.steps)

        auto_name = generate_routing_name(self.steps)
        if auto_name and (not self.name.strip() or self.name == auto_name_before):
            self.name = auto_name

    def toggle_active(self) -> bool:
        self.active = not self.active
        return self.active

    def validate(self) -> None:
        """Raise ValidationError listing empty required fields."""
        missing = [f for f in REQUIRED_FIELDS if not (getattr(self, f) or "").strip()]
        if missing:
            raise ValidationError(missing_fields=missing)

    def duplicate(self, suffix: Optional[str] = None) -> "RoutingDraft":
        """Unsaved copy with a new identity, fresh step ids and no primary flag."""
        if suffix is None:
            suffix = get_settings().ROUTING_COPY_SUFFIX
        clone = self.snapshot()
        clone.id = None
        clone.created_at = None
        clone.updated_at = None
        clone.is_primary_pricing_route = False
        clone.name = f"{self.name}{suffix}"
        clone.steps = [replace(step, id=new_id()) for step in clone.steps]
        return clone

    def snapshot(self) -> "RoutingDraft":
        return copy.deepcopy(self)

    def restore(self, snapshot: "RoutingDraft") -> None:
        """Put back the state captured by snapshot()."""
        for f in fields(self):
            setattr(self, f.name, copy.deepcopy(getattr(snapshot, f.name)))
