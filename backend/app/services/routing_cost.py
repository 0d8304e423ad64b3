"""
Routing Cost Calculator

Prices a routing from its ordered steps:
1. Setup cost per step, charged once per run
2. Runtime cost per step, scaled by quantity and complexity
3. Processing cost floored at the single highest step minimum
4. Material cost with markup, plus finishing cost by surface area

The calculator is pure: it reads step attributes and returns a CostBreakdown.
It works on anything shaped like a step (DraftStep or the RoutingStep model).
No currency rounding is applied here.
"""
from dataclasses import dataclass, asdict
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from app.core.settings import get_settings

SIXTY = Decimal("60")
HUNDRED = Decimal("100")
ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """Convert numbers (int, float, str, Decimal, None) to Decimal without float noise."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class CostBreakdown:
    """Result of a routing cost calculation"""
    processing_cost: Decimal
    material_cost: Decimal
    finishing_cost: Decimal
    total_cost: Decimal
    # Intermediate values, useful for previews and debugging
    setup_cost: Decimal = ZERO
    runtime_cost: Decimal = ZERO
    minimum_cost_floor: Decimal = ZERO

    def to_dict(self) -> Dict[str, Decimal]:
        return asdict(self)


def step_setup_cost(step) -> Decimal:
    """(setup minutes * setup multiplier / 60) * hourly rate"""
    minutes = to_decimal(step.setup_time_minutes) * to_decimal(step.setup_time_multiplier)
    return minutes / SIXTY * to_decimal(step.hourly_rate)


def step_runtime_cost(step, assumed_runtime_minutes: Any) -> Decimal:
    """(assumed minutes * runtime multiplier / 60) * hourly rate * complexity, for one unit"""
    minutes = to_decimal(assumed_runtime_minutes) * to_decimal(step.runtime_multiplier)
    return (
        minutes / SIXTY
        * to_decimal(step.hourly_rate)
        * to_decimal(step.complexity_multiplier)
    )


def calculate_routing_cost(
    steps: Iterable,
    *,
    quantity: int = 1,
    material_cost: Any = Decimal("100"),
    surface_area: Any = Decimal("100"),
    assumed_runtime_minutes: Any = Decimal("30"),
    material_markup_percent: Any = ZERO,
    finishing_cost_per_area: Any = ZERO,
) -> CostBreakdown:
    """
    Calculate the cost breakdown for a list of routing steps.

    Setup cost is charged once; runtime cost scales with quantity. The
    processing cost never drops below the largest per-step minimum cost
    (the floor is a max across steps, not a sum).

    Args:
        steps: Routing steps (any order)
        quantity: Number of parts, >= 1
        material_cost: Raw material cost before markup
        surface_area: Area used for finishing cost
        assumed_runtime_minutes: Runtime assumed for every step
        material_markup_percent: Markup applied to material cost (35 -> +35%)
        finishing_cost_per_area: Finishing cost per unit of surface area

    Returns:
        CostBreakdown with processing, material, finishing and total cost
    """
    qty = to_decimal(quantity)
    total_setup_cost = ZERO
    total_runtime_cost = ZERO
    total_minimum_cost = ZERO

    for step in steps:
        total_setup_cost += step_setup_cost(step)
        total_runtime_cost += step_runtime_cost(step, assumed_runtime_minutes) * qty
        total_minimum_cost = max(total_minimum_cost, to_decimal(step.minimum_cost))

    processing_cost = max(total_setup_cost + total_runtime_cost, total_minimum_cost)
    material_with_markup = to_decimal(material_cost) * (
        1 + to_decimal(material_markup_percent) / HUNDRED
    )
    finishing_cost = to_decimal(finishing_cost_per_area) * to_decimal(surface_area)

    return CostBreakdown(
        processing_cost=processing_cost,
        material_cost=material_with_markup,
        finishing_cost=finishing_cost,
        total_cost=processing_cost + material_with_markup + finishing_cost,
        setup_cost=total_setup_cost,
        runtime_cost=total_runtime_cost,
        minimum_cost_floor=total_minimum_cost,
    )


def _first_set(*values: Any) -> Decimal:
    # 0 on a routing default means "not configured"
    for value in values:
        if value is not None and to_decimal(value) != ZERO:
            return to_decimal(value)
    return ZERO


def estimate_routing_cost(
    routing,
    *,
    quantity: Optional[int] = None,
    material_cost: Any = None,
    surface_area: Any = None,
    assumed_runtime_minutes: Any = None,
) -> CostBreakdown:
    """
    Cost a routing (draft or model) using its own pricing configuration.

    Inputs not passed explicitly come from the routing's default_* fields,
    then from settings.
    """
    settings = get_settings()
    defaults = settings.routing_cost_defaults

    if material_cost is None:
        material_cost = _first_set(routing.default_material_cost, defaults["material_cost"])
    if surface_area is None:
        surface_area = _first_set(routing.default_surface_area, defaults["surface_area"])
    if assumed_runtime_minutes is None:
        assumed_runtime_minutes = _first_set(
            routing.default_runtime_minutes, defaults["assumed_runtime_minutes"]
        )

    return calculate_routing_cost(
        routing.steps,
        quantity=quantity if quantity is not None else settings.ROUTING_DEFAULT_QUANTITY,
        material_cost=material_cost,
        surface_area=surface_area,
        assumed_runtime_minutes=assumed_runtime_minutes,
        material_markup_percent=routing.material_markup_percent,
        finishing_cost_per_area=routing.finishing_cost_per_area,
    )
