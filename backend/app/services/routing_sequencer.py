"""
Routing step sequencer

Adds, removes, moves and edits steps on a RoutingDraft while keeping step
sequence numbers contiguous (1..N in list order) after every change.
"""
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Callable, Iterable, List, Optional

from app.exceptions import InvalidReferenceError, OutOfRangeError, ValidationError
from app.logging_config import get_logger
from app.services.routing_cost import to_decimal
from app.services.routing_draft import DraftStep, ProcessInfo, RoutingDraft, new_id

logger = get_logger(__name__)

ProcessLookup = Callable[[str], Optional[ProcessInfo]]

MUTABLE_STEP_FIELDS = ("setup_time_multiplier", "runtime_multiplier", "notes")
NUMERIC_STEP_FIELDS = ("setup_time_multiplier", "runtime_multiplier")


@dataclass
class StepInput:
    """A step as submitted in a bulk create/update request"""
    process_id: str
    id: Optional[str] = None
    setup_time_multiplier: Decimal = Decimal("1")
    runtime_multiplier: Decimal = Decimal("1")
    notes: Optional[str] = None
    parallel_step: bool = False
    quality_check_required: bool = False


def renumber_steps(steps: Iterable[DraftStep]) -> List[DraftStep]:
    """Copies of the steps with sequence set to 1..N in the given order."""
    return [replace(step, sequence=index) for index, step in enumerate(steps, start=1)]


class RoutingSequencer:
    """
    Step operations for one draft.

    Multipliers must be > 0. That is checked by the request schemas; the
    sequencer stores what it is given.
    """

    def __init__(self, draft: RoutingDraft, lookup_process: ProcessLookup):
        self.draft = draft
        self.lookup_process = lookup_process

    def _resolve_process(self, process_id: str) -> ProcessInfo:
        process = self.lookup_process(process_id)
        if process is None:
            raise InvalidReferenceError("Process", process_id)
        return process

    def _index_of(self, step_id: str) -> int:
        for index, step in enumerate(self.draft.steps):
            if step.id == step_id:
                return index
        raise InvalidReferenceError("Routing step", step_id)

    def add_step(self, process_id: str) -> DraftStep:
        """Append a step for the process with default multipliers."""
        process = self._resolve_process(process_id)
        step = DraftStep.from_process(process, sequence=self.draft.step_count + 1)
        self.draft.set_steps(self.draft.steps + [step])
        logger.debug(
            f"Added step {step.sequence} ({process.name})",
            extra={"routing_id": self.draft.id, "step_id": step.id, "process_id": process.id},
        )
        return step

    def remove_step(self, step_id: str) -> bool:
        """Remove a step and renumber. Unknown ids are ignored; returns whether a step was removed."""
        remaining = [step for step in self.draft.steps if step.id != step_id]
        if len(remaining) == self.draft.step_count:
            return False
        self.draft.set_steps(renumber_steps(remaining))
        return True

    def reorder(self, step_id: str, new_index: int) -> DraftStep:
        """
        Move a step to new_index (0-based) and renumber.

        Steps between the old and new position shift by one.
        """
        upper = self.draft.step_count - 1
        if new_index < 0 or new_index > upper:
            raise OutOfRangeError(new_index, lower=0, upper=upper)

        steps = list(self.draft.steps)
        moved = steps.pop(self._index_of(step_id))
        steps.insert(new_index, moved)
        self.draft.set_steps(renumber_steps(steps))
        return self.draft.steps[new_index]

    def update_step_field(self, step_id: str, field_name: str, value) -> DraftStep:
        """Change a multiplier or the notes of one step."""
        if field_name not in MUTABLE_STEP_FIELDS:
            raise ValidationError(
                f"Field '{field_name}' cannot be changed on a routing step",
                field=field_name,
            )
        index = self._index_of(step_id)
        if field_name in NUMERIC_STEP_FIELDS:
            value = to_decimal(value)

        steps = list(self.draft.steps)
        steps[index] = replace(steps[index], **{field_name: value})
        self.draft.set_steps(steps)
        return steps[index]

    def replace_steps(self, items: Iterable[StepInput]) -> List[DraftStep]:
        """
        Rebuild the step list from request items, in the given order.

        Items naming an existing step of the same process keep that step's
        copied pricing; everything else is priced from the process catalog.
        """
        existing = {step.id: step for step in self.draft.steps}
        steps = []
        for sequence, item in enumerate(items, start=1):
            options = dict(
                setup_time_multiplier=to_decimal(item.setup_time_multiplier),
                runtime_multiplier=to_decimal(item.runtime_multiplier),
                notes=item.notes,
                parallel_step=item.parallel_step,
                quality_check_required=item.quality_check_required,
            )
            # pop so a repeated id can't produce two steps with one identity
            current = existing.pop(item.id, None) if item.id else None
            if current is not None and current.process_id == item.process_id:
                steps.append(replace(current, sequence=sequence, **options))
            else:
                process = self._resolve_process(item.process_id)
                steps.append(DraftStep.from_process(process, sequence=sequence, id=new_id(), **options))

        self.draft.set_steps(steps)
        return self.draft.steps
