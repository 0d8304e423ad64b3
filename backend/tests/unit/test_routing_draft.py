"""
Unit Tests for Routing Drafts

Tests the routing aggregate rules: auto-naming, setup time, validation,
duplication and snapshot/restore.
"""
import pytest
from decimal import Decimal
from datetime import datetime

from app.exceptions import ValidationError
from app.services.routing_draft import (
    DraftStep,
    ProcessInfo,
    RoutingDraft,
    calculate_total_setup_time,
    generate_routing_name,
)

LASER = ProcessInfo("laser", "Laser Cutting", Decimal("30"), Decimal("50"), Decimal("40"), Decimal("1"))
BEND = ProcessInfo("bend", "Bending", Decimal("15"), Decimal("75"), Decimal("60"), Decimal("1.2"))


def step(process, sequence, **options):
    return DraftStep.from_process(process, sequence=sequence, **options)


@pytest.fixture
def draft():
    return RoutingDraft(
        name="Laser Cutting - Bending",
        description="Bracket",
        category="Sheet Metal",
        steps=[step(LASER, 1), step(BEND, 2)],
    )


class TestNaming:

    def test_generate_name_uses_sequence_order(self):
        steps = [step(BEND, 2), step(LASER, 1)]
        assert generate_routing_name(steps) == "Laser Cutting - Bending"

    def test_generate_name_custom_separator(self):
        assert generate_routing_name([step(LASER, 1), step(BEND, 2)], separator=" > ") == "Laser Cutting > Bending"

    def test_blank_name_follows_steps(self):
        draft = RoutingDraft()
        draft.set_steps([step(LASER, 1)])
        assert draft.name == "Laser Cutting"

        draft.set_steps([step(LASER, 1), step(BEND, 2)])
        assert draft.name == "Laser Cutting - Bending"
        assert draft.is_name_overridden is False

    def test_manual_name_is_kept(self):
        draft = RoutingDraft(name="Bracket Route")
        draft.set_steps([step(LASER, 1), step(BEND, 2)])

        assert draft.name == "Bracket Route"
        assert draft.is_name_overridden is True

    def test_removing_all_steps_keeps_last_name(self, draft):
        draft.set_steps([])
        assert draft.name == "Laser Cutting - Bending"


class TestSetupTime:

    def test_total_setup_time_uses_multipliers(self):
        steps = [step(LASER, 1, setup_time_multiplier=Decimal("2")), step(BEND, 2)]
        assert calculate_total_setup_time(steps) == Decimal("75")

    def test_recomputed_on_set_steps(self, draft):
        assert draft.total_setup_time == Decimal("45")
        draft.set_steps([step(BEND, 1)])
        assert draft.total_setup_time == Decimal("15")


class TestValidate:

    def test_valid_draft(self, draft):
        draft.validate()

    def test_lists_every_missing_field(self):
        draft = RoutingDraft(description="  ")
        with pytest.raises(ValidationError) as exc_info:
            draft.validate()

        error = exc_info.value
        assert error.missing_fields == ["name", "description", "category"]
        assert error.details["missing_fields"] == ["name", "description", "category"]
        assert error.error_code == "VALIDATION_ERROR"

    def test_numeric_fields_are_optional(self):
        RoutingDraft(name="Shell", description="No steps yet", category="Misc").validate()


class TestToggleActive:

    def test_flips_only_active(self, draft):
        before = draft.snapshot()
        assert draft.toggle_active() is False
        assert draft.toggle_active() is True
        assert draft == before


class TestDuplicate:

    def test_duplicate_has_new_identity(self, draft):
        draft.id = "routing-1"
        draft.is_primary_pricing_route = True
        draft.created_at = draft.updated_at = datetime(2025, 1, 1)
        draft.name = "Bracket Route"

        copy = draft.duplicate()

        assert copy.id is None
        assert copy.created_at is None and copy.updated_at is None
        assert copy.is_primary_pricing_route is False
        assert copy.name == "Bracket Route (Copy)"
        assert [s.id for s in copy.steps] != [s.id for s in draft.steps]
        assert [s.sequence for s in copy.steps] == [1, 2]
        assert copy.total_setup_time == draft.total_setup_time

    def test_duplicate_is_independent(self, draft):
        original_ids = [s.id for s in draft.steps]
        copy = draft.duplicate()
        copy.steps[0].notes = "copy only"
        copy.set_steps(copy.steps[:1])

        assert draft.step_count == 2
        assert [s.id for s in draft.steps] == original_ids
        assert draft.steps[0].notes is None

    def test_custom_suffix(self, draft):
        draft.name = "Route"
        assert draft.duplicate(suffix=" v2").name == "Route v2"


class TestSnapshot:

    def test_restore_undoes_changes(self, draft):
        saved = draft.snapshot()

        draft.set_steps([])
        draft.name = "Changed"
        draft.active = False

        draft.restore(saved)
        assert draft == saved
        assert draft.step_count == 2

    def test_snapshot_is_deep(self, draft):
        saved = draft.snapshot()
        draft.steps[0].notes = "edited"
        assert saved.steps[0].notes is None
