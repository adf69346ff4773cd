"""Unit tests for the penalty catalog"""

import uuid
import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from fleet_deductions.domain.enums import PenaltyCategory, PenaltySeverity, PenaltyTriggerType
from fleet_deductions.domain.exceptions import (
    InvalidPenaltyError,
    InvalidTriggerConfigError,
    PenaltyAlreadyExistsError,
    PenaltyNotFoundError,
)
from fleet_deductions.domain.models import PenaltyFilters
from fleet_deductions.services.catalog import PenaltyCatalog


def test_create_penalty_applies_defaults(db):
    """Omitted fields take the documented defaults"""
    catalog = PenaltyCatalog(db)
    penalty = catalog.create_penalty({"name": "Late Pickup", "amount": Decimal("100")})

    assert penalty.type == "PENALTY"
    assert penalty.is_active is True
    assert penalty.is_automatic is False
    assert penalty.trigger_type == "MANUAL"
    assert penalty.trigger_config is None
    assert penalty.category == "OPERATIONAL"
    assert penalty.severity == "MEDIUM"
    assert penalty.notify_admin is True
    assert penalty.notify_manager is True
    assert penalty.notify_driver is False
    assert penalty.block_driver is False


def test_exists_by_name_after_create(db):
    catalog = PenaltyCatalog(db)
    catalog.create_penalty({"name": "Late Pickup", "amount": Decimal("100")})

    assert catalog.exists_by_name("Late Pickup")
    assert catalog.exists_by_name("late pickup")
    assert not catalog.exists_by_name("Early Pickup")

    penalty = catalog.get_active_penalties()[0]
    assert not catalog.exists_by_name("LATE PICKUP", exclude_id=penalty.id)


@pytest.mark.parametrize("duplicate", ["Late Pickup", "LATE PICKUP", "  late pickup "])
def test_create_penalty_rejects_duplicate_name_any_case(db, duplicate):
    catalog = PenaltyCatalog(db)
    catalog.create_penalty({"name": "Late Pickup", "amount": Decimal("100")})

    with pytest.raises(PenaltyAlreadyExistsError, match="already exists"):
        catalog.create_penalty({"name": duplicate, "amount": Decimal("50")})


def test_create_penalty_validates_trigger_config(db):
    catalog = PenaltyCatalog(db)

    penalty = catalog.create_penalty(
        {
            "name": "Late Report",
            "amount": Decimal("100"),
            "is_automatic": True,
            "trigger_type": PenaltyTriggerType.LATE_REPORT,
            "trigger_config": {"delay_minutes": 5},
        }
    )
    assert penalty.trigger_config == {"delay_minutes": 5}

    with pytest.raises(InvalidTriggerConfigError):
        catalog.create_penalty(
            {
                "name": "Complaints",
                "amount": Decimal("100"),
                "trigger_type": PenaltyTriggerType.COMPLAINTS,
                "trigger_config": {"delay_minutes": 5},
            }
        )


def test_get_penalty_by_id_not_found(db):
    with pytest.raises(PenaltyNotFoundError, match="Penalty not found with ID"):
        PenaltyCatalog(db).get_penalty_by_id(uuid.uuid4())


def test_update_penalty_merges_only_provided_fields(db, make_penalty):
    penalty = make_penalty(name="Late Pickup", description="Late to pickup", amount=Decimal("100"))

    updated = PenaltyCatalog(db).update_penalty(penalty.id, {"amount": Decimal("150")})

    assert updated.amount == Decimal("150")
    assert updated.name == "Late Pickup"
    assert updated.description == "Late to pickup"


def test_update_penalty_rename_conflict(db, make_penalty):
    make_penalty(name="Late Pickup")
    other = make_penalty(name="No Show")

    with pytest.raises(PenaltyAlreadyExistsError):
        PenaltyCatalog(db).update_penalty(other.id, {"name": "late pickup"})


def test_update_penalty_rename_to_own_name_different_case(db, make_penalty):
    penalty = make_penalty(name="Late Pickup")

    updated = PenaltyCatalog(db).update_penalty(penalty.id, {"name": "LATE PICKUP"})

    assert updated.name == "LATE PICKUP"


def test_update_penalty_switching_to_manual_clears_config(db, make_penalty):
    penalty = make_penalty(
        name="Late Report",
        trigger_type="LATE_REPORT",
        trigger_config={"delay_minutes": 5},
        is_automatic=True,
    )

    updated = PenaltyCatalog(db).update_penalty(penalty.id, {"trigger_type": PenaltyTriggerType.MANUAL})

    assert updated.trigger_type == "MANUAL"
    assert updated.trigger_config is None


def test_update_penalty_ignores_null_for_required_fields(db, make_penalty):
    penalty = make_penalty(name="Late Pickup", description="Late", amount=Decimal("100"))

    updated = PenaltyCatalog(db).update_penalty(penalty.id, {"amount": None, "description": None})

    assert updated.amount == Decimal("100")
    assert updated.description is None


def test_delete_penalty_is_soft(db, make_penalty):
    """Deleted penalties leave the active list but remain resolvable by id"""
    penalty = make_penalty(name="Late Pickup")
    catalog = PenaltyCatalog(db)

    catalog.delete_penalty(penalty.id)

    assert penalty.id not in [p.id for p in catalog.get_active_penalties()]
    resolved = catalog.get_penalty_by_id(penalty.id)
    assert resolved.is_active is False


def test_list_penalties_equality_filters(db, make_penalty):
    make_penalty(name="Speeding", category="SAFETY", severity="HIGH")
    make_penalty(name="Rude Behaviour", category="BEHAVIORAL", severity="HIGH")
    make_penalty(name="Late Pickup", category="OPERATIONAL", severity="LOW", is_active=False)
    catalog = PenaltyCatalog(db)

    high = catalog.list_penalties(PenaltyFilters(severity=PenaltySeverity.HIGH))
    assert {p.name for p in high} == {"Speeding", "Rude Behaviour"}

    safety = catalog.list_penalties(PenaltyFilters(category=PenaltyCategory.SAFETY))
    assert [p.name for p in safety] == ["Speeding"]

    inactive = catalog.list_penalties(PenaltyFilters(is_active=False))
    assert [p.name for p in inactive] == ["Late Pickup"]


def test_list_penalties_search_name_or_description(db, make_penalty):
    make_penalty(name="Late Pickup", description="Arrived after the slot")
    make_penalty(name="No Show", description="Driver did not arrive LATE or otherwise")
    make_penalty(name="Uniform", description="Missing uniform")

    results = PenaltyCatalog(db).list_penalties(PenaltyFilters(search="late"))

    assert {p.name for p in results} == {"Late Pickup", "No Show"}


def test_list_penalties_newest_first(db, make_penalty):
    base = datetime(2026, 1, 1, 12, 0, 0)
    make_penalty(name="Oldest", created_at=base)
    make_penalty(name="Newest", created_at=base + timedelta(days=2))
    make_penalty(name="Middle", created_at=base + timedelta(days=1))

    results = PenaltyCatalog(db).list_penalties()

    assert [p.name for p in results] == ["Newest", "Middle", "Oldest"]


def test_find_by_trigger_type_returns_active_automatic_only(db, make_penalty):
    make_penalty(name="Manual Late", trigger_type="LATE_REPORT", trigger_config={"delay_minutes": 5})
    make_penalty(
        name="Retired Late",
        trigger_type="LATE_REPORT",
        trigger_config={"delay_minutes": 5},
        is_automatic=True,
        is_active=False,
    )
    automatic = make_penalty(
        name="Auto Late",
        trigger_type="LATE_REPORT",
        trigger_config={"delay_minutes": 10},
        is_automatic=True,
    )
    catalog = PenaltyCatalog(db)

    assert catalog.find_by_trigger_type(PenaltyTriggerType.LATE_REPORT).id == automatic.id
    assert catalog.find_by_trigger_type("COMPLAINTS") is None


@pytest.mark.parametrize("blank", ["", "   ", "\t\n"])
def test_create_penalty_rejects_blank_name(db, blank):
    catalog = PenaltyCatalog(db)

    with pytest.raises(InvalidPenaltyError, match="must not be blank"):
        catalog.create_penalty({"name": blank, "amount": Decimal("10")})

    assert catalog.list_penalties() == []


def test_update_penalty_rejects_blank_name(db, make_penalty):
    penalty = make_penalty(name="Late Pickup")

    with pytest.raises(InvalidPenaltyError):
        PenaltyCatalog(db).update_penalty(penalty.id, {"name": "   "})

    assert PenaltyCatalog(db).get_penalty_by_id(penalty.id).name == "Late Pickup"
