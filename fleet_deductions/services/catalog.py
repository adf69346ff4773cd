"""Penalty catalog - CRUD over penalty rule definitions"""

import logging
import uuid
from enum import Enum
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session

from fleet_deductions.domain.enums import PenaltyCategory, PenaltySeverity, PenaltyTriggerType, PenaltyType
from fleet_deductions.domain.exceptions import InvalidPenaltyError, PenaltyAlreadyExistsError, PenaltyNotFoundError
from fleet_deductions.domain.models import PenaltyFilters, parse_trigger_config, trigger_config_to_dict
from fleet_deductions.infrastructure.database.models import Penalty
from fleet_deductions.infrastructure.database.repositories import PenaltyRepository

PENALTY_DEFAULTS: Dict[str, Any] = {
    "description": None,
    "type": PenaltyType.PENALTY,
    "is_active": True,
    "is_automatic": False,
    "trigger_type": PenaltyTriggerType.MANUAL,
    "trigger_config": None,
    "category": PenaltyCategory.OPERATIONAL,
    "severity": PenaltySeverity.MEDIUM,
    "notify_admin": True,
    "notify_manager": True,
    "notify_driver": False,
    "block_driver": False,
}

UPDATABLE_FIELDS = {"name", "amount", *PENALTY_DEFAULTS}

# Only these may be explicitly cleared on update
NULLABLE_FIELDS = {"description", "trigger_config"}


def _plain(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value.value if isinstance(value, Enum) else value for key, value in fields.items()}


def _clean_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise InvalidPenaltyError("Penalty name must not be blank")
    return name


class PenaltyCatalog:
    """Create, read, update and soft-delete penalty rules"""

    def __init__(self, db: Session):
        self.db = db
        self.penalties = PenaltyRepository(db)

    def create_penalty(self, data: Dict[str, Any]) -> Penalty:
        """
        Create a penalty rule with documented defaults for omitted fields.

        Raises:
            InvalidPenaltyError: Name is blank
            PenaltyAlreadyExistsError: Name collides case-insensitively
            InvalidTriggerConfigError: Config does not match the trigger type
        """
        name = _clean_name(data["name"])
        if self.penalties.exists_by_name(name):
            raise PenaltyAlreadyExistsError(f'Penalty with name "{name}" already exists')

        fields = {**PENALTY_DEFAULTS}
        fields.update({key: value for key, value in data.items() if key in UPDATABLE_FIELDS and value is not None})
        fields["name"] = name

        config = parse_trigger_config(fields["trigger_type"], fields["trigger_config"])
        fields["trigger_config"] = trigger_config_to_dict(config)

        try:
            penalty = self.penalties.create(**_plain(fields))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logging.info("Penalty created", extra={"penalty_id": str(penalty.id), "penalty_name": penalty.name})
        return penalty

    def get_penalty_by_id(self, penalty_id: uuid.UUID) -> Penalty:
        """Resolve a penalty, active or not, so historical rows stay joinable"""
        penalty = self.penalties.get_by_id(penalty_id)
        if penalty is None:
            raise PenaltyNotFoundError(f"Penalty not found with ID: {penalty_id}")
        return penalty

    def update_penalty(self, penalty_id: uuid.UUID, changes: Dict[str, Any]) -> Penalty:
        """
        Merge the provided fields into an existing penalty.

        Keys absent from `changes` are left untouched.
        """
        penalty = self.get_penalty_by_id(penalty_id)

        changes = {
            key: value
            for key, value in changes.items()
            if key in UPDATABLE_FIELDS and (value is not None or key in NULLABLE_FIELDS)
        }

        if "name" in changes:
            changes["name"] = _clean_name(changes["name"])
            if self.penalties.exists_by_name(changes["name"], exclude_id=penalty.id):
                raise PenaltyAlreadyExistsError(f'Penalty with name "{changes["name"]}" already exists')

        if "trigger_type" in changes or "trigger_config" in changes:
            trigger_type = PenaltyTriggerType(changes.get("trigger_type", penalty.trigger_type))
            if "trigger_config" in changes:
                raw_config = changes["trigger_config"]
            elif trigger_type == PenaltyTriggerType.MANUAL:
                raw_config = None
            else:
                raw_config = penalty.trigger_config
            config = parse_trigger_config(trigger_type, raw_config)
            changes["trigger_config"] = trigger_config_to_dict(config)

        try:
            self.penalties.update(penalty, _plain(changes))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logging.info("Penalty updated", extra={"penalty_id": str(penalty.id), "fields": sorted(changes)})
        return penalty

    def delete_penalty(self, penalty_id: uuid.UUID) -> Penalty:
        """Soft delete: deactivate, keep the row for ledger history"""
        penalty = self.get_penalty_by_id(penalty_id)
        try:
            self.penalties.update(penalty, {"is_active": False})
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logging.info("Penalty deactivated", extra={"penalty_id": str(penalty.id)})
        return penalty

    def list_penalties(self, filters: Optional[PenaltyFilters] = None) -> List[Penalty]:
        return self.penalties.list(filters or PenaltyFilters())

    def get_active_penalties(self) -> List[Penalty]:
        return self.penalties.get_active()

    def find_by_trigger_type(self, trigger_type: PenaltyTriggerType | str) -> Optional[Penalty]:
        """The active automatic penalty for a trigger type, if one is configured"""
        return self.penalties.find_automatic_by_trigger_type(PenaltyTriggerType(trigger_type).value)

    def exists_by_name(self, name: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
        return self.penalties.exists_by_name(name, exclude_id=exclude_id)
