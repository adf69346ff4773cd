"""Seed the default driver penalty catalog.

Existing penalties (matched case-insensitively by name) are left untouched,
so the command is safe to re-run.

Example:
  python -m fleet_deductions.cli.seed_penalties --dry-run
"""

import argparse
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from fleet_deductions.config import settings
from fleet_deductions.domain.enums import PenaltyCategory, PenaltySeverity, PenaltyTriggerType
from fleet_deductions.infrastructure.observability.logging import setup_logging
from fleet_deductions.services.catalog import PenaltyCatalog

DEFAULT_PENALTIES: List[Dict[str, Any]] = [
    {
        "name": "Late Report",
        "description": "Reported for duty later than the allowed grace period",
        "amount": Decimal("100"),
        "is_automatic": True,
        "trigger_type": PenaltyTriggerType.LATE_REPORT,
        "trigger_config": {"delay_minutes": 5},
        "severity": PenaltySeverity.LOW,
    },
    {
        "name": "Repeated Customer Complaints",
        "description": "Customer complaints reached the review threshold",
        "amount": Decimal("500"),
        "is_automatic": True,
        "trigger_type": PenaltyTriggerType.COMPLAINTS,
        "trigger_config": {"complaint_count": 3},
        "category": PenaltyCategory.BEHAVIORAL,
        "severity": PenaltySeverity.HIGH,
        "notify_driver": True,
    },
    {
        "name": "Trip No-Show",
        "description": "Accepted a trip and did not arrive at pickup",
        "amount": Decimal("1000"),
        "severity": PenaltySeverity.HIGH,
        "notify_driver": True,
    },
    {
        "name": "Uniform Violation",
        "description": "On duty without the prescribed uniform",
        "amount": Decimal("50"),
        "category": PenaltyCategory.BEHAVIORAL,
        "severity": PenaltySeverity.LOW,
        "notify_admin": False,
    },
    {
        "name": "Vehicle Damage",
        "description": "Damage to a customer vehicle attributable to the driver",
        "amount": Decimal("2000"),
        "category": PenaltyCategory.FINANCIAL,
        "severity": PenaltySeverity.HIGH,
        "notify_driver": True,
    },
    {
        "name": "Unsafe Driving",
        "description": "Verified report of dangerous driving",
        "amount": Decimal("2500"),
        "category": PenaltyCategory.SAFETY,
        "severity": PenaltySeverity.CRITICAL,
        "notify_driver": True,
        "block_driver": True,
    },
]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed default driver penalties")
    parser.add_argument("--database-url", default=settings.database_url, help="SQLAlchemy database URL")
    parser.add_argument("--dry-run", action="store_true", help="Report what would be created without writing")
    return parser.parse_args(argv)


def seed_default_penalties(db: Session, dry_run: bool = False) -> List[str]:
    """Create every default penalty that does not exist yet; return the names created"""
    catalog = PenaltyCatalog(db)
    created = []
    for definition in DEFAULT_PENALTIES:
        name = definition["name"]
        if catalog.exists_by_name(name):
            logging.info(f'Penalty "{name}" already exists, skipping')
            continue
        if not dry_run:
            catalog.create_penalty(definition)
        created.append(name)
    return created


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    setup_logging(settings.log_level)

    engine = create_engine(args.database_url, pool_pre_ping=True)
    db = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    try:
        created = seed_default_penalties(db, dry_run=args.dry_run)
    finally:
        db.close()
        engine.dispose()

    verb = "Would create" if args.dry_run else "Created"
    for name in created:
        print(f"{verb}: {name}")
    print(f"COUNT={len(created)}")


if __name__ == "__main__":
    main()
