"""
Database initialization script.

Creates all tables and optionally loads a catalog JSON file into them.

Usage:
    python scripts/init_db.py
    python scripts/init_db.py seed_subsidies.json
"""
import json
import sys
from datetime import date
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import inspect, select

from subsidy_matcher.db.models import Base, Subsidy, SubsidyRegion
from subsidy_matcher.db.session import get_engine, get_session


def init_database():
    """Create all database tables."""
    print("Creating database tables...")
    Base.metadata.create_all(get_engine())
    print("Tables created successfully.")


def subsidy_from_record(record: dict) -> Subsidy:
    regions = record.get("regions", record.get("region")) or []
    if isinstance(regions, str):
        regions = [regions]
    deadline = record.get("deadline")
    return Subsidy(
        id=str(record["id"]),
        title=record.get("title") or "",
        description=record.get("description"),
        eligibility_criteria=record.get("eligibility_criteria", record.get("eligibility")),
        agency=record.get("agency"),
        primary_sector=record.get("primary_sector"),
        is_universal_sector=bool(record.get("is_universal_sector", False)),
        amount_min=record.get("amount_min"),
        amount_max=record.get("amount_max"),
        keywords=record.get("keywords") or [],
        legal_entities=record.get("legal_entities") or [],
        funding_type=record.get("funding_type"),
        deadline=date.fromisoformat(deadline) if deadline else None,
        is_active=record.get("is_active", True),
        is_business_relevant=record.get("is_business_relevant", True),
        regions=[SubsidyRegion(region=r, position=i) for i, r in enumerate(regions)],
    )


def seed_catalog(path: Path) -> int:
    """Insert catalog records that are not stored yet."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("subsidies", [])

    inserted = 0
    with get_session() as session:
        existing = set(session.scalars(select(Subsidy.id)).all())
        for record in data:
            if str(record["id"]) in existing:
                continue
            session.add(subsidy_from_record(record))
            inserted += 1
    return inserted


def list_tables():
    """List all tables in the database."""
    tables = inspect(get_engine()).get_table_names()
    print("\nDatabase tables:")
    for table in sorted(tables):
        print(f"  - {table}")
    return tables


if __name__ == "__main__":
    init_database()
    tables = list_tables()

    required = ["subsidies", "subsidy_regions", "compliance_events", "ai_usage", "bias_audit_runs"]
    missing = [t for t in required if t not in tables]
    if missing:
        print(f"\nWarning: Missing tables: {missing}")
    else:
        print("\nAll tables present.")

    if len(sys.argv) > 1:
        count = seed_catalog(Path(sys.argv[1]))
        print(f"\n{count} subsidies inserted.")
