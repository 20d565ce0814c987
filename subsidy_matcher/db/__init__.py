from subsidy_matcher.db.models import (
    Base,
    Subsidy,
    SubsidyRegion,
    ComplianceEvent,
    AIUsage,
    BiasAuditRun,
)
from subsidy_matcher.db.session import (
    create_db_engine,
    get_engine,
    make_session_factory,
    get_db,
    get_session,
)

__all__ = [
    "Base",
    "Subsidy",
    "SubsidyRegion",
    "ComplianceEvent",
    "AIUsage",
    "BiasAuditRun",
    "create_db_engine",
    "get_engine",
    "make_session_factory",
    "get_db",
    "get_session",
]
