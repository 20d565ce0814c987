"""Core module - logging, exceptions, lookup tables and application infrastructure."""

from subsidy_matcher.core.logging import setup_logging, get_logger
from subsidy_matcher.core.exceptions import (
    SubsidyMatcherError,
    CatalogError,
    AIProcessingError,
    ParsingError,
    RateLimitExceeded,
    AuditLogError,
)
from subsidy_matcher.core.keyword_config import DEFAULT_TABLES, KeywordTables

__all__ = [
    "setup_logging",
    "get_logger",
    "SubsidyMatcherError",
    "CatalogError",
    "AIProcessingError",
    "ParsingError",
    "RateLimitExceeded",
    "AuditLogError",
    "DEFAULT_TABLES",
    "KeywordTables",
]
