#!/usr/bin/env python
"""
Entry point for matching one company profile against the subsidy catalog.

Usage:
    python scripts/run_matching.py profile.json --catalog subsidies.json
    python scripts/run_matching.py profile.json --sql --limit 10
    python scripts/run_matching.py profile.json --catalog subsidies.json --no-ai

The response is printed as JSON; the summary goes to the log.
"""
import argparse
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from subsidy_matcher.catalog import InMemoryCandidateSource, SqlCandidateSource
from subsidy_matcher.compliance import SqlAuditLog
from subsidy_matcher.core.exceptions import CatalogError
from subsidy_matcher.core.logging import setup_logging
from subsidy_matcher.matching.pipeline import run_matching
from subsidy_matcher.matching.schemas import CompanyProfile
from subsidy_matcher.settings import settings


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Match a profile against the subsidy catalog")
    parser.add_argument("profile", type=Path, help="Profile JSON file")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--catalog", type=Path, help="Catalog JSON file")
    source.add_argument("--sql", action="store_true", help="Read the catalog from DATABASE_URL")
    parser.add_argument("--limit", type=int, default=None, help="Max number of matches")
    parser.add_argument("--no-ai", action="store_true", help="Skip the AI refinement")
    parser.add_argument("--audit", action="store_true", help="Store a compliance event (needs --sql)")
    return parser.parse_args(argv)


def main(argv=None):
    """Run the matching pipeline for one profile."""
    args = parse_args(argv)
    setup_logging(level=settings.log_level, log_file=settings.log_file)

    try:
        profile = CompanyProfile.model_validate_json(args.profile.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        print(f"Cannot read profile: {e}", file=sys.stderr)
        return 2

    try:
        if args.sql:
            source = SqlCandidateSource()
        else:
            source = InMemoryCandidateSource.from_json_file(args.catalog)
    except CatalogError as e:
        print(f"Cannot load catalog: {e.message}", file=sys.stderr)
        return 2

    config = settings.model_copy(update={"ai_enabled": False}) if args.no_ai else settings
    audit_log = SqlAuditLog() if args.audit and args.sql else None

    try:
        response = run_matching(profile, source, args.limit, config=config, audit_log=audit_log)
    except CatalogError as e:
        print(f"Catalog unavailable: {e.message}", file=sys.stderr)
        return 1

    print(json.dumps(response.model_dump(exclude_none=True), ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
