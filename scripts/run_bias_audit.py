#!/usr/bin/env python
"""
Bias-Audit der Matching-Regeln.

Runs the pipeline over reproducible synthetic profiles and reports groups
(region, sector, size) whose match rate deviates from the mean.

Usage:
    python scripts/run_bias_audit.py --catalog subsidies.json --seed 42
    python scripts/run_bias_audit.py --sql --save
    python scripts/run_bias_audit.py --check
"""
import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from subsidy_matcher.catalog import InMemoryCandidateSource, SqlCandidateSource
from subsidy_matcher.compliance.bias_auditor import BiasAuditConfig, BiasAuditor, quick_bias_check
from subsidy_matcher.core.constants import SEPARATOR_LINE
from subsidy_matcher.core.exceptions import CatalogError
from subsidy_matcher.core.logging import setup_logging
from subsidy_matcher.settings import settings


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Bias audit of the subsidy matcher")
    parser.add_argument("--catalog", type=Path, help="Catalog JSON file")
    parser.add_argument("--sql", action="store_true", help="Read the catalog from DATABASE_URL")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--sample-size", type=int, default=settings.bias_sample_size)
    parser.add_argument("--save", action="store_true", help="Store the report in bias_audit_runs")
    parser.add_argument("--check", action="store_true", help="Only show the status of the last stored run")
    return parser.parse_args(argv)


def print_report(report):
    print(SEPARATOR_LINE)
    print("BIAS AUDIT")
    print(SEPARATOR_LINE)
    print(f"  Profile:          {report.sample_size} (seed {report.seed})")
    print(f"  Varianz:          {report.variance_score:.4f}")
    print(f"  Ergebnis:         {'BESTANDEN' if report.passed else 'NICHT BESTANDEN'}")
    print(f"  Dauer:            {report.duration_ms} ms")
    print()
    for dimension, rates in report.match_rates.items():
        print(f"  {dimension}:")
        for group, rate in sorted(rates.items(), key=lambda x: -x[1]):
            print(f"    {group:<30} {rate:.2f}")
    if report.flagged_biases:
        print()
        print("  Auffälligkeiten:")
        for flag in report.flagged_biases:
            print(
                f"    [{flag.severity}] {flag.bias_type}/{flag.dimension}: "
                f"{flag.actual_rate:.2f} vs. {flag.expected_rate:.2f} ({flag.deviation_percent:.1f}%)"
            )


def main(argv=None):
    """Run a bias audit or show the last stored status."""
    args = parse_args(argv)
    setup_logging(level=settings.log_level, log_file=settings.log_file)

    if args.check:
        result = quick_bias_check()
        print(f"[{result.status}] {result.summary}")
        return 0 if result.status != "fail" else 1

    if args.sql:
        source = SqlCandidateSource()
    elif args.catalog:
        try:
            source = InMemoryCandidateSource.from_json_file(args.catalog)
        except CatalogError as e:
            print(f"Cannot load catalog: {e.message}", file=sys.stderr)
            return 2
    else:
        print("Either --catalog or --sql is required", file=sys.stderr)
        return 2

    auditor = BiasAuditor(source, settings)
    report = auditor.run(BiasAuditConfig(seed=args.seed, sample_size=args.sample_size))
    print_report(report)

    if args.save:
        run_id = auditor.save(report)
        print()
        print(f"Report gespeichert (ID {run_id})")

    return 0 if report.passed else 1


if __name__ == "__main__":
    sys.exit(main())
