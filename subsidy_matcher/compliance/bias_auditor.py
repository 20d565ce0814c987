"""Bias-Audit der Matching-Regeln.

Generates reproducible synthetic profiles over region x sector x size, runs
the full pipeline for each and flags groups whose match rate deviates from
the dimension mean by more than the configured threshold.

Severity: low (> threshold), medium (> 0.2), high (> 0.3).
An audit passes when no high-severity flag is raised.
"""

import random
import time
import uuid
from datetime import datetime, timedelta
from typing import Dict, List, Literal, Optional

import pandas as pd
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from subsidy_matcher.catalog.base import CandidateSource
from subsidy_matcher.core.exceptions import CatalogError
from subsidy_matcher.core.logging import get_logger
from subsidy_matcher.db.models import BiasAuditRun
from subsidy_matcher.db.session import get_session
from subsidy_matcher.matching.pipeline import _run_async, compute_matches
from subsidy_matcher.matching.schemas import CompanyProfile
from subsidy_matcher.settings import Settings, settings as default_settings

logger = get_logger("compliance.bias_auditor")

FRENCH_REGIONS = [
    "Île-de-France",
    "Auvergne-Rhône-Alpes",
    "Nouvelle-Aquitaine",
    "Occitanie",
    "Hauts-de-France",
    "Provence-Alpes-Côte d'Azur",
    "Grand Est",
    "Pays de la Loire",
    "Bretagne",
    "Normandie",
    "Bourgogne-Franche-Comté",
    "Centre-Val de Loire",
    "Corse",
]

# English labels, resolved by the profile analyzer's alias table
BUSINESS_SECTORS = [
    "Technology",
    "Manufacturing",
    "Services",
    "Agriculture",
    "Construction",
    "Retail",
    "Healthcare",
    "Energy",
    "Transport",
    "Tourism",
]

# (employee bucket, annual turnover)
COMPANY_SIZES = [
    ("1-10", 500_000),
    ("11-50", 2_000_000),
    ("51-250", 10_000_000),
    ("251+", 50_000_000),
]

PROJECT_TYPES = ["innovation", "digital", "export", "recrutement", "transition écologique"]

DIMENSIONS = {
    "region": "geographic",
    "sector": "sector",
    "size": "size",
}

MEDIUM_SEVERITY = 0.2
HIGH_SEVERITY = 0.3
STALE_AFTER_DAYS = 30


class BiasAuditConfig(BaseModel):
    """Parameters of one audit run."""

    test_name: str = "bias-audit"
    tester: str = "system"
    sample_size: int = Field(default_factory=lambda: default_settings.bias_sample_size, ge=1)
    seed: int = 42
    variance_threshold: float = Field(
        default_factory=lambda: default_settings.bias_variance_threshold, ge=0.0
    )
    match_score_threshold: int = Field(
        default_factory=lambda: default_settings.bias_match_score_threshold, ge=0, le=100
    )
    min_group_size: int = 3
    limit: int = 20
    ai_enabled: bool = False
    reference_year: Optional[int] = None


class BiasFlag(BaseModel):
    bias_type: Literal["geographic", "sector", "size"]
    dimension: str
    expected_rate: float
    actual_rate: float
    deviation_percent: float
    severity: Literal["low", "medium", "high"]


class BiasAuditReport(BaseModel):
    test_id: str
    test_name: str
    tester: str
    run_at: datetime
    seed: int
    sample_size: int
    passed: bool
    variance_score: float
    flagged_biases: List[BiasFlag] = Field(default_factory=list)
    match_rates: Dict[str, Dict[str, float]] = Field(default_factory=dict)
    model_version: Optional[str] = None
    duration_ms: int = 0
    profiles: List[CompanyProfile] = Field(default_factory=list)


class QuickCheckResult(BaseModel):
    status: Literal["pass", "warning", "fail"]
    summary: str
    last_run_at: Optional[datetime] = None


def generate_synthetic_profiles(
    sample_size: int,
    seed: int,
    reference_year: Optional[int] = None,
) -> List[CompanyProfile]:
    """Reproducible synthetic profiles (same seed -> same profiles).

    Every dimension is cycled so that all regions, sectors and sizes appear;
    the seed shuffles the cycles and draws age, certifications and projects.
    """
    rng = random.Random(seed)
    regions = list(FRENCH_REGIONS)
    sectors = list(BUSINESS_SECTORS)
    sizes = list(COMPANY_SIZES)
    rng.shuffle(regions)
    rng.shuffle(sectors)
    rng.shuffle(sizes)
    year = reference_year or datetime.now().year

    profiles = []
    for i in range(sample_size):
        employees, turnover = sizes[i % len(sizes)]
        project_count = rng.randint(1, 2)
        profiles.append(
            CompanyProfile(
                id=f"synthetic-{seed}-{i}",
                company_name=f"Test Company {i + 1}",
                sector=sectors[i % len(sectors)],
                region=regions[i % len(regions)],
                employees=employees,
                annual_turnover=turnover,
                year_created=year - rng.randint(1, 20),
                certifications=("ISO 9001",) if rng.random() < 1 / 3 else (),
                project_types=tuple(rng.sample(PROJECT_TYPES, project_count)),
            )
        )
    return profiles


def detect_biases(
    frame: pd.DataFrame,
    column: str,
    bias_type: str,
    threshold: float,
    min_group_size: int = 3,
) -> tuple[Dict[str, float], List[BiasFlag]]:
    """Group match rates for one dimension and flag outliers.

    Returns:
        Tuple of ({group: rate}, flags)
    """
    grouped = frame.groupby(column)["matches"].agg(["count", "mean"])
    rates = {str(group): float(row["mean"]) for group, row in grouped.iterrows()}
    if grouped.empty:
        return rates, []

    mean_rate = float(grouped["mean"].mean())
    flags: List[BiasFlag] = []
    for group, row in grouped.iterrows():
        if row["count"] < min_group_size:
            continue
        deviation = abs(row["mean"] - mean_rate) / (mean_rate or 1)
        if deviation > threshold:
            severity = "high" if deviation > HIGH_SEVERITY else "medium" if deviation > MEDIUM_SEVERITY else "low"
            flags.append(
                BiasFlag(
                    bias_type=bias_type,
                    dimension=str(group),
                    expected_rate=round(mean_rate, 4),
                    actual_rate=round(float(row["mean"]), 4),
                    deviation_percent=round(deviation * 100, 2),
                    severity=severity,
                )
            )
    return rates, flags


class BiasAuditor:
    """Drives the matching pipeline with synthetic profiles and evaluates the spread."""

    def __init__(
        self,
        candidate_source: CandidateSource,
        config: Optional[Settings] = None,
        session_factory: Optional[sessionmaker] = None,
    ):
        self.candidate_source = candidate_source
        self.config = config or default_settings
        self._session_factory = session_factory

    async def _count_matches(self, profile: CompanyProfile, audit: BiasAuditConfig, settings: Settings) -> int:
        try:
            response = await compute_matches(profile, self.candidate_source, audit.limit, config=settings)
        except CatalogError as e:
            logger.error("Match failed for %s: %s", profile.id, e.message)
            return 0
        return sum(1 for m in response.matches if m.match_score >= audit.match_score_threshold)

    async def run_async(self, audit: Optional[BiasAuditConfig] = None) -> BiasAuditReport:
        audit = audit or BiasAuditConfig()
        start = time.perf_counter()
        settings = self.config.model_copy(update={"ai_enabled": audit.ai_enabled})
        profiles = generate_synthetic_profiles(audit.sample_size, audit.seed, audit.reference_year)
        logger.info("Bias audit '%s': %d synthetic profiles (seed %d)", audit.test_name, len(profiles), audit.seed)

        rows = []
        for profile in profiles:
            rows.append({
                "profile_id": profile.id,
                "region": profile.region,
                "sector": profile.sector,
                "size": str(profile.employees),
                "matches": await self._count_matches(profile, audit, settings),
            })
        frame = pd.DataFrame(rows)

        match_rates: Dict[str, Dict[str, float]] = {}
        flags: List[BiasFlag] = []
        for column, bias_type in DIMENSIONS.items():
            rates, dimension_flags = detect_biases(
                frame, column, bias_type, audit.variance_threshold, audit.min_group_size
            )
            match_rates[column] = rates
            flags.extend(dimension_flags)

        all_rates = pd.Series([rate for rates in match_rates.values() for rate in rates.values()], dtype=float)
        variance_score = float(all_rates.std(ddof=0)) if len(all_rates) else 0.0

        report = BiasAuditReport(
            test_id=str(uuid.uuid4()),
            test_name=audit.test_name,
            tester=audit.tester,
            run_at=datetime.utcnow(),
            seed=audit.seed,
            sample_size=audit.sample_size,
            passed=not any(f.severity == "high" for f in flags),
            variance_score=round(variance_score, 4),
            flagged_biases=flags,
            match_rates=match_rates,
            model_version=settings.ai_model if audit.ai_enabled else None,
            duration_ms=int((time.perf_counter() - start) * 1000),
            profiles=profiles,
        )
        logger.info(
            "Bias audit %s: %d flags, variance %.4f",
            "passed" if report.passed else "FAILED",
            len(flags),
            report.variance_score,
        )
        return report

    def run(self, audit: Optional[BiasAuditConfig] = None) -> BiasAuditReport:
        """Synchronous entry point for run_async()."""
        return _run_async(self.run_async(audit))

    def save(self, report: BiasAuditReport) -> int:
        """Persist a report as a BiasAuditRun row.

        Returns:
            ID of the stored run
        """
        with get_session(self._session_factory) as session:
            run = BiasAuditRun(
                run_at=report.run_at,
                seed=report.seed,
                sample_size=report.sample_size,
                passed=report.passed,
                variance_score=report.variance_score,
                flags=[f.model_dump() for f in report.flagged_biases],
                match_rates=report.match_rates,
                duration_ms=report.duration_ms,
            )
            session.add(run)
            session.flush()
            return run.id


def quick_bias_check(
    session_factory: Optional[sessionmaker] = None,
    now: Optional[datetime] = None,
) -> QuickCheckResult:
    """Status of the latest stored audit: pass, warning (none / stale) or fail."""
    now = now or datetime.utcnow()
    with get_session(session_factory) as session:
        latest = session.scalars(
            select(BiasAuditRun).order_by(BiasAuditRun.run_at.desc()).limit(1)
        ).first()
        if latest is None:
            return QuickCheckResult(
                status="warning",
                summary="Aucun test de biais récent. Exécutez un test pour vérifier la conformité.",
            )
        run_at = latest.run_at
        passed = latest.passed
        variance = latest.variance_score or 0.0
        high = sum(1 for f in (latest.flags or []) if f.get("severity") == "high")

    days = (now - run_at) // timedelta(days=1)
    if days > STALE_AFTER_DAYS:
        return QuickCheckResult(
            status="warning",
            summary=f"Dernier test il y a {days} jours. Un nouveau test est recommandé.",
            last_run_at=run_at,
        )
    if not passed:
        return QuickCheckResult(
            status="fail",
            summary=f"{high} biais critiques détectés. Action corrective requise.",
            last_run_at=run_at,
        )
    return QuickCheckResult(
        status="pass",
        summary=f"Dernier test réussi (variance: {variance * 100:.1f}%)",
        last_run_at=run_at,
    )
