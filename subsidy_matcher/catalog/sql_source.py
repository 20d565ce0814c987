"""SQLAlchemy candidate source.

Three simple queries instead of one complex OR:
A. region-matched (profile region, "National" or unrestricted)
B. sector-matched (primary_sector ILIKE %sector%)
C. high-value national programmes
Results are merged and deduplicated in that order. If the targeted queries
fail, one plain query over the active catalog is tried before giving up.
"""

from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from subsidy_matcher.catalog.base import merge_and_dedupe
from subsidy_matcher.catalog.normalize import candidate_from_record
from subsidy_matcher.core.constants import REGION_NATIONAL
from subsidy_matcher.core.exceptions import CatalogError
from subsidy_matcher.core.logging import get_logger
from subsidy_matcher.core.retry import db_retry
from subsidy_matcher.db.models import Subsidy, SubsidyRegion
from subsidy_matcher.db.session import make_session_factory
from subsidy_matcher.matching.schemas import AnalyzedProfile, SubsidyCandidate
from subsidy_matcher.settings import settings

logger = get_logger("catalog.sql")

SECTOR_QUERY_LIMIT = 60
NATIONAL_QUERY_LIMIT = 50
NATIONAL_MIN_AMOUNT = 50_000
FALLBACK_QUERY_LIMIT = 200


def subsidy_to_record(row: Subsidy) -> dict:
    return {
        "id": row.id,
        "title": row.title,
        "description": row.description,
        "eligibility_criteria": row.eligibility_criteria,
        "agency": row.agency,
        "regions": [r.region for r in row.regions],
        "primary_sector": row.primary_sector,
        "is_universal_sector": row.is_universal_sector,
        "amount_min": row.amount_min,
        "amount_max": row.amount_max,
        "keywords": row.keywords,
        "legal_entities": row.legal_entities,
        "funding_type": row.funding_type,
        "deadline": row.deadline,
    }


class SqlCandidateSource:
    """Reads active, business-relevant subsidies from the catalog tables."""

    def __init__(
        self,
        session_factory: Optional[sessionmaker] = None,
        locale: Optional[str] = None,
        query_limit: Optional[int] = None,
    ):
        self._session_factory = session_factory
        self.locale = locale or settings.display_locale
        self.query_limit = query_limit or settings.catalog_query_limit

    def _session(self) -> Session:
        if self._session_factory is None:
            self._session_factory = make_session_factory()
        return self._session_factory()

    def _base_query(self):
        return (
            select(Subsidy)
            .options(selectinload(Subsidy.regions))
            .where(Subsidy.is_active.is_(True), Subsidy.is_business_relevant.is_(True))
        )

    def _to_candidates(self, rows) -> List[SubsidyCandidate]:
        return [candidate_from_record(subsidy_to_record(row), self.locale) for row in rows]

    @db_retry
    def _targeted_queries(self, analyzed: AnalyzedProfile) -> List[SubsidyCandidate]:
        wanted_regions = [REGION_NATIONAL]
        if analyzed.region:
            wanted_regions.insert(0, analyzed.region)

        region_query = (
            self._base_query()
            .where(
                or_(
                    Subsidy.regions.any(SubsidyRegion.region.in_(wanted_regions)),
                    ~Subsidy.regions.any(),
                )
            )
            .order_by(Subsidy.id)
            .limit(self.query_limit)
        )
        national_query = (
            self._base_query()
            .where(
                Subsidy.regions.any(SubsidyRegion.region == REGION_NATIONAL),
                Subsidy.amount_max >= NATIONAL_MIN_AMOUNT,
            )
            .order_by(Subsidy.amount_max.desc(), Subsidy.id)
            .limit(NATIONAL_QUERY_LIMIT)
        )

        session = self._session()
        try:
            region_rows = session.scalars(region_query).all()
            sector_rows = []
            if analyzed.sector:
                sector_query = (
                    self._base_query()
                    .where(Subsidy.primary_sector.ilike(f"%{analyzed.sector}%"))
                    .order_by(Subsidy.id)
                    .limit(SECTOR_QUERY_LIMIT)
                )
                sector_rows = session.scalars(sector_query).all()
            national_rows = session.scalars(national_query).all()

            return merge_and_dedupe([
                self._to_candidates(region_rows),
                self._to_candidates(sector_rows),
                self._to_candidates(national_rows),
            ])
        finally:
            session.close()

    @db_retry
    def _fallback_query(self) -> List[SubsidyCandidate]:
        session = self._session()
        try:
            rows = session.scalars(
                self._base_query().order_by(Subsidy.id).limit(FALLBACK_QUERY_LIMIT)
            ).all()
            return self._to_candidates(rows)
        finally:
            session.close()

    def fetch_candidates(self, analyzed: AnalyzedProfile) -> List[SubsidyCandidate]:
        """Fetch candidates for a profile.

        Raises:
            CatalogError: If neither the targeted nor the fallback query succeeds
        """
        try:
            candidates = self._targeted_queries(analyzed)
            logger.info("Fetched %d unique candidates", len(candidates))
            return candidates
        except SQLAlchemyError as e:
            logger.error("Targeted catalog queries failed, using fallback query: %s", e)

        try:
            candidates = self._fallback_query()
        except SQLAlchemyError as e:
            raise CatalogError(f"Catalog query failed: {e}", source="sql") from e
        logger.info("Fetched %d candidates (fallback query)", len(candidates))
        return candidates
