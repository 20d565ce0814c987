"""Candidate source contract."""

from typing import Iterable, List, Optional, Protocol, runtime_checkable

from subsidy_matcher.matching.schemas import AnalyzedProfile, SubsidyCandidate


@runtime_checkable
class CandidateSource(Protocol):
    """Read path over the subsidy catalog.

    Implementations return active, business-relevant candidates with all
    localized fields already resolved. Failures raise CatalogError.
    """

    def fetch_candidates(self, analyzed: AnalyzedProfile) -> List[SubsidyCandidate]:
        ...


def merge_and_dedupe(batches: Iterable[Optional[Iterable[SubsidyCandidate]]]) -> List[SubsidyCandidate]:
    """Concatenate query results, keeping the first occurrence of each id."""
    seen = set()
    result: List[SubsidyCandidate] = []
    for batch in batches:
        if not batch:
            continue
        for candidate in batch:
            if candidate.id not in seen:
                seen.add(candidate.id)
                result.append(candidate)
    return result
