"""Matching module - profile analysis, pre-scoring, compaction and merging.

The async pipeline lives in subsidy_matcher.matching.pipeline.
"""

from subsidy_matcher.matching.schemas import (
    CompanyProfile,
    AnalyzedProfile,
    SubsidyCandidate,
    PreScoreResult,
    CompactBatch,
    AIEvaluation,
    AIRefinement,
    AIFailure,
    MatchResult,
    MatchResponse,
)
from subsidy_matcher.matching.profile_analyzer import analyze_profile
from subsidy_matcher.matching.pre_scoring import calculate_pre_score, pre_score_candidates
from subsidy_matcher.matching.compactor import compact_candidates
from subsidy_matcher.matching.merger import merge_results

__all__ = [
    "CompanyProfile",
    "AnalyzedProfile",
    "SubsidyCandidate",
    "PreScoreResult",
    "CompactBatch",
    "AIEvaluation",
    "AIRefinement",
    "AIFailure",
    "MatchResult",
    "MatchResponse",
    "analyze_profile",
    "calculate_pre_score",
    "pre_score_candidates",
    "compact_candidates",
    "merge_results",
]
