"""Result merger: AI refinement + pre-scores -> final ranked matches."""

from typing import List, Sequence

from subsidy_matcher.core.constants import MISSING_AI_EVALUATION, SOURCE_AI, SOURCE_PRE_SCORE
from subsidy_matcher.core.logging import get_logger
from subsidy_matcher.matching.schemas import (
    AIEvaluation,
    AIRefinement,
    AIResult,
    MatchResult,
    PreScoreResult,
)

logger = get_logger("matching.merger")

# (minimum score, probability) - first matching tier wins
AI_PROBABILITY_TIERS = [(90, 70), (70, 50), (50, 30)]
PRE_SCORE_PROBABILITY_TIERS = [(70, 40), (50, 25)]
DEFAULT_PROBABILITY = 15


def _probability(score: int, tiers) -> int:
    for minimum, probability in tiers:
        if score >= minimum:
            return probability
    return DEFAULT_PROBABILITY


def _criteria_from_reasons(reasons: Sequence[str]) -> List[str]:
    """Reason labels ('Région: Occitanie' -> 'Région')."""
    return [reason.split(":")[0].strip() for reason in reasons]


def from_pre_score(result: PreScoreResult) -> MatchResult:
    """Fallback entry built from the deterministic score alone."""
    score = max(0, result.score)
    return MatchResult(
        subsidy_id=result.candidate.id,
        match_score=score,
        success_probability=_probability(score, PRE_SCORE_PROBABILITY_TIERS),
        match_reasons=list(result.reasons),
        matching_criteria=_criteria_from_reasons(result.reasons),
        missing_criteria=[MISSING_AI_EVALUATION],
        source=SOURCE_PRE_SCORE,
    )


def from_evaluation(evaluation: AIEvaluation, result: PreScoreResult) -> MatchResult:
    """Entry built from the model verdict; empty AI reasons keep the pre-score reasons."""
    probability = evaluation.success_probability
    if probability is None:
        probability = _probability(evaluation.score, AI_PROBABILITY_TIERS)
    return MatchResult(
        subsidy_id=result.candidate.id,
        match_score=evaluation.score,
        success_probability=probability,
        match_reasons=evaluation.reasons or list(result.reasons),
        matching_criteria=evaluation.matching_criteria,
        missing_criteria=evaluation.missing_criteria,
        source=SOURCE_AI,
    )


def merge_results(
    pre_scored: Sequence[PreScoreResult],
    ai_result: AIResult,
    limit: int,
) -> List[MatchResult]:
    """Reconcile AI-refined scores with pre-scores.

    Success: evaluated candidates take the AI verdict, every other pre-scored
    candidate keeps its pre-score; ordered by score desc, then id.
    Failure: the top `limit` pre-scored candidates in pre-score order.

    Hard-filtered results are never emitted. The result never exceeds limit.
    """
    if limit <= 0:
        return []

    eligible = [r for r in pre_scored if not r.hard_filtered]

    if not isinstance(ai_result, AIRefinement):
        return [from_pre_score(r) for r in eligible[:limit]]

    evaluations = {e.subsidy_id: e for e in ai_result.evaluations}
    merged: List[MatchResult] = []
    fallbacks = 0
    for result in eligible:
        evaluation = evaluations.get(result.candidate.id)
        if evaluation is not None:
            merged.append(from_evaluation(evaluation, result))
        else:
            fallbacks += 1
            merged.append(from_pre_score(result))

    merged.sort(key=lambda m: (-m.match_score, m.subsidy_id))
    logger.debug(
        "Merged %d AI evaluations with %d pre-score entries",
        len(merged) - fallbacks,
        fallbacks,
    )
    return merged[:limit]
