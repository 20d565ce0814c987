"""Context compaction for the refinement call.

Short keys keep the serialized batch small:
i=index, id, t=title, s=sector, r=region, a=amount, p=pre_score, rs=reasons.
"""

from typing import Optional, Sequence

from subsidy_matcher.ai.tokens import compact_json, estimate_tokens
from subsidy_matcher.core.constants import REGION_NATIONAL
from subsidy_matcher.core.logging import get_logger
from subsidy_matcher.matching.schemas import CompactBatch, CompactCandidate, PreScoreResult
from subsidy_matcher.settings import settings

logger = get_logger("matching.compactor")

TITLE_MAX_CHARS = 60
SECTOR_MAX_CHARS = 20
REGION_MAX_CHARS = 15
MAX_REASONS = 2

# "[" + "]" of the JSON array
LIST_FRAME_TOKENS = 1


def format_amount(amount_max: Optional[float]) -> Optional[str]:
    """Amount token such as '250k€'."""
    if not amount_max:
        return None
    return f"{round(amount_max / 1000)}k€"


def compact_candidate(index: int, result: PreScoreResult) -> CompactCandidate:
    """Build the minimal record for one pre-scored candidate."""
    candidate = result.candidate
    region = candidate.regions[0][:REGION_MAX_CHARS] if candidate.regions else REGION_NATIONAL
    return CompactCandidate(
        i=index,
        id=candidate.id,
        t=candidate.title[:TITLE_MAX_CHARS],
        s=candidate.primary_sector[:SECTOR_MAX_CHARS] if candidate.primary_sector else None,
        r=region,
        a=format_amount(candidate.amount_max),
        p=result.score,
        rs=list(result.reasons[:MAX_REASONS]),
    )


def serialize_batch(batch: CompactBatch) -> str:
    return compact_json([item.model_dump() for item in batch.items])


def compact_candidates(
    ranked: Sequence[PreScoreResult],
    budget: int,
    max_candidates: Optional[int] = None,
) -> CompactBatch:
    """Select the top-K candidates that fit into the token budget.

    K is not fixed: candidates are added in rank order until the estimated
    tokens of the serialized list would exceed the budget or max_candidates
    is reached.

    Args:
        ranked: Non-filtered pre-score results in rank order
        budget: Tokens available for the candidate list
        max_candidates: Upper bound for K (default: settings.ai_max_candidates)

    Returns:
        CompactBatch with the selected items
    """
    max_candidates = max_candidates or settings.ai_max_candidates
    items = []
    used = LIST_FRAME_TOKENS
    truncated = False

    for result in ranked[:max_candidates]:
        item = compact_candidate(len(items), result)
        # +1 for the separating comma
        cost = estimate_tokens(compact_json(item.model_dump())) + 1
        if used + cost > budget:
            truncated = True
            break
        items.append(item)
        used += cost

    if truncated:
        logger.info(
            "Token budget %d reached: sending %d of %d candidates",
            budget,
            len(items),
            min(len(ranked), max_candidates),
        )

    return CompactBatch(
        items=items,
        estimated_tokens=used if items else 0,
        token_budget=budget,
        truncated=truncated,
    )
