"""Hybrid matching pipeline.

Flow:
1. Profile analysis -> 2. Candidate fetch -> 3. Pre-scoring -> 4. Compaction
-> 5. AI refinement (one call) -> 6. Merge & rank -> 7. Compliance event

Only a failing candidate source aborts a request (CatalogError). Every
problem after a successful fetch degrades to the pre-score ranking and is
reported through pipeline_stats.fallback_reason.
"""

import asyncio
import concurrent.futures
import time
from typing import Optional

from subsidy_matcher.ai.client import RefinementClient
from subsidy_matcher.ai.tokens import TokenBudget
from subsidy_matcher.catalog.base import CandidateSource
from subsidy_matcher.compliance.audit_log import AuditLog, build_compliance_event
from subsidy_matcher.core.constants import (
    FALLBACK_AI_DISABLED,
    FALLBACK_CANCELLED,
    FALLBACK_INVALID_RESPONSE,
    SEPARATOR_LINE,
)
from subsidy_matcher.core.exceptions import AIProcessingError, AuditLogError, CatalogError
from subsidy_matcher.core.keyword_config import DEFAULT_TABLES, KeywordTables
from subsidy_matcher.core.logging import get_logger
from subsidy_matcher.matching.compactor import compact_candidates
from subsidy_matcher.matching.merger import merge_results
from subsidy_matcher.matching.pre_scoring import pre_score_candidates
from subsidy_matcher.matching.profile_analyzer import analyze_profile
from subsidy_matcher.matching.schemas import (
    AIFailure,
    AIRefinement,
    AIResult,
    AnalyzedProfile,
    CompactBatch,
    CompanyProfile,
    MatchResponse,
    PipelineStats,
    TokenUsage,
)
from subsidy_matcher.settings import Settings, settings as default_settings

logger = get_logger("matching.pipeline")


def _run_async(coro):
    """Run a coroutine from synchronous code, also inside a running event loop."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop and loop.is_running():
        # Already in an async context, run in a separate thread
        with concurrent.futures.ThreadPoolExecutor() as pool:
            future = pool.submit(asyncio.run, coro)
            return future.result()
    return asyncio.run(coro)


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


async def _refine_or_cancel(
    client: RefinementClient,
    analyzed: AnalyzedProfile,
    profile: CompanyProfile,
    batch: CompactBatch,
    limit: int,
    abandon: Optional[asyncio.Event],
) -> AIResult:
    """Run the refinement call, aborting it when `abandon` fires."""
    if abandon is None:
        return await client.refine(analyzed, profile, batch, limit)
    if abandon.is_set():
        return AIFailure(reason=FALLBACK_CANCELLED, detail="abandoned before AI call")

    refine_task = asyncio.ensure_future(client.refine(analyzed, profile, batch, limit))
    abandon_task = asyncio.ensure_future(abandon.wait())
    try:
        done, _ = await asyncio.wait({refine_task, abandon_task}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        abandon_task.cancel()

    if refine_task in done:
        return refine_task.result()

    refine_task.cancel()
    try:
        await refine_task
    except asyncio.CancelledError:
        pass
    logger.info("AI call cancelled by caller")
    return AIFailure(reason=FALLBACK_CANCELLED, detail="abandoned during AI call")


def _log_summary(profile_id: str, response: MatchResponse) -> None:
    stats = response.pipeline_stats
    logger.info(SEPARATOR_LINE)
    logger.info("MATCHING SUMMARY (%s)", profile_id)
    logger.info("  Candidates fetched: %d", stats.candidates_fetched)
    logger.info("  Pre-scored:         %d", stats.pre_scored_count)
    logger.info("  Matches returned:   %d", len(response.matches))
    logger.info("  AI evaluated:       %s", stats.ai_evaluated)
    if stats.fallback_reason:
        logger.info("  Fallback reason:    %s", stats.fallback_reason)
    logger.info(
        "  Tokens:             %d in / %d out",
        response.tokens_used.input,
        response.tokens_used.output,
    )
    logger.info("  Duration:           %d ms", response.processing_time_ms)
    logger.info(SEPARATOR_LINE)


async def _record_audit_event(
    audit_log: AuditLog,
    profile: CompanyProfile,
    analyzed: AnalyzedProfile,
    response: MatchResponse,
    config: Settings,
) -> None:
    """Best-effort compliance event. Never fails the request."""
    event = build_compliance_event(
        profile,
        analyzed,
        response,
        model_provider=config.ai_provider,
        model_version=config.ai_model,
    )
    try:
        await asyncio.to_thread(audit_log.record, event)
    except AuditLogError as e:
        logger.warning("Failed to log compliance event: %s", e.message)
    except Exception as e:
        logger.warning("Unexpected error in audit log: %s", e)


async def compute_matches(
    profile: CompanyProfile,
    candidate_source: CandidateSource,
    limit: Optional[int] = None,
    *,
    config: Optional[Settings] = None,
    refinement_client: Optional[RefinementClient] = None,
    audit_log: Optional[AuditLog] = None,
    tables: KeywordTables = DEFAULT_TABLES,
    abandon: Optional[asyncio.Event] = None,
) -> MatchResponse:
    """Match a profile against the catalog.

    Args:
        profile: Company or association profile
        candidate_source: Read path over the subsidy catalog
        limit: Max number of matches (default: settings.default_match_limit)
        config: Settings override
        refinement_client: AI client (created from config if omitted)
        audit_log: Optional compliance sink
        tables: Lookup tables (extended by config.extra_exclusions)
        abandon: Event set by the caller to abort the AI call

    Returns:
        MatchResponse; AI problems show up as pipeline_stats.fallback_reason

    Raises:
        CatalogError: If the candidate source fails
    """
    config = config or default_settings
    limit = config.default_match_limit if limit is None else max(0, limit)
    start = time.perf_counter()
    stats = PipelineStats()

    # 1. Profile analysis
    tables = tables.with_extra_exclusions(config.extra_exclusions)
    analyzed = analyze_profile(profile, tables, search_term_cap=config.search_term_cap)
    logger.info(
        "Profile %s: sector=%s, size=%s, region=%s",
        profile.id,
        analyzed.sector,
        analyzed.size_label,
        analyzed.region,
    )

    # 2. Candidate fetch
    try:
        candidates = await asyncio.to_thread(candidate_source.fetch_candidates, analyzed)
    except CatalogError:
        raise
    except Exception as e:
        raise CatalogError(f"Candidate source failed: {e}", source=type(candidate_source).__name__) from e
    stats.candidates_fetched = len(candidates)

    if not candidates:
        logger.info("No candidates for profile %s", profile.id)
        return MatchResponse(processing_time_ms=_elapsed_ms(start), pipeline_stats=stats)

    # 3. Pre-scoring
    pre_scored = pre_score_candidates(
        candidates,
        analyzed,
        min_score=config.pre_score_min,
        max_results=config.pre_scored_limit,
        weights=config.scoring,
        tables=tables,
    )
    stats.pre_scored_count = len(pre_scored)
    logger.info("Pre-scored: %d of %d candidates kept", len(pre_scored), len(candidates))
    for result in pre_scored[:5]:
        logger.debug("  %3d pts: %s [%s]", result.score, result.candidate.title[:50], ", ".join(result.reasons))

    if not pre_scored:
        return MatchResponse(processing_time_ms=_elapsed_ms(start), pipeline_stats=stats)

    # 4./5. Compaction + AI refinement
    if not config.ai_enabled:
        ai_result: AIResult = AIFailure(reason=FALLBACK_AI_DISABLED)
    else:
        client = refinement_client or RefinementClient(config)
        try:
            budget = TokenBudget.for_settings(config, client.prompt_overhead(analyzed, profile, limit))
            batch = compact_candidates(pre_scored, budget.candidate_tokens, config.ai_max_candidates)
            ai_result = await _refine_or_cancel(client, analyzed, profile, batch, limit, abandon)
        except AIProcessingError as e:
            logger.warning("AI refinement failed: %s", e.message)
            ai_result = AIFailure(reason=FALLBACK_INVALID_RESPONSE, detail=e.message)
        finally:
            if refinement_client is None:
                await client.aclose()

    # 6. Merge & rank
    matches = merge_results(pre_scored, ai_result, limit)
    tokens = TokenUsage()
    if isinstance(ai_result, AIRefinement):
        stats.ai_evaluated = True
        tokens = TokenUsage(input=ai_result.input_tokens, output=ai_result.output_tokens)
    else:
        stats.fallback_reason = ai_result.reason
        logger.warning("AI refinement skipped (%s), returning pre-scores", ai_result.reason)

    response = MatchResponse(
        matches=matches,
        processing_time_ms=_elapsed_ms(start),
        tokens_used=tokens,
        pipeline_stats=stats,
    )

    # 7. Compliance event
    if audit_log is not None:
        await _record_audit_event(audit_log, profile, analyzed, response, config)

    _log_summary(profile.id, response)
    return response


def run_matching(
    profile: CompanyProfile,
    candidate_source: CandidateSource,
    limit: Optional[int] = None,
    **kwargs,
) -> MatchResponse:
    """Synchronous entry point for compute_matches()."""
    return _run_async(compute_matches(profile, candidate_source, limit, **kwargs))
