"""Parsing der Modell-Antwort.

Single entry point: parse_refinement_response(). It never raises; failures
come back as AIFailure values so that no parsing exception reaches the merger.
"""

import json
from typing import Any, List, Optional, Union

from pydantic import ValidationError

from subsidy_matcher.ai.schemas import COMPACT_SCHEMA, RefinementEntry
from subsidy_matcher.core.constants import FALLBACK_INVALID_RESPONSE, FALLBACK_PARSE_ERROR
from subsidy_matcher.core.exceptions import ParsingError
from subsidy_matcher.core.logging import get_logger
from subsidy_matcher.matching.schemas import AIEvaluation, AIFailure, CompactBatch, CompactCandidate

logger = get_logger("ai.parsing")

SCORE_MIN = 0
SCORE_MAX = 100

_decoder = json.JSONDecoder()


def extract_first_json(text: str) -> Any:
    """Return the first well-formed JSON object or array embedded in text.

    Providers may wrap the payload in prose or code fences.

    Raises:
        ParsingError: If no parseable JSON value is found
    """
    if not text or not text.strip():
        raise ParsingError("Empty model response", raw_output=text, expected_schema=COMPACT_SCHEMA)

    position = 0
    while True:
        starts = [p for p in (text.find("{", position), text.find("[", position)) if p != -1]
        if not starts:
            break
        start = min(starts)
        try:
            value, _ = _decoder.raw_decode(text, start)
            return value
        except json.JSONDecodeError:
            position = start + 1

    raise ParsingError("No JSON found in model response", raw_output=text, expected_schema=COMPACT_SCHEMA)


def _clamp(value: float) -> int:
    return int(round(max(SCORE_MIN, min(SCORE_MAX, value))))


def _resolve(entry: RefinementEntry, batch: CompactBatch) -> Optional[CompactCandidate]:
    """Map an entry to the sent candidate it refers to (index first, then id)."""
    if entry.index is not None:
        item = batch.by_index(entry.index)
        if item is not None and (entry.subsidy_id is None or entry.subsidy_id == item.id):
            return item
    if entry.subsidy_id is not None:
        for item in batch.items:
            if item.id == entry.subsidy_id:
                return item
    return None


def _to_evaluation(entry: RefinementEntry, item: CompactCandidate) -> AIEvaluation:
    if entry.score is not None:
        score = _clamp(entry.score)
    elif entry.adjustment is not None:
        score = _clamp(item.p + entry.adjustment)
    else:
        score = _clamp(item.p)

    probability = None
    if entry.success_probability is not None:
        probability = _clamp(entry.success_probability)

    return AIEvaluation(
        subsidy_id=item.id,
        score=score,
        success_probability=probability,
        reasons=entry.reasons,
        matching_criteria=entry.matching_criteria,
        missing_criteria=entry.missing_criteria,
    )


def parse_refinement_response(text: str, batch: CompactBatch) -> Union[List[AIEvaluation], AIFailure]:
    """Parse the model output against the batch that was sent.

    - first well-formed JSON object/array in the text is used
    - an object must carry a "matches" list; a bare array is the list itself
    - entries for unknown indices / ids are dropped
    - scores are clamped to 0-100; duplicates keep the first entry

    Returns:
        List of AIEvaluation, or AIFailure("parse_error" | "invalid_response")
    """
    try:
        payload = extract_first_json(text)
    except ParsingError as e:
        logger.warning("Refinement parse error: %s", e.message)
        return AIFailure(reason=FALLBACK_PARSE_ERROR, detail=e.message)

    if isinstance(payload, dict):
        raw_entries = payload.get("matches")
    else:
        raw_entries = payload

    if not isinstance(raw_entries, list):
        logger.warning("Refinement response has no matches list")
        return AIFailure(reason=FALLBACK_INVALID_RESPONSE, detail="missing 'matches' list")

    evaluations: List[AIEvaluation] = []
    seen = set()
    dropped = 0
    for raw in raw_entries:
        if not isinstance(raw, dict):
            dropped += 1
            continue
        try:
            entry = RefinementEntry.model_validate(raw)
        except ValidationError:
            dropped += 1
            continue
        item = _resolve(entry, batch)
        if item is None or item.id in seen:
            dropped += 1
            continue
        seen.add(item.id)
        evaluations.append(_to_evaluation(entry, item))

    if dropped:
        logger.debug("Dropped %d refinement entries (unknown or malformed)", dropped)
    return evaluations
