"""Deterministisches Pre-Scoring von Förderprogrammen.

Scoring order (first two are hard filters that short-circuit):
1. Exclusion keyword in title -> filtered score, nothing else evaluated
2. Eligible entities incompatible with the profile -> filtered score
3. Region (30 / 25 national / 15 unrestricted)
4. Sector (25 match / 15 universal / 10 unspecified)
5. Free text over title + description + eligibility (tiered)
6. Thematic keywords (5 per hit, max 15)
7. Keyword tags, certification, company age
8. Amount boost by amount_max
9. Agency boost
10. Clamp to [score_min, score_max]

No I/O. Safe to run over the full catalog synchronously.
"""

import re
from functools import lru_cache
from typing import Iterable, List, Optional, Pattern, Sequence, Tuple

from subsidy_matcher.core.keyword_config import (
    DEFAULT_TABLES,
    GENERIC_ENTITY_ENTRIES,
    KeywordTables,
)
from subsidy_matcher.core.constants import REGION_NATIONAL
from subsidy_matcher.core.logging import get_logger
from subsidy_matcher.matching.schemas import AnalyzedProfile, PreScoreResult, SubsidyCandidate
from subsidy_matcher.settings import ScoringWeights, settings

logger = get_logger("matching.pre_scoring")

MAX_TEXT_REASON_TERMS = 3
MAX_THEME_REASON_TERMS = 2

# (pattern, kind, default years). Erste Übereinstimmung gewinnt.
AGE_PATTERNS: List[Tuple[Pattern, str, int]] = [
    (re.compile(r"jeune entreprise|moins de (\d+) ans|créée? depuis moins", re.IGNORECASE), "max", 5),
    (re.compile(r"startup|start-up|jeune pousse", re.IGNORECASE), "max", 7),
    (re.compile(r"entreprise établie|plus de (\d+) ans", re.IGNORECASE), "min", 3),
]


def check_entity_compatibility(
    legal_entities: Sequence[str],
    analyzed: AnalyzedProfile,
) -> Tuple[bool, bool, Optional[str]]:
    """Check the candidate's eligible entities against the profile.

    Returns:
        Tuple of (compatible, exact_size_match, reason_if_incompatible)
    """
    if not legal_entities:
        return True, False, None

    size = analyzed.size_label.lower()
    entity_types = [e.lower() for e in analyzed.entity_types]

    def _matches(entry: str) -> bool:
        entry = entry.strip().lower()
        if not entry:
            return False
        if size in entry:
            return True
        for entity in entity_types:
            if entity in entry or entry in entity:
                return True
        return entry in GENERIC_ENTITY_ENTRIES

    if not any(_matches(entry) for entry in legal_entities):
        reason = f"Entités requises: {', '.join(legal_entities)} - Profil: {analyzed.size_label}"
        return False, False, reason

    exact = any(entry.strip().lower() == size for entry in legal_entities)
    return True, exact, None


@lru_cache(maxsize=512)
def _agency_pattern(name: str) -> Pattern:
    return re.compile(rf"(?<!\w){re.escape(name)}(?!\w)", re.IGNORECASE)


def get_agency_boost(agency: Optional[str], tables: KeywordTables = DEFAULT_TABLES) -> int:
    """Boost for strategic funding agencies (first matching tier wins)."""
    if not agency:
        return 0
    for name, boost in tables.agency_tiers:
        if _agency_pattern(name).search(agency):
            return boost
    return 0


def get_amount_boost(amount_max: Optional[float], weights: ScoringWeights) -> int:
    """Tiered boost by the candidate's funding ceiling."""
    if not amount_max:
        return 0
    for threshold, points in weights.amount_tiers:
        if amount_max >= threshold:
            return points
    return 0


def _text_score(matched: int, weights: ScoringWeights) -> int:
    if matched >= weights.text_high_threshold:
        return weights.text_high_bonus
    if matched >= weights.text_medium_threshold:
        return weights.text_medium_bonus
    return matched * weights.text_per_term


def _age_adjustment(text: str, company_age: int, weights: ScoringWeights) -> Tuple[int, Optional[str]]:
    for pattern, kind, default_years in AGE_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        years = int(match.group(1)) if pattern.groups and match.group(1) else default_years
        if kind == "max":
            if company_age <= years:
                return weights.young_company_bonus, f"Jeune entreprise ({company_age} ans)"
            return -weights.company_too_old_malus, f"Ancienneté: {company_age} ans > {years} ans requis"
        if company_age >= years:
            return weights.established_company_bonus, f"Entreprise établie ({company_age} ans)"
        return 0, None
    return 0, None


def _filtered(candidate: SubsidyCandidate, reason: str, weights: ScoringWeights) -> PreScoreResult:
    return PreScoreResult(
        candidate=candidate,
        score=weights.filtered_score,
        hard_filtered=True,
        filter_reason=reason,
        reasons=(),
    )


def calculate_pre_score(
    candidate: SubsidyCandidate,
    analyzed: AnalyzedProfile,
    weights: Optional[ScoringWeights] = None,
    tables: KeywordTables = DEFAULT_TABLES,
) -> PreScoreResult:
    """Score one candidate against an analyzed profile.

    Missing candidate data never penalizes; only positive matches add points,
    except the explicit company-age malus.

    Args:
        candidate: Normalized subsidy candidate
        analyzed: Analyzed profile
        weights: Point table (default: settings.scoring)
        tables: Lookup tables (agency tiers)

    Returns:
        PreScoreResult
    """
    weights = weights or settings.scoring
    title = candidate.title.lower()

    # ========== HARD FILTERS ==========
    for keyword in analyzed.exclusion_keywords:
        if keyword and keyword in title:
            return _filtered(candidate, f'Secteur exclu: "{keyword}" dans le titre', weights)

    score = 0
    reasons: List[str] = []

    compatible, exact_size, entity_reason = check_entity_compatibility(candidate.legal_entities, analyzed)
    if not compatible:
        return _filtered(candidate, entity_reason or "Type d'entité incompatible", weights)
    if exact_size:
        score += weights.size_exact_bonus
        reasons.append(f"Taille {analyzed.size_label} éligible")

    # ========== SOFT SCORING ==========
    text = candidate.search_text

    # Region
    if candidate.regions:
        regions = [r.casefold() for r in candidate.regions]
        if analyzed.region and analyzed.region.casefold() in regions:
            score += weights.region_match
            reasons.append(f"Région: {analyzed.region}")
        elif REGION_NATIONAL.casefold() in regions:
            score += weights.region_national
            reasons.append("Programme national")
    else:
        score += weights.region_unrestricted
        reasons.append("Toutes régions")

    # Sector
    if candidate.primary_sector:
        candidate_sector = candidate.primary_sector.lower()
        profile_sector = analyzed.sector.lower()
        if candidate_sector in profile_sector or profile_sector in candidate_sector:
            score += weights.sector_match
            reasons.append(f"Secteur: {candidate.primary_sector}")
        elif candidate.is_universal_sector:
            score += weights.sector_universal
            reasons.append("Multi-secteurs")
    elif candidate.is_universal_sector:
        score += weights.sector_universal
        reasons.append("Secteur universel")
    else:
        score += weights.sector_unspecified
        reasons.append("Secteur non spécifié")

    # Free text
    matched_terms = [term for term in analyzed.search_terms if term and term in text]
    if matched_terms:
        score += _text_score(len(matched_terms), weights)
        label = "Mots-clés" if len(matched_terms) >= weights.text_medium_threshold else "Texte"
        reasons.append(f"{label}: {', '.join(matched_terms[:MAX_TEXT_REASON_TERMS])}")

    # Thematic keywords
    thematic_hits = [kw for kw in analyzed.thematic_keywords if kw and kw in text]
    if thematic_hits:
        score += min(weights.thematic_cap, len(thematic_hits) * weights.thematic_per_hit)
        reasons.append(f"Thématique: {', '.join(thematic_hits[:MAX_THEME_REASON_TERMS])}")

    # Keyword tags
    if candidate.keywords:
        tag_hits = [
            tag for tag in candidate.keywords
            if any(kw in tag.lower() for kw in analyzed.thematic_keywords if kw)
            or any(term in tag.lower() for term in analyzed.search_terms if term)
        ]
        if tag_hits:
            score += min(weights.keyword_tag_cap, len(tag_hits) * weights.keyword_tag_per_hit)
            reasons.append(f"Keywords: {len(tag_hits)} correspondances")

    # Certification (once)
    for cert in analyzed.certifications:
        if cert.lower() in text:
            score += weights.certification_bonus
            reasons.append(f"Certification: {cert}")
            break

    # Company age
    if analyzed.company_age is not None:
        adjustment, age_reason = _age_adjustment(text, analyzed.company_age, weights)
        score += adjustment
        if age_reason:
            reasons.append(age_reason)

    # Amount
    amount_boost = get_amount_boost(candidate.amount_max, weights)
    if amount_boost:
        score += amount_boost
        reasons.append(f"Montant élevé (+{amount_boost}pts)")

    # Agency
    agency_boost = get_agency_boost(candidate.agency, tables)
    if agency_boost:
        score += agency_boost
        if agency_boost >= 4:
            reasons.append(f"Programme stratégique (+{agency_boost}pts)")

    final_score = max(weights.score_min, min(weights.score_max, score))
    return PreScoreResult(
        candidate=candidate,
        score=final_score,
        hard_filtered=False,
        reasons=tuple(reasons),
    )


def rank_key(result: PreScoreResult) -> Tuple[int, str]:
    """Descending score, then candidate id."""
    return (-result.score, result.candidate.id)


def pre_score_candidates(
    candidates: Iterable[SubsidyCandidate],
    analyzed: AnalyzedProfile,
    min_score: Optional[int] = None,
    max_results: Optional[int] = None,
    weights: Optional[ScoringWeights] = None,
    tables: KeywordTables = DEFAULT_TABLES,
) -> List[PreScoreResult]:
    """Score all candidates and return the kept ones in rank order.

    Hard-filtered candidates are dropped. Candidates below min_score are kept
    only when they declare no sector (uncertain rather than weak).
    """
    min_score = settings.pre_score_min if min_score is None else min_score
    max_results = max_results or settings.pre_scored_limit

    kept: List[PreScoreResult] = []
    filtered = 0
    for candidate in candidates:
        result = calculate_pre_score(candidate, analyzed, weights, tables)
        if result.hard_filtered:
            filtered += 1
            logger.debug("Filtered %s: %s", candidate.id, result.filter_reason)
            continue
        if result.score >= min_score or not candidate.primary_sector:
            kept.append(result)

    kept.sort(key=rank_key)
    logger.debug("Pre-scoring: %d kept, %d hard-filtered", len(kept), filtered)
    return kept[:max_results]
