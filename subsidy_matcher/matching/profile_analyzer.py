"""Profil-Analyse: CompanyProfile -> AnalyzedProfile.

Pure functions without I/O. Missing fields never raise; they fall back to
permissive defaults (generic "Services" sector, micro size class, universal
keyword set).
"""

import re
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from subsidy_matcher.core.keyword_config import (
    ASSOCIATION_ENTITY_TYPES,
    DEFAULT_ENTITY_TYPES,
    DEFAULT_TABLES,
    GENERIC_SECTOR,
    UNKNOWN_FORM_ENTITY_TYPES,
    KeywordTables,
)
from subsidy_matcher.core.logging import get_logger
from subsidy_matcher.matching.schemas import AnalyzedProfile, CompanyProfile
from subsidy_matcher.settings import settings

logger = get_logger("matching.profile_analyzer")

# Employee thresholds: (upper bound exclusive, size class, size label)
SIZE_THRESHOLDS: List[Tuple[int, str, str]] = [
    (10, "micro", "TPE"),
    (250, "small", "PME"),
    (5000, "medium", "ETI"),
]
LARGEST_SIZE = ("large", "GE")

MAX_DESCRIPTION_TERMS = 10
MAX_WEB_DESCRIPTION_TERMS = 8

_LEADING_INT = re.compile(r"\d[\d\s]*")
_LABEL_SPLIT = re.compile(r"[\s,;]+")
_TEXT_SPLIT = re.compile(r"[\s,;.!?]+")

# Certification -> extra search terms
CERTIFICATION_TERMS: List[Tuple[str, Tuple[str, ...]]] = [
    ("bio", ("bio", "biologique")),
    ("hve", ("hve", "haute valeur environnementale")),
    ("rge", ("rge", "reconnu garant environnement")),
]

# Certification -> thematic keywords
CERTIFICATION_THEMES: List[Tuple[Tuple[str, ...], Tuple[str, ...]]] = [
    (("bio", "biologique"), ("biologique", "bio", "agriculture biologique", "conversion bio", "label bio")),
    (("hve",), ("haute valeur environnementale", "hve", "certification environnementale")),
    (("iso 14001", "iso14001"), ("environnement", "management environnemental", "certification iso")),
    (("rge",), ("rénovation énergétique", "efficacité énergétique", "rge")),
]

# Description cue -> thematic keywords
DESCRIPTION_THEMES: List[Tuple[Tuple[str, ...], Tuple[str, ...]]] = [
    (("construction", "bâtiment"), ("construction", "bâtiment", "btp", "travaux")),
    (("écologique", "durable"), ("écologique", "durable", "environnement", "vert")),
    (("transformation",), ("transformation", "valorisation", "filière")),
]

# Business activity cue -> thematic keywords (secondary sectors)
ACTIVITY_THEMES: List[Tuple[Tuple[str, ...], Tuple[str, ...]]] = [
    (("construction", "bâtiment", "matériau"), ("construction", "bâtiment", "matériaux", "btp")),
    (
        ("bois", "forestier", "bambou"),
        ("bois", "filière bois", "forestier", "biosourcé", "matériaux biosourcés", "bois-construction", "éco-matériaux"),
    ),
    (("énergie", "renouvelable"), ("énergie", "renouvelable", "transition énergétique")),
]

# Sustainability initiative cue -> thematic keywords
INITIATIVE_THEMES: List[Tuple[Tuple[str, ...], Tuple[str, ...]]] = [
    (("carbone",), ("carbone", "bas carbone", "neutralité carbone", "décarbonation")),
    (("déchet", "zéro"), ("déchets", "économie circulaire", "valorisation")),
]

# Project type cue -> thematic keywords
PROJECT_THEMES: List[Tuple[Tuple[str, ...], Tuple[str, ...]]] = [
    (("innov",), ("innovation",)),
    (("export",), ("export", "international")),
    (("embauche", "recrutement"), ("emploi", "recrutement")),
    (("formation",), ("formation", "compétences")),
    (("écolog", "environnement"), ("transition écologique",)),
]


def _dedupe(values: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


def _themes_for(text: str, table: List[Tuple[Tuple[str, ...], Tuple[str, ...]]]) -> List[str]:
    keywords: List[str] = []
    for cues, themes in table:
        if any(cue in text for cue in cues):
            keywords.extend(themes)
    return keywords


def resolve_sector(profile: CompanyProfile, tables: KeywordTables = DEFAULT_TABLES) -> Tuple[str, bool]:
    """Resolve the profile sector.

    Explicit sector wins (canonicalised against the sector table and English
    aliases), then the 2-digit NAF prefix, then the generic fallback.

    Returns:
        Tuple of (sector label, is_fallback)
    """
    if profile.sector and profile.sector.strip():
        raw = profile.sector.strip()
        lowered = raw.lower()
        for known in tables.known_sectors():
            if known.lower() == lowered:
                return known, False
        if lowered in tables.sector_aliases:
            return tables.sector_aliases[lowered], False
        return raw, False

    if profile.naf_code:
        prefix = profile.naf_code.strip()[:2]
        sector = tables.naf_sectors.get(prefix)
        if sector:
            return sector, False
        logger.debug("Unknown NAF prefix %r, using generic sector", prefix)

    return GENERIC_SECTOR, True


def parse_employee_count(employees) -> int:
    """Leading integer of an employee bucket ('11-50' -> 11, '251+' -> 251)."""
    if employees is None:
        return 0
    if isinstance(employees, (int, float)):
        return max(0, int(employees))
    match = _LEADING_INT.search(str(employees))
    if not match:
        return 0
    return int(match.group(0).replace(" ", ""))


def get_size_class(employees) -> Tuple[str, str]:
    """Map employees to (size class, French size label)."""
    count = parse_employee_count(employees)
    for upper, size_class, label in SIZE_THRESHOLDS:
        if count < upper:
            return size_class, label
    return LARGEST_SIZE


def get_entity_types(
    legal_form: Optional[str],
    is_association: bool = False,
    tables: KeywordTables = DEFAULT_TABLES,
) -> List[str]:
    """Entity types a legal form qualifies for in eligibility lists.

    Exact form names win over substring matches; among substring matches the
    longest form wins so that "SARL" is not read as "SA".
    """
    if not legal_form:
        if is_association:
            return list(ASSOCIATION_ENTITY_TYPES)
        return list(DEFAULT_ENTITY_TYPES)

    upper = legal_form.strip().upper()
    forms = tables.legal_form_entities
    for form, types in forms.items():
        if form.upper() == upper:
            return list(types)

    candidates = [form for form in forms if form.upper() in upper]
    if candidates:
        best = max(candidates, key=len)
        return list(forms[best])

    if is_association:
        return list(ASSOCIATION_ENTITY_TYPES)
    return list(UNKNOWN_FORM_ENTITY_TYPES)


def extract_search_terms(
    profile: CompanyProfile,
    sector: str,
    cap: int,
    tables: KeywordTables = DEFAULT_TABLES,
) -> List[str]:
    """Ordered, deduplicated search terms for free-text matching."""
    stopwords = tables.stopwords
    terms: List[str] = []

    if profile.naf_label:
        words = _LABEL_SPLIT.split(profile.naf_label.lower())
        terms.extend(w for w in words if len(w) > 3 and w not in stopwords)

    terms.append(sector.lower())
    if profile.sub_sector:
        terms.append(profile.sub_sector.strip().lower())

    terms.extend(p.strip().lower() for p in profile.project_types)

    for cert in profile.certifications:
        cert_lower = cert.strip().lower()
        terms.append(cert_lower)
        for cue, expansions in CERTIFICATION_TERMS:
            if cue in cert_lower:
                terms.extend(expansions)

    if profile.description:
        words = _TEXT_SPLIT.split(profile.description.lower())
        important = [
            w for w in words
            if len(w) > 4 and w not in stopwords and w not in tables.description_stopwords
        ]
        terms.extend(important[:MAX_DESCRIPTION_TERMS])

    wi = profile.website_intelligence
    if wi:
        for activity in wi.business_activities:
            activity_lower = activity.strip().lower()
            terms.append(activity_lower)
            terms.extend(w for w in activity_lower.split() if len(w) > 3)

        if wi.company_description:
            words = _TEXT_SPLIT.split(wi.company_description.lower())
            terms.extend([w for w in words if len(w) > 4 and w not in stopwords][:MAX_WEB_DESCRIPTION_TERMS])

        if wi.innovations:
            terms.extend(i.lower() for i in wi.innovations.indicators)
        if wi.sustainability:
            terms.extend(i.lower() for i in wi.sustainability.initiatives)

    return _dedupe(terms)[:cap]


def extract_thematic_keywords(
    profile: CompanyProfile,
    sector: str,
    tables: KeywordTables = DEFAULT_TABLES,
) -> List[str]:
    """Thematic keywords: sector ∪ region ∪ universal list, plus profile themes."""
    keywords: List[str] = list(tables.sector_indicators.get(sector, ()))

    if profile.region:
        keywords.extend(tables.region_indicators.get(profile.region.strip(), ()))

    keywords.extend(tables.universal_keywords)

    for cert in profile.certifications:
        keywords.extend(_themes_for(cert.lower(), CERTIFICATION_THEMES))

    if profile.description:
        keywords.extend(_themes_for(profile.description.lower(), DESCRIPTION_THEMES))

    wi = profile.website_intelligence
    if wi:
        keywords.extend(_website_score_themes(wi))
        for activity in wi.business_activities:
            keywords.extend(_themes_for(activity.lower(), ACTIVITY_THEMES))
        if wi.sustainability:
            for initiative in wi.sustainability.initiatives:
                keywords.extend(_themes_for(initiative.lower(), INITIATIVE_THEMES))

    for project_type in profile.project_types:
        keywords.extend(_themes_for(project_type.lower(), PROJECT_THEMES))

    return _dedupe(k.lower() for k in keywords)


def _website_score_themes(wi) -> List[str]:
    """Tiered themes from website-intelligence scores (>= 50 / 70 / 80)."""
    keywords: List[str] = []

    innovation = wi.innovations.score if wi.innovations and wi.innovations.score else 0
    if innovation >= 50:
        keywords.extend(["innovation", "r&d", "recherche", "développement"])
        if innovation >= 70:
            keywords.extend(["brevet", "prototype", "expérimentation", "innovant"])

    sustainability = wi.sustainability.score if wi.sustainability and wi.sustainability.score else 0
    if sustainability >= 50:
        keywords.extend(["environnement", "transition écologique", "rse", "développement durable"])
        if sustainability >= 70:
            keywords.extend(["carbone", "décarbonation", "empreinte carbone", "neutralité carbone", "climat"])
            keywords.extend(["prêt vert", "financement vert", "éco-prêt"])
        if sustainability >= 80:
            keywords.extend(["économie circulaire", "recyclage", "réemploi", "biodiversité"])
            keywords.extend(["industrie verte", "transition industrielle", "décarboner"])

    if wi.export and wi.export.score and wi.export.score >= 50:
        keywords.extend(["export", "international", "développement international"])
    if wi.digital and wi.digital.score and wi.digital.score >= 50:
        keywords.extend(["numérique", "digital", "transformation digitale"])

    return keywords


def analyze_profile(
    profile: CompanyProfile,
    tables: KeywordTables = DEFAULT_TABLES,
    search_term_cap: Optional[int] = None,
    reference_year: Optional[int] = None,
) -> AnalyzedProfile:
    """Derive the matching view of a profile.

    Args:
        profile: Raw company or association profile
        tables: Immutable lookup tables
        search_term_cap: Max search terms (default: settings.search_term_cap)
        reference_year: Year used for company age (default: current year)

    Returns:
        AnalyzedProfile
    """
    cap = search_term_cap or settings.search_term_cap
    sector, is_fallback = resolve_sector(profile, tables)
    size_class, size_label = get_size_class(profile.employees)

    exclusions = tables.generic_exclusions if is_fallback else tables.exclusions_for(sector)

    company_age = None
    if profile.year_created:
        year = reference_year or datetime.now().year
        company_age = max(0, year - profile.year_created)

    analyzed = AnalyzedProfile(
        sector=sector,
        size_class=size_class,
        size_label=size_label,
        region=profile.region.strip() if profile.region else None,
        search_terms=tuple(extract_search_terms(profile, sector, cap, tables)),
        thematic_keywords=tuple(extract_thematic_keywords(profile, sector, tables)),
        exclusion_keywords=tuple(e.lower() for e in exclusions),
        entity_types=tuple(get_entity_types(profile.legal_form, profile.is_association, tables)),
        certifications=tuple(c.strip() for c in profile.certifications if c.strip()),
        project_types=tuple(p.strip() for p in profile.project_types if p.strip()),
        company_age=company_age,
    )

    logger.debug(
        "Profile %s: sector=%s, size=%s, region=%s, %d terms, %d themes, %d exclusions",
        profile.id,
        analyzed.sector,
        analyzed.size_label,
        analyzed.region,
        len(analyzed.search_terms),
        len(analyzed.thematic_keywords),
        len(analyzed.exclusion_keywords),
    )
    return analyzed
