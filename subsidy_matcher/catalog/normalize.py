"""Normalisierung von Katalog-Datensätzen an der Lesegrenze.

Titles, descriptions and eligibility texts arrive either as plain strings or
as {locale: text} maps (sometimes JSON-encoded). They are resolved to one
display string here so the scoring engine never branches on their shape.
"""

import json
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional, Tuple

from subsidy_matcher.matching.schemas import SubsidyCandidate

FALLBACK_LOCALES = ("fr", "en")


def resolve_localized(value: Any, locale: str = "fr") -> str:
    """Resolve a plain or localized text to one string.

    Order: requested locale, then fr, then en, then the first non-empty value.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.startswith("{") and stripped.endswith("}"):
            try:
                decoded = json.loads(stripped)
            except json.JSONDecodeError:
                return stripped
            if isinstance(decoded, dict):
                return resolve_localized(decoded, locale)
        return stripped
    if isinstance(value, Mapping):
        for key in (locale, *FALLBACK_LOCALES):
            text = value.get(key)
            if isinstance(text, str) and text.strip():
                return text.strip()
        for text in value.values():
            if isinstance(text, str) and text.strip():
                return text.strip()
        return ""
    return str(value).strip()


def _string_tuple(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, Iterable):
        return ()
    return tuple(str(v).strip() for v in value if v is not None and str(v).strip())


def _amount(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _deadline(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def candidate_from_record(record: Mapping[str, Any], locale: str = "fr") -> SubsidyCandidate:
    """Build a SubsidyCandidate from a catalog row or JSON record.

    Accepts both `region` and `regions`, and `eligibility_criteria` or
    `eligibility` for the eligibility text.
    """
    regions = record.get("regions", record.get("region"))
    eligibility = record.get("eligibility_criteria", record.get("eligibility"))
    return SubsidyCandidate(
        id=str(record["id"]),
        title=resolve_localized(record.get("title"), locale),
        description=resolve_localized(record.get("description"), locale),
        eligibility=resolve_localized(eligibility, locale),
        agency=record.get("agency") or None,
        regions=_string_tuple(regions),
        primary_sector=(record.get("primary_sector") or None),
        is_universal_sector=bool(record.get("is_universal_sector") or False),
        amount_min=_amount(record.get("amount_min")),
        amount_max=_amount(record.get("amount_max")),
        keywords=_string_tuple(record.get("keywords")),
        legal_entities=_string_tuple(record.get("legal_entities")),
        funding_type=record.get("funding_type") or None,
        deadline=_deadline(record.get("deadline")),
    )


def is_listed(record: Mapping[str, Any]) -> bool:
    """Active and business-relevant (missing flags count as true)."""
    return record.get("is_active", True) is not False and record.get("is_business_relevant", True) is not False
