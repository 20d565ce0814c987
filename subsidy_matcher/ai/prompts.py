"""Prompt-Bausteine für die Verfeinerung.

Only the structure is fixed: a short system prompt, a compact profile
summary, the compact candidate list and the expected JSON output shape.
"""

from typing import List

from subsidy_matcher.ai.schemas import COMPACT_SCHEMA
from subsidy_matcher.matching.schemas import AnalyzedProfile, CompanyProfile

SYSTEM_PROMPT = (
    "Tu es un expert des aides publiques aux entreprises françaises. "
    "Tu évalues l'éligibilité d'une entreprise à des subventions pré-qualifiées. "
    "Réponds uniquement en JSON valide."
)

MAX_DESCRIPTION_CHARS = 500


def _truncate(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + " [...]"


def build_profile_context(profile: CompanyProfile, analyzed: AnalyzedProfile) -> str:
    """One line per known profile field."""
    lines: List[str] = []
    if profile.company_name:
        lines.append(f"Nom: {profile.company_name}")
    if profile.naf_code:
        lines.append(f"Code NAF: {profile.naf_code} ({profile.naf_label or 'N/A'})")
    lines.append(f"Secteur: {analyzed.sector}")
    if profile.sub_sector:
        lines.append(f"Sous-secteur: {profile.sub_sector}")
    if profile.region:
        lines.append(f"Région: {profile.region}")
    if profile.department:
        lines.append(f"Département: {profile.department}")
    if profile.employees is not None:
        lines.append(f"Effectif: {profile.employees} salariés")
    lines.append(f"Taille: {analyzed.size_label}")
    if profile.annual_turnover:
        lines.append(f"CA annuel: {profile.annual_turnover:,.0f} €".replace(",", " "))
    if profile.year_created:
        lines.append(f"Année de création: {profile.year_created}")
    if profile.legal_form:
        lines.append(f"Forme juridique: {profile.legal_form}")
    if profile.company_category:
        lines.append(f"Catégorie: {profile.company_category}")
    if profile.is_association:
        lines.append("Structure: association")
    if profile.project_types:
        lines.append(f"Types de projets: {', '.join(profile.project_types)}")
    if profile.certifications:
        lines.append(f"Certifications: {', '.join(profile.certifications)}")
    if profile.description:
        lines.append(f"Description: {_truncate(profile.description, MAX_DESCRIPTION_CHARS)}")

    wi = profile.website_intelligence
    if wi:
        if wi.company_description:
            lines.append(f"Activité (web): {_truncate(wi.company_description, MAX_DESCRIPTION_CHARS)}")
        for label, dimension in (
            ("innovation", wi.innovations),
            ("RSE", wi.sustainability),
            ("export", wi.export),
            ("digital", wi.digital),
        ):
            if dimension and dimension.score:
                lines.append(f"Score {label}: {dimension.score}/100")

    return "\n".join(lines)


def build_user_prompt(
    profile_context: str,
    candidates_json: str,
    candidate_count: int,
    limit: int,
    max_adjustment: int,
) -> str:
    return (
        f"Évalue l'éligibilité de cette entreprise aux {candidate_count} subventions PRÉ-QUALIFIÉES.\n\n"
        f"ENTREPRISE:\n{profile_context}\n\n"
        "SUBVENTIONS (format compact: i=index, t=titre, s=secteur, r=région, a=montant, "
        "p=pre_score, rs=raisons):\n"
        f"{candidates_json}\n\n"
        "RÈGLES:\n"
        f"- Partir du p (pre_score) et AJUSTER de +/- {max_adjustment}pts max\n"
        "- AUGMENTER si secteur/taille/région correspondent bien\n"
        "- DIMINUER si critères restrictifs (taille, CA, zone géographique)\n\n"
        f"RETOURNE les {limit} meilleures en JSON:\n{COMPACT_SCHEMA}\n"
        "STRICT: JSON uniquement, score=p+adj (0-100)"
    )


def build_messages(system_prompt: str, user_prompt: str) -> List[dict]:
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]
