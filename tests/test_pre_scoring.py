"""Unit tests for the deterministic pre-scoring engine."""

import pytest

from subsidy_matcher.matching.pre_scoring import (
    calculate_pre_score,
    check_entity_compatibility,
    get_agency_boost,
    get_amount_boost,
    pre_score_candidates,
)
from subsidy_matcher.matching.profile_analyzer import analyze_profile
from subsidy_matcher.matching.schemas import AnalyzedProfile, SubsidyCandidate
from subsidy_matcher.settings import ScoringWeights


def make_analyzed(**overrides) -> AnalyzedProfile:
    values = dict(sector="Agriculture", size_class="micro", size_label="TPE", region="Occitanie")
    values.update(overrides)
    return AnalyzedProfile(**values)


def make_candidate(**overrides) -> SubsidyCandidate:
    values = dict(id="sub-1", title="Aide")
    values.update(overrides)
    return SubsidyCandidate(**values)


class TestHardFilters:
    """Tests for exclusion keywords and entity compatibility."""

    def test_exclusion_keyword_in_title(self):
        """Test an excluded keyword in the title filters the candidate."""
        analyzed = make_analyzed(exclusion_keywords=("musique",))
        result = calculate_pre_score(make_candidate(title="Festival de musique"), analyzed)

        assert result.hard_filtered is True
        assert result.score == -50
        assert result.reasons == ()
        assert "musique" in result.filter_reason

    def test_exclusion_wins_over_every_boost(self):
        """Test a filtered candidate ignores region, sector and boosts."""
        analyzed = make_analyzed(exclusion_keywords=("musique",))
        candidate = make_candidate(
            title="Aide musique agricole",
            regions=("Occitanie",),
            primary_sector="Agriculture",
            amount_max=20_000_000,
            agency="Bpifrance",
        )
        assert calculate_pre_score(candidate, analyzed).score == -50

    def test_exclusion_only_checks_title(self):
        """Test an excluded keyword in the description does not filter."""
        analyzed = make_analyzed(exclusion_keywords=("musique",))
        result = calculate_pre_score(make_candidate(description="Hors musique"), analyzed)
        assert result.hard_filtered is False

    def test_incompatible_entities(self):
        """Test eligible entities that exclude the profile filter the candidate."""
        result = calculate_pre_score(make_candidate(legal_entities=("ETI",)), make_analyzed())

        assert result.hard_filtered is True
        assert result.filter_reason == "Entités requises: ETI - Profil: TPE"

    def test_exact_size_bonus(self):
        """Test an exact size entry gives the size bonus."""
        result = calculate_pre_score(make_candidate(legal_entities=("TPE",)), make_analyzed())

        assert result.score == 15 + 10 + 10
        assert "Taille TPE éligible" in result.reasons

    def test_generic_entity_entry_is_compatible(self):
        """Test generic entries accept every company."""
        compatible, exact, reason = check_entity_compatibility(["Toutes entreprises"], make_analyzed())
        assert (compatible, exact, reason) == (True, False, None)

    def test_entity_type_match(self):
        """Test entity types from the legal form are accepted."""
        analyzed = make_analyzed(entity_types=("Exploitation agricole",))
        compatible, _, _ = check_entity_compatibility(["Exploitation agricole"], analyzed)
        assert compatible is True


class TestRegionAndSector:
    """Tests for the region and sector clauses."""

    @pytest.mark.parametrize("regions, expected, reason", [
        (("Occitanie",), 30, "Région: Occitanie"),
        (("National",), 25, "Programme national"),
        ((), 15, "Toutes régions"),
    ])
    def test_region_points(self, regions, expected, reason):
        """Test region match, national and unrestricted points."""
        result = calculate_pre_score(make_candidate(regions=regions), make_analyzed())
        assert result.score == expected + 10
        assert reason in result.reasons

    def test_other_region_gives_nothing(self):
        """Test a region list without the profile region adds no points."""
        result = calculate_pre_score(make_candidate(regions=("Bretagne",)), make_analyzed())
        assert result.score == 10

    def test_region_match_is_case_insensitive(self):
        """Test region comparison ignores case."""
        result = calculate_pre_score(make_candidate(regions=("occitanie",)), make_analyzed())
        assert result.score == 40

    def test_sector_match(self):
        """Test matching primary sector."""
        result = calculate_pre_score(make_candidate(primary_sector="Agriculture"), make_analyzed())
        assert result.score == 15 + 25
        assert "Secteur: Agriculture" in result.reasons

    def test_universal_with_other_sector(self):
        """Test universal programmes with another primary sector."""
        candidate = make_candidate(primary_sector="Industrie", is_universal_sector=True)
        result = calculate_pre_score(candidate, make_analyzed())
        assert result.score == 15 + 15
        assert "Multi-secteurs" in result.reasons

    def test_universal_without_sector(self):
        """Test universal programmes without a primary sector."""
        result = calculate_pre_score(make_candidate(is_universal_sector=True), make_analyzed())
        assert "Secteur universel" in result.reasons

    def test_other_sector_gives_nothing(self):
        """Test a non-matching, non-universal sector adds no points."""
        result = calculate_pre_score(make_candidate(primary_sector="Industrie"), make_analyzed())
        assert result.score == 15


class TestTextAndThemes:
    """Tests for free-text, thematic and tag clauses."""

    TERMS = ("alpha", "bravo", "charlie", "delta", "echo")

    @pytest.mark.parametrize("matched, points", [(1, 7), (2, 14), (3, 20), (4, 20), (5, 25)])
    def test_text_tiers(self, matched, points):
        """Test free-text points per number of matched terms."""
        analyzed = make_analyzed(search_terms=self.TERMS)
        candidate = make_candidate(description=" ".join(self.TERMS[:matched]))
        assert calculate_pre_score(candidate, analyzed).score == 25 + points

    def test_text_reason_label(self):
        """Test the reason label depends on the number of matches."""
        analyzed = make_analyzed(search_terms=self.TERMS)
        few = calculate_pre_score(make_candidate(description="alpha"), analyzed)
        many = calculate_pre_score(make_candidate(description="alpha bravo charlie"), analyzed)
        assert "Texte: alpha" in few.reasons
        assert "Mots-clés: alpha, bravo, charlie" in many.reasons

    def test_thematic_cap(self):
        """Test thematic points are capped at 15."""
        analyzed = make_analyzed(thematic_keywords=self.TERMS)
        candidate = make_candidate(eligibility=" ".join(self.TERMS))
        result = calculate_pre_score(candidate, analyzed)
        assert result.score == 25 + 15
        assert "Thématique: alpha, bravo" in result.reasons

    def test_keyword_tags(self):
        """Test candidate keyword tags matching the profile."""
        analyzed = make_analyzed(thematic_keywords=("bio",))
        candidate = make_candidate(keywords=("agriculture bio", "conversion bio", "export"))
        result = calculate_pre_score(candidate, analyzed)
        assert result.score == 25 + 6
        assert "Keywords: 2 correspondances" in result.reasons

    def test_certification_counts_once(self):
        """Test the certification bonus is applied once."""
        analyzed = make_analyzed(certifications=("HVE", "Bio"))
        candidate = make_candidate(description="Exploitations HVE ou Bio")
        assert calculate_pre_score(candidate, analyzed).score == 25 + 10


class TestCompanyAge:
    """Tests for company age patterns."""

    def test_young_company_bonus(self):
        """Test companies within the maximum age get the bonus."""
        candidate = make_candidate(eligibility="Entreprises de moins de 5 ans")
        assert calculate_pre_score(candidate, make_analyzed(company_age=3)).score == 25 + 10

    def test_too_old_malus(self):
        """Test companies older than the maximum get the malus."""
        candidate = make_candidate(eligibility="Entreprises de moins de 5 ans")
        result = calculate_pre_score(candidate, make_analyzed(company_age=8))
        assert result.score == 25 - 20
        assert "Ancienneté: 8 ans > 5 ans requis" in result.reasons

    def test_established_company(self):
        """Test minimum age patterns only reward old enough companies."""
        candidate = make_candidate(eligibility="Entreprises de plus de 3 ans")
        assert calculate_pre_score(candidate, make_analyzed(company_age=5)).score == 25 + 5
        assert calculate_pre_score(candidate, make_analyzed(company_age=2)).score == 25

    def test_unknown_age_is_neutral(self):
        """Test age patterns are ignored without a company age."""
        candidate = make_candidate(eligibility="Startup de moins de 3 ans")
        assert calculate_pre_score(candidate, make_analyzed()).score == 25


class TestBoosts:
    """Tests for amount and agency boosts."""

    @pytest.mark.parametrize("amount, boost", [
        (None, 0),
        (99_999, 0),
        (100_000, 3),
        (500_000, 5),
        (1_000_000, 8),
        (10_000_000, 12),
    ])
    def test_amount_boost(self, amount, boost):
        """Test amount tiers."""
        assert get_amount_boost(amount, ScoringWeights()) == boost

    def test_agency_boost(self):
        """Test agency tiers."""
        assert get_agency_boost("Bpifrance") == 5
        assert get_agency_boost("Région Occitanie") == 3
        assert get_agency_boost("Chambre d'Agriculture du Gers") == 2
        assert get_agency_boost(None) == 0

    def test_agency_needs_whole_word(self):
        """Test short agency names do not match inside other words."""
        assert get_agency_boost("Transanrix") == 0

    def test_strategic_agency_reason(self):
        """Test only strong agency boosts are explained."""
        strong = calculate_pre_score(make_candidate(agency="ADEME"), make_analyzed())
        weak = calculate_pre_score(make_candidate(agency="Région Occitanie"), make_analyzed())
        assert "Programme stratégique (+5pts)" in strong.reasons
        assert weak.score == 25 + 3
        assert not any(r.startswith("Programme stratégique") for r in weak.reasons)


class TestScoreProperties:
    """Tests for ordering, clamping and determinism."""

    def test_minimal_candidate(self):
        """Test a candidate without region, sector or amount scores 25."""
        result = calculate_pre_score(make_candidate(), make_analyzed())
        assert result.score == 25
        assert result.reasons == ("Toutes régions", "Secteur non spécifié")

    def test_clamped_to_100(self):
        """Test scores never exceed 100."""
        analyzed = make_analyzed(
            search_terms=("alpha", "bravo", "charlie", "delta", "echo"),
            thematic_keywords=("zulu", "yankee", "xray"),
            certifications=("HVE",),
            company_age=2,
        )
        candidate = make_candidate(
            title="Aide alpha",
            description="bravo charlie delta echo zulu yankee xray hve jeune entreprise",
            regions=("Occitanie",),
            primary_sector="Agriculture",
            legal_entities=("TPE",),
            keywords=("alpha", "bravo", "charlie", "delta"),
            amount_max=20_000_000,
            agency="Bpifrance",
        )
        assert calculate_pre_score(candidate, analyzed).score == 100

    def test_clamped_to_zero(self):
        """Test non-filtered scores never go below zero."""
        candidate = make_candidate(primary_sector="Industrie", regions=("Bretagne",), eligibility="moins de 2 ans")
        assert calculate_pre_score(candidate, make_analyzed(company_age=30)).score == 0

    def test_deterministic(self, occitanie_farm, scenario_catalog):
        """Test identical inputs give identical results."""
        analyzed = analyze_profile(occitanie_farm, reference_year=2025)
        first = pre_score_candidates(scenario_catalog, analyzed)
        second = pre_score_candidates(scenario_catalog, analyzed)
        assert first == second

    def test_region_match_never_lowers_score(self):
        """Test adding the profile region to a candidate does not lower its score."""
        analyzed = make_analyzed()
        without = calculate_pre_score(make_candidate(regions=("Bretagne",)), analyzed)
        with_region = calculate_pre_score(make_candidate(regions=("Bretagne", "Occitanie")), analyzed)
        assert with_region.score > without.score

    def test_more_matching_terms_never_lower_score(self):
        """Test adding matching search terms never lowers the free-text points."""
        terms = ("alpha", "bravo", "charlie", "delta", "echo")
        candidate = make_candidate(description=" ".join(terms))
        scores = [
            calculate_pre_score(candidate, make_analyzed(search_terms=terms[:n])).score
            for n in range(len(terms) + 1)
        ]

        assert scores == [25, 32, 39, 45, 45, 50]
        assert scores == sorted(scores)


class TestPreScoreCandidates:
    """Tests for batch scoring and ranking."""

    def test_occitanie_scenario(self, occitanie_farm, scenario_catalog):
        """Test ranking of the Occitanie farm scenario."""
        analyzed = analyze_profile(occitanie_farm, reference_year=2025)
        results = pre_score_candidates(scenario_catalog, analyzed)

        assert [r.candidate.id for r in results] == ["sub-national-bpi", "sub-occ-agri"]
        assert [r.score for r in results] == [65, 63]
        assert results[1].reasons == ("Région: Occitanie", "Secteur: Agriculture", "Thématique: agricole")

    def test_tie_break_by_id(self):
        """Test equal scores are ordered by id."""
        candidates = [make_candidate(id="b"), make_candidate(id="a"), make_candidate(id="c")]
        results = pre_score_candidates(candidates, make_analyzed(), min_score=0)
        assert [r.candidate.id for r in results] == ["a", "b", "c"]

    def test_low_score_without_sector_is_kept(self):
        """Test weak candidates are kept only when they declare no sector."""
        candidates = [
            make_candidate(id="no-sector", regions=("Bretagne",)),
            make_candidate(id="other-sector", regions=("Bretagne",), primary_sector="Industrie"),
        ]
        results = pre_score_candidates(candidates, make_analyzed(), min_score=20)
        assert [r.candidate.id for r in results] == ["no-sector"]

    def test_max_results(self):
        """Test the result list is truncated."""
        candidates = [make_candidate(id=f"s{i}") for i in range(10)]
        assert len(pre_score_candidates(candidates, make_analyzed(), max_results=3)) == 3


class TestReferenceScenario:
    """Tests for the Occitanie farm against four typical programmes."""

    @pytest.fixture
    def analyzed(self, occitanie_farm):
        return analyze_profile(occitanie_farm, reference_year=2025)

    def test_national_agriculture_aid(self, analyzed, reference_catalog):
        """Test the nationwide agriculture aid gets national and sector reasons."""
        result = calculate_pre_score(reference_catalog["national_agri"], analyzed)

        assert result.score == 63
        assert result.reasons == (
            "Programme national",
            "Secteur: Agriculture",
            "Thématique: agricole, investissement",
            "Montant élevé (+3pts)",
        )

    def test_regional_agriculture_aid(self, analyzed, reference_catalog):
        """Test the regional agriculture aid lands in the top band."""
        result = calculate_pre_score(reference_catalog["regional_agri"], analyzed)

        assert result.score == 71
        assert result.score >= 70
        assert "Région: Occitanie" in result.reasons
        assert "Secteur: Agriculture" in result.reasons

    def test_arts_programme_is_filtered(self, analyzed, reference_catalog):
        """Test the music programme is excluded with no reasons."""
        result = calculate_pre_score(reference_catalog["arts"], analyzed)

        assert result.hard_filtered is True
        assert result.score == -50
        assert result.reasons == ()
        assert result.filter_reason == 'Secteur exclu: "musical" dans le titre'

    def test_green_loan(self, analyzed, reference_catalog):
        """Test the universal green loan scores through universality and amount."""
        result = calculate_pre_score(reference_catalog["green_loan"], analyzed)

        assert result.score == 62
        assert "Secteur universel" in result.reasons
        assert "Montant élevé (+12pts)" in result.reasons
        assert not any(r.startswith("Secteur:") for r in result.reasons)

    def test_ranking(self, analyzed, reference_catalog):
        """Test the region-matched aid ranks first and the arts programme is dropped."""
        results = pre_score_candidates(list(reference_catalog.values()), analyzed)

        assert [(r.candidate.id, r.score) for r in results] == [
            ("sub-occ-agri-region", 71),
            ("sub-nat-agri-invest", 63),
            ("sub-pret-vert", 62),
        ]
