"""End-to-end tests of the matching pipeline with mocked provider and catalog."""

import asyncio

import httpx
import pytest
from sqlalchemy import select

from subsidy_matcher.catalog.memory_source import InMemoryCandidateSource
from subsidy_matcher.compliance.audit_log import SqlAuditLog
from subsidy_matcher.core.constants import MISSING_AI_EVALUATION
from subsidy_matcher.core.exceptions import AuditLogError, CatalogError
from subsidy_matcher.db.models import AIUsage, ComplianceEvent
from subsidy_matcher.matching.pipeline import compute_matches, run_matching

PRE_SCORE_ORDER = ["sub-agri-0", "sub-agri-1", "sub-agri-2", "sub-agri-3", "sub-agri-4"]


class BrokenSource:
    def fetch_candidates(self, analyzed):
        raise RuntimeError("connection reset")


class FailingAuditLog:
    def __init__(self):
        self.events = 0

    def record(self, event):
        self.events += 1
        raise AuditLogError("audit store down", sink="test")


def rate_limited_handler(request):
    return httpx.Response(429, json={"error": {"message": "Too many requests"}}, headers={"retry-after": "60"})


class TestFallbackPaths:
    """Tests for degraded responses."""

    def test_rate_limited_returns_pre_score_ranking(
        self, make_refinement_client, test_settings, occitanie_farm, agricultural_catalog
    ):
        """Test a provider 429 still yields `limit` pre-scored matches."""
        client = make_refinement_client(rate_limited_handler)
        response = asyncio.run(compute_matches(
            occitanie_farm,
            InMemoryCandidateSource(agricultural_catalog),
            5,
            config=test_settings,
            refinement_client=client,
        ))

        assert [m.subsidy_id for m in response.matches] == PRE_SCORE_ORDER
        assert response.tokens_used.input == 0
        assert response.tokens_used.output == 0
        assert response.pipeline_stats.ai_evaluated is False
        assert response.pipeline_stats.fallback_reason == "rate_limited"
        assert all(m.missing_criteria == [MISSING_AI_EVALUATION] for m in response.matches)

    def test_ai_disabled(self, test_settings, occitanie_farm, agricultural_catalog):
        """Test the feature flag skips the AI call entirely."""
        config = test_settings.model_copy(update={"ai_enabled": False})
        response = run_matching(occitanie_farm, InMemoryCandidateSource(agricultural_catalog), 3, config=config)

        assert [m.subsidy_id for m in response.matches] == PRE_SCORE_ORDER[:3]
        assert response.pipeline_stats.fallback_reason == "ai_disabled"

    def test_default_limit(self, test_settings, occitanie_farm, agricultural_catalog):
        """Test the configured default limit is used."""
        config = test_settings.model_copy(update={"ai_enabled": False})
        response = run_matching(occitanie_farm, InMemoryCandidateSource(agricultural_catalog), config=config)
        assert len(response.matches) == test_settings.default_match_limit

    def test_cancelled_before_call(self, make_refinement_client, test_settings, occitanie_farm, agricultural_catalog):
        """Test an already abandoned request never reaches the provider."""
        def handler(request):
            raise AssertionError("no request expected")

        async def scenario():
            abandon = asyncio.Event()
            abandon.set()
            return await compute_matches(
                occitanie_farm,
                InMemoryCandidateSource(agricultural_catalog),
                5,
                config=test_settings,
                refinement_client=make_refinement_client(handler),
                abandon=abandon,
            )

        response = asyncio.run(scenario())
        assert response.pipeline_stats.fallback_reason == "cancelled"
        assert len(response.matches) == 5

    def test_cancelled_during_call(self, make_refinement_client, test_settings, occitanie_farm, agricultural_catalog):
        """Test abandoning a slow call returns the pre-score ranking."""
        async def slow_handler(request):
            await asyncio.sleep(10)
            return httpx.Response(500)

        async def scenario():
            abandon = asyncio.Event()
            asyncio.get_running_loop().call_later(0.05, abandon.set)
            return await compute_matches(
                occitanie_farm,
                InMemoryCandidateSource(agricultural_catalog),
                5,
                config=test_settings,
                refinement_client=make_refinement_client(slow_handler),
                abandon=abandon,
            )

        response = asyncio.run(scenario())
        assert response.pipeline_stats.fallback_reason == "cancelled"
        assert [m.subsidy_id for m in response.matches] == PRE_SCORE_ORDER

    def test_empty_catalog(self, test_settings, occitanie_farm):
        """Test an empty catalog gives an empty response without AI call."""
        response = run_matching(occitanie_farm, InMemoryCandidateSource([]), 5, config=test_settings)

        assert response.matches == []
        assert response.pipeline_stats.candidates_fetched == 0
        assert response.pipeline_stats.fallback_reason is None

    @pytest.mark.parametrize("body", ["html", "no_message"])
    def test_malformed_completion_falls_back(
        self, make_refinement_client, completion_body, test_settings, occitanie_farm, agricultural_catalog, body
    ):
        """Test a 200 answer that is not a usable completion degrades to pre-scores."""
        def handler(request):
            if body == "html":
                return httpx.Response(200, text="<html>gateway</html>", headers={"content-type": "text/html"})
            payload = completion_body("{}")
            del payload["choices"][0]["message"]
            return httpx.Response(200, json=payload)

        response = asyncio.run(compute_matches(
            occitanie_farm,
            InMemoryCandidateSource(agricultural_catalog),
            5,
            config=test_settings,
            refinement_client=make_refinement_client(handler),
        ))

        assert [m.subsidy_id for m in response.matches] == PRE_SCORE_ORDER
        assert response.pipeline_stats.ai_evaluated is False
        assert response.pipeline_stats.fallback_reason == "invalid_response"


class TestAIPath:
    """Tests for a successful refinement."""

    def test_ai_scores_are_merged(
        self, make_refinement_client, completion_body, test_settings, occitanie_farm, agricultural_catalog
    ):
        """Test the refined candidate moves up and the others keep pre-scores."""
        def handler(request):
            content = '{"matches":[{"id":"sub-agri-7","score":95,"reasons":["Projet idéal"]}]}'
            return httpx.Response(200, json=completion_body(content, 900, 80))

        response = asyncio.run(compute_matches(
            occitanie_farm,
            InMemoryCandidateSource(agricultural_catalog),
            5,
            config=test_settings,
            refinement_client=make_refinement_client(handler),
        ))

        assert [m.subsidy_id for m in response.matches] == ["sub-agri-7"] + PRE_SCORE_ORDER[:4]
        assert response.matches[0].source == "ai"
        assert response.matches[0].match_reasons == ["Projet idéal"]
        assert response.matches[1].source == "pre_score"
        assert response.pipeline_stats.ai_evaluated is True
        assert response.pipeline_stats.fallback_reason is None
        assert (response.tokens_used.input, response.tokens_used.output) == (900, 80)

    def test_stats(self, make_refinement_client, completion_body, test_settings, occitanie_farm, scenario_catalog):
        """Test fetch and pre-score counts."""
        def handler(request):
            return httpx.Response(200, json=completion_body('{"matches":[]}'))

        response = asyncio.run(compute_matches(
            occitanie_farm,
            InMemoryCandidateSource(scenario_catalog),
            5,
            config=test_settings,
            refinement_client=make_refinement_client(handler),
        ))

        assert response.pipeline_stats.candidates_fetched == 5
        assert response.pipeline_stats.pre_scored_count == 2
        assert [m.subsidy_id for m in response.matches] == ["sub-national-bpi", "sub-occ-agri"]


class TestErrors:
    """Tests for error propagation and the audit trail."""

    def test_catalog_failure_propagates(self, test_settings, occitanie_farm):
        """Test a failing candidate source aborts the request."""
        with pytest.raises(CatalogError) as exc_info:
            run_matching(occitanie_farm, BrokenSource(), 5, config=test_settings)
        assert exc_info.value.source == "BrokenSource"

    def test_audit_failure_does_not_fail_request(self, test_settings, occitanie_farm, agricultural_catalog):
        """Test a failing audit sink is only logged."""
        audit_log = FailingAuditLog()
        config = test_settings.model_copy(update={"ai_enabled": False})
        response = run_matching(
            occitanie_farm, InMemoryCandidateSource(agricultural_catalog), 5, config=config, audit_log=audit_log
        )

        assert audit_log.events == 1
        assert len(response.matches) == 5

    def test_degraded_event_is_stored(
        self, make_refinement_client, test_settings, session_factory, occitanie_farm, agricultural_catalog
    ):
        """Test a fallback response is audited as degraded."""
        asyncio.run(compute_matches(
            occitanie_farm,
            InMemoryCandidateSource(agricultural_catalog),
            5,
            config=test_settings,
            refinement_client=make_refinement_client(rate_limited_handler),
            audit_log=SqlAuditLog(session_factory),
        ))

        with session_factory() as session:
            event = session.scalars(select(ComplianceEvent)).one()
            assert event.system_status == "degraded"
            assert event.error_message == "rate_limited"
            assert event.ai_output["pipeline_version"] == "v5.1-fallback"
            assert session.scalars(select(AIUsage)).all() == []

    def test_ai_event_and_cost_are_stored(
        self, make_refinement_client, completion_body, test_settings, session_factory, occitanie_farm, agricultural_catalog
    ):
        """Test a refined response stores the event and the token cost."""
        def handler(request):
            return httpx.Response(200, json=completion_body('{"matches":[{"i":0,"adj":3}]}', 1000, 100))

        asyncio.run(compute_matches(
            occitanie_farm,
            InMemoryCandidateSource(agricultural_catalog),
            5,
            config=test_settings,
            refinement_client=make_refinement_client(handler),
            audit_log=SqlAuditLog(session_factory),
        ))

        with session_factory() as session:
            event = session.scalars(select(ComplianceEvent)).one()
            usage = session.scalars(select(AIUsage)).one()
            assert event.system_status == "nominal"
            assert event.input_tokens == 1000
            assert usage.profile_id == "profile-occ-farm"
            assert usage.cost_usd > 0
