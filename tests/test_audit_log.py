"""Tests for the compliance audit trail."""

import json

import httpx
import pytest
from sqlalchemy import select

from subsidy_matcher.compliance.audit_log import RestAuditLog, SqlAuditLog, build_compliance_event
from subsidy_matcher.core.exceptions import AuditLogError
from subsidy_matcher.db.models import AIUsage, ComplianceEvent
from subsidy_matcher.matching.profile_analyzer import analyze_profile
from subsidy_matcher.matching.schemas import MatchResponse, MatchResult, PipelineStats, TokenUsage
from subsidy_matcher.settings import Settings


def make_response(fallback_reason=None, tokens=(0, 0)) -> MatchResponse:
    return MatchResponse(
        matches=[MatchResult(subsidy_id="sub-a", match_score=72, success_probability=50)],
        processing_time_ms=120,
        tokens_used=TokenUsage(input=tokens[0], output=tokens[1]),
        pipeline_stats=PipelineStats(
            candidates_fetched=8,
            pre_scored_count=6,
            ai_evaluated=fallback_reason is None,
            fallback_reason=fallback_reason,
        ),
    )


@pytest.fixture
def audit_settings():
    return Settings(_env_file=None, audit_log_url="https://audit.test/rest/v1/", audit_log_api_key="secret")


class TestBuildEvent:
    """Tests for the event payload."""

    def test_nominal_event(self, occitanie_farm):
        """Test an AI refined response."""
        event = build_compliance_event(
            occitanie_farm, analyze_profile(occitanie_farm), make_response(tokens=(900, 80)), "mistral", "mistral-small-latest"
        )

        assert event.system_status == "nominal"
        assert event.error_message is None
        assert event.ai_output["top_match_score"] == 72
        assert event.ai_output["pipeline_version"] == "v5.1-prescored"
        assert event.input_snapshot["profile_summary"]["sector"] == "Agriculture"
        assert "fallback_reason" not in event.input_snapshot

    def test_degraded_event(self, occitanie_farm):
        """Test a fallback response is marked degraded."""
        event = build_compliance_event(
            occitanie_farm, analyze_profile(occitanie_farm), make_response("timeout"), "mistral", "mistral-small-latest"
        )

        assert event.system_status == "degraded"
        assert event.error_message == "timeout"
        assert event.input_snapshot["fallback_reason"] == "timeout"


class TestSqlAuditLog:
    """Tests for the SQL sink."""

    def test_event_and_usage(self, session_factory, occitanie_farm):
        """Test the event row and the cost row."""
        event = build_compliance_event(
            occitanie_farm, analyze_profile(occitanie_farm), make_response(tokens=(1000, 200)), "mistral", "mistral-small-latest"
        )
        SqlAuditLog(session_factory).record(event)

        with session_factory() as session:
            stored = session.scalars(select(ComplianceEvent)).one()
            usage = session.scalars(select(AIUsage)).one()
            assert stored.profile_id == "profile-occ-farm"
            assert stored.ai_output["matches_count"] == 1
            assert usage.operation == "refinement"
            assert usage.cost_usd == pytest.approx((1000 * 0.10 + 200 * 0.30) / 1_000_000)

    def test_no_usage_without_tokens(self, session_factory, occitanie_farm):
        """Test fallback events do not create cost rows."""
        event = build_compliance_event(
            occitanie_farm, analyze_profile(occitanie_farm), make_response("ai_disabled"), "mistral", "mistral-small-latest"
        )
        SqlAuditLog(session_factory).record(event)

        with session_factory() as session:
            assert session.scalars(select(AIUsage)).all() == []


class TestRestAuditLog:
    """Tests for the REST sink."""

    def test_post(self, audit_settings, occitanie_farm):
        """Test endpoint, headers and payload."""
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(201)

        sink = RestAuditLog(config=audit_settings, http_client=httpx.Client(transport=httpx.MockTransport(handler)))
        event = build_compliance_event(
            occitanie_farm, analyze_profile(occitanie_farm), make_response(), "mistral", "mistral-small-latest"
        )
        sink.record(event)
        sink.close()

        request = requests[0]
        assert str(request.url) == "https://audit.test/rest/v1/compliance_events"
        assert request.headers["apikey"] == "secret"
        assert request.headers["authorization"] == "Bearer secret"
        assert request.headers["prefer"] == "return=minimal"
        assert json.loads(request.content)["event_type"] == "subsidy_recommendation_generated"

    def test_http_error(self, audit_settings, occitanie_farm):
        """Test error responses raise AuditLogError."""
        def handler(request):
            return httpx.Response(500, text="boom")

        sink = RestAuditLog(config=audit_settings, http_client=httpx.Client(transport=httpx.MockTransport(handler)))
        event = build_compliance_event(
            occitanie_farm, analyze_profile(occitanie_farm), make_response(), "mistral", "mistral-small-latest"
        )
        with pytest.raises(AuditLogError) as exc_info:
            sink.record(event)
        assert exc_info.value.sink == "rest"

    def test_unreachable_endpoint_is_retried(self, audit_settings, occitanie_farm):
        """Test transport errors are retried and then raised as AuditLogError."""
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        sink = RestAuditLog(config=audit_settings, http_client=httpx.Client(transport=httpx.MockTransport(handler)))
        event = build_compliance_event(
            occitanie_farm, analyze_profile(occitanie_farm), make_response(), "mistral", "mistral-small-latest"
        )
        with pytest.raises(AuditLogError):
            sink.record(event)
        assert len(calls) == 3

    def test_base_url_required(self):
        """Test the sink needs a base URL."""
        with pytest.raises(ValueError):
            RestAuditLog(config=Settings(_env_file=None))
