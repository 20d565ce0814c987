"""Compliance-Log für generierte Empfehlungen.

Every matching call produces one ComplianceEventPayload. Sinks:
- SqlAuditLog: compliance_events row + ai_usage cost row
- RestAuditLog: POST to a PostgREST-style endpoint

Sinks raise AuditLogError; the pipeline logs it and carries on.
"""

from typing import Any, Dict, Optional, Protocol, runtime_checkable

import httpx
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from subsidy_matcher.ai.cost_tracking import log_ai_usage
from subsidy_matcher.core.constants import (
    EVENT_RECOMMENDATION_GENERATED,
    PIPELINE_FUNCTION_NAME,
    PIPELINE_VERSION_AI,
    PIPELINE_VERSION_FALLBACK,
    SYSTEM_STATUS_DEGRADED,
    SYSTEM_STATUS_NOMINAL,
)
from subsidy_matcher.core.exceptions import AuditLogError
from subsidy_matcher.core.logging import get_logger
from subsidy_matcher.core.retry import http_retry
from subsidy_matcher.db.models import ComplianceEvent
from subsidy_matcher.db.session import get_session
from subsidy_matcher.matching.schemas import AnalyzedProfile, CompanyProfile, MatchResponse
from subsidy_matcher.settings import Settings, settings as default_settings

logger = get_logger("compliance.audit_log")

AI_USAGE_OPERATION = "refinement"


class ComplianceEventPayload(BaseModel):
    """One audit record of a recommendation."""

    event_type: str = EVENT_RECOMMENDATION_GENERATED
    function_name: str = PIPELINE_FUNCTION_NAME
    profile_id: Optional[str] = None
    input_snapshot: Dict[str, Any] = Field(default_factory=dict)
    ai_output: Dict[str, Any] = Field(default_factory=dict)
    model_provider: Optional[str] = None
    model_version: Optional[str] = None
    input_tokens: int = 0
    output_tokens: int = 0
    system_status: str = SYSTEM_STATUS_NOMINAL
    error_message: Optional[str] = None


@runtime_checkable
class AuditLog(Protocol):
    def record(self, event: ComplianceEventPayload) -> None:
        ...


def build_compliance_event(
    profile: CompanyProfile,
    analyzed: AnalyzedProfile,
    response: MatchResponse,
    model_provider: str,
    model_version: str,
) -> ComplianceEventPayload:
    """Summarize one matching call for the audit trail."""
    stats = response.pipeline_stats
    degraded = stats.fallback_reason is not None

    input_snapshot: Dict[str, Any] = {
        "profile_summary": {
            "company_name": profile.company_name,
            "sector": analyzed.sector,
            "region": profile.region,
            "employees": profile.employees,
        },
        "subsidies_analyzed": stats.candidates_fetched,
        "pre_scored_count": stats.pre_scored_count,
    }
    if degraded:
        input_snapshot["fallback_reason"] = stats.fallback_reason

    return ComplianceEventPayload(
        profile_id=profile.id,
        input_snapshot=input_snapshot,
        ai_output={
            "matches_count": len(response.matches),
            "top_match_score": response.matches[0].match_score if response.matches else 0,
            "processing_time_ms": response.processing_time_ms,
            "pipeline_version": PIPELINE_VERSION_FALLBACK if degraded else PIPELINE_VERSION_AI,
        },
        model_provider=model_provider,
        model_version=model_version,
        input_tokens=response.tokens_used.input,
        output_tokens=response.tokens_used.output,
        system_status=SYSTEM_STATUS_DEGRADED if degraded else SYSTEM_STATUS_NOMINAL,
        error_message=stats.fallback_reason,
    )


class SqlAuditLog:
    """Writes events to compliance_events and token costs to ai_usage."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self._session_factory = session_factory

    def record(self, event: ComplianceEventPayload) -> None:
        try:
            with get_session(self._session_factory) as session:
                session.add(ComplianceEvent(**event.model_dump()))
                if event.input_tokens or event.output_tokens:
                    log_ai_usage(
                        db=session,
                        operation=AI_USAGE_OPERATION,
                        model=event.model_version or "unknown",
                        input_tokens=event.input_tokens,
                        output_tokens=event.output_tokens,
                        profile_id=event.profile_id,
                    )
        except SQLAlchemyError as e:
            raise AuditLogError(f"Failed to store compliance event: {e}", sink="sql") from e


class RestAuditLog:
    """Posts events to `<base_url>/compliance_events` (PostgREST conventions)."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        config: Optional[Settings] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        config = config or default_settings
        base_url = base_url or config.audit_log_url
        if not base_url:
            raise ValueError("RestAuditLog needs a base URL (AUDIT_LOG_URL)")
        self.endpoint = base_url.rstrip("/") + "/compliance_events"
        api_key = api_key or config.audit_log_api_key
        headers = {"Content-Type": "application/json", "Prefer": "return=minimal"}
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"
        self._headers = headers
        self._client = http_client or httpx.Client(timeout=config.audit_log_timeout_seconds)

    @http_retry
    def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        return self._client.post(self.endpoint, json=payload, headers=self._headers)

    def record(self, event: ComplianceEventPayload) -> None:
        try:
            response = self._post(event.model_dump(mode="json"))
        except httpx.HTTPError as e:
            raise AuditLogError(f"Audit endpoint unreachable: {e}", sink="rest") from e
        if response.status_code >= 400:
            raise AuditLogError(
                f"Audit endpoint returned HTTP {response.status_code}",
                sink="rest",
                details={"body": response.text[:200]},
            )

    def close(self) -> None:
        self._client.close()
