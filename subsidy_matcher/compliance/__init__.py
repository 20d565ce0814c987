"""Compliance module - audit trail of recommendations and bias audits.

The bias auditor (subsidy_matcher.compliance.bias_auditor) drives the
pipeline and is imported from its own module.
"""

from subsidy_matcher.compliance.audit_log import (
    AuditLog,
    ComplianceEventPayload,
    RestAuditLog,
    SqlAuditLog,
    build_compliance_event,
)

__all__ = [
    "AuditLog",
    "ComplianceEventPayload",
    "RestAuditLog",
    "SqlAuditLog",
    "build_compliance_event",
]
