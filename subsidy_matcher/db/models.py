from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Text, Float, Boolean, DateTime, Date,
    ForeignKey, JSON, Index
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


# ============================================================
# Subsidy catalog (read path of the matcher)
# ============================================================


class Subsidy(Base):
    """Funding programme. Text fields hold a plain string or a {locale: text} map."""
    __tablename__ = "subsidies"

    id = Column(String(64), primary_key=True)
    title = Column(JSON, nullable=False)
    description = Column(JSON)
    eligibility_criteria = Column(JSON)
    agency = Column(String(255))
    primary_sector = Column(String(100))
    is_universal_sector = Column(Boolean, default=False)
    amount_min = Column(Float)
    amount_max = Column(Float)
    keywords = Column(JSON)  # List[str]
    legal_entities = Column(JSON)  # List[str]
    funding_type = Column(String(50))
    deadline = Column(Date)
    is_active = Column(Boolean, default=True, nullable=False)
    is_business_relevant = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    regions = relationship(
        "SubsidyRegion",
        back_populates="subsidy",
        cascade="all, delete-orphan",
        order_by="SubsidyRegion.position",
    )

    __table_args__ = (
        Index("idx_subsidies_active", "is_active", "is_business_relevant"),
        Index("idx_subsidies_sector", "primary_sector"),
    )


class SubsidyRegion(Base):
    """Region restriction of a subsidy. No rows = unrestricted."""
    __tablename__ = "subsidy_regions"

    id = Column(Integer, primary_key=True)
    subsidy_id = Column(String(64), ForeignKey("subsidies.id", ondelete="CASCADE"), nullable=False)
    region = Column(String(100), nullable=False)  # Regionsname oder "National"
    position = Column(Integer, default=0)

    subsidy = relationship("Subsidy", back_populates="regions")

    __table_args__ = (
        Index("idx_subsidy_regions_region", "region"),
    )


# ============================================================
# Compliance & monitoring
# ============================================================


class ComplianceEvent(Base):
    """Audit trail of generated recommendations."""
    __tablename__ = "compliance_events"

    id = Column(Integer, primary_key=True)
    event_type = Column(String(100), nullable=False)
    function_name = Column(String(100), nullable=False)
    profile_id = Column(String(64))
    input_snapshot = Column(JSON)
    ai_output = Column(JSON)
    model_provider = Column(String(50))
    model_version = Column(String(100))
    input_tokens = Column(Integer, default=0)
    output_tokens = Column(Integer, default=0)
    system_status = Column(String(20), default="nominal")  # nominal | degraded
    error_message = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class AIUsage(Base):
    """Tracks AI API usage for cost monitoring."""
    __tablename__ = "ai_usage"

    id = Column(Integer, primary_key=True)
    operation = Column(String(50), nullable=False)  # refinement
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)
    model = Column(String(100), default="mistral-small-latest")
    input_tokens = Column(Integer, default=0)
    output_tokens = Column(Integer, default=0)
    cost_usd = Column(Float, default=0.0)
    profile_id = Column(String(64), nullable=True)


class BiasAuditRun(Base):
    """Stored result of one bias audit."""
    __tablename__ = "bias_audit_runs"

    id = Column(Integer, primary_key=True)
    run_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    seed = Column(Integer, nullable=False)
    sample_size = Column(Integer, nullable=False)
    passed = Column(Boolean, nullable=False)
    variance_score = Column(Float, default=0.0)
    flags = Column(JSON)  # List[BiasFlag]
    match_rates = Column(JSON)  # {dimension: {group: rate}}
    duration_ms = Column(Integer, default=0)
