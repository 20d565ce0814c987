"""Pydantic schemas for profiles, candidates and match results."""

from typing import List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from subsidy_matcher.core.constants import SOURCE_AI, SOURCE_PRE_SCORE

SizeClass = Literal["micro", "small", "medium", "large"]
SizeLabel = Literal["TPE", "PME", "ETI", "GE"]


# ============================================================
# Input: company / association profile
# ============================================================


class IntelligenceScore(BaseModel):
    """One scored dimension of the website analysis."""

    model_config = ConfigDict(frozen=True)

    score: Optional[int] = Field(default=None, ge=0, le=100)
    indicators: Tuple[str, ...] = ()
    initiatives: Tuple[str, ...] = ()


class WebsiteIntelligence(BaseModel):
    """Enrichment extracted from the company website."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    company_description: Optional[str] = Field(default=None, alias="companyDescription")
    business_activities: Tuple[str, ...] = Field(default=(), alias="businessActivities")
    innovations: Optional[IntelligenceScore] = None
    sustainability: Optional[IntelligenceScore] = None
    export: Optional[IntelligenceScore] = None
    digital: Optional[IntelligenceScore] = None


class CompanyProfile(BaseModel):
    """Applicant record as handed over by the caller. Immutable per call."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    company_name: Optional[str] = None
    sector: Optional[str] = None
    sub_sector: Optional[str] = None
    naf_code: Optional[str] = None
    naf_label: Optional[str] = None
    region: Optional[str] = None
    department: Optional[str] = None
    employees: Optional[Union[int, str]] = Field(
        default=None, description="Bucket such as '11-50' or '251+', or a head count"
    )
    annual_turnover: Optional[float] = None
    year_created: Optional[int] = None
    legal_form: Optional[str] = None
    company_category: Optional[str] = None
    certifications: Tuple[str, ...] = ()
    project_types: Tuple[str, ...] = ()
    description: Optional[str] = None
    is_association: bool = False
    website_intelligence: Optional[WebsiteIntelligence] = None


class AnalyzedProfile(BaseModel):
    """Normalized matching view of a profile. Recomputed on every call."""

    model_config = ConfigDict(frozen=True)

    sector: str
    size_class: SizeClass
    size_label: SizeLabel
    region: Optional[str] = None
    search_terms: Tuple[str, ...] = ()
    thematic_keywords: Tuple[str, ...] = ()
    exclusion_keywords: Tuple[str, ...] = ()
    entity_types: Tuple[str, ...] = ()
    certifications: Tuple[str, ...] = ()
    project_types: Tuple[str, ...] = ()
    company_age: Optional[int] = None


# ============================================================
# Catalog records
# ============================================================


class SubsidyCandidate(BaseModel):
    """Funding programme with all localized fields resolved to one string."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    description: str = ""
    eligibility: str = ""
    agency: Optional[str] = None
    regions: Tuple[str, ...] = Field(
        default=(), description="Empty means unrestricted; may contain 'National'"
    )
    primary_sector: Optional[str] = None
    is_universal_sector: bool = False
    amount_min: Optional[float] = None
    amount_max: Optional[float] = None
    keywords: Tuple[str, ...] = ()
    legal_entities: Tuple[str, ...] = ()
    funding_type: Optional[str] = None
    deadline: Optional[str] = None

    @property
    def search_text(self) -> str:
        """Lower-cased title, description and eligibility for substring matching."""
        return f"{self.title} {self.description} {self.eligibility}".lower()


class PreScoreResult(BaseModel):
    """Deterministic score of one candidate against one profile."""

    model_config = ConfigDict(frozen=True)

    candidate: SubsidyCandidate
    score: int
    hard_filtered: bool = False
    filter_reason: Optional[str] = None
    reasons: Tuple[str, ...] = ()


# ============================================================
# AI refinement
# ============================================================


class CompactCandidate(BaseModel):
    """Minimal per-candidate record sent to the language model."""

    i: int
    id: str
    t: str
    s: Optional[str] = None
    r: str
    a: Optional[str] = None
    p: int
    rs: List[str] = Field(default_factory=list)


class CompactBatch(BaseModel):
    """Candidates selected for refinement plus their token estimate."""

    items: List[CompactCandidate] = Field(default_factory=list)
    estimated_tokens: int = 0
    token_budget: int = 0
    truncated: bool = False

    def candidate_ids(self) -> List[str]:
        return [item.id for item in self.items]

    def by_index(self, index: int) -> Optional[CompactCandidate]:
        if 0 <= index < len(self.items):
            return self.items[index]
        return None


class AIEvaluation(BaseModel):
    """Refined verdict of the model for one sent candidate."""

    subsidy_id: str
    score: int = Field(ge=0, le=100)
    success_probability: Optional[int] = Field(default=None, ge=0, le=100)
    reasons: List[str] = Field(default_factory=list)
    matching_criteria: List[str] = Field(default_factory=list)
    missing_criteria: List[str] = Field(default_factory=list)


class AIRefinement(BaseModel):
    """Successful refinement call."""

    ok: Literal[True] = True
    evaluations: List[AIEvaluation] = Field(default_factory=list)
    input_tokens: int = 0
    output_tokens: int = 0
    model: Optional[str] = None


class AIFailure(BaseModel):
    """Classified refinement failure. An expected branch, never raised."""

    ok: Literal[False] = False
    reason: str
    detail: Optional[str] = None


AIResult = Union[AIRefinement, AIFailure]


# ============================================================
# Output
# ============================================================


class MatchResult(BaseModel):
    """One ranked subsidy in the response."""

    subsidy_id: str
    match_score: int
    success_probability: int
    match_reasons: List[str] = Field(default_factory=list)
    matching_criteria: List[str] = Field(default_factory=list)
    missing_criteria: List[str] = Field(default_factory=list)
    source: Literal["ai", "pre_score"] = SOURCE_PRE_SCORE

    @property
    def ai_evaluated(self) -> bool:
        return self.source == SOURCE_AI


class TokenUsage(BaseModel):
    input: int = 0
    output: int = 0


class PipelineStats(BaseModel):
    """Per-request telemetry of the matching pipeline."""

    candidates_fetched: int = 0
    pre_scored_count: int = 0
    ai_evaluated: bool = False
    fallback_reason: Optional[str] = None


class MatchResponse(BaseModel):
    """Result of one compute_matches call."""

    matches: List[MatchResult] = Field(default_factory=list)
    processing_time_ms: int = 0
    tokens_used: TokenUsage = Field(default_factory=TokenUsage)
    pipeline_stats: PipelineStats = Field(default_factory=PipelineStats)
