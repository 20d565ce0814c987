"""Application constants."""

# Display formatting
SEPARATOR_LINE = "=" * 60

# Region sentinel for nationwide programmes
REGION_NATIONAL = "National"

# Fallback reasons reported in pipeline_stats.fallback_reason
FALLBACK_RATE_LIMITED = "rate_limited"
FALLBACK_TIMEOUT = "timeout"
FALLBACK_NETWORK_ERROR = "network_error"
FALLBACK_HTTP_ERROR = "http_error"
FALLBACK_PARSE_ERROR = "parse_error"
FALLBACK_INVALID_RESPONSE = "invalid_response"
FALLBACK_TOKEN_BUDGET = "token_budget_exceeded"
FALLBACK_AI_DISABLED = "ai_disabled"
FALLBACK_CANCELLED = "cancelled"

# Match sources
SOURCE_AI = "ai"
SOURCE_PRE_SCORE = "pre_score"

# Compliance event values
EVENT_RECOMMENDATION_GENERATED = "subsidy_recommendation_generated"
PIPELINE_FUNCTION_NAME = "hybrid-calculate-matches"
PIPELINE_VERSION_AI = "v5.1-prescored"
PIPELINE_VERSION_FALLBACK = "v5.1-fallback"
SYSTEM_STATUS_NOMINAL = "nominal"
SYSTEM_STATUS_DEGRADED = "degraded"

# Shown instead of missing criteria when the AI did not evaluate a match
MISSING_AI_EVALUATION = "Évaluation AI non disponible"
