"""AI module - refinement client, response parsing, rate limiting and token budget.

The refinement client lives in subsidy_matcher.ai.client.
"""

from subsidy_matcher.ai.rate_limit import RateLimiter, get_rate_limiter, reset_rate_limiters
from subsidy_matcher.ai.tokens import TokenBudget, estimate_tokens

__all__ = [
    "RateLimiter",
    "get_rate_limiter",
    "reset_rate_limiters",
    "TokenBudget",
    "estimate_tokens",
]
