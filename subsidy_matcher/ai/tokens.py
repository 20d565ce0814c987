"""Token-Schätzung für das Kontext-Budget.

Character based estimate (about 4 characters per token), the same rule the
provider documentation uses for French and English text.
"""

import json
import math
from dataclasses import dataclass
from typing import Any

from subsidy_matcher.settings import Settings

CHARS_PER_TOKEN = 4

# Framing added by the chat format per message (role, separators)
MESSAGE_OVERHEAD_TOKENS = 4


def estimate_tokens(text: str) -> int:
    """Estimate the token count of a text."""
    if not text:
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def compact_json(value: Any) -> str:
    """Serialize without whitespace, keeping accents readable."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


@dataclass(frozen=True)
class TokenBudget:
    """Per-call token ceiling split into prompt, candidates and output."""

    call_ceiling: int
    reserved_output: int
    prompt_overhead: int

    @property
    def candidate_tokens(self) -> int:
        """Tokens left for the serialized candidate list."""
        return max(0, self.call_ceiling - self.reserved_output - self.prompt_overhead)

    @classmethod
    def for_settings(cls, config: Settings, prompt_overhead: int) -> "TokenBudget":
        """Budget for the configured provider tier.

        The per-call ceiling is the tier's context window, further bounded by
        its tokens-per-minute limit.
        """
        tier = config.provider_tier
        return cls(
            call_ceiling=min(tier.context_window, tier.tokens_per_minute),
            reserved_output=config.ai_max_output_tokens,
            prompt_overhead=prompt_overhead + 2 * MESSAGE_OVERHEAD_TOKENS,
        )
