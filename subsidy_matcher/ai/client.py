"""AI refinement client (OpenAI-compatible chat completions, Mistral by default).

One request per matching operation: SDK retries are disabled and no retry
decorator is applied. Every provider problem is classified into an
AIFailure; only task cancellation propagates.
"""

import asyncio
from typing import Optional, Tuple

import httpx
from openai import (
    APIConnectionError,
    APIError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    RateLimitError,
)
from openai.types.chat import ChatCompletion

from subsidy_matcher.ai.parsing import parse_refinement_response
from subsidy_matcher.ai.prompts import (
    SYSTEM_PROMPT,
    build_messages,
    build_profile_context,
    build_user_prompt,
)
from subsidy_matcher.ai.rate_limit import RateLimiter, get_rate_limiter
from subsidy_matcher.ai.tokens import estimate_tokens
from subsidy_matcher.core.constants import (
    FALLBACK_HTTP_ERROR,
    FALLBACK_INVALID_RESPONSE,
    FALLBACK_NETWORK_ERROR,
    FALLBACK_RATE_LIMITED,
    FALLBACK_TIMEOUT,
    FALLBACK_TOKEN_BUDGET,
)
from subsidy_matcher.core.exceptions import RateLimitExceeded
from subsidy_matcher.core.logging import get_logger
from subsidy_matcher.matching.compactor import serialize_batch
from subsidy_matcher.matching.schemas import (
    AIFailure,
    AIRefinement,
    AIResult,
    AnalyzedProfile,
    CompactBatch,
    CompanyProfile,
)
from subsidy_matcher.settings import Settings, settings as default_settings

logger = get_logger("ai.client")

# Provider block after a 429 without Retry-After header
DEFAULT_RATE_LIMIT_BACKOFF_SECONDS = 60.0


def _retry_after_seconds(error: RateLimitError) -> float:
    try:
        value = error.response.headers.get("retry-after")
        return float(value) if value else DEFAULT_RATE_LIMIT_BACKOFF_SECONDS
    except (AttributeError, ValueError):
        return DEFAULT_RATE_LIMIT_BACKOFF_SECONDS


def _completion_content(response) -> Optional[str]:
    """Content of the first choice, None when the body is not a usable completion."""
    if not isinstance(response, ChatCompletion) or not response.choices:
        return None
    try:
        return response.choices[0].message.content or ""
    except (AttributeError, TypeError):
        return None


def _token_usage(response: ChatCompletion, estimated_input: int, raw_content: str) -> Tuple[int, int]:
    """Reported (input, output) tokens, estimated when usage is missing."""
    try:
        return response.usage.prompt_tokens, response.usage.completion_tokens
    except (AttributeError, TypeError):
        return estimated_input, estimate_tokens(raw_content)


class RefinementClient:
    """Re-scores a compact candidate batch with one language-model call.

    Usage:
        async with RefinementClient() as client:
            result = await client.refine(analyzed, profile, batch, limit=20)
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        limiter: Optional[RateLimiter] = None,
    ):
        self.config = config or default_settings
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.ai_timeout_seconds, connect=5.0),
        )
        self._client = AsyncOpenAI(
            api_key=self.config.ai_api_key or "missing-key",
            base_url=self.config.ai_base_url,
            max_retries=0,
            timeout=self.config.ai_timeout_seconds,
            http_client=self._http_client,
        )
        self.limiter = limiter or get_rate_limiter(self.config.ai_account_key, self.config)

    async def __aenter__(self) -> "RefinementClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()

    @property
    def model(self) -> str:
        return self.config.ai_model

    def prompt_overhead(self, analyzed: AnalyzedProfile, profile: CompanyProfile, limit: int) -> int:
        """Estimated prompt tokens without the candidate list."""
        user_prompt = build_user_prompt(
            build_profile_context(profile, analyzed),
            candidates_json="",
            candidate_count=0,
            limit=limit,
            max_adjustment=self.config.ai_max_score_adjustment,
        )
        return estimate_tokens(SYSTEM_PROMPT) + estimate_tokens(user_prompt)

    async def refine(
        self,
        analyzed: AnalyzedProfile,
        profile: CompanyProfile,
        batch: CompactBatch,
        limit: int = 20,
    ) -> AIResult:
        """Refine the batch with one model call.

        Args:
            analyzed: Analyzed profile
            profile: Raw profile (prompt context)
            batch: Compact candidates to re-score
            limit: Number of matches the caller will return

        Returns:
            AIRefinement on success, AIFailure with a classified reason otherwise
        """
        if not batch.items:
            return AIFailure(reason=FALLBACK_TOKEN_BUDGET, detail="no candidate fits the token budget")

        user_prompt = build_user_prompt(
            build_profile_context(profile, analyzed),
            candidates_json=serialize_batch(batch),
            candidate_count=len(batch.items),
            limit=limit,
            max_adjustment=self.config.ai_max_score_adjustment,
        )
        messages = build_messages(SYSTEM_PROMPT, user_prompt)
        estimated_input = estimate_tokens(SYSTEM_PROMPT) + estimate_tokens(user_prompt)

        try:
            await self.limiter.acquire(
                estimated_input + self.config.ai_max_output_tokens,
                max_wait=self.config.ai_max_limiter_wait_seconds,
            )
        except RateLimitExceeded as e:
            logger.warning("AI call skipped: %s", e.message)
            return AIFailure(reason=FALLBACK_RATE_LIMITED, detail=e.message)

        logger.info(
            "AI refinement: %d candidates, ~%d input tokens (%s)",
            len(batch.items),
            estimated_input,
            self.model,
        )

        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    max_tokens=self.config.ai_max_output_tokens,
                    temperature=self.config.ai_temperature,
                    response_format={"type": "json_object"},
                ),
                timeout=self.config.ai_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning("AI call timed out after %.1fs", self.config.ai_timeout_seconds)
            return AIFailure(reason=FALLBACK_TIMEOUT, detail=f"no response after {self.config.ai_timeout_seconds}s")
        except RateLimitError as e:
            backoff = _retry_after_seconds(e)
            self.limiter.block_for(backoff)
            logger.warning("AI provider rate limit (429), blocking for %.0fs", backoff)
            return AIFailure(reason=FALLBACK_RATE_LIMITED, detail=str(e)[:200])
        except APITimeoutError as e:
            logger.warning("AI call timed out: %s", e)
            return AIFailure(reason=FALLBACK_TIMEOUT, detail=str(e)[:200])
        except APIConnectionError as e:
            logger.warning("AI provider unreachable: %s", e)
            return AIFailure(reason=FALLBACK_NETWORK_ERROR, detail=str(e)[:200])
        except APIStatusError as e:
            logger.warning("AI provider returned HTTP %d", e.status_code)
            return AIFailure(reason=FALLBACK_HTTP_ERROR, detail=f"HTTP {e.status_code}")
        except APIError as e:
            logger.warning("AI provider error: %s", e)
            return AIFailure(reason=FALLBACK_HTTP_ERROR, detail=str(e)[:200])

        raw_content = _completion_content(response)
        if raw_content is None:
            logger.warning("AI provider returned an unexpected body: %s", type(response).__name__)
            return AIFailure(reason=FALLBACK_INVALID_RESPONSE, detail=str(response)[:200])
        logger.debug("LLM raw response: %s", raw_content[:500])

        input_tokens, output_tokens = _token_usage(response, estimated_input, raw_content)

        parsed = parse_refinement_response(raw_content, batch)
        if isinstance(parsed, AIFailure):
            return parsed

        logger.info(
            "AI refinement: %d/%d candidates evaluated, %d in / %d out tokens",
            len(parsed),
            len(batch.items),
            input_tokens,
            output_tokens,
        )
        return AIRefinement(
            evaluations=parsed,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            model=response.model or self.model,
        )
