"""AI Cost Tracking - Erfasst Token-Verbrauch und Kosten."""

from typing import Optional

from sqlalchemy.orm import Session

from subsidy_matcher.db.models import AIUsage
from subsidy_matcher.core.logging import get_logger

logger = get_logger("ai.cost_tracking")

# Preise pro 1M Tokens (USD)
MODEL_PRICES = {
    "mistral-small-latest": {"input": 0.10, "output": 0.30},
    "mistral-medium-latest": {"input": 0.40, "output": 2.00},
    "mistral-large-latest": {"input": 2.00, "output": 6.00},
}
DEFAULT_PRICES = MODEL_PRICES["mistral-small-latest"]


def estimate_cost_usd(model: str, input_tokens: int, output_tokens: int) -> float:
    """Kosten eines Calls in USD."""
    prices = MODEL_PRICES.get(model, DEFAULT_PRICES)
    return (input_tokens * prices["input"] + output_tokens * prices["output"]) / 1_000_000


def log_ai_usage(
    db: Session,
    operation: str,
    model: str,
    input_tokens: int,
    output_tokens: int,
    profile_id: Optional[str] = None,
) -> float:
    """Erfasse AI-Nutzung in der Datenbank.

    Args:
        db: SQLAlchemy Session
        operation: Art der Operation (refinement)
        model: Verwendetes Modell (mistral-small-latest, ...)
        input_tokens: Anzahl Input-Tokens
        output_tokens: Anzahl Output-Tokens
        profile_id: Optional zugehörige Profil-ID

    Returns:
        Berechnete Kosten in USD
    """
    cost_usd = estimate_cost_usd(model, input_tokens, output_tokens)

    usage = AIUsage(
        operation=operation,
        model=model,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        cost_usd=cost_usd,
        profile_id=profile_id,
    )
    db.add(usage)

    logger.debug(
        "AI-Usage: %s | %s | %d+%d tokens | $%.6f",
        operation,
        model,
        input_tokens,
        output_tokens,
        cost_usd,
    )
    return cost_usd
