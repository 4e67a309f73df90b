"""Extended-reasoning directive conversion per provider."""

from __future__ import annotations

import logging
from typing import Any

from askbridge.errors import ValidationError
from askbridge.models import ThinkingDirective

logger = logging.getLogger(__name__)

MIN_THINKING_BUDGET_TOKENS = 1024


def validate_thinking(directive: ThinkingDirective) -> int:
    """Check a directive and return its budget.

    Raises:
        ValidationError: If the type tag is not ``"enabled"`` or the budget is
            not an integer of at least ``MIN_THINKING_BUDGET_TOKENS``.
    """
    if directive.type != "enabled":
        raise ValidationError(
            f'Invalid thinking configuration: type must be "enabled", got {directive.type!r}',
            hint="Pass ThinkingDirective(budget_tokens=2048) or omit thinking.",
        )
    budget = directive.budget_tokens
    if (
        isinstance(budget, bool)
        or not isinstance(budget, int)
        or budget < MIN_THINKING_BUDGET_TOKENS
    ):
        raise ValidationError(
            "Invalid thinking configuration: budget_tokens must be an integer "
            f">= {MIN_THINKING_BUDGET_TOKENS}, got {budget!r}",
            hint=f"Use budget_tokens={MIN_THINKING_BUDGET_TOKENS} or more.",
        )
    return budget


def convert_thinking(
    directive: ThinkingDirective | None, provider: str
) -> dict[str, Any] | None:
    """Map a thinking directive into the provider's parameter shape.

    Validation always runs first, so a malformed directive fails for every
    provider. An unrecognized provider yields ``None`` instead of an error.

    The ``openai`` mapping is lossy: the budget collapses into the highest
    reasoning-effort tier. The ``proxy`` shape nests the native parameter
    under ``thinking`` so it can be merged into a request body as-is.
    """
    if directive is None:
        return None

    budget = validate_thinking(directive)

    match provider:
        case "anthropic":
            return {"type": "enabled", "budget_tokens": budget}
        case "google":
            return {"includeThoughts": True, "thinkingBudget": budget}
        case "openai":
            return {"reasoningEffort": "high"}
        case "proxy":
            return {"thinking": {"type": "enabled", "budget_tokens": budget}}
        case _:
            logger.debug("No thinking mapping for provider %r; dropping directive", provider)
            return None
