"""Small HTTP-related constants shared across askbridge.

This module is intentionally tiny to avoid circular imports and drift.
"""

from __future__ import annotations

# Status codes a caller may reasonably retry; surfaced on APIError.retryable.
RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({408, 409, 429, 500, 502, 503, 504})

CHAT_COMPLETIONS_PATH = "/chat/completions"
