"""Map transport failures into APIError with stable retry metadata.

askbridge never retries on its own; the metadata lets callers decide.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from askbridge._http import RETRYABLE_STATUS_CODES
from askbridge.config import api_key_env_var
from askbridge.errors import APIError, RateLimitError, _walk_exception_chain
from askbridge.providers import is_provider


def extract_status_code(exc: BaseException) -> int | None:
    """Walk the exception chain to find an HTTP status code."""
    for e in _walk_exception_chain(exc):
        for attr in ("status_code", "status"):
            value = getattr(e, attr, None)
            if isinstance(value, int) and 100 <= value <= 599:
                return value
        response = getattr(e, "response", None)
        value = getattr(response, "status_code", None)
        if isinstance(value, int) and 100 <= value <= 599:
            return value
    return None


def extract_retry_after_s(exc: BaseException) -> float | None:
    """Walk the exception chain to find a Retry-After delay in seconds."""
    for e in _walk_exception_chain(exc):
        response = getattr(e, "response", None)
        headers: Any = getattr(response, "headers", None)
        if headers is None:
            continue
        raw = headers.get("Retry-After")
        if not isinstance(raw, str) or not raw.strip():
            continue
        try:
            seconds = float(raw)
        except ValueError:
            continue
        if seconds >= 0:
            return seconds
    return None


def _auth_hint(provider: str, status_code: int | None) -> str | None:
    if status_code in {401, 403}:
        env_var = api_key_env_var(provider) if is_provider(provider) else "API key"
        return f"Check credentials/permissions (try setting {env_var} or Config.api_key)."
    return None


def wrap_transport_error(
    exc: BaseException,
    *,
    provider: str,
    message: str | None = None,
) -> APIError:
    """Map an httpx failure into APIError (RateLimitError for HTTP 429)."""
    if isinstance(exc, asyncio.CancelledError):
        raise exc

    if isinstance(exc, APIError):
        if exc.provider is None:
            exc.provider = provider
        return exc

    status_code = extract_status_code(exc)
    retry_after_s = extract_retry_after_s(exc)

    retryable = retry_after_s is not None
    if isinstance(status_code, int) and status_code in RETRYABLE_STATUS_CODES:
        retryable = True
    elif status_code is None:
        for e in _walk_exception_chain(exc):
            if isinstance(e, (httpx.TimeoutException, httpx.RequestError)):
                retryable = True
                break

    err_cls: type[APIError] = RateLimitError if status_code == 429 else APIError
    msg = message or f"{provider} chat completion failed"
    status_note = f" (status={status_code})" if isinstance(status_code, int) else ""
    cause = str(exc)
    return err_cls(
        f"{msg}{status_note}: {cause}" if cause else f"{msg}{status_note}",
        hint=_auth_hint(provider, status_code),
        retryable=retryable,
        status_code=status_code,
        retry_after_s=retry_after_s,
        provider=provider,
    )
