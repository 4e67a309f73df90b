"""Transport clients that send translated bodies to a chat-completion endpoint."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import httpx

from askbridge._errors import wrap_transport_error
from askbridge.config import redact_key
from askbridge.errors import APIError

if TYPE_CHECKING:
    from askbridge.config import Endpoint

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 60.0


@runtime_checkable
class Transport(Protocol):
    """Minimal transport protocol: send one body, get one response."""

    async def ask(self, body: dict[str, Any]) -> dict[str, Any]:
        """Send *body* and return the decoded JSON response."""
        ...


class ChatCompletionsTransport:
    """POSTs request bodies to an OpenAI-compatible ``/chat/completions`` URL.

    No retries and no streaming; failures surface as ``APIError``.
    """

    def __init__(
        self,
        endpoint: Endpoint,
        client: httpx.AsyncClient | None = None,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ) -> None:
        """Initialize with a resolved endpoint and an optional shared client."""
        self.endpoint = endpoint
        self._client = client
        self._owns_client = client is None
        self._timeout_s = timeout_s

    @property
    def url(self) -> str:
        return self.endpoint.url

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.endpoint.api_key}",
            "Content-Type": "application/json",
        }

    def _get_client(self) -> httpx.AsyncClient:
        """Lazily initialize and return the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout_s)
        return self._client

    async def ask(self, body: dict[str, Any]) -> dict[str, Any]:
        """Send *body* and return the decoded JSON response."""
        client = self._get_client()
        provider = self.endpoint.provider
        try:
            response = await client.post(self.url, json=body, headers=self.headers)
            response.raise_for_status()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise wrap_transport_error(e, provider=provider) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise APIError(
                f"{provider} returned a non-JSON response",
                status_code=response.status_code,
                retryable=False,
                provider=provider,
            ) from e
        if not isinstance(payload, dict):
            raise APIError(
                f"{provider} returned {type(payload).__name__}, expected a JSON object",
                status_code=response.status_code,
                retryable=False,
                provider=provider,
            )
        return payload

    async def aclose(self) -> None:
        """Close the HTTP client if this transport created it."""
        client = self._client
        if client is None or not self._owns_client:
            return
        self._client = None
        await client.aclose()


class LoggingTransport:
    """Decorator that logs each request and response around ``inner.ask``."""

    def __init__(
        self,
        inner: Transport,
        *,
        provider: str,
        url: str | None = None,
        api_key: str | None = None,
    ) -> None:
        self.inner = inner
        self.provider = provider
        self.url = url
        self._api_key = api_key

    async def ask(self, body: dict[str, Any]) -> dict[str, Any]:
        logger.debug(
            "[%s] Request: url=%s headers=%s body=%s",
            self.provider,
            self.url,
            {
                "Authorization": "Bearer " + redact_key(self._api_key),
                "Content-Type": "application/json",
            },
            json.dumps(body, indent=2),
        )
        response = await self.inner.ask(body)
        logger.debug("[%s] Response: %s", self.provider, json.dumps(response, indent=2))
        return response

    async def aclose(self) -> None:
        aclose = getattr(self.inner, "aclose", None)
        if callable(aclose):
            await aclose()


def with_logging(transport: Transport, endpoint: Endpoint, *, debug: bool) -> Transport:
    """Wrap *transport* in ``LoggingTransport`` when *debug* is set."""
    if not debug:
        return transport
    return LoggingTransport(
        transport,
        provider=endpoint.provider,
        url=endpoint.url,
        api_key=endpoint.api_key,
    )
