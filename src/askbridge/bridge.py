"""End-to-end flow: select a provider, validate, adjust, translate, send."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
import logging
from typing import TYPE_CHECKING, Any

from askbridge.capabilities import (
    CapabilityValidationResult,
    ModelCapabilities,
    find_model_capabilities,
    validate_capabilities,
)
from askbridge.models import ImageBlock, TextBlock
from askbridge.transport import ChatCompletionsTransport, with_logging
from askbridge.translate import translate_request

if TYPE_CHECKING:
    from collections.abc import Callable

    from askbridge.config import Config
    from askbridge.models import AskRequest
    from askbridge.providers import ProviderName
    from askbridge.transport import Transport

    CapabilityRegistry = Callable[[str], ModelCapabilities | None]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderSelection:
    """The provider and model a request will be translated for."""

    provider: ProviderName
    model: str
    #: None when the model is not in the registry.
    capabilities: ModelCapabilities | None = None


@dataclass(frozen=True)
class PreparedRequest:
    """A wire body plus the capability report that shaped it."""

    body: dict[str, Any]
    validation: CapabilityValidationResult | None = None


def select_provider(
    config: Config,
    registry: CapabilityRegistry = find_model_capabilities,
) -> ProviderSelection:
    """Pick the target provider for ``config.model``.

    ``proxy`` is honored as configured. Otherwise a known model takes the
    provider recorded in the registry and an unknown one falls back to the
    configured provider.
    """
    capabilities = registry(config.model)
    if config.provider == "proxy":
        provider: ProviderName = "proxy"
    elif capabilities is not None:
        provider = capabilities.provider
    else:
        logger.debug(
            "Model %r not in registry; using configured provider %r",
            config.model,
            config.provider,
        )
        provider = config.provider
    return ProviderSelection(
        provider=provider, model=config.model, capabilities=capabilities
    )


def apply_adjustments(
    request: AskRequest, result: CapabilityValidationResult
) -> AskRequest:
    """Return a copy of *request* with the reported adjustments applied."""
    adjustments = result.adjustments
    changes: dict[str, Any] = {}
    if adjustments.max_output_tokens is not None:
        changes["max_output_tokens"] = adjustments.max_output_tokens
    if adjustments.tools_disabled:
        changes["tools"] = ()
    if adjustments.images_ignored:
        kept = tuple(b for b in request.content if not isinstance(b, ImageBlock))
        changes["content"] = kept or (TextBlock(text=""),)
    if not changes:
        return request
    return replace(request, **changes)


def prepare(
    request: AskRequest,
    selection: ProviderSelection,
    *,
    logger_fn: Callable[[str], object] | None = None,
) -> PreparedRequest:
    """Validate *request* against the selection and build its wire body.

    Capability mismatches are applied, never raised. Unknown models skip
    validation and translate with provider defaults.

    Raises:
        ValidationError: If the thinking directive is malformed.
    """
    validation: CapabilityValidationResult | None = None
    if selection.capabilities is not None:
        validation = validate_capabilities(selection.capabilities, request, logger_fn)
        request = apply_adjustments(request, validation)

    body = translate_request(request, selection.model, provider=selection.provider)
    return PreparedRequest(body=body, validation=validation)


async def ask(
    request: AskRequest,
    config: Config,
    *,
    transport: Transport | None = None,
    logger_fn: Callable[[str], object] | None = None,
    registry: CapabilityRegistry = find_model_capabilities,
) -> dict[str, Any]:
    """Translate *request* for *config*'s target and send it.

    Args:
        request: The unified request.
        config: Target provider, model and credentials. URL and API key are
            resolved for the selected provider, which may differ from
            ``config.provider`` for models found in the registry.
        transport: Optional transport; a ``ChatCompletionsTransport`` is
            created (and closed) when omitted.
        logger_fn: Receives capability warnings as plain strings.
        registry: Model capability lookup.

    Returns:
        The backend's decoded JSON response, uninspected.

    Raises:
        ConfigurationError: If no API key is available for the selected provider.
        ValidationError: If the thinking directive is malformed.
    """
    selection = select_provider(config, registry)
    endpoint = config.endpoint(selection.provider)
    prepared = prepare(request, selection, logger_fn=logger_fn)

    owned = transport is None
    inner: Transport = transport if transport is not None else ChatCompletionsTransport(endpoint)
    client = with_logging(inner, endpoint, debug=config.debug)
    try:
        return await client.ask(prepared.body)
    finally:
        if owned:
            try:
                await inner.aclose()  # type: ignore[attr-defined]
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                # Cleanup should never mask the primary failure.
                logger.warning("Transport cleanup failed: %s", exc)
