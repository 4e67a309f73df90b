"""Model capability metadata and request validation against it."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from askbridge.models import AskRequest
    from askbridge.providers import ProviderName

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelCapabilities:
    """Declared limits of a model."""

    provider: ProviderName
    max_output_tokens: int
    supports_tools: bool
    supports_image_input: bool


@dataclass(frozen=True)
class CapabilityAdjustments:
    """Adjustments needed for a request to fit a model.

    A field is set only when the matching mismatch was detected.
    """

    max_output_tokens: int | None = None
    tools_disabled: bool | None = None
    images_ignored: bool | None = None

    def as_dict(self) -> dict[str, int | bool]:
        """Return only the adjustments that apply."""
        out: dict[str, int | bool] = {}
        if self.max_output_tokens is not None:
            out["max_output_tokens"] = self.max_output_tokens
        if self.tools_disabled is not None:
            out["tools_disabled"] = self.tools_disabled
        if self.images_ignored is not None:
            out["images_ignored"] = self.images_ignored
        return out


@dataclass(frozen=True)
class CapabilityValidationResult:
    """Non-fatal report of what must change for a request to be satisfiable."""

    warnings: tuple[str, ...] = ()
    adjustments: CapabilityAdjustments = field(default_factory=CapabilityAdjustments)

    @property
    def valid(self) -> bool:
        return not self.warnings


# Pure data; callers may pass their own lookup instead.
MODEL_CAPABILITIES: dict[str, ModelCapabilities] = {
    "claude-sonnet-4-20250514": ModelCapabilities(
        provider="anthropic",
        max_output_tokens=64_000,
        supports_tools=True,
        supports_image_input=True,
    ),
    "claude-3-5-haiku-20241022": ModelCapabilities(
        provider="anthropic",
        max_output_tokens=8_192,
        supports_tools=True,
        supports_image_input=True,
    ),
    "gpt-4o": ModelCapabilities(
        provider="openai",
        max_output_tokens=16_384,
        supports_tools=True,
        supports_image_input=True,
    ),
    "gpt-4o-mini": ModelCapabilities(
        provider="openai",
        max_output_tokens=16_384,
        supports_tools=True,
        supports_image_input=True,
    ),
    "o3-mini": ModelCapabilities(
        provider="openai",
        max_output_tokens=100_000,
        supports_tools=True,
        supports_image_input=False,
    ),
    "gemini-2.0-flash": ModelCapabilities(
        provider="google",
        max_output_tokens=8_192,
        supports_tools=True,
        supports_image_input=True,
    ),
    "gemini-2.5-pro": ModelCapabilities(
        provider="google",
        max_output_tokens=65_536,
        supports_tools=True,
        supports_image_input=True,
    ),
}


def find_model_capabilities(model: str) -> ModelCapabilities | None:
    """Return capabilities for a known model id, or None."""
    return MODEL_CAPABILITIES.get(model)


def validate_capabilities(
    capabilities: ModelCapabilities,
    request: AskRequest,
    logger_fn: Callable[[str], object] | None = None,
) -> CapabilityValidationResult:
    """Compare *request* with *capabilities* and report needed adjustments.

    Every check runs; warnings accumulate. Nothing is mutated and nothing is
    raised. Each warning is also passed to *logger_fn* when given.
    """
    warnings: list[str] = []
    max_output_tokens: int | None = None
    tools_disabled: bool | None = None
    images_ignored: bool | None = None

    def _emit(message: str) -> None:
        logger.debug(message)
        if logger_fn is not None:
            logger_fn(message)

    requested = request.max_output_tokens
    if requested is not None and requested > capabilities.max_output_tokens:
        warnings.append(
            f"Requested max_tokens ({requested}) exceeds model limit "
            f"({capabilities.max_output_tokens}). Will be clamped to model maximum."
        )
        max_output_tokens = capabilities.max_output_tokens
        _emit(f"Max tokens clamped: {requested} -> {capabilities.max_output_tokens}")

    if request.tools and not capabilities.supports_tools:
        warnings.append(
            f"Model {request.model} does not support tools. Tool calls will be disabled."
        )
        tools_disabled = True
        _emit("Tools disabled for model without tool support")

    if request.has_images and not capabilities.supports_image_input:
        warnings.append(
            f"Model {request.model} does not support image input. Images will be ignored."
        )
        images_ignored = True
        _emit("Images ignored for model without image support")

    return CapabilityValidationResult(
        warnings=tuple(warnings),
        adjustments=CapabilityAdjustments(
            max_output_tokens=max_output_tokens,
            tools_disabled=tools_disabled,
            images_ignored=images_ignored,
        ),
    )
