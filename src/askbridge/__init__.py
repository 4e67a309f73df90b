"""askbridge: translate unified ask requests for OpenAI-compatible backends.

Public API:
    - AskRequest and content blocks: the unified request
    - validate_capabilities(): report what a model cannot satisfy
    - convert_thinking(): provider-specific extended-reasoning parameters
    - translate_request(): build the chat-completion body
    - ask(): select, validate, translate and send in one call
"""

from __future__ import annotations

import logging

from askbridge.bridge import (
    PreparedRequest,
    ProviderSelection,
    apply_adjustments,
    ask,
    prepare,
    select_provider,
)
from askbridge.capabilities import (
    MODEL_CAPABILITIES,
    CapabilityAdjustments,
    CapabilityValidationResult,
    ModelCapabilities,
    find_model_capabilities,
    validate_capabilities,
)
from askbridge.config import Config, Endpoint, resolve_api_key
from askbridge.errors import (
    APIError,
    BridgeError,
    ConfigurationError,
    InternalError,
    RateLimitError,
    ValidationError,
)
from askbridge.models import (
    AskRequest,
    ImageBlock,
    TextBlock,
    ThinkingBlock,
    ThinkingDirective,
    ToolResultBlock,
    ToolSpec,
)
from askbridge.providers import PROVIDERS, ProviderName
from askbridge.thinking import convert_thinking
from askbridge.translate import translate_request
from askbridge.transport import ChatCompletionsTransport, LoggingTransport, Transport

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("askbridge")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("askbridge").addHandler(logging.NullHandler())

__all__ = [
    "MODEL_CAPABILITIES",
    "PROVIDERS",
    "APIError",
    "AskRequest",
    "BridgeError",
    "CapabilityAdjustments",
    "CapabilityValidationResult",
    "ChatCompletionsTransport",
    "Config",
    "ConfigurationError",
    "Endpoint",
    "ImageBlock",
    "InternalError",
    "LoggingTransport",
    "ModelCapabilities",
    "PreparedRequest",
    "ProviderName",
    "ProviderSelection",
    "RateLimitError",
    "TextBlock",
    "ThinkingBlock",
    "ThinkingDirective",
    "ToolResultBlock",
    "ToolSpec",
    "Transport",
    "ValidationError",
    "apply_adjustments",
    "ask",
    "convert_thinking",
    "find_model_capabilities",
    "prepare",
    "resolve_api_key",
    "select_provider",
    "translate_request",
    "validate_capabilities",
]
