"""Translate a unified ask request into an OpenAI-compatible chat body.

The produced body is consumed by chat-completion endpoints that expect a
plain string for simple user turns, so content collapsing below is part of
the wire contract.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from askbridge.models import ThinkingBlock
from askbridge.providers import is_provider, unsupported_provider
from askbridge.thinking import convert_thinking

if TYPE_CHECKING:
    from askbridge.models import AskRequest, ToolSpec
    from askbridge.providers import ProviderName

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 512
DEFAULT_TEMPERATURE = 0.7


def translate_request(
    request: AskRequest,
    fallback_model: str,
    *,
    provider: ProviderName = "proxy",
) -> dict[str, Any]:
    """Build the chat-completion request body for *request*.

    Args:
        request: The unified request.
        fallback_model: Model id used when ``request.model`` is empty.
        provider: Target provider; selects the thinking parameter shape.

    Returns:
        A new JSON-ready dict. The request is not modified.

    Raises:
        ValidationError: If the thinking directive is malformed.
        InternalError: If *provider* is not a known provider.
    """
    if not is_provider(provider):
        unsupported_provider(provider)  # type: ignore[arg-type]

    thinking_param = convert_thinking(request.thinking, provider)

    # Single user turn: request blocks first, then tool results.
    content: list[dict[str, Any]] = [block.to_wire() for block in request.content]
    content.extend(result.to_wire() for result in request.tool_results)
    messages: list[dict[str, Any]] = [{"role": "user", "content": content}]

    body: dict[str, Any] = {
        "model": request.model or fallback_model,
        "messages": messages,
        "stream": False,
        "max_tokens": (
            request.max_output_tokens
            if request.max_output_tokens is not None
            else DEFAULT_MAX_TOKENS
        ),
        "temperature": (
            request.temperature
            if request.temperature is not None
            else DEFAULT_TEMPERATURE
        ),
    }

    if request.tools:
        body["tools"] = [_function_tool(tool) for tool in request.tools]

    if request.thinking is not None:
        if thinking_param is not None:
            _attach_thinking(body, thinking_param, provider)
        placeholder = ThinkingBlock().to_wire()
        for message in messages:
            message["content"].append(dict(placeholder))

    for message in messages:
        message["content"] = _collapse_content(message["content"])

    logger.debug(
        "Translated request for %s: %d block(s), %d tool(s)",
        provider,
        len(content),
        len(request.tools),
    )
    return body


def _function_tool(tool: ToolSpec) -> dict[str, Any]:
    function: dict[str, Any] = {"name": tool.name}
    if tool.description is not None:
        function["description"] = tool.description
    function["parameters"] = tool.parameters()
    return {"type": "function", "function": function}


def _attach_thinking(
    body: dict[str, Any], param: dict[str, Any], provider: ProviderName
) -> None:
    match provider:
        case "proxy":
            # Already shaped as a body fragment: {"thinking": {...}}.
            body.update(param)
        case "anthropic" | "openai" | "google":
            body["thinking"] = param
        case _:
            unsupported_provider(provider)


def _collapse_content(blocks: list[dict[str, Any]]) -> str | list[dict[str, Any]]:
    """Reduce a lone text block to its string; keep anything else as blocks."""
    if len(blocks) == 1 and blocks[0].get("type") == "text":
        return blocks[0]["text"]
    return blocks
