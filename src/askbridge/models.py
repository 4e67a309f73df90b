"""Domain models for the unified ask request.

All models are frozen; sequences are normalized to tuples on construction so
a request can be shared freely between validation and translation.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, ClassVar

from pydantic import BaseModel

from askbridge.errors import ValidationError

ToolInputSchema = type[BaseModel] | dict[str, Any]


@dataclass(frozen=True)
class TextBlock:
    """Plain text content."""

    type: ClassVar[str] = "text"

    text: str

    def to_wire(self) -> dict[str, Any]:
        return {"type": "text", "text": self.text}


@dataclass(frozen=True)
class ImageBlock:
    """Image content, either inline base64 data or a URL."""

    type: ClassVar[str] = "image"

    media_type: str
    data: str
    #: ``"base64"`` or ``"url"``; for URLs *data* holds the address.
    source_type: str = "base64"

    def to_wire(self) -> dict[str, Any]:
        if self.source_type == "url":
            source: dict[str, Any] = {"type": "url", "url": self.data}
        else:
            source = {
                "type": self.source_type,
                "media_type": self.media_type,
                "data": self.data,
            }
        return {"type": "image", "source": source}


@dataclass(frozen=True)
class ToolResultBlock:
    """The output of a tool call, keyed by the call id it answers."""

    type: ClassVar[str] = "tool_result"

    tool_call_id: str
    content: str | tuple[Mapping[str, Any], ...] = ""

    def __post_init__(self) -> None:
        if not isinstance(self.content, str):
            object.__setattr__(self, "content", tuple(self.content))

    def to_wire(self) -> dict[str, Any]:
        content: Any = self.content
        if not isinstance(content, str):
            content = [deepcopy(dict(item)) for item in content]
        return {
            "type": "tool_result",
            "tool_use_id": self.tool_call_id,
            "content": content,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ToolResultBlock:
        """Build from ``{"tool_use_id"|"toolCallId"|"tool_call_id", "content"}``."""
        call_id = (
            data.get("tool_use_id") or data.get("toolCallId") or data.get("tool_call_id")
        )
        if not isinstance(call_id, str) or not call_id:
            raise ValidationError(
                "tool result is missing its tool call id",
                hint="Pass {'tool_use_id': 'call_1', 'content': '...'}.",
            )
        return cls(tool_call_id=call_id, content=data.get("content", ""))


@dataclass(frozen=True)
class ThinkingBlock:
    """A reasoning block; empty values act as a placeholder signal."""

    type: ClassVar[str] = "thinking"

    thinking: str = ""
    signature: str = ""

    def to_wire(self) -> dict[str, Any]:
        return {
            "type": "thinking",
            "thinking": self.thinking,
            "signature": self.signature,
        }


ContentBlock = TextBlock | ImageBlock | ToolResultBlock | ThinkingBlock

_BLOCK_TYPES = (TextBlock, ImageBlock, ToolResultBlock, ThinkingBlock)


def content_block_from_dict(data: Mapping[str, Any]) -> ContentBlock:
    """Parse an Anthropic-style content block dict."""
    block_type = data.get("type")
    if block_type == "text":
        return TextBlock(text=str(data.get("text", "")))
    if block_type == "image":
        source = data.get("source") or {}
        if source.get("type") == "url":
            return ImageBlock(media_type="", data=source.get("url", ""), source_type="url")
        return ImageBlock(
            media_type=source.get("media_type", ""),
            data=source.get("data", ""),
            source_type=source.get("type", "base64"),
        )
    if block_type == "tool_result":
        return ToolResultBlock.from_dict(data)
    if block_type == "thinking":
        return ThinkingBlock(
            thinking=data.get("thinking", ""),
            signature=data.get("signature", ""),
        )
    raise ValidationError(
        f"Unknown content block type: {block_type!r}",
        hint="Supported block types: 'text', 'image', 'tool_result', 'thinking'.",
    )


def normalize_content(
    content: str | ContentBlock | Mapping[str, Any] | Sequence[Any],
) -> tuple[ContentBlock, ...]:
    """Return *content* as an ordered tuple of blocks.

    A bare string or a single block becomes a one-element tuple.
    """
    if isinstance(content, str):
        return (TextBlock(text=content),)
    if isinstance(content, _BLOCK_TYPES):
        return (content,)
    if isinstance(content, Mapping):
        return (content_block_from_dict(content),)
    if not isinstance(content, Sequence):
        raise ValidationError(
            f"content must be a block or a sequence of blocks, got {type(content).__name__}",
            hint="Pass content='...' or content=[TextBlock('...'), ...].",
        )

    blocks: list[ContentBlock] = []
    for item in content:
        if isinstance(item, _BLOCK_TYPES):
            blocks.append(item)
        elif isinstance(item, Mapping):
            blocks.append(content_block_from_dict(item))
        elif isinstance(item, str):
            blocks.append(TextBlock(text=item))
        else:
            raise ValidationError(
                f"Unsupported content item: {type(item).__name__}",
                hint="Content items must be blocks, block dicts or strings.",
            )
    return tuple(blocks)


@dataclass(frozen=True)
class ToolSpec:
    """A tool the model may call."""

    name: str
    description: str | None = None
    #: Pydantic ``BaseModel`` subclass or JSON Schema dict.
    input_schema: ToolInputSchema = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValidationError(
                "tool name must be a non-empty string",
                hint="Pass ToolSpec(name='get_weather', ...).",
            )
        schema = self.input_schema
        if not (
            isinstance(schema, dict)
            or (isinstance(schema, type) and issubclass(schema, BaseModel))
        ):
            raise ValidationError(
                f"input_schema for tool {self.name!r} must be a Pydantic model class "
                "or JSON schema dict",
                hint="Pass a BaseModel subclass or a dict following JSON Schema.",
            )

    def parameters(self) -> dict[str, Any]:
        """Return the JSON Schema for the tool's input."""
        schema = self.input_schema
        if isinstance(schema, dict):
            return deepcopy(schema)
        return schema.model_json_schema()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ToolSpec:
        """Build from an Anthropic-style ``{"name", "description", "input_schema"}``."""
        kwargs: dict[str, Any] = {
            "name": data.get("name"),
            "description": data.get("description"),
        }
        schema = data.get("input_schema", data.get("inputSchema"))
        if schema is not None:
            kwargs["input_schema"] = schema
        return cls(**kwargs)


@dataclass(frozen=True)
class ThinkingDirective:
    """Request for extended reasoning with a bounded token budget.

    Construction does not validate; malformed directives are rejected when
    converted for a provider (see ``askbridge.thinking``).
    """

    budget_tokens: Any
    type: Any = "enabled"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ThinkingDirective:
        return cls(
            budget_tokens=data.get("budget_tokens", data.get("budgetTokens")),
            type=data.get("type"),
        )


@dataclass(frozen=True)
class AskRequest:
    """A single unified conversational turn with its tools and parameters."""

    model: str
    content: tuple[ContentBlock, ...]
    tools: tuple[ToolSpec, ...] = ()
    tool_results: tuple[ToolResultBlock, ...] = ()
    thinking: ThinkingDirective | None = None
    max_output_tokens: int | None = None
    temperature: float | None = None

    def __post_init__(self) -> None:
        """Normalize loose inputs (strings, dicts, lists) into frozen models."""
        object.__setattr__(self, "content", normalize_content(self.content))
        object.__setattr__(
            self,
            "tools",
            tuple(
                t if isinstance(t, ToolSpec) else ToolSpec.from_dict(t)
                for t in self.tools or ()
            ),
        )
        object.__setattr__(
            self,
            "tool_results",
            tuple(
                r if isinstance(r, ToolResultBlock) else ToolResultBlock.from_dict(r)
                for r in self.tool_results or ()
            ),
        )
        if isinstance(self.thinking, Mapping):
            object.__setattr__(
                self, "thinking", ThinkingDirective.from_dict(self.thinking)
            )

        tokens = self.max_output_tokens
        if tokens is not None and (isinstance(tokens, bool) or not isinstance(tokens, int)):
            raise ValidationError(
                "max_output_tokens must be an integer",
                hint="Pass max_output_tokens=1024 or omit it for the default.",
            )
        # A non-positive limit means "unset"; the translator applies its default.
        if tokens is not None and tokens <= 0:
            object.__setattr__(self, "max_output_tokens", None)

    @property
    def has_images(self) -> bool:
        """Whether any content block is an image."""
        return any(isinstance(block, ImageBlock) for block in self.content)
