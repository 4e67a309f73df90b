"""Request translation characterization tests.

These pin the exact chat-completion body shapes, since the body is consumed
by external endpoints and drift is hard to detect.
"""

from __future__ import annotations

from typing import Any

from hypothesis import given, settings
from hypothesis import strategies as st
from pydantic import BaseModel
import pytest

from askbridge.errors import InternalError, ValidationError
from askbridge.models import (
    AskRequest,
    ImageBlock,
    TextBlock,
    ThinkingDirective,
    ToolResultBlock,
    ToolSpec,
)
from askbridge.translate import translate_request

pytestmark = pytest.mark.contract

_PLACEHOLDER = {"type": "thinking", "thinking": "", "signature": ""}


def test_single_text_block_collapses_to_plain_string() -> None:
    body = translate_request(AskRequest(model="gpt-4o", content="Hello"), "fallback")

    assert body == {
        "model": "gpt-4o",
        "messages": [{"role": "user", "content": "Hello"}],
        "stream": False,
        "max_tokens": 512,
        "temperature": 0.7,
    }


def test_top_level_keys_are_emitted_in_wire_order() -> None:
    request = AskRequest(
        model="gpt-4o",
        content="Hi",
        tools=[ToolSpec(name="x")],
        thinking=ThinkingDirective(budget_tokens=2048),
    )

    body = translate_request(request, "fallback", provider="anthropic")

    assert list(body) == [
        "model",
        "messages",
        "stream",
        "max_tokens",
        "temperature",
        "tools",
        "thinking",
    ]


def test_image_and_text_blocks_stay_a_typed_array() -> None:
    request = AskRequest(
        model="gpt-4o",
        content=[
            ImageBlock(media_type="image/png", data="aGVsbG8="),
            TextBlock(text="What is this?"),
        ],
    )

    body = translate_request(request, "fallback", provider="openai")

    assert body["messages"][0]["content"] == [
        {
            "type": "image",
            "source": {"type": "base64", "media_type": "image/png", "data": "aGVsbG8="},
        },
        {"type": "text", "text": "What is this?"},
    ]


def test_lone_image_block_is_not_collapsed() -> None:
    request = AskRequest(
        model="gpt-4o", content=ImageBlock(media_type="", data="https://x/y.png", source_type="url")
    )

    body = translate_request(request, "fallback")

    assert body["messages"][0]["content"] == [
        {"type": "image", "source": {"type": "url", "url": "https://x/y.png"}}
    ]


def test_tool_results_are_appended_after_content_and_prevent_collapse() -> None:
    request = AskRequest(
        model="gpt-4o",
        content="Here are the results",
        tool_results=[
            ToolResultBlock(tool_call_id="call_1", content="sunny"),
            {"toolCallId": "call_2", "content": [{"type": "text", "text": "42"}]},
        ],
    )

    body = translate_request(request, "fallback")

    assert body["messages"][0]["content"] == [
        {"type": "text", "text": "Here are the results"},
        {"type": "tool_result", "tool_use_id": "call_1", "content": "sunny"},
        {
            "type": "tool_result",
            "tool_use_id": "call_2",
            "content": [{"type": "text", "text": "42"}],
        },
    ]


def test_tools_map_to_function_specs_in_declaration_order() -> None:
    schema = {"type": "object", "properties": {"city": {"type": "string"}}}
    request = AskRequest(
        model="gpt-4o",
        content="Weather?",
        tools=[
            ToolSpec(name="get_weather", description="Look up weather", input_schema=schema),
            {"name": "noop", "input_schema": {"type": "object"}},
        ],
    )

    body = translate_request(request, "fallback")

    assert body["tools"] == [
        {
            "type": "function",
            "function": {
                "name": "get_weather",
                "description": "Look up weather",
                "parameters": schema,
            },
        },
        {
            "type": "function",
            "function": {"name": "noop", "parameters": {"type": "object"}},
        },
    ]


def test_pydantic_tool_schema_is_expanded_to_json_schema() -> None:
    class Lookup(BaseModel):
        city: str

    request = AskRequest(
        model="gpt-4o", content="x", tools=[ToolSpec(name="lookup", input_schema=Lookup)]
    )

    body = translate_request(request, "fallback")

    parameters = body["tools"][0]["function"]["parameters"]
    assert parameters["type"] == "object"
    assert "city" in parameters["properties"]


def test_no_tools_key_without_tools() -> None:
    body = translate_request(AskRequest(model="m", content="x"), "fallback")
    assert "tools" not in body
    assert "thinking" not in body


def test_proxy_thinking_sets_root_field_and_placeholder_block() -> None:
    request = AskRequest(
        model="gpt-4o", content="Think hard", thinking={"type": "enabled", "budget_tokens": 4096}
    )

    body = translate_request(request, "fallback", provider="proxy")

    assert body["thinking"] == {"type": "enabled", "budget_tokens": 4096}
    assert body["messages"][0]["content"] == [
        {"type": "text", "text": "Think hard"},
        _PLACEHOLDER,
    ]


@pytest.mark.parametrize(
    ("provider", "expected"),
    [
        ("anthropic", {"type": "enabled", "budget_tokens": 2000}),
        ("google", {"includeThoughts": True, "thinkingBudget": 2000}),
        ("openai", {"reasoningEffort": "high"}),
    ],
)
def test_thinking_parameter_shape_follows_provider(
    provider: Any, expected: dict[str, Any]
) -> None:
    request = AskRequest(
        model="m", content="x", thinking=ThinkingDirective(budget_tokens=2000)
    )

    body = translate_request(request, "fallback", provider=provider)

    assert body["thinking"] == expected
    assert body["messages"][0]["content"][-1] == _PLACEHOLDER


def test_thinking_placeholder_follows_tool_results() -> None:
    request = AskRequest(
        model="m",
        content="x",
        tool_results=[ToolResultBlock(tool_call_id="c", content="r")],
        thinking=ThinkingDirective(budget_tokens=1024),
    )

    content = translate_request(request, "fallback")["messages"][0]["content"]

    assert [block["type"] for block in content] == ["text", "tool_result", "thinking"]


def test_malformed_thinking_fails_before_body_is_built() -> None:
    request = AskRequest(
        model="m", content="x", thinking=ThinkingDirective(budget_tokens=512)
    )

    with pytest.raises(ValidationError, match="budget_tokens"):
        translate_request(request, "fallback")


def test_scalar_overrides_and_fallback_model() -> None:
    request = AskRequest(model="", content="x", max_output_tokens=2048, temperature=0.0)

    body = translate_request(request, "fallback-model")

    assert body["model"] == "fallback-model"
    assert body["max_tokens"] == 2048
    assert body["temperature"] == 0.0
    assert body["stream"] is False


def test_unknown_provider_is_an_internal_error() -> None:
    with pytest.raises(InternalError, match="Unsupported provider"):
        translate_request(AskRequest(model="m", content="x"), "f", provider="azure")  # type: ignore[arg-type]


def test_translation_does_not_share_state_between_calls() -> None:
    request = AskRequest(
        model="m",
        content=[TextBlock("a"), TextBlock("b")],
        tool_results=[ToolResultBlock(tool_call_id="c", content=[{"type": "text", "text": "r"}])],
        thinking=ThinkingDirective(budget_tokens=1024),
    )

    first = translate_request(request, "f")
    first["messages"][0]["content"][2]["content"][0]["text"] = "mutated"
    second = translate_request(request, "f")

    assert second["messages"][0]["content"][2]["content"][0]["text"] == "r"
    assert first != second


# =============================================================================
# Properties
# =============================================================================

_text = st.text(max_size=20)
_blocks = st.lists(
    st.one_of(
        _text.map(TextBlock),
        st.just(ImageBlock(media_type="image/png", data="AA==")),
    ),
    min_size=1,
    max_size=4,
)
_results = st.lists(
    st.builds(ToolResultBlock, tool_call_id=st.text(min_size=1, max_size=8), content=_text),
    min_size=1,
    max_size=3,
)


@given(text=_text)
@settings(max_examples=25, deadline=None, derandomize=True)
def test_property_simple_text_turn_is_a_plain_string(text: str) -> None:
    body = translate_request(AskRequest(model="m", content=[TextBlock(text)]), "f")
    assert body["messages"][0]["content"] == text


@given(blocks=_blocks, results=_results)
@settings(max_examples=25, deadline=None, derandomize=True)
def test_property_tool_results_keep_array_and_order(
    blocks: list[Any], results: list[ToolResultBlock]
) -> None:
    request = AskRequest(model="m", content=blocks, tool_results=results)

    content = translate_request(request, "f")["messages"][0]["content"]

    assert isinstance(content, list)
    assert len(content) == len(blocks) + len(results)
    assert content[: len(blocks)] == [b.to_wire() for b in blocks]
    assert [c["tool_use_id"] for c in content[len(blocks) :]] == [
        r.tool_call_id for r in results
    ]


@pytest.mark.parametrize("value", [0, -5])
def test_non_positive_max_output_tokens_falls_back_to_default(value: int) -> None:
    request = AskRequest(model="m", content="x", max_output_tokens=value)

    assert translate_request(request, "f")["max_tokens"] == 512
