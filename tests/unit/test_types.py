# tests/unit/test_types.py

from __future__ import annotations
import sys
from pathlib import Path
import pytest

# Make "src" importable
sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from corrin.providers.types import (
    ChatCompletionResponse,
    ChatMessage,
    FinishReason,
    ModelDescriptor,
    ProviderConfig,
    ProviderKind,
    normalize_base_url,
)


def test_base_url_normalisation_is_idempotent():
    once = normalize_base_url("http://x/v1")
    assert once == "http://x/v1/"
    assert normalize_base_url(once) == once
    assert normalize_base_url(None) == "http://localhost:11434/v1/"


def test_provider_config_from_dict_keeps_model_order():
    cfg = ProviderConfig.from_dict({
        "name": "Local",
        "type": "OpenAI",
        "base_url": "http://x/v1",
        "models": [
            {"id": "b", "name": "B", "context_window": "4096"},
            {"id": "a"},
        ],
    })
    assert cfg.kind is ProviderKind.OPENAI
    assert [m.id for m in cfg.models] == ["b", "a"]
    assert cfg.models[0].context_window == 4096
    assert cfg.models[1].name == "a"  # name falls back to id
    assert cfg.api_key is None


def test_provider_config_rejects_duplicate_model_ids():
    with pytest.raises(ValueError):
        ProviderConfig.from_dict({"name": "x", "type": "groq", "models": [{"id": "m"}, {"id": "m"}]})


def test_unknown_kind_is_kept_as_string():
    cfg = ProviderConfig.from_dict({"name": "x", "type": "anthropic"})
    assert cfg.kind == "anthropic"


def test_chat_message_omits_empty_tool_fields():
    assert ChatMessage("user", "hi").to_dict() == {"role": "user", "content": "hi"}
    tool = ChatMessage("tool", "42", tool_call_id="call_1")
    assert tool.to_dict() == {"role": "tool", "content": "42", "tool_call_id": "call_1"}


def test_from_payload_preserves_tool_calls():
    tool_calls = [{
        "id": "call_1",
        "type": "function",
        "function": {"name": "read_file", "arguments": "{\"path\": \"a.txt\"}"},
    }]
    resp = ChatCompletionResponse.from_payload({
        "choices": [{
            "message": {"role": "assistant", "content": None, "tool_calls": tool_calls},
            "finish_reason": "tool_calls",
        }],
        "usage": {"prompt_tokens": 3, "completion_tokens": 4, "total_tokens": 7},
    })
    choice = resp.choices[0]
    assert choice.finish_reason is FinishReason.TOOL_CALLS
    assert choice.message.content is None
    assert choice.message.tool_calls == tool_calls
    assert resp.usage.total_tokens == 7


def test_from_payload_reasoning_and_missing_usage():
    resp = ChatCompletionResponse.from_payload({
        "choices": [{"message": {"content": "hi", "reasoning": "thought"}, "finish_reason": "length"}],
    })
    assert resp.first_message.reasoning == "thought"
    assert resp.choices[0].finish_reason is FinishReason.LENGTH
    assert resp.usage is None


@pytest.mark.parametrize("raw,expected", [
    ("stop", FinishReason.STOP),
    ("content_filter", FinishReason.CONTENT_FILTER),
    ("function_call", FinishReason.TOOL_CALLS),
    (None, FinishReason.STOP),
    ("eos", FinishReason.STOP),
])
def test_finish_reason_parse(raw, expected):
    assert FinishReason.parse(raw) is expected


def test_model_descriptor_is_frozen():
    m = ModelDescriptor("a", "A")
    with pytest.raises(Exception):
        m.id = "b"  # type: ignore[misc]
