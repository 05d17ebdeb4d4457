from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Literal, Mapping, Optional, Union

Role = Literal["system", "user", "assistant", "tool"]
ToolChoice = Union[str, Dict[str, Any]]

DEFAULT_BASE_URL = "http://localhost:11434/v1/"


class ProviderKind(str, Enum):
    GROQ = "groq"        # vendor SDK-backed
    OPENAI = "openai"    # generic OpenAI-compatible HTTP endpoint


class ProviderState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    CONFIGURED = "configured"


class FinishReason(str, Enum):
    STOP = "stop"
    TOOL_CALLS = "tool_calls"
    LENGTH = "length"
    CONTENT_FILTER = "content_filter"

    @classmethod
    def parse(cls, raw: Any) -> "FinishReason":
        # Legacy "function_call" is the pre-tools spelling; anything else unknown (or null) is a stop.
        if raw == "function_call":
            return cls.TOOL_CALLS
        try:
            return cls(raw)
        except ValueError:
            return cls.STOP


def normalize_base_url(base_url: Optional[str]) -> str:
    url = (base_url or DEFAULT_BASE_URL).strip()
    return url if url.endswith("/") else url + "/"


@dataclass(frozen=True)
class ModelDescriptor:
    id: str
    name: str
    description: Optional[str] = None
    context_window: Optional[int] = None
    default_max_tokens: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ModelDescriptor":
        if "id" not in data:
            raise ValueError(f"Model entry is missing 'id': {dict(data)}")
        mid = str(data["id"])
        ctx = data.get("context_window")
        mx = data.get("default_max_tokens")
        return cls(
            id=mid,
            name=str(data.get("name") or mid),
            description=data.get("description"),
            context_window=int(ctx) if ctx is not None else None,
            default_max_tokens=int(mx) if mx is not None else None,
        )


@dataclass
class ProviderConfig:
    """
    One configured backend.
    - kind selects the variant ('groq' SDK-backed, 'openai' HTTP-compatible)
    - base_url only matters for the HTTP-compatible variant
    - supports_tools overrides the variant's default tool capability when set
    """
    name: str
    kind: ProviderKind
    models: List[ModelDescriptor] = field(default_factory=list)
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    supports_tools: Optional[bool] = None
    timeout: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProviderConfig":
        raw_kind = data.get("type", data.get("kind"))
        if raw_kind is None:
            raise ValueError(f"Provider entry is missing 'type': {data.get('name')!r}")
        try:
            kind: Any = ProviderKind(str(raw_kind).lower())
        except ValueError:
            # Left as a plain string; the manager reports it as an unknown backend kind.
            kind = str(raw_kind).lower()

        models = [ModelDescriptor.from_dict(m) for m in (data.get("models") or [])]
        seen = set()
        for m in models:
            if m.id in seen:
                raise ValueError(f"Duplicate model id '{m.id}' in provider {data.get('name')!r}")
            seen.add(m.id)

        timeout = data.get("timeout")
        return cls(
            name=str(data.get("name") or raw_kind),
            kind=kind,
            models=models,
            base_url=data.get("base_url"),
            api_key=data.get("api_key") or None,
            supports_tools=data.get("supports_tools"),
            timeout=float(timeout) if timeout is not None else None,
        )


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str
    tool_calls: Optional[List[Dict[str, Any]]] = None
    tool_call_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            out["tool_calls"] = self.tool_calls
        if self.tool_call_id:
            out["tool_call_id"] = self.tool_call_id
        return out


@dataclass
class ChatCompletionRequest:
    model: str
    messages: List[ChatMessage]
    tools: Optional[List[Dict[str, Any]]] = None
    tool_choice: Optional[ToolChoice] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    stream: Optional[bool] = None

    def wire_messages(self) -> List[Dict[str, Any]]:
        return [m.to_dict() for m in self.messages]


@dataclass
class AssistantMessage:
    content: Optional[str]
    tool_calls: Optional[List[Dict[str, Any]]] = None
    reasoning: Optional[str] = None
    role: Literal["assistant"] = "assistant"


@dataclass
class Choice:
    message: AssistantMessage
    finish_reason: FinishReason


@dataclass
class Usage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass
class ChatCompletionResponse:
    choices: List[Choice]
    usage: Optional[Usage] = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ChatCompletionResponse":
        """Build the canonical response from an OpenAI-style completion payload."""
        choices: List[Choice] = []
        for raw in data.get("choices") or []:
            msg = raw.get("message") or {}
            choices.append(Choice(
                message=AssistantMessage(
                    content=msg.get("content"),
                    tool_calls=msg.get("tool_calls"),
                    reasoning=msg.get("reasoning"),
                ),
                finish_reason=FinishReason.parse(raw.get("finish_reason")),
            ))

        usage = None
        u = data.get("usage")
        if u:
            usage = Usage(
                prompt_tokens=int(u.get("prompt_tokens") or 0),
                completion_tokens=int(u.get("completion_tokens") or 0),
                total_tokens=int(u.get("total_tokens") or 0),
            )
        return cls(choices=choices, usage=usage)

    @property
    def first_message(self) -> Optional[AssistantMessage]:
        return self.choices[0].message if self.choices else None


@dataclass(frozen=True)
class ProviderStatus:
    connected: bool
    error: Optional[str] = None
