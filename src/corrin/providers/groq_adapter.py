from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional
import asyncio

from openai import AsyncOpenAI

from corrin.core.cancellation import run_cancellable
from corrin.core.errors import (
    BackendRejectedError,
    ProviderError,
    ProviderNotConfiguredError,
    ProviderTransportError,
)
from .base import BaseProvider
from .registry import ProviderRegistry
from .types import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    ModelDescriptor,
    ProviderKind,
    ProviderStatus,
)

logger = logging.getLogger(__name__)

GROQ_BASE_URL = "https://api.groq.com/openai/v1"
FALLBACK_PROBE_MODEL = "llama3-8b-8192"


def _classify_sdk_exception(exc: Exception, provider_name: str) -> ProviderError:
    """
    Convert SDK exceptions into neutral provider errors.
    Avoid hard dependency on specific SDK exception classes by inspecting attributes.
    """
    status = getattr(exc, "status_code", None) or getattr(exc, "http_status", None)
    if status is not None:
        return BackendRejectedError(int(status), str(exc))
    return ProviderTransportError(f"Failed to communicate with {provider_name}: {exc}")


def _as_payload(resp: Any) -> Dict[str, Any]:
    # SDK responses are pydantic models; extra fields such as `reasoning` survive model_dump.
    if isinstance(resp, dict):
        return resp
    return resp.model_dump()


@ProviderRegistry.register(ProviderKind.GROQ)
class GroqProvider(BaseProvider):
    """
    SDK-backed variant:
    - one AsyncOpenAI client per call against Groq's OpenAI-compatible API
    - SDK retries disabled; every call is a single attempt
    - always requests a non-streaming completion
    """

    tools_default = True

    def _client(self) -> AsyncOpenAI:
        return AsyncOpenAI(api_key=self._credential, base_url=GROQ_BASE_URL, max_retries=0)

    @staticmethod
    def _build_args(request: ChatCompletionRequest) -> Dict[str, Any]:
        args: Dict[str, Any] = {
            "model": request.model,
            "messages": request.wire_messages(),
            "stream": False,
        }
        optional = {
            "tools": request.tools,
            "tool_choice": request.tool_choice,
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
        }
        args.update({k: v for k, v in optional.items() if v is not None})
        return args

    async def create_chat_completion(
        self,
        request: ChatCompletionRequest,
        cancel_signal: Optional[asyncio.Event] = None,
    ) -> ChatCompletionResponse:
        if not self._credential:
            raise ProviderNotConfiguredError(f"{self.name} client not initialized. Please set API key.")

        async def _call() -> Any:
            async with self._client() as client:
                return await client.chat.completions.create(**self._build_args(request))

        logger.debug("%s: chat completion model=%s messages=%d", self.provider_id, request.model, len(request.messages))
        try:
            resp = await run_cancellable(_call(), cancel_signal)
        except ProviderError:
            raise
        except Exception as e:
            logger.warning("%s: chat completion failed: %s", self.provider_id, e)
            raise _classify_sdk_exception(e, self.name) from e
        return ChatCompletionResponse.from_payload(_as_payload(resp))

    async def check_status(self) -> ProviderStatus:
        if not self._credential:
            return ProviderStatus(connected=False, error="No API key configured")

        models = self.config.models
        probe_model = models[0].id if models else FALLBACK_PROBE_MODEL
        try:
            async with self._client() as client:
                await client.chat.completions.create(
                    model=probe_model,
                    messages=[{"role": "user", "content": "test"}],
                    max_tokens=1,
                )
            return ProviderStatus(connected=True)
        except Exception as e:
            return ProviderStatus(connected=False, error=str(e) or "Unknown error")

    @staticmethod
    def default_models() -> List[ModelDescriptor]:
        return [
            ModelDescriptor("moonshotai/kimi-k2-instruct", "Kimi K2 Instruct", "Most capable model"),
            ModelDescriptor("openai/gpt-oss-120b", "GPT OSS 120B", "Fast, capable, and cheap model"),
            ModelDescriptor("openai/gpt-oss-20b", "GPT OSS 20B", "Fastest and cheapest model"),
            ModelDescriptor("qwen/qwen3-32b", "Qwen 3 32B"),
            ModelDescriptor("meta-llama/llama-4-maverick-17b-128e-instruct", "Llama 4 Maverick"),
            ModelDescriptor("meta-llama/llama-4-scout-17b-16e-instruct", "Llama 4 Scout"),
        ]
