from __future__ import annotations
import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from corrin.core.cancellation import run_cancellable
from corrin.core.errors import BackendRejectedError, ProviderTransportError
from .base import BaseProvider
from .registry import ProviderRegistry
from .types import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    ProviderConfig,
    ProviderKind,
    ProviderStatus,
    normalize_base_url,
)

logger = logging.getLogger(__name__)

STATUS_TIMEOUT = 5.0
DEFAULT_TIMEOUT = 60.0


@ProviderRegistry.register(ProviderKind.OPENAI)
class OpenAICompatibleProvider(BaseProvider):
    """
    Generic OpenAI-compatible REST backend (Ollama, LM Studio, vLLM, llama.cpp server...).
    Tool fields are sent only when the provider is configured to support tools.
    """

    def __init__(
        self,
        provider_id: str,
        config: ProviderConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(provider_id, config)
        self.base_url = normalize_base_url(config.base_url)
        self.timeout = config.timeout if config.timeout is not None else DEFAULT_TIMEOUT
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._credential:
            headers["Authorization"] = f"Bearer {self._credential}"
        return headers

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    def build_body(self, request: ChatCompletionRequest) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "model": request.model,
            "messages": request.wire_messages(),
            "stream": bool(request.stream),
        }
        if request.temperature is not None:
            body["temperature"] = request.temperature
        if request.max_tokens is not None:
            body["max_tokens"] = request.max_tokens
        if request.tools and self.supports_tools():
            body["tools"] = request.tools
            if request.tool_choice is not None:
                body["tool_choice"] = request.tool_choice
        return body

    async def _post_completion(self, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}chat/completions"
        async with self._client(self.timeout) as client:
            resp = await client.post(url, json=body, headers=self._headers())
        if not resp.is_success:
            logger.warning("%s: POST %s -> HTTP %s", self.provider_id, url, resp.status_code)
            raise BackendRejectedError(resp.status_code, resp.text)
        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderTransportError(f"Invalid JSON from {self.name}: {e}") from e
        if not isinstance(data, dict):
            raise ProviderTransportError(
                f"Unexpected response from {self.name}: expected a JSON object, got {type(data).__name__}"
            )
        return data

    async def create_chat_completion(
        self,
        request: ChatCompletionRequest,
        cancel_signal: Optional[asyncio.Event] = None,
    ) -> ChatCompletionResponse:
        body = self.build_body(request)
        logger.debug("%s: POST %schat/completions model=%s", self.provider_id, self.base_url, request.model)
        try:
            data = await run_cancellable(self._post_completion(body), cancel_signal)
        except httpx.HTTPError as e:
            raise ProviderTransportError(f"Failed to communicate with {self.name}: {e}") from e
        return ChatCompletionResponse.from_payload(data)

    async def check_status(self) -> ProviderStatus:
        try:
            async with self._client(STATUS_TIMEOUT) as client:
                resp = await client.get(f"{self.base_url}models", headers=self._headers())
            if resp.is_success:
                return ProviderStatus(connected=True)
            return ProviderStatus(connected=False, error=f"HTTP {resp.status_code}: {resp.text}")
        except Exception as e:
            return ProviderStatus(connected=False, error=str(e) or type(e).__name__)
