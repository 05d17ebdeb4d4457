from __future__ import annotations
import asyncio
import logging
from typing import Optional

from corrin.providers.manager import ProviderManager
from corrin.providers.types import AssistantMessage, ChatCompletionRequest, ChatMessage, Usage
from corrin.resilience.retry import ResiliencePolicy, call_with_retries
from corrin.storage.transcript import Transcript
from .errors import ProviderError, ProviderNotConfiguredError
from .ports import Provider

logger = logging.getLogger(__name__)


class ChatSession:
    """
    One conversation against whichever provider serves the current model.
    A turn is only recorded once the backend answers; failed or cancelled
    turns leave the history untouched.
    """

    def __init__(
        self,
        manager: ProviderManager,
        transcript: Transcript,
        model: str,
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        policy: Optional[ResiliencePolicy] = None,
    ):
        self.manager = manager
        self.transcript = transcript
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.policy = policy or ResiliencePolicy(max_retries=0)
        self.last_usage: Optional[Usage] = None

    def provider(self) -> Provider:
        provider = self.manager.find_provider_for_model(self.model)
        if provider is None:
            raise ProviderNotConfiguredError(f"No configured provider serves model '{self.model}'")
        return provider

    def switch_model(self, model_id: str) -> Provider:
        provider = self.manager.find_provider_for_model(model_id)
        if provider is None:
            raise ValueError(f"Unknown model '{model_id}'")
        self.model = model_id
        logger.info("Switched model to %s (%s)", model_id, provider.provider_id)
        return provider

    def _max_tokens(self, provider: Provider) -> Optional[int]:
        if self.max_tokens is not None:
            return self.max_tokens
        descriptor = provider.get_model(self.model)
        return descriptor.default_max_tokens if descriptor else None

    async def run_turn(self, user_text: str, cancel_signal: Optional[asyncio.Event] = None) -> AssistantMessage:
        provider = self.provider()
        user_msg = ChatMessage("user", user_text)
        request = ChatCompletionRequest(
            model=self.model,
            messages=self.transcript.messages + [user_msg],
            temperature=self.temperature,
            max_tokens=self._max_tokens(provider),
        )

        logger.info("Turn -> %s/%s (%d messages)", provider.provider_id, self.model, len(request.messages))
        response = await call_with_retries(
            lambda: provider.create_chat_completion(request, cancel_signal),
            self.policy,
        )
        reply = response.first_message
        if reply is None:
            raise ProviderError(f"{provider.name} returned no choices")

        self.last_usage = response.usage
        self.transcript.append(user_msg)
        self.transcript.append(
            ChatMessage("assistant", reply.content or "", tool_calls=reply.tool_calls),
            reasoning=reply.reasoning,
            model=self.model,
        )
        if response.usage:
            logger.debug("Usage: %s", response.usage)
        return reply

    def reset(self) -> None:
        self.transcript.reset()
        self.last_usage = None
