from __future__ import annotations
import asyncio
from typing import List, Optional, Protocol

from corrin.providers.types import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    ModelDescriptor,
    ProviderConfig,
    ProviderState,
    ProviderStatus,
)


class Provider(Protocol):
    """
    Interface the core uses to talk to any chat-completion backend.
    """

    provider_id: str
    config: ProviderConfig

    @property
    def name(self) -> str: ...

    @property
    def state(self) -> ProviderState: ...

    def set_credential(self, value: Optional[str]) -> None:
        """Replace the stored credential. No I/O; applies to the next call."""
        ...

    def list_models(self) -> List[ModelDescriptor]: ...

    def has_model(self, model_id: str) -> bool: ...

    def get_model(self, model_id: str) -> Optional[ModelDescriptor]: ...

    async def create_chat_completion(
        self,
        request: ChatCompletionRequest,
        cancel_signal: Optional[asyncio.Event] = None,
    ) -> ChatCompletionResponse:
        """
        One request/response call. Raises a ProviderError subclass on failure,
        ProviderCancelledError if cancel_signal is set before the call settles.
        """
        ...

    async def check_status(self) -> ProviderStatus:
        """Cheap connectivity probe. Never raises."""
        ...

    def supports_tools(self) -> bool: ...
