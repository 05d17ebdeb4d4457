from __future__ import annotations
from typing import List, Optional

from .types import ModelDescriptor, ProviderConfig, ProviderState


class BaseProvider:
    """
    Model bookkeeping and credential state shared by every backend variant.
    Subclasses supply create_chat_completion, check_status and a default tool flag.
    """

    tools_default: bool = False

    def __init__(self, provider_id: str, config: ProviderConfig):
        self.provider_id = provider_id
        self.config = config
        self._credential: Optional[str] = None
        if config.api_key:
            self.set_credential(config.api_key)

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def credential(self) -> Optional[str]:
        return self._credential

    @property
    def state(self) -> ProviderState:
        return ProviderState.CONFIGURED if self._credential else ProviderState.UNAUTHENTICATED

    def set_credential(self, value: Optional[str]) -> None:
        self._credential = value or None

    def list_models(self) -> List[ModelDescriptor]:
        return list(self.config.models)

    def has_model(self, model_id: str) -> bool:
        return any(m.id == model_id for m in self.config.models)

    def get_model(self, model_id: str) -> Optional[ModelDescriptor]:
        return next((m for m in self.config.models if m.id == model_id), None)

    def supports_tools(self) -> bool:
        if self.config.supports_tools is not None:
            return bool(self.config.supports_tools)
        return self.tools_default

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.provider_id!r}, state={self.state.value})"
