from __future__ import annotations
import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Type

from corrin.core.errors import UnknownBackendKindError
from corrin.core.ports import Provider
from .registry import ProviderRegistry
from .types import ModelDescriptor, ProviderConfig, ProviderKind, ProviderStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupedModel:
    provider_id: str
    provider_name: str
    model: ModelDescriptor


@dataclass(frozen=True)
class ProviderModels:
    provider: Provider
    models: List[ModelDescriptor]


class ProviderManager:
    """
    Owns the configured providers and routes model ids to them.

    Providers are kept in registration order; that order is the tie-break when
    two providers expose the same model id (first registered wins).
    """

    def __init__(self, kinds: Optional[Mapping[str, Type]] = None):
        self._kinds: Dict[str, Type] = dict(kinds) if kinds is not None else ProviderRegistry.kinds()
        self._providers: "OrderedDict[str, Provider]" = OrderedDict()
        self._configs: Dict[str, ProviderConfig] = {}

    def register_provider(self, provider_id: str, config: ProviderConfig) -> Provider:
        # The old entry is dropped even when the new kind turns out to be unknown.
        self.remove_provider(provider_id)

        key = config.kind.value if isinstance(config.kind, ProviderKind) else str(config.kind).lower()
        klass = self._kinds.get(key)
        if klass is None:
            raise UnknownBackendKindError(key)

        provider = klass(provider_id, config)
        self._providers[provider_id] = provider
        self._configs[provider_id] = config
        logger.debug("Registered provider %s (%s, %d models)", provider_id, key, len(config.models))
        return provider

    def get_provider(self, provider_id: str) -> Optional[Provider]:
        return self._providers.get(provider_id)

    def get_config(self, provider_id: str) -> Optional[ProviderConfig]:
        return self._configs.get(provider_id)

    def get_all_providers(self) -> List[Provider]:
        return list(self._providers.values())

    def get_provider_ids(self) -> List[str]:
        return list(self._providers.keys())

    def remove_provider(self, provider_id: str) -> bool:
        existed = provider_id in self._providers
        self._providers.pop(provider_id, None)
        self._configs.pop(provider_id, None)
        return existed

    def clear(self) -> None:
        self._providers.clear()
        self._configs.clear()

    def find_provider_for_model(self, model_id: str) -> Optional[Provider]:
        for provider in self._providers.values():
            if provider.has_model(model_id):
                return provider
        return None

    def list_all_models(self) -> List[GroupedModel]:
        return [
            GroupedModel(provider_id=pid, provider_name=p.name, model=m)
            for pid, p in self._providers.items()
            for m in p.list_models()
        ]

    def group_models_by_provider(self) -> "OrderedDict[str, ProviderModels]":
        return OrderedDict(
            (pid, ProviderModels(provider=p, models=p.list_models()))
            for pid, p in self._providers.items()
        )

    def set_credential_for_provider(self, provider_id: str, value: Optional[str]) -> None:
        # Unknown ids are ignored so credentials can be resolved before every provider is registered.
        provider = self._providers.get(provider_id)
        if provider is not None:
            provider.set_credential(value)

    async def check_all_provider_status(self) -> "OrderedDict[str, ProviderStatus]":
        async def _probe(provider: Provider) -> ProviderStatus:
            try:
                return await provider.check_status()
            except Exception as e:
                logger.warning("Status probe for %s raised: %s", provider.provider_id, e)
                return ProviderStatus(connected=False, error=str(e) or "Unknown error")

        items = list(self._providers.items())
        results = await asyncio.gather(*(_probe(p) for _, p in items))
        return OrderedDict((pid, status) for (pid, _), status in zip(items, results))

    @staticmethod
    def default_configs() -> Dict[str, ProviderConfig]:
        from .groq_adapter import GroqProvider

        return {
            "groq": ProviderConfig(
                name="Groq",
                kind=ProviderKind.GROQ,
                models=GroqProvider.default_models(),
            ),
        }
