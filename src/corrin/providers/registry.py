from __future__ import annotations
from typing import Callable, Dict, Type, Union
from importlib import import_module

from corrin.core.errors import UnknownBackendKindError
from .types import ProviderKind


class ProviderRegistry:
    """Kind -> provider class table, filled by the @register decorator."""

    _classes: Dict[str, Type] = {}

    @staticmethod
    def _key(kind: Union[str, ProviderKind]) -> str:
        return (kind.value if isinstance(kind, ProviderKind) else str(kind)).lower()

    @classmethod
    def register(cls, kind: Union[str, ProviderKind]) -> Callable[[Type], Type]:
        key = cls._key(kind)
        def deco(klass: Type) -> Type:
            cls._classes[key] = klass
            return klass
        return deco

    @classmethod
    def get(cls, kind: Union[str, ProviderKind]) -> Type:
        key = cls._key(kind)
        if key not in cls._classes:
            raise UnknownBackendKindError(key)
        return cls._classes[key]

    @classmethod
    def kinds(cls) -> Dict[str, Type]:
        """Snapshot of the table with the built-in variants imported."""
        cls.ensure_imports()
        return dict(cls._classes)

    @classmethod
    def ensure_imports(cls) -> None:
        """
        Import built-in variants so their @register decorators run.
        """
        import_module("corrin.providers.groq_adapter")
        import_module("corrin.providers.openai_compatible")
