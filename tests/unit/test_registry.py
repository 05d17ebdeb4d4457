# tests/unit/test_registry.py

from __future__ import annotations
import sys
from pathlib import Path
import pytest

# Make "src" importable
sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from corrin.core.errors import UnknownBackendKindError
from corrin.providers.registry import ProviderRegistry
from corrin.providers.types import ProviderKind


def test_builtin_kinds_are_registered():
    kinds = ProviderRegistry.kinds()
    from corrin.providers.groq_adapter import GroqProvider
    from corrin.providers.openai_compatible import OpenAICompatibleProvider

    assert kinds["groq"] is GroqProvider
    assert kinds["openai"] is OpenAICompatibleProvider
    assert ProviderRegistry.get(ProviderKind.OPENAI) is OpenAICompatibleProvider


def test_registry_register_and_get_case_insensitive():
    @ProviderRegistry.register("Dummy")
    class DummyProvider:
        def __init__(self, provider_id, config):
            self.provider_id = provider_id

    assert ProviderRegistry.get("dummy") is DummyProvider
    assert ProviderRegistry.get("DUMMY") is DummyProvider


def test_registry_unknown_raises():
    with pytest.raises(UnknownBackendKindError) as exc:
        ProviderRegistry.get("does-not-exist")
    assert exc.value.kind == "does-not-exist"
