# tests/unit/test_bootstrap.py

from __future__ import annotations
import sys
from pathlib import Path
from textwrap import dedent
import pytest

# Make "src" importable
sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from corrin.bootstrap import DEFAULT_SYSTEM_PROMPT, build_app  # type: ignore
from corrin.logging_setup import configure_logging
from corrin.providers.openai_compatible import OpenAICompatibleProvider
from corrin.providers.types import ProviderState


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch):
    monkeypatch.delenv("LOCAL_API_KEY", raising=False)
    yield
    configure_logging(None, enabled=False)


def write_config(tmp_path: Path, extra: str = "", backend: str = "file") -> Path:
    p = tmp_path / "corrin.yaml"
    p.write_text(dedent(f"""
        model: {{ default: llama3 }}
        runtime: {{ temperature: 0.4, retries: 1 }}
        storage: {{ backend: {backend}, root: .corrin }}
        secrets: {{ method: env }}
        providers:
          local:
            name: Local
            type: openai
            base_url: http://localhost:11434/v1
            models:
              - {{ id: llama3, name: Llama 3 }}
              - {{ id: qwen, name: Qwen }}
    """).lstrip() + extra, encoding="utf-8")
    return p


def test_build_app_wires_everything(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("LOCAL_API_KEY", "sk-local")
    ctx = build_app(write_config(tmp_path), project_root=tmp_path)

    manager = ctx["manager"]
    provider = manager.get_provider("local")
    assert isinstance(provider, OpenAICompatibleProvider)
    assert provider.state is ProviderState.CONFIGURED

    session = ctx["session"]
    assert session.model == "llama3"
    assert session.temperature == 0.4
    assert session.policy.max_retries == 1

    paths = ctx["paths"]
    assert paths.root == tmp_path / ".corrin"
    assert paths.sessions.is_dir()
    transcript = ctx["transcript"]
    assert transcript.path.parent == paths.sessions
    assert transcript.messages[0].content == DEFAULT_SYSTEM_PROMPT
    assert ctx["settings"] is not None
    assert ctx["warnings"] == []


def test_unknown_kind_is_skipped_with_warning(tmp_path: Path):
    cfg = write_config(tmp_path, extra="  mystery:\n    name: Mystery\n    type: anthropic\n")
    ctx = build_app(cfg, project_root=tmp_path)
    assert ctx["manager"].get_provider_ids() == ["local"]
    assert any("mystery" in w for w in ctx["warnings"])
    assert ctx["manager"].get_provider("local").state is ProviderState.UNAUTHENTICATED


def test_saved_model_wins_and_unknown_model_falls_back(tmp_path: Path):
    cfg = write_config(tmp_path)
    ctx = build_app(cfg, project_root=tmp_path)
    ctx["settings"].set_default_model("qwen")
    assert build_app(cfg, project_root=tmp_path)["session"].model == "qwen"

    ctx["settings"].set_default_model("gone")
    again = build_app(cfg, project_root=tmp_path)
    assert again["session"].model == "llama3"
    assert any("gone" in w for w in again["warnings"])


def test_backend_none_keeps_everything_in_memory(tmp_path: Path):
    ctx = build_app(write_config(tmp_path, backend="none"), project_root=tmp_path, system_prompt="custom")
    assert not (tmp_path / ".corrin").exists()
    assert ctx["settings"] is None
    assert ctx["transcript"].path is None
    assert ctx["transcript"].messages[0].content == "custom"
