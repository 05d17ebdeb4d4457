# tests/unit/test_ui_banner.py

from __future__ import annotations
import io
import sys
from pathlib import Path
import pytest
from rich.console import Console

# Make "src" importable
sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

import corrin.ui.banner as banner  # import the module to monkeypatch


class FakePanel:
    def __init__(self, content, **kw):
        self.content = content
        self.kw = kw


class FakeAlign:
    @staticmethod
    def center(x): return f"<CENTER>{x}"


class FakeConsole:
    def __init__(self, width):
        self.width = width
        self.printed = []

    def print(self, obj): self.printed.append(obj)


@pytest.fixture
def fakes(monkeypatch):
    chosen = {}

    def fake_figlet(title, font=None):
        chosen["font"] = font
        return f"ART:{title}  \n"

    monkeypatch.setattr(banner, "figlet_format", fake_figlet, raising=True)
    monkeypatch.setattr(banner, "Panel", FakePanel, raising=True)
    monkeypatch.setattr(banner, "Align", FakeAlign, raising=True)
    return chosen


@pytest.mark.parametrize("width,font", [(35, "small"), (50, "small"), (51, "slant"), (400, "slant")])
def test_font_follows_console_width(fakes, width, font):
    banner.render_banner(FakeConsole(width))
    assert fakes["font"] == font


def test_panel_carries_version_and_subtitle(fakes):
    console = FakeConsole(80)
    banner.render_banner(console, version="v1.0.2", subtitle="local + groq")
    panel = console.printed[0]
    assert panel.content == "<CENTER>ART:Corrin"   # trailing spaces stripped
    assert panel.kw["title"] == "v1.0.2"
    assert panel.kw["subtitle"] == "local + groq"
    assert panel.kw["border_style"] == banner.BORDER_STYLE


def test_real_render_smoke():
    console = Console(file=io.StringIO(), width=80)
    banner.render_banner(console, version="v9")
    assert "v9" in console.file.getvalue()
