from __future__ import annotations
from typing import List, Optional, Tuple

from pyfiglet import figlet_format
from rich.align import Align
from rich.console import Console
from rich.panel import Panel

# (max console width, figlet font); first match wins
FONT_RULES: List[Tuple[int, str]] = [(50, "small"), (10_000, "slant")]
BORDER_STYLE = "#FF4500"


def _pick_font(width: int) -> str:
    for max_width, name in FONT_RULES:
        if width <= max_width:
            return name
    return FONT_RULES[-1][1]


def render_banner(console: Console, title: str = "Corrin", version: Optional[str] = None,
                  subtitle: Optional[str] = None) -> None:
    art = figlet_format(title, font=_pick_font(console.width))
    art = "\n".join(line.rstrip() for line in art.splitlines())
    console.print(Panel(
        Align.center(art),
        title=version,
        subtitle=subtitle,
        border_style=BORDER_STYLE,
        expand=True,
    ))
