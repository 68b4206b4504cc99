"""Rich Console factory and theme for patchctl diagnostics.

Consoles render into a StringIO buffer so renderers return plain strings;
in non-TTY environments (tests, pipes) Rich emits no color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

PATCH_THEME = Theme(
    {
        "patch.ok": "bold green",
        "patch.error": "bold red",
        "patch.warning": "bold yellow",
        "patch.op": "bold cyan",
        "patch.key": "dim",
        "patch.origin": "bold blue",
        "patch.name": "bold",
        "patch.path": "dim",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=PATCH_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
