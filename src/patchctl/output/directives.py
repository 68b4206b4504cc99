"""Render override groups as Cargo ``[patch]`` sections.

Output shape::

    [patch."https://example.org/repo"]
    core = { path = "/work/source/core" }

Origins and paths are written as TOML basic strings; JSON string escaping
is a subset of TOML's, so :func:`json.dumps` does the quoting.
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterable
from pathlib import Path

from patchctl.domain.overrides import OverrideGroup

_BARE_KEY_CHARS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789_-")


def toml_string(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def toml_key(name: str) -> str:
    """Bare key when TOML allows it, quoted otherwise."""
    if name and set(name) <= _BARE_KEY_CHARS:
        return name
    return toml_string(name)


def render_path(path: Path, relative_to: Path | None = None) -> str:
    if relative_to is None:
        return str(path)
    return os.path.relpath(path, relative_to)


def render_group(group: OverrideGroup, *, relative_to: Path | None = None) -> str:
    """One ``[patch."<origin>"]`` section."""
    lines = [f"[patch.{toml_string(group.origin)}]"]
    for entry in group.entries:
        path = toml_string(render_path(entry.path, relative_to))
        lines.append(f"{toml_key(entry.name)} = {{ path = {path} }}")
    return "\n".join(lines)


def render_directives(
    groups: Iterable[OverrideGroup],
    *,
    relative_to: Path | None = None,
) -> str:
    """All sections, separated by blank lines. Empty string for no groups."""
    return "\n\n".join(render_group(g, relative_to=relative_to) for g in groups)
