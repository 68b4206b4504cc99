"""Adapt a ServiceResult to the requested output mode.

* ``--json``: the whole ServiceResult, machine-readable.
* default, success: the ``[patch]`` directives and nothing else.
* default, failure: a one-line Rich-rendered error.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel

from patchctl.domain.overrides import OverrideGroup
from patchctl.output.directives import render_directives
from patchctl.output.renderers import render_error

if TYPE_CHECKING:
    from patchctl.services.result import ServiceResult


class OutputSettings(BaseModel):
    """Output-mode flags."""

    model_config = {"frozen": True}

    json_output: bool = False
    verbose: bool = False
    relative_paths: bool = False


def groups_from_result(result: ServiceResult) -> list[OverrideGroup]:
    return [OverrideGroup.model_validate(g) for g in result.data.get("groups", [])]


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if not result.ok:
        return render_error(result, verbose=settings.verbose)

    relative_to: Path | None = None
    destination = result.data.get("destination")
    if settings.relative_paths and destination:
        relative_to = Path(destination).absolute()
    return render_directives(groups_from_result(result), relative_to=relative_to)
