"""Override resolution: which destination packages to patch, and where to.

Cross-references the source workspace's members against the destination's
git-sourced packages, groups them per origin, keeps only the names the
destination actually declares as dependencies, and maps each name to the
member's manifest directory in the source workspace.

INVARIANT: Resolution is all-or-nothing. Any error aborts before a
single group is returned.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from patchctl.domain.errors import ConflictingOverrideError, SourceMemberNotFoundError
from patchctl.domain.graph import DependencyGraph
from patchctl.domain.locators import is_git_locator, normalize_locator

GroupBy = Literal["canonical", "raw"]


class OverrideEntry(BaseModel):
    """One ``name = { path = ... }`` line."""

    model_config = {"frozen": True}

    name: str
    path: Path


class OverrideGroup(BaseModel):
    """All overrides for one canonical origin."""

    model_config = {"frozen": True}

    origin: str
    raw_origins: tuple[str, ...] = ()
    entries: tuple[OverrideEntry, ...] = ()

    @property
    def names(self) -> list[str]:
        return [entry.name for entry in self.entries]


class ResolveOptions(BaseModel):
    """Knobs for the open points of the algorithm.

    Attributes:
        group_by: ``"canonical"`` merges raw locators that normalize to the
            same origin; ``"raw"`` keeps one group per raw locator string.
        drop_empty_groups: Omit groups whose every candidate was filtered out.
        allow_conflicts: Emit a name under several origins instead of raising.
    """

    model_config = {"frozen": True}

    group_by: GroupBy = "canonical"
    drop_empty_groups: bool = False
    allow_conflicts: bool = False


@dataclass
class _Candidate:
    origin: str
    raw_origins: list[str] = field(default_factory=list)
    names: list[str] = field(default_factory=list)


def _collect_candidates(
    source: DependencyGraph,
    destination: DependencyGraph,
    *,
    group_by: GroupBy,
) -> list[_Candidate]:
    """Group git-sourced destination packages that are source members."""
    all_members = source.member_names()
    groups: dict[str, _Candidate] = {}

    for pkg in destination.packages.values():
        if pkg.name not in all_members or pkg.source is None:
            continue
        if not is_git_locator(pkg.source):
            continue

        origin = normalize_locator(pkg.source)
        key = origin if group_by == "canonical" else pkg.source
        candidate = groups.setdefault(key, _Candidate(origin=origin))
        if pkg.source not in candidate.raw_origins:
            candidate.raw_origins.append(pkg.source)
        if pkg.name not in candidate.names:
            candidate.names.append(pkg.name)

    return list(groups.values())


def find_conflicts(groups: list[OverrideGroup]) -> dict[str, list[str]]:
    """Names that appear in more than one group, mapped to their origins."""
    seen: dict[str, list[str]] = {}
    for group in groups:
        for name in group.names:
            seen.setdefault(name, []).append(group.origin)
    return {name: origins for name, origins in seen.items() if len(origins) > 1}


def resolve_overrides(
    source: DependencyGraph,
    destination: DependencyGraph,
    active: frozenset[str] | set[str],
    *,
    options: ResolveOptions | None = None,
) -> list[OverrideGroup]:
    """Compute the override groups for *destination* against *source*.

    Args:
        source: Graph of the workspace under local development.
        destination: Graph of the workspace consuming *source* over git.
        active: Names the destination declares as direct dependencies
            (see :func:`~patchctl.domain.graph.active_dependencies`).
        options: Grouping, empty-group and conflict behavior.

    Raises:
        LocatorParseError: If any candidate's locator is malformed.
        SourceMemberNotFoundError: If a surviving name has no source package.
        ConflictingOverrideError: If a name survives under several origins
            and ``allow_conflicts`` is off.
    """
    options = options or ResolveOptions()
    candidates = _collect_candidates(source, destination, group_by=options.group_by)

    groups: list[OverrideGroup] = []
    for candidate in candidates:
        entries: list[OverrideEntry] = []
        for name in candidate.names:
            if name not in active:
                continue
            pkg = source.find_by_name(name)
            if pkg is None:
                raise SourceMemberNotFoundError(name)
            entries.append(OverrideEntry(name=name, path=pkg.manifest_dir))

        if not entries and options.drop_empty_groups:
            continue
        groups.append(
            OverrideGroup(
                origin=candidate.origin,
                raw_origins=tuple(candidate.raw_origins),
                entries=tuple(entries),
            )
        )

    conflicts = find_conflicts(groups)
    if conflicts and not options.allow_conflicts:
        raise ConflictingOverrideError(conflicts)

    return groups
