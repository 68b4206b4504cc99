"""Resolved dependency graph models.

A :class:`DependencyGraph` is an immutable snapshot of one workspace as
reported by ``cargo metadata``: every package in the resolve, the root
package (absent for virtual workspaces), and the workspace members.
Dependencies are kept by *name*; names are the join key across graphs,
since package ids are only meaningful inside the graph that produced them.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from patchctl.domain.errors import MissingPackageError, MissingRootError


class Dependency(BaseModel):
    """A dependency as declared in a package manifest."""

    model_config = {"frozen": True, "extra": "ignore"}

    name: str
    source: str | None = None
    req: str = "*"
    kind: str | None = None
    rename: str | None = None
    optional: bool = False


class Package(BaseModel):
    """A package in a resolved graph."""

    model_config = {"frozen": True, "extra": "ignore"}

    id: str
    name: str
    version: str = "0.0.0"
    source: str | None = None
    manifest_path: Path
    dependencies: tuple[Dependency, ...] = ()

    @property
    def manifest_dir(self) -> Path:
        """Directory holding this package's manifest."""
        return self.manifest_path.parent

    @property
    def dependency_names(self) -> list[str]:
        return [dep.name for dep in self.dependencies]


class DependencyGraph(BaseModel):
    """A fully-resolved workspace snapshot."""

    model_config = {"frozen": True}

    packages: dict[str, Package] = Field(default_factory=dict)
    root: str | None = None
    workspace_members: tuple[str, ...] = ()
    workspace_root: Path | None = None

    @classmethod
    def from_metadata(cls, data: dict[str, Any]) -> DependencyGraph:
        """Build a graph from decoded ``cargo metadata --format-version 1`` output.

        Package order follows the ``packages`` array. ``resolve`` is null
        when metadata was produced with ``--no-deps``; the root is then unknown.
        """
        packages = [Package.model_validate(raw) for raw in data.get("packages", [])]
        resolve = data.get("resolve") or {}
        workspace_root = data.get("workspace_root")
        return cls(
            packages={pkg.id: pkg for pkg in packages},
            root=resolve.get("root"),
            workspace_members=tuple(data.get("workspace_members", [])),
            workspace_root=Path(workspace_root) if workspace_root else None,
        )

    def package(self, package_id: str) -> Package:
        """Return the package for *package_id*.

        Raises:
            MissingPackageError: If the id is not in this graph.
        """
        try:
            return self.packages[package_id]
        except KeyError:
            raise MissingPackageError(package_id) from None

    def root_package(self) -> Package:
        """Return the root package.

        Raises:
            MissingRootError: If the graph has no root or the root id is dangling.
        """
        if self.root is None:
            raise MissingRootError("Graph has no root package")
        pkg = self.packages.get(self.root)
        if pkg is None:
            raise MissingRootError(
                f"Root package '{self.root}' not found in graph", package_id=self.root
            )
        return pkg

    def members(self) -> list[Package]:
        """Workspace member packages, in declaration order."""
        return [self.package(member_id) for member_id in self.workspace_members]

    def member_names(self) -> set[str]:
        return {pkg.name for pkg in self.members()}

    def find_by_name(self, name: str) -> Package | None:
        """First package named *name*, in package order."""
        for pkg in self.packages.values():
            if pkg.name == name:
                return pkg
        return None


def active_dependencies(graph: DependencyGraph) -> frozenset[str]:
    """Names declared as direct dependencies by the root or any workspace member.

    A package that is present in *graph* but not named here only arrives
    transitively, so nothing in the workspace's own manifests consumes it.

    Raises:
        MissingRootError: If the graph's root cannot be resolved.
        MissingPackageError: If a workspace member id is dangling.
    """
    names: set[str] = set(graph.root_package().dependency_names)
    for member in graph.members():
        names.update(member.dependency_names)
    return frozenset(names)
