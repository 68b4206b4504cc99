"""Shared pytest fixtures and test helpers for patchctl tests."""

from __future__ import annotations

import json
import os
import subprocess
from collections.abc import Generator, Iterable
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from patchctl.config.settings import PatchSettings
from patchctl.domain.graph import DependencyGraph
from patchctl.services.telemetry import disable_telemetry

GIT_ORIGIN = "git+https://example.org/repo?rev=abc#x"
REGISTRY = "registry+https://github.com/rust-lang/crates.io-index"


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Run every test from an empty directory with no patchctl env vars.

    Keeps walk-up config discovery and ``PATCHCTL_*`` variables from the
    developer's machine out of the settings under test.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CARGO", raising=False)
    for name in [k for k in os.environ if k.startswith("PATCHCTL_")]:
        monkeypatch.delenv(name)
    yield
    disable_telemetry()


@pytest.fixture
def settings() -> PatchSettings:
    return PatchSettings.from_cli()


# ---------------------------------------------------------------------------
# cargo metadata builders
# ---------------------------------------------------------------------------


def package_json(
    name: str,
    directory: Path | str,
    *,
    source: str | None = None,
    deps: Iterable[str] = (),
    version: str = "0.1.0",
) -> dict[str, Any]:
    """One entry of ``cargo metadata``'s ``packages`` array."""
    directory = Path(directory)
    pkg_id = f"{name} {version} ({source or f'path+file://{directory}'})"
    return {
        "id": pkg_id,
        "name": name,
        "version": version,
        "source": source,
        "manifest_path": str(directory / "Cargo.toml"),
        "dependencies": [
            {"name": dep, "source": None, "req": "*", "kind": None, "optional": False}
            for dep in deps
        ],
        "targets": [],
        "features": {},
    }


def metadata_json(
    packages: list[dict[str, Any]],
    *,
    members: Iterable[str],
    root: str | None,
    workspace_root: Path | str,
) -> dict[str, Any]:
    """A ``cargo metadata --format-version 1`` document.

    *members* and *root* are package names; ids are looked up in *packages*.
    """
    ids = {pkg["name"]: pkg["id"] for pkg in packages if pkg["source"] is None}
    return {
        "packages": packages,
        "workspace_members": [ids[name] for name in members],
        "resolve": {"root": ids[root] if root else None, "nodes": []},
        "target_directory": str(Path(workspace_root) / "target"),
        "version": 1,
        "workspace_root": str(workspace_root),
    }


def build_graph(
    packages: list[dict[str, Any]],
    *,
    members: Iterable[str],
    root: str | None,
    workspace_root: Path | str = "/ws",
) -> DependencyGraph:
    return DependencyGraph.from_metadata(
        metadata_json(packages, members=members, root=root, workspace_root=workspace_root)
    )


@pytest.fixture
def source_graph() -> DependencyGraph:
    """Source workspace with members ``core`` and ``util`` (no deps)."""
    return build_graph(
        [
            package_json("core", "/src/core"),
            package_json("util", "/src/util"),
        ],
        members=["core", "util"],
        root=None,
        workspace_root="/src",
    )


@pytest.fixture
def destination_graph() -> DependencyGraph:
    """Destination whose root uses ``core``; ``util`` only arrives transitively."""
    return build_graph(
        [
            package_json("app", "/dst", deps=["core"]),
            package_json("core", "/git/core", source=GIT_ORIGIN, deps=["util"]),
            package_json("util", "/git/util", source=GIT_ORIGIN),
        ],
        members=["app"],
        root="app",
        workspace_root="/dst",
    )


class FakeCargo:
    """Stand-in for ``subprocess.run`` serving canned metadata per manifest."""

    def __init__(self) -> None:
        self.documents: dict[str, dict[str, Any]] = {}
        self.failures: dict[str, str] = {}
        self.calls: list[list[str]] = []

    def add(self, root: Path, document: dict[str, Any]) -> None:
        self.documents[str(root / "Cargo.toml")] = document

    def fail(self, root: Path, stderr: str) -> None:
        self.failures[str(root / "Cargo.toml")] = stderr

    def __call__(self, argv: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        self.calls.append(argv)
        manifest = argv[argv.index("--manifest-path") + 1]
        if manifest in self.failures:
            raise subprocess.CalledProcessError(
                101, argv, output="", stderr=self.failures[manifest]
            )
        if manifest not in self.documents:
            raise subprocess.CalledProcessError(
                101, argv, output="", stderr=f"error: manifest path `{manifest}` does not exist\n"
            )
        return subprocess.CompletedProcess(
            argv, 0, stdout=json.dumps(self.documents[manifest]), stderr=""
        )


@pytest.fixture
def fake_cargo(monkeypatch: pytest.MonkeyPatch) -> FakeCargo:
    """Replace the cargo subprocess with :class:`FakeCargo`."""
    fake = FakeCargo()
    monkeypatch.setattr("patchctl.infrastructure.metadata.subprocess.run", fake)
    return fake


@pytest.fixture
def workspaces(tmp_path: Path, fake_cargo: FakeCargo) -> tuple[Path, Path]:
    """Source and destination roots served by ``fake_cargo``.

    The source has members ``core`` and ``util``; the destination root
    depends on ``core`` only, with both pulled from one git origin.
    """
    src = tmp_path / "source"
    dst = tmp_path / "destination"
    src.mkdir()
    dst.mkdir()
    fake_cargo.add(
        src,
        metadata_json(
            [package_json("core", src / "core"), package_json("util", src / "util")],
            members=["core", "util"],
            root=None,
            workspace_root=src,
        ),
    )
    fake_cargo.add(
        dst,
        metadata_json(
            [
                package_json("app", dst, deps=["core"]),
                package_json("core", tmp_path / "git" / "core", source=GIT_ORIGIN, deps=["util"]),
                package_json("util", tmp_path / "git" / "util", source=GIT_ORIGIN),
            ],
            members=["app"],
            root="app",
            workspace_root=dst,
        ),
    )
    return src, dst
