"""``cargo metadata`` subprocess adapter.

Runs ``cargo metadata --format-version 1`` for a manifest and returns the
decoded JSON document.  Cargo may resolve (and, unless ``--offline``,
fetch) the workspace's dependencies while doing so, which is the only
blocking I/O in a patchctl run.

Failures are never retried; a nonzero exit surfaces cargo's stderr verbatim
so the CLI can print it unchanged.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

FORMAT_VERSION = "1"
CARGO_ENV_VAR = "CARGO"


class MetadataError(Exception):
    """``cargo metadata`` could not produce a usable document.

    Attributes:
        stderr: Cargo's diagnostic output when the command itself failed,
            otherwise ``None``.
    """

    code = "METADATA_FAILED"

    def __init__(self, message: str, *, stderr: str | None = None, manifest_path: Path) -> None:
        super().__init__(message)
        self.message = message
        self.stderr = stderr
        self.manifest_path = manifest_path


class MetadataCommand:
    """Builder for a single ``cargo metadata`` invocation.

    Usage::

        data = MetadataCommand(Path("ws/Cargo.toml"), offline=True).exec()
    """

    def __init__(
        self,
        manifest_path: Path,
        *,
        cargo: str | None = None,
        offline: bool = False,
        locked: bool = False,
        frozen: bool = False,
    ) -> None:
        self.manifest_path = manifest_path
        self.cargo = cargo or os.environ.get(CARGO_ENV_VAR) or "cargo"
        self.offline = offline
        self.locked = locked
        self.frozen = frozen

    def args(self) -> list[str]:
        """The full argv for this invocation."""
        argv = [
            self.cargo,
            "metadata",
            "--format-version",
            FORMAT_VERSION,
            "--manifest-path",
            str(self.manifest_path),
        ]
        if self.offline:
            argv.append("--offline")
        if self.locked:
            argv.append("--locked")
        if self.frozen:
            argv.append("--frozen")
        return argv

    def exec(self) -> dict[str, Any]:
        """Run cargo and decode its stdout.

        Raises:
            MetadataError: If cargo is missing, exits nonzero, or prints
                something other than a metadata JSON object.
        """
        argv = self.args()
        logger.debug("Running %s", " ".join(argv))
        try:
            proc = subprocess.run(argv, capture_output=True, text=True, check=True)
        except FileNotFoundError as exc:
            msg = f"Could not run '{self.cargo}': {exc.strerror or exc}"
            raise MetadataError(msg, manifest_path=self.manifest_path) from exc
        except subprocess.CalledProcessError as exc:
            msg = f"cargo metadata failed for {self.manifest_path} (exit {exc.returncode})"
            raise MetadataError(msg, stderr=exc.stderr, manifest_path=self.manifest_path) from exc

        return parse_metadata(proc.stdout, manifest_path=self.manifest_path)


def parse_metadata(text: str, *, manifest_path: Path) -> dict[str, Any]:
    """Decode ``cargo metadata`` stdout, checking the top-level shape."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"cargo metadata returned invalid JSON for {manifest_path}: {exc}"
        raise MetadataError(msg, manifest_path=manifest_path) from exc

    if not isinstance(data, dict) or not isinstance(data.get("packages"), list):
        msg = f"cargo metadata output for {manifest_path} has no 'packages' list"
        raise MetadataError(msg, manifest_path=manifest_path)

    version = data.get("version")
    if version is not None and str(version) != FORMAT_VERSION:
        logger.warning("Unexpected cargo metadata format version %s", version)
    return data


def manifest_for(root: Path, manifest_name: str = "Cargo.toml") -> Path:
    """Manifest path for a workspace root directory."""
    return root / manifest_name
