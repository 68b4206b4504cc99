"""Config file discovery.

Walk-up finder locates patchctl.toml, similar to how git finds .git/.
The search starts at the current directory, not at either workspace
root, so one file can serve every pair of workspaces below it.
Supports PATCHCTL_CONFIG env var and --config CLI flag overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "patchctl.toml"
CONFIG_ENV_VAR = "PATCHCTL_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for patchctl.toml.

    Returns the path to the config file, or None if not found.
    Checks PATCHCTL_CONFIG env var first.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        explicit = Path(env_path)
        return explicit if explicit.is_file() else None

    start_dir = (start or Path.cwd()).resolve()
    for directory in (start_dir, *start_dir.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
