"""Root CLI command: ``patchctl SOURCE DESTINATION``."""

from __future__ import annotations

from pathlib import Path

import click

from patchctl import __version__
from patchctl.commands._base import PatchCommand
from patchctl.commands._context import AppContext
from patchctl.config.settings import PatchSettings

_workspace_dir = click.Path(file_okay=False, path_type=Path)


@click.command(
    cls=PatchCommand,
    examples="""\
  patchctl ../my-lib .
  patchctl ../my-lib . >> .cargo/config.toml
  patchctl --relative ../my-lib .
  patchctl --group-by raw --drop-empty ../my-lib .
  patchctl --json ../my-lib . | jq '.data.groups'""",
)
@click.version_option(version=__version__, prog_name="patchctl")
@click.argument("source", type=_workspace_dir)
@click.argument("destination", type=_workspace_dir)
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logs and a summary on stderr.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "--group-by",
    type=click.Choice(["canonical", "raw"]),
    default=None,
    help="Merge origins by canonical URL or keep raw locators apart.",
)
@click.option("--drop-empty", is_flag=True, help="Omit sections with no overrides.")
@click.option("--allow-conflicts", is_flag=True, help="Allow a package under several origins.")
@click.option("--relative", is_flag=True, help="Write paths relative to DESTINATION.")
@click.option("--offline", is_flag=True, help="Pass --offline to cargo metadata.")
@click.option("--locked", is_flag=True, help="Pass --locked to cargo metadata.")
def cli(
    source: Path,
    destination: Path,
    json_output: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    group_by: str | None,
    drop_empty: bool,
    allow_conflicts: bool,
    relative: bool,
    offline: bool,
    locked: bool,
) -> None:
    """Print Cargo [patch] sections pointing DESTINATION's git
    dependencies at the workspace members of SOURCE.
    """
    settings = PatchSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        verbose=verbose,
        log_json=log_json,
        metadata={"offline": offline, "locked": locked},
        resolve={
            "group_by": group_by,
            "drop_empty_groups": drop_empty,
            "allow_conflicts": allow_conflicts,
        },
        output={"relative_paths": relative},
    )
    app = AppContext(settings)

    from patchctl.services.overrides import OverrideService

    app.emit(OverrideService(settings).generate(source, destination))
