"""AppContext: per-invocation state for the root command.

Configures logging and telemetry from the settings, and owns result
emission: stdout/stderr routing and exit codes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from patchctl.output.formatters import OutputSettings, format_result
from patchctl.output.renderers import render_summary

if TYPE_CHECKING:
    from patchctl.config.settings import PatchSettings
    from patchctl.services.result import ServiceResult

METADATA_FAILED = "METADATA_FAILED"


class AppContext:
    """Settings plus the output policy for one run."""

    def __init__(self, settings: PatchSettings) -> None:
        self.settings = settings

        from patchctl.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from patchctl.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def output_settings(self) -> OutputSettings:
        return OutputSettings(
            json_output=self.settings.json_output,
            verbose=self.settings.verbose,
            relative_paths=self.settings.output.relative_paths,
        )

    def emit(self, result: ServiceResult) -> None:
        """Write a ServiceResult with the right exit semantics.

        * Success: directives (or JSON) to stdout, warnings to stderr.
        * Failure: nothing on stdout; diagnostic on stderr, exit code 1.
          Cargo's own stderr is passed through verbatim when loading failed.
        """
        settings = self.output_settings
        output = format_result(result, settings=settings)

        if not result.ok:
            error = result.error
            stderr = error.detail.get("stderr") if error else None
            if error and error.code == METADATA_FAILED and stderr and not settings.json_output:
                click.echo(stderr, err=True, nl=not stderr.endswith("\n"))
            else:
                click.echo(output, err=True)
            raise SystemExit(1)

        if output:
            click.echo(output)
        if settings.json_output:
            return
        for warning in result.warnings:
            click.echo(f"WARNING: {warning}", err=True)
        if settings.verbose:
            click.echo(render_summary(result), err=True)
