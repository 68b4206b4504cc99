"""Unified settings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs: CLI flags passed by Click
  2. Env vars: ``PATCHCTL_*`` prefix (``PATCHCTL_RESOLVE__GROUP_BY=raw``)
  3. TOML file: ``patchctl.toml`` discovered via walk-up
  4. Code defaults: baked into the section models

Nested section values from different sources are deep-merged, so a CLI
flag that sets ``resolve.drop_empty_groups`` keeps ``resolve.group_by``
from the TOML file.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from patchctl.config.discovery import find_config
from patchctl.config.models import MetadataConfig, OutputConfig, ResolveConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``patchctl.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class PatchSettings(BaseSettings):
    """Unified settings for one patchctl invocation.

    Stored on the :class:`~patchctl.commands._context.AppContext` created
    by the root command.

    Attributes:
        config_path: The TOML file that was loaded, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "PATCHCTL_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    metadata: MetadataConfig = Field(default_factory=MetadataConfig)
    resolve: ResolveConfig = Field(default_factory=ResolveConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        start: Path | None = None,
        metadata: dict[str, Any] | None = None,
        resolve: dict[str, Any] | None = None,
        output: dict[str, Any] | None = None,
        **cli_flags: Any,
    ) -> PatchSettings:
        """Construct settings from a CLI invocation.

        Section overrides only carry options the user actually passed:
        ``None`` and ``False`` values are dropped so an absent flag never
        masks a value from the environment or the TOML file.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(start)

        sections = {
            name: overrides
            for name, overrides in (
                ("metadata", _passed(metadata)),
                ("resolve", _passed(resolve)),
                ("output", _passed(output)),
            )
            if overrides
        }

        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **sections, **cli_flags)
        finally:
            _tls.toml_path = None


def _passed(values: dict[str, Any] | None) -> dict[str, Any]:
    return {k: v for k, v in (values or {}).items() if v is not None and v is not False}
