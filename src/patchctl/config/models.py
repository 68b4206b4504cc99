"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, patchctl.toml only contains
overrides.  A project needs no config file at all.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class MetadataConfig(BaseModel):
    """[metadata] section: how ``cargo metadata`` is invoked."""

    model_config = {"frozen": True}

    cargo: str | None = None
    manifest_name: str = "Cargo.toml"
    offline: bool = False
    locked: bool = False
    frozen: bool = False


class ResolveConfig(BaseModel):
    """[resolve] section."""

    model_config = {"frozen": True}

    group_by: Literal["canonical", "raw"] = "canonical"
    drop_empty_groups: bool = False
    allow_conflicts: bool = False


class OutputConfig(BaseModel):
    """[output] section."""

    model_config = {"frozen": True}

    relative_paths: bool = False


class PatchConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    metadata: MetadataConfig = Field(default_factory=MetadataConfig)
    resolve: ResolveConfig = Field(default_factory=ResolveConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
