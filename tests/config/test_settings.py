"""Tests for PatchSettings source merging."""

from __future__ import annotations

from pathlib import Path

import click
import pytest
from pydantic import ValidationError

from patchctl.config.settings import PatchSettings


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


class TestDefaults:
    def test_no_config(self) -> None:
        s = PatchSettings.from_cli()
        assert s.config_path is None
        assert s.metadata.manifest_name == "Cargo.toml"
        assert s.metadata.cargo is None
        assert s.resolve.group_by == "canonical"
        assert s.resolve.drop_empty_groups is False
        assert s.resolve.allow_conflicts is False
        assert s.output.relative_paths is False

    def test_frozen(self) -> None:
        s = PatchSettings.from_cli()
        with pytest.raises(ValidationError):
            s.verbose = True  # type: ignore[misc]


class TestTomlSource:
    def test_discovered_file(self, tmp_path: Path) -> None:
        cfg = _write(
            tmp_path / "patchctl.toml",
            '[resolve]\ngroup_by = "raw"\n\n[metadata]\noffline = true\n',
        )
        s = PatchSettings.from_cli()
        assert s.config_path == cfg.resolve()
        assert s.resolve.group_by == "raw"
        assert s.metadata.offline is True

    def test_explicit_path(self, tmp_path: Path) -> None:
        cfg = _write(tmp_path / "custom.toml", "[output]\nrelative_paths = true\n")
        s = PatchSettings.from_cli(config_path=str(cfg))
        assert s.config_path == cfg
        assert s.output.relative_paths is True

    def test_invalid_toml(self, tmp_path: Path) -> None:
        _write(tmp_path / "patchctl.toml", "[resolve\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            PatchSettings.from_cli()


class TestPriority:
    def test_env_beats_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write(tmp_path / "patchctl.toml", '[resolve]\ngroup_by = "raw"\n')
        monkeypatch.setenv("PATCHCTL_RESOLVE__GROUP_BY", "canonical")
        assert PatchSettings.from_cli().resolve.group_by == "canonical"

    def test_cli_beats_toml_and_keeps_siblings(self, tmp_path: Path) -> None:
        _write(tmp_path / "patchctl.toml", '[resolve]\ngroup_by = "raw"\n')
        s = PatchSettings.from_cli(resolve={"drop_empty_groups": True})
        assert s.resolve.drop_empty_groups is True
        assert s.resolve.group_by == "raw"

    def test_unset_cli_flags_do_not_mask_toml(self, tmp_path: Path) -> None:
        _write(tmp_path / "patchctl.toml", "[metadata]\nlocked = true\n")
        s = PatchSettings.from_cli(metadata={"locked": False, "offline": False})
        assert s.metadata.locked is True

    def test_none_choice_does_not_mask_toml(self, tmp_path: Path) -> None:
        _write(tmp_path / "patchctl.toml", '[resolve]\ngroup_by = "raw"\n')
        s = PatchSettings.from_cli(resolve={"group_by": None})
        assert s.resolve.group_by == "raw"
