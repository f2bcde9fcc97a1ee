from __future__ import annotations

from pathlib import Path

import pytest

from resprune.config import CliOverrides, load_effective_config


def _write_config(root: Path, *lines: str) -> None:
    (root / "resprune.toml").write_text("\n".join(lines), encoding="utf-8")


def test_invalid_list_type_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, "[index]", 'exclude_files = "analytics.xml"')

    with pytest.raises(ValueError, match="index.exclude_files"):
        load_effective_config(tmp_path)


def test_invalid_section_type_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, 'scan = "not-a-table"')

    with pytest.raises(ValueError, match="section 'scan'"):
        load_effective_config(tmp_path)


def test_extension_without_dot_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, "[index]", 'image_extensions = ["png"]')

    with pytest.raises(ValueError, match="index.image_extensions"):
        load_effective_config(tmp_path)


def test_overlapping_dialect_extensions_raise_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, "[scan]", 'code_extensions = [".kt", ".xml"]')

    with pytest.raises(ValueError, match="must not overlap"):
        load_effective_config(tmp_path)


def test_empty_manifest_path_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, "[project]", 'manifest_path = "  "')

    with pytest.raises(ValueError, match="project.manifest_path"):
        load_effective_config(tmp_path)


def test_backup_dir_inside_project_root_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="backup_dir"):
        load_effective_config(tmp_path, CliOverrides(backup_dir=tmp_path / "backup"))


def test_backup_dir_containing_project_root_is_rejected(tmp_path: Path) -> None:
    project = tmp_path / "outer" / "app"
    project.mkdir(parents=True)

    with pytest.raises(ValueError, match="must not contain the project root"):
        load_effective_config(project, CliOverrides(backup_dir=tmp_path / "outer"))
    with pytest.raises(ValueError, match="must not contain the project root"):
        load_effective_config(project, CliOverrides(backup_dir=Path(project.anchor)))

    assert project.is_dir()


def test_backup_dir_containing_extra_root_is_rejected(tmp_path: Path) -> None:
    project = tmp_path / "app"
    project.mkdir()
    shared = tmp_path / "shared"

    with pytest.raises(ValueError, match="search root"):
        load_effective_config(
            project,
            CliOverrides(backup_dir=shared, extra_roots=(shared / "feature",)),
        )
