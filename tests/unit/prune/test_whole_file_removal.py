from __future__ import annotations

from pathlib import Path

import pytest

from resprune.catalog import ResourceIndexer
from resprune.config import IndexConfig
from resprune.logging import AuditTrail
from resprune.prune import BackupStore, SafeDeleter

PNG = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"


def _project(tmp_path: Path) -> Path:
    res = tmp_path / "app" / "res"
    for folder in ("drawable", "drawable-hdpi"):
        (res / folder).mkdir(parents=True)
        (res / folder / "icon.png").write_bytes(PNG + folder.encode())
    (res / "drawable" / "logo.png").write_bytes(PNG)
    (res / "layout").mkdir()
    (res / "layout" / "orphan.xml").write_text("<FrameLayout/>\n", encoding="utf-8")
    return res


def _run(tmp_path: Path, trail: AuditTrail | None = None):  # type: ignore[no-untyped-def]
    catalog = ResourceIndexer(IndexConfig()).index(tmp_path / "app")
    catalog.get("drawable", "logo").mark_used()
    deleter = SafeDeleter(BackupStore(tmp_path / "app", tmp_path / "backup"), trail=trail)
    return catalog, deleter.remove_unused(catalog)


def test_every_file_of_unused_resource_is_backed_up_then_deleted(tmp_path: Path) -> None:
    res = _project(tmp_path)
    backup = tmp_path / "backup" / "res"

    catalog, result = _run(tmp_path)

    assert result.removed_counts() == {"layout": 1, "drawable": 1}
    assert not (res / "drawable" / "icon.png").exists()
    assert not (res / "drawable-hdpi" / "icon.png").exists()
    assert not (res / "layout" / "orphan.xml").exists()
    assert (backup / "drawable" / "icon.png").read_bytes() == PNG + b"drawable"
    assert (backup / "drawable-hdpi" / "icon.png").read_bytes() == PNG + b"drawable-hdpi"
    assert (backup / "layout" / "orphan.xml").read_text(encoding="utf-8") == "<FrameLayout/>\n"
    assert (res / "drawable" / "logo.png").exists()
    assert catalog.names("drawable") == ("logo",)
    assert catalog.get("drawable", "logo").uses == 0


def test_backup_failure_keeps_file_and_does_not_count(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    res = _project(tmp_path)

    def failing_archive(self, path: Path) -> Path:  # type: ignore[no-untyped-def]
        raise OSError("disk full")

    monkeypatch.setattr(BackupStore, "archive", failing_archive)
    trail = AuditTrail()

    catalog, result = _run(tmp_path, trail)

    assert result.removed_count == 0
    assert result.failed_counts() == {"layout": 1, "drawable": 1}
    assert (res / "drawable" / "icon.png").exists()
    assert (res / "layout" / "orphan.xml").exists()
    assert catalog.get("drawable", "icon") is None
    assert {event.error_code for event in trail.failures("remove")} == {"BACKUP_FAILED"}


def test_delete_failure_is_reported_after_backup(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    res = _project(tmp_path)
    real_unlink = Path.unlink

    def failing_unlink(self, missing_ok: bool = False) -> None:  # type: ignore[no-untyped-def]
        if self.name == "orphan.xml":
            raise PermissionError("read-only")
        real_unlink(self, missing_ok=missing_ok)

    monkeypatch.setattr(Path, "unlink", failing_unlink)
    trail = AuditTrail()

    _, result = _run(tmp_path, trail)

    assert result.removed_counts() == {"drawable": 1}
    assert result.failed_counts() == {"layout": 1}
    assert (res / "layout" / "orphan.xml").exists()
    assert (tmp_path / "backup" / "res" / "layout" / "orphan.xml").exists()
    assert [event.error_code for event in trail.failures("remove")] == ["DELETE_FAILED"]
