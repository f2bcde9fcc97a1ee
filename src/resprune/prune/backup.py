"""Session backup directory that mirrors project-relative paths."""

from __future__ import annotations

import shutil
from pathlib import Path

BACKUP_MARKER_NAME = ".resprune-backup"


class BackupPathError(Exception):
    """Raised when a file cannot be mapped into the backup directory."""

    def __init__(self, reason: str, hint: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


def mirrored_backup_path(project_root: Path, backup_dir: Path, path: Path) -> Path:
    """Return where `path` is archived: its project-relative path under `backup_dir`."""
    root = project_root.resolve()
    resolved = path.resolve(strict=False)
    if not resolved.is_relative_to(root):
        raise BackupPathError(
            reason="Path is outside project_root.",
            hint="Only files under the project root can be backed up and removed.",
        )
    relative = resolved.relative_to(root)
    if not relative.parts:
        raise BackupPathError(
            reason="Path is the project root itself.",
            hint="Back up individual resource files, not the project root.",
        )
    return backup_dir / relative


class BackupStore:
    """Lazily populated backup directory owned by one top-level run."""

    def __init__(self, project_root: Path, backup_dir: Path) -> None:
        self._project_root = project_root.resolve()
        self._backup_dir = backup_dir
        self._archived: list[Path] = []

    @property
    def path(self) -> Path:
        """Return the backup directory location."""
        return self._backup_dir

    @property
    def archived(self) -> tuple[Path, ...]:
        """Return backup copies written during this session."""
        return tuple(self._archived)

    def clear(self) -> bool:
        """Remove the previous session's backups; True when something was removed.

        Only a directory holding the session marker is removed. A missing or
        empty directory is left as is; anything else raises `BackupPathError`.
        """
        if not self._backup_dir.exists() and not self._backup_dir.is_symlink():
            return False
        if self._backup_dir.is_symlink() or not self._backup_dir.is_dir():
            raise BackupPathError(
                reason=f"Backup path {self._backup_dir} is not a directory.",
                hint="Point --backup-dir at a new or empty directory.",
            )
        if not (self._backup_dir / BACKUP_MARKER_NAME).is_file():
            if any(self._backup_dir.iterdir()):
                raise BackupPathError(
                    reason=f"Backup directory {self._backup_dir} was not created by resprune.",
                    hint="Point --backup-dir at a new or empty directory.",
                )
            return False
        shutil.rmtree(self._backup_dir)
        return True

    def target_for(self, path: Path) -> Path:
        """Return the mirrored backup location of a project file."""
        return mirrored_backup_path(self._project_root, self._backup_dir, path)

    def archive(self, path: Path) -> Path:
        """Copy a project file into the backup directory, creating parents on demand."""
        target = self.target_for(path)
        self._claim()
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(path, target)
        self._archived.append(target)
        return target

    def _claim(self) -> None:
        marker = self._backup_dir / BACKUP_MARKER_NAME
        if marker.is_file():
            return
        self._backup_dir.mkdir(parents=True, exist_ok=True)
        marker.write_text("resprune session backup\n", encoding="utf-8")
