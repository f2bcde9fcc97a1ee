"""Removal of unused resources from disk."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path

from resprune.catalog import Catalog, ResourceRecord
from resprune.categories import CATEGORIES
from resprune.logging import AuditTrail
from resprune.prune.backup import BackupPathError, BackupStore
from resprune.prune.rewrite import rewrite_definition_lines


@dataclass(slots=True)
class RemovalResult:
    """What one deletion pass removed, and what it had to leave in place."""

    removed: dict[str, list[str]] = field(default_factory=dict)
    failed: dict[str, list[str]] = field(default_factory=dict)
    deleted_files: list[Path] = field(default_factory=list)
    rewritten_files: list[Path] = field(default_factory=list)

    @property
    def removed_count(self) -> int:
        return sum(len(names) for names in self.removed.values())

    @property
    def failed_count(self) -> int:
        return sum(len(names) for names in self.failed.values())

    def removed_counts(self) -> dict[str, int]:
        """Return successful removals per category key."""
        return {key: len(names) for key, names in self.removed.items() if names}

    def failed_counts(self) -> dict[str, int]:
        """Return deferred removals per category key."""
        return {key: len(names) for key, names in self.failed.items() if names}


def read_definition_lines(path: Path) -> list[str]:
    """Read a definition file keeping every line terminator byte-for-byte."""
    with path.open("r", encoding="utf-8", newline="") as handle:
        return handle.read().splitlines(keepends=True)


def write_definition_text(path: Path, text: str) -> None:
    """Write rewritten definition text without newline translation."""
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(text)


class SafeDeleter:
    """Removes zero-counter records: inline declarations in place, whole files via backup."""

    def __init__(self, backups: BackupStore, trail: AuditTrail | None = None) -> None:
        self._backups = backups
        self._trail = trail or AuditTrail()

    def remove_unused(self, catalog: Catalog) -> RemovalResult:
        """Remove every unused record, evict candidates and reset survivors' counters."""
        result = RemovalResult()
        inline: list[ResourceRecord] = []
        whole_file: list[ResourceRecord] = []
        for category in CATEGORIES:
            result.removed[category.key] = []
            result.failed[category.key] = []
            for record in catalog.unused(category):
                (inline if category.is_inline else whole_file).append(record)

        self._remove_inline(inline, result)
        for record in whole_file:
            self._remove_files(record, result)

        for record in (*inline, *whole_file):
            catalog.evict(record.category, record.name)
        catalog.reset_counters()
        return result

    def _remove_inline(self, records: list[ResourceRecord], result: RemovalResult) -> None:
        doomed_by_file: dict[Path, dict[str, set[str]]] = defaultdict(lambda: defaultdict(set))
        for record in records:
            for path in record.defining_paths():
                doomed_by_file[path][record.category.key].add(record.name)

        removed_pairs: dict[Path, set[tuple[str, str]]] = {}
        for path in sorted(doomed_by_file):
            removed_pairs[path] = self._rewrite_file(path, doomed_by_file[path], result)

        for record in records:
            key = (record.category.key, record.name)
            paths = record.defining_paths()
            if paths and all(key in removed_pairs.get(path, set()) for path in paths):
                result.removed[record.category.key].append(record.name)
                self._trail.record(
                    "remove",
                    category=record.category.key,
                    name=record.name,
                    paths=list(paths),
                )
                continue
            result.failed[record.category.key].append(record.name)
            self._trail.record(
                "remove",
                ok=False,
                error_code="REWRITE_INCOMPLETE",
                category=record.category.key,
                name=record.name,
                paths=list(paths),
            )

    def _rewrite_file(
        self,
        path: Path,
        doomed: dict[str, set[str]],
        result: RemovalResult,
    ) -> set[tuple[str, str]]:
        try:
            lines = read_definition_lines(path)
        except (OSError, UnicodeDecodeError) as error:
            self._trail.warn(
                "rewrite",
                "UNREADABLE_FILE",
                f"Left definition file {path} untouched; it could not be read: {error}",
                path=path,
            )
            return set()

        rewrite = rewrite_definition_lines(lines, doomed)
        if rewrite.unterminated is not None:
            self._trail.warn(
                "rewrite",
                "UNTERMINATED_BLOCK",
                f"Left definition file {path} untouched; "
                f"'{rewrite.unterminated.name}' never reaches {rewrite.unterminated.closing_tag}.",
                path=path,
            )
            return set()
        if rewrite.shared:
            kept = ", ".join(f"{category}/{name}" for category, name in rewrite.shared)
            self._trail.warn(
                "rewrite",
                "SHARED_LINE",
                f"Kept {kept} in {path}; the declaration shares its lines with one still in use.",
                path=path,
            )
        if not rewrite.should_write:
            if rewrite.removed_line_count > 0:
                self._trail.warn(
                    "rewrite",
                    "WOULD_EMPTY_FILE",
                    f"Left definition file {path} untouched; removal would empty it.",
                    path=path,
                )
            return set()

        try:
            write_definition_text(path, rewrite.text)
        except OSError as error:
            self._trail.warn(
                "rewrite",
                "WRITE_FAILED",
                f"Could not rewrite definition file {path}: {error}",
                path=path,
            )
            return set()
        result.rewritten_files.append(path)
        self._trail.record(
            "rewrite",
            path=path,
            removed_lines=rewrite.removed_line_count,
            removed=[f"{category}/{name}" for category, name in rewrite.removed],
        )
        return set(rewrite.removed)

    def _remove_files(self, record: ResourceRecord, result: RemovalResult) -> None:
        for path in record.files:
            try:
                backup = self._backups.archive(path)
            except (OSError, BackupPathError) as error:
                self._fail_file(record, path, "BACKUP_FAILED", error, result)
                return
            try:
                path.unlink()
            except OSError as error:
                self._fail_file(record, path, "DELETE_FAILED", error, result)
                return
            result.deleted_files.append(path)
            self._trail.record("delete_file", path=path, backup=backup)
        result.removed[record.category.key].append(record.name)
        self._trail.record(
            "remove",
            category=record.category.key,
            name=record.name,
            paths=list(record.files),
        )

    def _fail_file(
        self,
        record: ResourceRecord,
        path: Path,
        error_code: str,
        error: Exception,
        result: RemovalResult,
    ) -> None:
        result.failed[record.category.key].append(record.name)
        self._trail.warn(
            "remove",
            error_code,
            f"Kept {record.category.key} '{record.name}': {path} could not be removed ({error}).",
            category=record.category.key,
            name=record.name,
            path=path,
        )
