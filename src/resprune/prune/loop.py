"""Fixed-point pruning loop: index, scan and delete until a round removes nothing."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from resprune.catalog import ResourceIndexer
from resprune.categories import CATEGORIES
from resprune.config import CliOverrides, PruneConfig, load_effective_config
from resprune.logging import AuditTrail, JsonlAuditLogger
from resprune.prune.backup import BackupStore
from resprune.prune.deleter import RemovalResult, SafeDeleter
from resprune.scan import ScanCancelledError, ScanStats, UsageScanner
from resprune.scan.scanner import CancelCheck

AUDIT_LOG_NAME = "audit.jsonl"


class ManifestNotFoundError(Exception):
    """Raised before indexing when the project manifest is missing."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Manifest not found: {path}")
        self.path = path


@dataclass(slots=True, frozen=True)
class RoundReport:
    """Counts for one index -> scan -> delete round.

    `usage` holds every record's reference count (category -> name -> uses) and is
    only filled on a dry run.
    """

    number: int
    found: dict[str, int]
    unused: dict[str, tuple[str, ...]]
    removed: dict[str, int]
    failed: dict[str, int]
    deleted_files: tuple[Path, ...]
    scan: ScanStats
    usage: dict[str, dict[str, int]] = field(default_factory=dict)

    @property
    def removed_count(self) -> int:
        return sum(self.removed.values())

    @property
    def unused_count(self) -> int:
        return sum(len(names) for names in self.unused.values())

    def to_dict(self) -> dict[str, object]:
        return {
            "round": self.number,
            "found": dict(self.found),
            "unused": {key: list(names) for key, names in self.unused.items()},
            "removed": dict(self.removed),
            "failed": dict(self.failed),
            "deleted_files": [path.as_posix() for path in self.deleted_files],
            "scan": {
                "files_scanned": self.scan.files_scanned,
                "files_skipped": self.scan.files_skipped,
                "lines_scanned": self.scan.lines_scanned,
                "references": self.scan.references,
            },
            "usage": {key: dict(counts) for key, counts in self.usage.items()},
        }


@dataclass(slots=True, frozen=True)
class PruneReport:
    """Outcome of a full run, consumed by reporting front-ends."""

    run_id: str
    dry_run: bool
    rounds: tuple[RoundReport, ...]
    total_removed: int
    removed_by_category: dict[str, int]
    deleted_files: tuple[Path, ...]
    backup_dir: Path
    warnings: tuple[str, ...]

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serializable report."""
        return {
            "run_id": self.run_id,
            "dry_run": self.dry_run,
            "total_removed": self.total_removed,
            "removed_by_category": dict(self.removed_by_category),
            "deleted_files": [path.as_posix() for path in self.deleted_files],
            "backup_dir": self.backup_dir.as_posix(),
            "rounds": [round_report.to_dict() for round_report in self.rounds],
            "warnings": list(self.warnings),
        }


class ConvergenceLoop:
    """Runs rounds until no newly orphaned resource is found."""

    def __init__(
        self,
        config: PruneConfig,
        trail: AuditTrail | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> None:
        self._config = config
        self._trail = trail or AuditTrail()
        self._should_cancel = should_cancel
        self._indexer = ResourceIndexer(config.index, self._trail)
        self._scanner = UsageScanner(config.scan, self._trail, should_cancel=should_cancel)
        self._backups = BackupStore(config.project_root, config.backup_dir)
        self._deleter = SafeDeleter(self._backups, self._trail)
        self._search_roots: tuple[Path, ...] | None = None

    @property
    def trail(self) -> AuditTrail:
        return self._trail

    @property
    def backups(self) -> BackupStore:
        return self._backups

    def search_roots(self) -> tuple[Path, ...]:
        """Return the project root followed by every existing extra root."""
        if self._search_roots is not None:
            return self._search_roots
        roots: list[Path] = [self._config.project_root]
        for root in self._config.scan.extra_roots:
            if not root.exists():
                self._trail.warn(
                    "scan_skip",
                    "MISSING_ROOT",
                    f"Extra search root {root} does not exist; skipped.",
                    path=root,
                )
                continue
            roots.append(root)
        self._search_roots = tuple(roots)
        return self._search_roots

    def run(self, dry_run: bool = False) -> PruneReport:
        """Prune until a fixed point; with dry_run, report one round without deleting."""
        manifest = self._config.manifest
        if not manifest.is_file():
            raise ManifestNotFoundError(manifest)
        if not dry_run and self._backups.clear():
            self._trail.record("backup_cleared", path=self._backups.path)

        rounds: list[RoundReport] = []
        totals = {category.key: 0 for category in CATEGORIES}
        deleted_files: list[Path] = []
        number = 0
        while True:
            number += 1
            if self._should_cancel is not None and self._should_cancel():
                raise ScanCancelledError(f"Run cancelled before round {number}")
            report = self.run_round(number, dry_run=dry_run)
            rounds.append(report)
            if dry_run or report.removed_count == 0:
                break
            for key, count in report.removed.items():
                totals[key] += count
            deleted_files.extend(report.deleted_files)

        total_removed = sum(totals.values())
        self._trail.record(
            "run",
            dry_run=dry_run,
            rounds=len(rounds),
            total_removed=total_removed,
        )
        return PruneReport(
            run_id=self._trail.run_id,
            dry_run=dry_run,
            rounds=tuple(rounds),
            total_removed=total_removed,
            removed_by_category={key: count for key, count in totals.items() if count},
            deleted_files=tuple(deleted_files),
            backup_dir=self._backups.path,
            warnings=tuple(self._trail.warnings),
        )

    def run_round(self, number: int, dry_run: bool = False) -> RoundReport:
        """Index from disk, count references, then remove (unless dry_run) what is unused."""
        catalog = self._indexer.index(self._config.project_root)
        found = catalog.counts()
        stats = self._scanner.scan(catalog, self.search_roots(), manifest=self._config.manifest)
        unused = {
            category.key: tuple(record.name for record in catalog.unused(category))
            for category in CATEGORIES
        }
        usage = catalog.usage() if dry_run else {}
        removal = RemovalResult() if dry_run else self._deleter.remove_unused(catalog)
        report = RoundReport(
            number=number,
            found=found,
            unused={key: names for key, names in unused.items() if names},
            removed=removal.removed_counts(),
            failed=removal.failed_counts(),
            deleted_files=tuple(removal.deleted_files),
            scan=stats,
            usage=usage,
        )
        self._trail.record(
            "round",
            number=number,
            found=found,
            unused=report.unused_count,
            removed=report.removed_count,
            failed=removal.failed_count,
        )
        return report


def create_loop(
    project_root: str | Path,
    cli_overrides: CliOverrides | None = None,
    should_cancel: CancelCheck | None = None,
) -> ConvergenceLoop:
    """Create a configured loop that also appends events to the audit log."""
    config = load_effective_config(Path(project_root).resolve(), overrides=cli_overrides)
    trail = AuditTrail(logger=JsonlAuditLogger(path=config.data_dir / AUDIT_LOG_NAME))
    return ConvergenceLoop(config, trail=trail, should_cancel=should_cancel)
