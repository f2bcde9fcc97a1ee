"""Reference counting over markup and code files."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path

from resprune.catalog import Catalog, ResourceRecord, walk_files
from resprune.categories import CATEGORIES, Dialect, ResourceCategory
from resprune.config import ScanConfig
from resprune.logging import AuditTrail
from resprune.scan.matching import contains_any_token, is_code_comment

CancelCheck = Callable[[], bool]


class ScanCancelledError(Exception):
    """Raised between files when the caller asks the scan to stop."""


@dataclass(slots=True, frozen=True)
class ScanStats:
    """Counters for one scan pass."""

    files_scanned: int
    files_skipped: int
    lines_scanned: int
    references: int


@dataclass(slots=True, frozen=True)
class CategoryTokens:
    """Precomputed reference tokens of one category for one dialect."""

    category: ResourceCategory
    anchors: tuple[str, ...]
    entries: tuple[tuple[ResourceRecord, tuple[str, ...]], ...]


def build_token_table(catalog: Catalog, dialect: Dialect) -> tuple[CategoryTokens, ...]:
    """Build per-category token lists for every record in the catalog."""
    table: list[CategoryTokens] = []
    for category in CATEGORIES:
        records = catalog.records(category)
        if not records:
            continue
        entries = tuple((record, category.tokens(record.name, dialect)) for record in records)
        table.append(
            CategoryTokens(
                category=category,
                anchors=category.anchors(dialect),
                entries=entries,
            )
        )
    return tuple(table)


def scan_line(line: str, dialect: Dialect, table: Sequence[CategoryTokens]) -> int:
    """Increment every record referenced on the line; return the number incremented.

    Each category is tested independently and each record counts at most once
    per line.
    """
    if dialect is Dialect.CODE and is_code_comment(line):
        return 0
    incremented = 0
    for group in table:
        if not any(anchor in line for anchor in group.anchors):
            continue
        alias = group.category.markup_alias if dialect is Dialect.MARKUP else None
        for record, tokens in group.entries:
            if contains_any_token(line, tokens) or (
                alias is not None and alias(line, record.name)
            ):
                record.mark_used()
                incremented += 1
    return incremented


class UsageScanner:
    """Scans search roots and bumps catalog counters for referenced resources."""

    def __init__(
        self,
        config: ScanConfig,
        trail: AuditTrail | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> None:
        self._config = config
        self._trail = trail or AuditTrail()
        self._should_cancel = should_cancel
        self._markup = frozenset(ext.lower() for ext in config.markup_extensions)
        self._code = frozenset(ext.lower() for ext in config.code_extensions)

    def dialect_for(self, path: Path) -> Dialect | None:
        """Return the dialect of a file by extension, or None when it is not scanned."""
        suffix = path.suffix.lower()
        if suffix in self._markup:
            return Dialect.MARKUP
        if suffix in self._code:
            return Dialect.CODE
        return None

    def scan(
        self,
        catalog: Catalog,
        search_roots: Iterable[Path],
        manifest: Path | None = None,
    ) -> ScanStats:
        """Scan the manifest and every eligible file under the search roots."""
        tables = {dialect: build_token_table(catalog, dialect) for dialect in Dialect}
        seen: set[Path] = set()
        files_scanned = 0
        files_skipped = 0
        lines_scanned = 0
        references = 0

        for path in self._candidate_files(search_roots, manifest):
            resolved = path.resolve()
            if resolved in seen:
                continue
            seen.add(resolved)
            dialect = self.dialect_for(path)
            if dialect is None:
                continue
            if self._should_cancel is not None and self._should_cancel():
                raise ScanCancelledError(f"Scan cancelled before {path}")
            try:
                text = path.read_text(encoding="utf-8", errors="replace")
            except OSError as error:
                files_skipped += 1
                self._trail.warn(
                    "scan_skip",
                    "UNREADABLE_FILE",
                    f"Skipped unreadable file {path}: {error}",
                    path=path,
                )
                continue
            files_scanned += 1
            table = tables[dialect]
            for line in text.splitlines():
                lines_scanned += 1
                references += scan_line(line, dialect, table)

        return ScanStats(
            files_scanned=files_scanned,
            files_skipped=files_skipped,
            lines_scanned=lines_scanned,
            references=references,
        )

    def scan_text(self, catalog: Catalog, text: str, dialect: Dialect) -> int:
        """Scan in-memory text; return the number of counter increments."""
        table = build_token_table(catalog, dialect)
        return sum(scan_line(line, dialect, table) for line in text.splitlines())

    def _candidate_files(
        self, search_roots: Iterable[Path], manifest: Path | None
    ) -> Iterator[Path]:
        if manifest is not None:
            if manifest.is_file():
                yield manifest
            else:
                self._trail.warn(
                    "scan_skip",
                    "MISSING_FILE",
                    f"Manifest {manifest} is not a file; skipped.",
                    path=manifest,
                )
        for root in search_roots:
            if root.is_file():
                yield root
                continue
            yield from walk_files(root, self._config.skip_dir_names, on_error=self._unreadable_dir)

    def _unreadable_dir(self, path: Path, error: OSError) -> None:
        self._trail.warn(
            "scan_skip",
            "UNREADABLE_DIRECTORY",
            f"Skipped unreadable directory {path}: {error}",
            path=path,
        )
