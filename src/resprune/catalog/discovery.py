"""Deterministic directory walks for resource and source discovery."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path

from resprune.categories import CATEGORIES
from resprune.config import IndexConfig

WalkErrorHandler = Callable[[Path, OSError], None]


@dataclass(slots=True, frozen=True)
class DefinitionDir:
    """Resource directory matched by a category directory prefix."""

    prefix: str
    path: Path


def walk_files(
    root: Path,
    skip_dir_names: tuple[str, ...] = (),
    on_error: WalkErrorHandler | None = None,
) -> Iterator[Path]:
    """Yield regular files under root in sorted path order, pruning skipped directories."""
    skipped = {name.lower() for name in skip_dir_names}
    stack: list[Path] = [root]
    while stack:
        current = stack.pop()
        entries = _sorted_entries(current, on_error)
        if entries is None:
            continue
        subdirs: list[Path] = []
        for entry in entries:
            full_path = Path(entry.path)
            if entry.is_dir(follow_symlinks=False):
                if entry.name.lower() in skipped:
                    continue
                subdirs.append(full_path)
                continue
            if entry.is_file(follow_symlinks=False):
                yield full_path
        stack.extend(reversed(subdirs))


def find_definition_dirs(
    root: Path,
    config: IndexConfig,
    on_error: WalkErrorHandler | None = None,
) -> list[DefinitionDir]:
    """Return category directories (values*, drawable*, layout*) inside every resource dir."""
    prefixes = tuple(dict.fromkeys(category.directory_prefix for category in CATEGORIES))
    skipped = {name.lower() for name in config.skip_dir_names}
    found: list[DefinitionDir] = []
    stack: list[Path] = [root]
    while stack:
        current = stack.pop()
        entries = _sorted_entries(current, on_error)
        if entries is None:
            continue
        subdirs: list[Path] = []
        for entry in entries:
            if not entry.is_dir(follow_symlinks=False):
                continue
            if entry.name.lower() in skipped:
                continue
            if entry.name == config.resource_dir_name:
                found.extend(_category_dirs(Path(entry.path), prefixes, skipped, on_error))
                continue
            subdirs.append(Path(entry.path))
        stack.extend(reversed(subdirs))
    return found


def _category_dirs(
    resource_dir: Path,
    prefixes: tuple[str, ...],
    skipped: set[str],
    on_error: WalkErrorHandler | None,
) -> list[DefinitionDir]:
    entries = _sorted_entries(resource_dir, on_error)
    if entries is None:
        return []
    output: list[DefinitionDir] = []
    for entry in entries:
        if not entry.is_dir(follow_symlinks=False) or entry.name.lower() in skipped:
            continue
        for prefix in prefixes:
            if entry.name.startswith(prefix):
                output.append(DefinitionDir(prefix=prefix, path=Path(entry.path)))
                break
    return output


def _sorted_entries(
    directory: Path, on_error: WalkErrorHandler | None
) -> list[os.DirEntry[str]] | None:
    try:
        with os.scandir(directory) as entries:
            return sorted(entries, key=lambda item: item.name)
    except OSError as error:
        if on_error is not None:
            on_error(directory, error)
        return None
