"""Build a fresh resource catalog from the project tree."""

from __future__ import annotations

from pathlib import Path

from resprune.catalog.declarations import match_declarations
from resprune.catalog.discovery import DefinitionDir, find_definition_dirs, walk_files
from resprune.catalog.models import Catalog
from resprune.categories import DRAWABLE, LAYOUT, ResourceCategory
from resprune.config import IndexConfig
from resprune.logging import AuditTrail

DEFINITION_FILE_EXTENSION = ".xml"
NINE_PATCH_QUALIFIER = ".9"


def derived_resource_name(file_name: str, extensions: tuple[str, ...]) -> str | None:
    """Return the logical name of a filename-derived resource, or None if it does not qualify.

    `icon.png`, `icon.9.png` and `icon.xml` all map to `icon`.
    """
    lowered = file_name.lower()
    for extension in extensions:
        if lowered.endswith(extension) and len(file_name) > len(extension):
            stem = file_name[: -len(extension)]
            if stem.endswith(NINE_PATCH_QUALIFIER):
                stem = stem[: -len(NINE_PATCH_QUALIFIER)]
            return stem or None
    return None


class ResourceIndexer:
    """Derives the catalog from definition files and resource file names."""

    def __init__(self, config: IndexConfig, trail: AuditTrail | None = None) -> None:
        self._config = config
        self._trail = trail or AuditTrail()
        self._excluded = frozenset(config.exclude_files)
        self._drawable_extensions = tuple(
            dict.fromkeys((*config.image_extensions, DEFINITION_FILE_EXTENSION))
        )

    def index(self, root: Path) -> Catalog:
        """Return a catalog with every declared resource and zeroed counters."""
        catalog = Catalog()
        definition_dirs = find_definition_dirs(root, self._config, on_error=self._unreadable_dir)
        for definition_dir in definition_dirs:
            if definition_dir.prefix == LAYOUT.directory_prefix:
                self._index_file_resources(
                    catalog, definition_dir, LAYOUT, (DEFINITION_FILE_EXTENSION,)
                )
            elif definition_dir.prefix == DRAWABLE.directory_prefix:
                self._index_file_resources(
                    catalog, definition_dir, DRAWABLE, self._drawable_extensions
                )
            else:
                self._index_definition_dir(catalog, definition_dir)
        return catalog

    def index_definition_file(self, catalog: Catalog, path: Path) -> bool:
        """Register inline declarations of one definition file; False when unreadable."""
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as error:
            self._trail.warn(
                "index_skip",
                "UNREADABLE_FILE",
                f"Skipped unreadable definition file {path}: {error}",
                path=path,
            )
            return False
        for line in text.splitlines():
            for match in match_declarations(line):
                record, _ = catalog.register(match.category, match.name)
                record.add_file(path)
        return True

    def _index_definition_dir(self, catalog: Catalog, definition_dir: DefinitionDir) -> None:
        for path in self._walk(definition_dir.path):
            if path.suffix.lower() != DEFINITION_FILE_EXTENSION:
                continue
            self.index_definition_file(catalog, path)

    def _index_file_resources(
        self,
        catalog: Catalog,
        definition_dir: DefinitionDir,
        category: ResourceCategory,
        extensions: tuple[str, ...],
    ) -> None:
        for path in self._walk(definition_dir.path):
            name = derived_resource_name(path.name, extensions)
            if name is None:
                continue
            record, _ = catalog.register(category, name)
            record.add_file(path)

    def _walk(self, directory: Path) -> list[Path]:
        return [
            path
            for path in walk_files(
                directory, self._config.skip_dir_names, on_error=self._unreadable_dir
            )
            if path.name not in self._excluded
        ]

    def _unreadable_dir(self, path: Path, error: OSError) -> None:
        self._trail.warn(
            "index_skip",
            "UNREADABLE_DIRECTORY",
            f"Treated unreadable directory {path} as empty: {error}",
            path=path,
        )
