"""Typed models for the per-round resource catalog."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from resprune.categories import CATEGORIES, ResourceCategory, category_by_key


@dataclass(slots=True)
class ResourceRecord:
    """One declared resource and its usage counter for the current round."""

    category: ResourceCategory
    name: str
    uses: int = 0
    files: list[Path] = field(default_factory=list)

    @property
    def is_used(self) -> bool:
        return self.uses > 0

    def mark_used(self) -> None:
        """Count one referencing line."""
        self.uses += 1

    def add_file(self, path: Path) -> None:
        """Record a file that declares, or is, this resource."""
        if path not in self.files:
            self.files.append(path)

    def defining_paths(self) -> tuple[Path, ...]:
        """Return every file that declares or is this resource, first seen first."""
        return tuple(self.files)


class Catalog:
    """Category -> name -> record mapping owned by one pipeline round."""

    def __init__(self) -> None:
        self._records: dict[str, dict[str, ResourceRecord]] = {
            category.key: {} for category in CATEGORIES
        }

    def register(self, category: ResourceCategory, name: str) -> tuple[ResourceRecord, bool]:
        """Return the record for `name`, creating it on first declaration."""
        bucket = self._records[category.key]
        record = bucket.get(name)
        if record is not None:
            return record, False
        record = ResourceRecord(category=category, name=name)
        bucket[name] = record
        return record, True

    def get(self, category: ResourceCategory | str, name: str) -> ResourceRecord | None:
        """Return a record by category and name."""
        return self._bucket(category).get(name)

    def records(self, category: ResourceCategory | str) -> list[ResourceRecord]:
        """Return a category's records ordered by name."""
        bucket = self._bucket(category)
        return [bucket[name] for name in sorted(bucket)]

    def names(self, category: ResourceCategory | str) -> tuple[str, ...]:
        """Return a category's names in sorted order."""
        return tuple(sorted(self._bucket(category)))

    def unused(self, category: ResourceCategory | str) -> list[ResourceRecord]:
        """Return zero-counter records of a category, ordered by name."""
        return [record for record in self.records(category) if not record.is_used]

    def evict(self, category: ResourceCategory | str, name: str) -> None:
        """Drop a record for the rest of the round."""
        self._bucket(category).pop(name, None)

    def reset_counters(self) -> None:
        """Zero every remaining counter for the next round."""
        for record in self:
            record.uses = 0

    def counts(self) -> dict[str, int]:
        """Return record counts per category key, in table order."""
        return {key: len(bucket) for key, bucket in self._records.items()}

    def total(self) -> int:
        return sum(len(bucket) for bucket in self._records.values())

    def key_sets(self) -> dict[str, frozenset[str]]:
        """Return the declared names per category key."""
        return {key: frozenset(bucket) for key, bucket in self._records.items()}

    def usage(self) -> dict[str, dict[str, int]]:
        """Return every record's counter per category key; empty categories are omitted."""
        return {
            category.key: {record.name: record.uses for record in self.records(category)}
            for category in CATEGORIES
            if self._records[category.key]
        }

    def __iter__(self) -> Iterator[ResourceRecord]:
        for category in CATEGORIES:
            yield from self.records(category)

    def __len__(self) -> int:
        return self.total()

    def _bucket(self, category: ResourceCategory | str) -> dict[str, ResourceRecord]:
        key = category if isinstance(category, str) else category.key
        if key not in self._records:
            category_by_key(key)
        return self._records[key]
