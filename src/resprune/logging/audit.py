"""Structured JSONL audit log utilities."""

from __future__ import annotations

import json
import uuid
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from pathlib import Path


@dataclass(slots=True, frozen=True)
class AuditEvent:
    """Single recorded pipeline action."""

    timestamp: str
    run_id: str
    action: str
    ok: bool
    error_code: str | None
    metadata: dict[str, object]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_run_id() -> str:
    """Return a short identifier for one top-level run."""
    return f"run-{uuid.uuid4().hex[:12]}"


class JsonlAuditLogger:
    """Append-only JSONL audit logger and bounded reader."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    def append(self, event: AuditEvent) -> None:
        """Append an event as one JSON object per line."""
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(event), sort_keys=True))
            handle.write("\n")

    def read(self, since: str | None = None, limit: int = 50) -> list[dict[str, object]]:
        """Read recent events, optionally filtered by timestamp lower bound."""
        if limit < 1:
            return []
        entries: list[dict[str, object]] = []
        if not self._path.exists():
            return entries
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                stripped = line.strip()
                if not stripped:
                    continue
                try:
                    record = json.loads(stripped)
                except json.JSONDecodeError:
                    continue
                if since is not None:
                    ts = record.get("timestamp")
                    if not isinstance(ts, str) or ts < since:
                        continue
                entries.append(record)
        if len(entries) <= limit:
            return entries
        return entries[-limit:]


@dataclass(slots=True)
class AuditTrail:
    """Run-scoped event recorder shared by indexer, scanner and deleter.

    Events are always kept in memory; when a logger is attached they are also
    appended to its JSONL file. Warnings are the human-readable subset surfaced
    in the final report.
    """

    logger: JsonlAuditLogger | None = None
    run_id: str = field(default_factory=new_run_id)
    events: list[AuditEvent] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def record(
        self,
        action: str,
        *,
        ok: bool = True,
        error_code: str | None = None,
        **metadata: object,
    ) -> AuditEvent:
        """Record one action with sorted, JSON-friendly metadata."""
        event = AuditEvent(
            timestamp=utc_timestamp(),
            run_id=self.run_id,
            action=action,
            ok=ok,
            error_code=error_code,
            metadata={key: _plain(metadata[key]) for key in sorted(metadata)},
        )
        self.events.append(event)
        if self.logger is not None:
            self.logger.append(event)
        return event

    def warn(self, action: str, error_code: str, message: str, **metadata: object) -> None:
        """Record a failed action and keep its message for the report."""
        self.warnings.append(message)
        self.record(action, ok=False, error_code=error_code, message=message, **metadata)

    def failures(self, action: str | None = None) -> list[AuditEvent]:
        """Return failed events, optionally restricted to one action."""
        return [
            event
            for event in self.events
            if not event.ok and (action is None or event.action == action)
        ]


def _plain(value: object) -> object:
    if isinstance(value, Path):
        return value.as_posix()
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _plain(item) for key, item in value.items()}
    return value
