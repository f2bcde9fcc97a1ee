from __future__ import annotations

from pathlib import Path

from resprune.logging import AuditTrail


def test_trail_keeps_events_in_memory_without_logger() -> None:
    trail = AuditTrail()

    trail.record("round", number=1, removed=2)
    trail.warn("scan_skip", "UNREADABLE_FILE", "Skipped unreadable file a.kt", path="a.kt")
    trail.warn("remove", "BACKUP_FAILED", "Kept drawable 'icon'")

    assert [event.action for event in trail.events] == ["round", "scan_skip", "remove"]
    assert trail.warnings == ["Skipped unreadable file a.kt", "Kept drawable 'icon'"]
    assert [event.error_code for event in trail.failures()] == [
        "UNREADABLE_FILE",
        "BACKUP_FAILED",
    ]
    assert [event.action for event in trail.failures("remove")] == ["remove"]
    assert trail.failures()[0].metadata == {
        "message": "Skipped unreadable file a.kt",
        "path": "a.kt",
    }


def test_trail_metadata_converts_nested_values() -> None:
    event = AuditTrail().record("remove", paths=[Path("res/values/strings.xml")], found={"a": 1})

    assert event.metadata == {"found": {"a": 1}, "paths": ["res/values/strings.xml"]}
