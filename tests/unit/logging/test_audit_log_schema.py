from __future__ import annotations

import json
from pathlib import Path

from resprune.logging import AuditTrail, JsonlAuditLogger


def test_audit_log_writes_jsonl_schema(tmp_path: Path) -> None:
    logger = JsonlAuditLogger(tmp_path / ".resprune" / "audit.jsonl")
    trail = AuditTrail(logger=logger)

    trail.record("delete_file", path=tmp_path / "res" / "drawable" / "icon.png", backup=None)

    lines = logger.path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    event = json.loads(lines[0])

    assert set(event.keys()) == {"action", "error_code", "metadata", "ok", "run_id", "timestamp"}
    assert event["run_id"] == trail.run_id
    assert event["run_id"].startswith("run-")
    assert event["action"] == "delete_file"
    assert event["ok"] is True
    assert event["error_code"] is None
    assert event["timestamp"].endswith("Z")
    assert list(event["metadata"]) == ["backup", "path"]
    assert event["metadata"]["path"] == (tmp_path / "res" / "drawable" / "icon.png").as_posix()


def test_audit_log_read_respects_limit_and_since(tmp_path: Path) -> None:
    logger = JsonlAuditLogger(tmp_path / "audit.jsonl")
    trail = AuditTrail(logger=logger)
    for number in range(1, 6):
        trail.record("round", number=number)
    with logger.path.open("a", encoding="utf-8") as handle:
        handle.write("not json\n\n")

    recent = logger.read(limit=2)

    assert [entry["metadata"]["number"] for entry in recent] == [4, 5]
    assert logger.read(limit=0) == []
    assert logger.read(since="9999") == []
    assert JsonlAuditLogger(tmp_path / "missing.jsonl").read() == []
