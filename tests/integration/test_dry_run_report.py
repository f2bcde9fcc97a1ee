from __future__ import annotations

import json
from pathlib import Path

from resprune.config import CliOverrides
from resprune.prune import AUDIT_LOG_NAME, create_loop


def _project(root: Path) -> Path:
    (root / "res" / "values").mkdir(parents=True)
    (root / "res" / "drawable").mkdir()
    (root / "AndroidManifest.xml").write_text(
        '<application android:label="@string/label" />\n', encoding="utf-8"
    )
    strings = root / "res" / "values" / "strings.xml"
    strings.write_text(
        "<resources>\n"
        '    <string name="label">Label</string>\n'
        '    <string name="stale">Stale</string>\n'
        "</resources>\n",
        encoding="utf-8",
    )
    (root / "res" / "drawable" / "unused.png").write_bytes(b"\x89PNG")
    return strings


def test_dry_run_reports_one_round_without_changes(tmp_path: Path) -> None:
    project = tmp_path / "app"
    strings = _project(project)
    original = strings.read_bytes()
    backup = tmp_path / "backup"
    (backup / "previous").mkdir(parents=True)
    loop = create_loop(project, cli_overrides=CliOverrides(backup_dir=backup))

    report = loop.run(dry_run=True)

    assert report.dry_run is True
    assert len(report.rounds) == 1
    assert report.total_removed == 0
    assert report.rounds[0].found["string"] == 2
    assert report.rounds[0].unused == {"string": ("stale",), "drawable": ("unused",)}
    assert report.rounds[0].removed == {}
    assert strings.read_bytes() == original
    assert (project / "res" / "drawable" / "unused.png").exists()
    assert (backup / "previous").exists()


def test_report_and_audit_log_are_json(tmp_path: Path) -> None:
    project = tmp_path / "app"
    _project(project)
    loop = create_loop(project, cli_overrides=CliOverrides(backup_dir=tmp_path / "backup"))

    payload = loop.run().to_dict()

    encoded = json.loads(json.dumps(payload))
    assert encoded["run_id"] == loop.trail.run_id
    assert encoded["total_removed"] == 2
    assert encoded["removed_by_category"] == {"string": 1, "drawable": 1}
    assert encoded["rounds"][0]["unused"] == {"string": ["stale"], "drawable": ["unused"]}
    assert encoded["deleted_files"] == [
        (project.resolve() / "res" / "drawable" / "unused.png").as_posix()
    ]

    audit_path = project / ".resprune" / AUDIT_LOG_NAME
    entries = [json.loads(line) for line in audit_path.read_text(encoding="utf-8").splitlines()]
    actions = [entry["action"] for entry in entries]
    assert actions.count("round") == 2
    assert actions[-1] == "run"
    assert {entry["run_id"] for entry in entries} == {loop.trail.run_id}


def test_dry_run_reports_usage_count_of_every_resource(tmp_path: Path) -> None:
    project = tmp_path / "app"
    _project(project)
    (project / "Main.kt").write_text(
        "val a = getString(R.string.label)\nval b = getString(R.string.label)\n",
        encoding="utf-8",
    )
    loop = create_loop(project, cli_overrides=CliOverrides(backup_dir=tmp_path / "backup"))

    report = loop.run(dry_run=True)

    assert report.rounds[0].usage == {
        "string": {"label": 3, "stale": 0},
        "drawable": {"unused": 0},
    }
    assert report.to_dict()["rounds"][0]["usage"]["string"] == {"label": 3, "stale": 0}


def test_pruning_rounds_do_not_carry_usage(tmp_path: Path) -> None:
    project = tmp_path / "app"
    _project(project)
    loop = create_loop(project, cli_overrides=CliOverrides(backup_dir=tmp_path / "backup"))

    report = loop.run()

    assert all(round_report.usage == {} for round_report in report.rounds)
