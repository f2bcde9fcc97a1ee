"""Command-line entrypoint that runs the pruning loop and prints a JSON report."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import TextIO

from resprune.config import CliOverrides
from resprune.prune import BackupPathError, ManifestNotFoundError, create_loop

EXIT_OK = 0
EXIT_PRECONDITION = 2


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for a pruning run."""
    parser = argparse.ArgumentParser(prog="resprune")
    parser.add_argument("--project-root", required=False, default=".")
    parser.add_argument(
        "--extra-root",
        dest="extra_roots",
        action="append",
        default=[],
        help="Additional tree searched for references (repeatable).",
    )
    parser.add_argument("--manifest-path", required=False, default=None)
    parser.add_argument("--data-dir", required=False, default=None)
    parser.add_argument("--backup-dir", required=False, default=None)
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report unused resources after one round without deleting anything.",
    )
    return parser


def main(
    argv: list[str] | None = None,
    out_stream: TextIO | None = None,
    err_stream: TextIO | None = None,
) -> int:
    """Entrypoint for the resprune command."""
    out = out_stream or sys.stdout
    err = err_stream or sys.stderr
    args = build_arg_parser().parse_args(argv)
    overrides = CliOverrides(
        data_dir=Path(args.data_dir).resolve() if args.data_dir is not None else None,
        backup_dir=Path(args.backup_dir).resolve() if args.backup_dir is not None else None,
        manifest_path=args.manifest_path,
        extra_roots=tuple(Path(root).resolve() for root in args.extra_roots),
    )
    try:
        loop = create_loop(project_root=args.project_root, cli_overrides=overrides)
    except ValueError as error:
        err.write(f"Invalid configuration: {error}\n")
        return EXIT_PRECONDITION
    try:
        report = loop.run(dry_run=args.dry_run)
    except BackupPathError as error:
        err.write(f"{error.reason}\n{error.hint}\n")
        return EXIT_PRECONDITION
    except ManifestNotFoundError as error:
        err.write(
            f"{error}\nThe project root should contain the Android manifest "
            "(see --manifest-path).\n"
        )
        return EXIT_PRECONDITION
    out.write(f"{json.dumps(report.to_dict(), sort_keys=True, indent=2)}\n")
    out.flush()
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
