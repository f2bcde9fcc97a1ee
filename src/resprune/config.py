"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tempfile
import tomllib
from dataclasses import dataclass
from pathlib import Path

CONFIG_FILE_NAME = "resprune.toml"
DEFAULT_MANIFEST_PATH = "AndroidManifest.xml"
DEFAULT_RESOURCE_DIR_NAME = "res"
DEFAULT_SKIP_DIR_NAMES = ("build", ".git", ".gradle", ".idea")
DEFAULT_EXCLUDE_FILES = ("analytics.xml",)
DEFAULT_IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".webp")
DEFAULT_MARKUP_EXTENSIONS = (".xml",)
DEFAULT_CODE_EXTENSIONS = (".java", ".kt")
DEFAULT_DATA_DIR_NAME = ".resprune"
DEFAULT_BACKUP_DIR_NAME = "resprune-backup"


@dataclass(slots=True, frozen=True)
class IndexConfig:
    """Where resources are declared and which files are ignored."""

    resource_dir_name: str = DEFAULT_RESOURCE_DIR_NAME
    skip_dir_names: tuple[str, ...] = DEFAULT_SKIP_DIR_NAMES
    exclude_files: tuple[str, ...] = DEFAULT_EXCLUDE_FILES
    image_extensions: tuple[str, ...] = DEFAULT_IMAGE_EXTENSIONS


@dataclass(slots=True, frozen=True)
class ScanConfig:
    """Which files are searched for references."""

    markup_extensions: tuple[str, ...] = DEFAULT_MARKUP_EXTENSIONS
    code_extensions: tuple[str, ...] = DEFAULT_CODE_EXTENSIONS
    skip_dir_names: tuple[str, ...] = DEFAULT_SKIP_DIR_NAMES
    extra_roots: tuple[Path, ...] = ()


@dataclass(slots=True, frozen=True)
class PruneConfig:
    """Fully merged pruning configuration."""

    project_root: Path
    data_dir: Path
    backup_dir: Path
    manifest_path: str
    index: IndexConfig
    scan: ScanConfig

    @property
    def manifest(self) -> Path:
        """Return the absolute manifest location."""
        return self.project_root / self.manifest_path

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot for reports."""
        return {
            "project_root": str(self.project_root),
            "data_dir": str(self.data_dir),
            "backup_dir": str(self.backup_dir),
            "manifest_path": self.manifest_path,
            "index": {
                "resource_dir_name": self.index.resource_dir_name,
                "skip_dir_names": list(self.index.skip_dir_names),
                "exclude_files": list(self.index.exclude_files),
                "image_extensions": list(self.index.image_extensions),
            },
            "scan": {
                "markup_extensions": list(self.scan.markup_extensions),
                "code_extensions": list(self.scan.code_extensions),
                "extra_roots": [str(root) for root in self.scan.extra_roots],
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    data_dir: Path | None = None
    backup_dir: Path | None = None
    manifest_path: str | None = None
    extra_roots: tuple[Path, ...] = ()


def default_backup_dir() -> Path:
    """Return the well-known session backup location."""
    return Path(tempfile.gettempdir()) / DEFAULT_BACKUP_DIR_NAME


def default_config(project_root: Path) -> PruneConfig:
    """Build default config for a given project root."""
    resolved_root = project_root.resolve()
    return PruneConfig(
        project_root=resolved_root,
        data_dir=resolved_root / DEFAULT_DATA_DIR_NAME,
        backup_dir=default_backup_dir(),
        manifest_path=DEFAULT_MANIFEST_PATH,
        index=IndexConfig(),
        scan=ScanConfig(),
    )


def load_project_config_file(project_root: Path) -> dict[str, object]:
    """Load optional resprune.toml from the project root."""
    config_path = project_root / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _extensions(value: object, section: str, field: str) -> tuple[str, ...]:
    raw = _tuple_of_strings(value, section, field)
    output: list[str] = []
    for item in raw:
        if not item.startswith(".") or len(item) < 2:
            raise ValueError(
                f"Config field '{section}.{field}' entries must look like '.ext'."
            )
        output.append(item.lower())
    return tuple(output)


def _non_empty_string(value: object, section: str, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Config field '{section}.{field}' must be a non-empty string.")
    return value


def _resolve_roots(project_root: Path, raw_roots: tuple[str | Path, ...]) -> tuple[Path, ...]:
    output: list[Path] = []
    for raw in raw_roots:
        candidate = Path(raw)
        if not candidate.is_absolute():
            candidate = project_root / candidate
        resolved = candidate.resolve()
        if resolved not in output:
            output.append(resolved)
    return tuple(output)


def merge_config(
    base: PruneConfig, project_payload: dict[str, object], overrides: CliOverrides
) -> PruneConfig:
    """Merge defaults, project config, then CLI/startup overrides."""
    project_table = _get_table(project_payload, "project")
    index_table = _get_table(project_payload, "index")
    scan_table = _get_table(project_payload, "scan")

    manifest_path = base.manifest_path
    if "manifest_path" in project_table:
        manifest_path = _non_empty_string(
            project_table["manifest_path"], "project", "manifest_path"
        )
    backup_dir = base.backup_dir
    if "backup_dir" in project_table:
        backup_dir = Path(
            _non_empty_string(project_table["backup_dir"], "project", "backup_dir")
        )
        if not backup_dir.is_absolute():
            backup_dir = base.project_root / backup_dir

    resource_dir_name = base.index.resource_dir_name
    if "resource_dir_name" in index_table:
        resource_dir_name = _non_empty_string(
            index_table["resource_dir_name"], "index", "resource_dir_name"
        )
    skip_dir_names = base.index.skip_dir_names
    if "skip_dir_names" in index_table:
        skip_dir_names = _tuple_of_strings(index_table["skip_dir_names"], "index", "skip_dir_names")
    exclude_files = base.index.exclude_files
    if "exclude_files" in index_table:
        exclude_files = _tuple_of_strings(index_table["exclude_files"], "index", "exclude_files")
    image_extensions = base.index.image_extensions
    if "image_extensions" in index_table:
        image_extensions = _extensions(
            index_table["image_extensions"], "index", "image_extensions"
        )

    markup_extensions = base.scan.markup_extensions
    if "markup_extensions" in scan_table:
        markup_extensions = _extensions(
            scan_table["markup_extensions"], "scan", "markup_extensions"
        )
    code_extensions = base.scan.code_extensions
    if "code_extensions" in scan_table:
        code_extensions = _extensions(scan_table["code_extensions"], "scan", "code_extensions")
    if set(markup_extensions) & set(code_extensions):
        raise ValueError(
            "Config fields 'scan.markup_extensions' and 'scan.code_extensions' must not overlap."
        )
    extra_roots = base.scan.extra_roots
    if "extra_roots" in scan_table:
        extra_roots = _resolve_roots(
            base.project_root,
            _tuple_of_strings(scan_table["extra_roots"], "scan", "extra_roots"),
        )

    merged = PruneConfig(
        project_root=base.project_root,
        data_dir=base.data_dir,
        backup_dir=backup_dir,
        manifest_path=manifest_path,
        index=IndexConfig(
            resource_dir_name=resource_dir_name,
            skip_dir_names=skip_dir_names,
            exclude_files=exclude_files,
            image_extensions=image_extensions,
        ),
        scan=ScanConfig(
            markup_extensions=markup_extensions,
            code_extensions=code_extensions,
            skip_dir_names=skip_dir_names,
            extra_roots=extra_roots,
        ),
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: PruneConfig, overrides: CliOverrides) -> PruneConfig:
    """Apply startup overrides at highest precedence."""
    manifest_path = config.manifest_path
    if overrides.manifest_path is not None:
        manifest_path = _non_empty_string(overrides.manifest_path, "overrides", "manifest_path")
    extra_roots = config.scan.extra_roots
    if overrides.extra_roots:
        extra_roots = _resolve_roots(config.project_root, extra_roots + overrides.extra_roots)
    data_dir = overrides.data_dir or config.data_dir
    backup_dir = (overrides.backup_dir or config.backup_dir).resolve()
    if backup_dir.is_relative_to(config.project_root):
        raise ValueError(
            "Config field 'project.backup_dir' must be outside the project root; "
            "backups inside it would be indexed and scanned."
        )
    for root in (config.project_root, *extra_roots):
        if root.is_relative_to(backup_dir):
            raise ValueError(
                "Config field 'project.backup_dir' must not contain the project root "
                f"or a search root ({root}); it is cleared at the start of each run."
            )
    return PruneConfig(
        project_root=config.project_root,
        data_dir=data_dir.resolve(),
        backup_dir=backup_dir,
        manifest_path=manifest_path,
        index=config.index,
        scan=ScanConfig(
            markup_extensions=config.scan.markup_extensions,
            code_extensions=config.scan.code_extensions,
            skip_dir_names=config.scan.skip_dir_names,
            extra_roots=extra_roots,
        ),
    )


def load_effective_config(project_root: Path, overrides: CliOverrides | None = None) -> PruneConfig:
    """Load effective config using merge order defaults -> project config -> overrides."""
    resolved_root = project_root.resolve()
    base = default_config(resolved_root)
    payload = load_project_config_file(resolved_root)
    return merge_config(base, payload, overrides or CliOverrides())
