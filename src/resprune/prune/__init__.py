"""Safe deletion and the convergence loop."""

from .backup import BACKUP_MARKER_NAME, BackupPathError, BackupStore, mirrored_backup_path
from .deleter import (
    RemovalResult,
    SafeDeleter,
    read_definition_lines,
    write_definition_text,
)
from .loop import (
    AUDIT_LOG_NAME,
    ConvergenceLoop,
    ManifestNotFoundError,
    PruneReport,
    RoundReport,
    create_loop,
)
from .rewrite import PendingBlock, RewriteResult, open_block_after, rewrite_definition_lines

__all__ = [
    "AUDIT_LOG_NAME",
    "BACKUP_MARKER_NAME",
    "BackupPathError",
    "BackupStore",
    "ConvergenceLoop",
    "ManifestNotFoundError",
    "PendingBlock",
    "PruneReport",
    "RemovalResult",
    "RewriteResult",
    "RoundReport",
    "SafeDeleter",
    "create_loop",
    "mirrored_backup_path",
    "open_block_after",
    "read_definition_lines",
    "rewrite_definition_lines",
    "write_definition_text",
]
