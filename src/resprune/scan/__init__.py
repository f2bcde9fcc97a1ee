"""Usage scanning package."""

from .matching import contains_any_token, contains_token, find_token, is_code_comment
from .scanner import (
    CategoryTokens,
    ScanCancelledError,
    ScanStats,
    UsageScanner,
    build_token_table,
    scan_line,
)

__all__ = [
    "CategoryTokens",
    "ScanCancelledError",
    "ScanStats",
    "UsageScanner",
    "build_token_table",
    "contains_any_token",
    "contains_token",
    "find_token",
    "is_code_comment",
    "scan_line",
]
