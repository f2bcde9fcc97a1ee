"""Structured logging utilities."""

from .audit import AuditEvent, AuditTrail, JsonlAuditLogger, new_run_id, utc_timestamp

__all__ = ["AuditEvent", "AuditTrail", "JsonlAuditLogger", "new_run_id", "utc_timestamp"]
