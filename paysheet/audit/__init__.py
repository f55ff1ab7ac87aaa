"""Audit logging package."""

from paysheet.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
