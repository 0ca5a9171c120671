"""Audit log adapters."""

from .local import LocalAuditLog
from .memory import InMemoryAuditLog

__all__ = ["InMemoryAuditLog", "LocalAuditLog"]
