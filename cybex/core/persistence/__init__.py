"""Persistence — the audit ledger."""

from cybex.core.persistence.audit import AuditEntry, AuditWriter

__all__ = ["AuditEntry", "AuditWriter"]
