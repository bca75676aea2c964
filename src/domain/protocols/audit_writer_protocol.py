"""Audit writer protocol (port).

A non-blocking sink for audit entries. ``submit`` only enqueues; it never
waits on the audit store and never raises, so it cannot add latency or
failure modes to the operation being audited.
"""

from typing import Protocol

from src.domain.entities import AuditLogEntry


class AuditWriterProtocol(Protocol):
    """Protocol for the audit log writer."""

    def submit(self, entry: AuditLogEntry) -> bool:
        """Enqueue ``entry``.

        Returns:
            True when queued, False when dropped (queue full).
        """
        ...
