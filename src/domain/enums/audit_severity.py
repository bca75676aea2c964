"""Audit entry severity levels."""

from enum import Enum


class AuditSeverity(str, Enum):
    """Severity recorded on every audit entry.

    INFO for normal activity, WARNING for destructive or unusual activity,
    ERROR for failed operations, CRITICAL for compliance-relevant breakage.
    """

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
