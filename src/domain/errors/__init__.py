"""Domain errors package.

Usage:
    from src.domain.errors import AuditError, IllegalStateError, SyncError
"""

from src.domain.errors.audit_error import AuditError
from src.domain.errors.illegal_state_error import IllegalStateError
from src.domain.errors.sync_error import SyncError

__all__ = ["AuditError", "IllegalStateError", "SyncError"]
