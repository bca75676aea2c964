"""Failed synchronization record states."""

from enum import Enum


class FailedSyncStatus(str, Enum):
    """Status of a failed dual-store write awaiting the retry sweep.

    PENDING: captured, not yet retried
    RETRIED: redriven at least once (retry_count > 0)
    ABANDONED: given up on; needs manual reconciliation
    """

    PENDING = "pending"
    RETRIED = "retried"
    ABANDONED = "abandoned"
