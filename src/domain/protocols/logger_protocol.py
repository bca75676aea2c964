"""LoggerProtocol definition for structured logging.

Backend-agnostic structured logging port. Every call is a message plus
key-value context.

Log Levels:
    - DEBUG: diagnostic detail
    - INFO: normal pipeline activity (event published, instance signed)
    - WARNING: isolated handler failure, validation rejection
    - ERROR: partition write failed, audit store write failed
    - CRITICAL: audit entry dropped (queue full)

Security:
    - NEVER log regulated (PHI) values; log field ids, counts and opaque ids only

Usage:
    logger: LoggerProtocol = get_logger()
    logger.info("form_instance_submitted", form_instance_id=instance.id)

    handler_logger = logger.bind(handler="SynchronizationEventHandler")
    handler_logger.warning("dual_store_sync_failed", event_id=str(event.event_id))
"""

from __future__ import annotations

from typing import Any, Protocol


class LoggerProtocol(Protocol):
    """Protocol for structured logging adapters."""

    def debug(self, message: str, /, **context: Any) -> None:
        """Log a debug-level message."""
        ...

    def info(self, message: str, /, **context: Any) -> None:
        """Log an info-level message."""
        ...

    def warning(self, message: str, /, **context: Any) -> None:
        """Log a warning-level message."""
        ...

    def error(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log an error-level message.

        Args:
            message: Snake_case event name.
            error: Optional exception; adapters add error_type and error_message.
            **context: Structured key-value context fields.
        """
        ...

    def critical(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log a critical-level message.

        Reserved for compliance-relevant breakage such as a dropped audit entry.
        """
        ...

    def bind(self, **context: Any) -> "LoggerProtocol":
        """Return new logger with permanently bound context.

        The original logger is unchanged.
        """
        ...

    def with_context(self, **context: Any) -> "LoggerProtocol":
        """Alias for bind()."""
        ...
