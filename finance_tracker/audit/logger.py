"""
Audit Logger

DESIGN DECISION: Every ledger mutation and image-edit request is logged.
This provides:
1. Traceability of ledger changes
2. Debugging capability for the silent recovery paths
3. A short in-session history the UI can show

The audit logger:
- Never raises - logging must not break a ledger mutation
- Keeps the most recent events in memory
- Supports correlation IDs to trace related events
"""

import logging
import sys
from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from finance_tracker.models.audit import AuditEvent, AuditEventBuilder


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(debug: bool = False) -> None:
    """
    Attach a stderr handler to the stdlib root logger.

    structlog renders to JSON; the stdlib handler only has to print the message.
    Entrypoints call this once at startup. Library code never does.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=logging.DEBUG if debug else logging.INFO,
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events to the structured local log and keeps the most recent
    ones in memory.
    """

    def __init__(self, history_size: int = 200):
        self._logger = structlog.get_logger(__name__)
        self._history: deque[AuditEvent] = deque(maxlen=history_size)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        self._history.append(event)
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def recent_events(self, limit: int = 50) -> list[AuditEvent]:
        """Most recent events, newest first."""
        events = list(self._history)[-limit:]
        events.reverse()
        return events

    def log_ledger_loaded(self, slot_name: str, count: int) -> None:
        self.log(AuditEventBuilder.ledger_loaded(slot_name=slot_name, count=count))

    def log_ledger_load_failed(self, slot_name: str, error: Exception) -> None:
        self.log(AuditEventBuilder.ledger_load_failed(slot_name=slot_name, error=error))

    def log_ledger_save_failed(self, count: int, error: Exception) -> None:
        self.log(AuditEventBuilder.ledger_save_failed(count=count, error=error))

    def log_ledger_flushed(self, count: int) -> None:
        self.log(AuditEventBuilder.ledger_flushed(count=count))

    def log_transaction_added(
        self,
        transaction_id: str,
        kind: str,
        amount: str,
        occurred_on: str,
    ) -> None:
        """Log a new ledger entry."""
        self.log(AuditEventBuilder.transaction_added(
            transaction_id=transaction_id,
            kind=kind,
            amount=amount,
            occurred_on=occurred_on,
        ))

    def log_transaction_removed(self, transaction_id: str) -> None:
        self.log(AuditEventBuilder.transaction_removed(transaction_id=transaction_id))

    def log_image_edit_requested(
        self,
        model_name: str,
        mime_type: str,
        instruction_length: int,
        correlation_id: UUID,
    ) -> None:
        """Log an outbound image edit request."""
        self.log(AuditEventBuilder.image_edit_requested(
            model_name=model_name,
            mime_type=mime_type,
            instruction_length=instruction_length,
            correlation_id=correlation_id,
        ))

    def log_image_edit_completed(self, mime_type: str, correlation_id: UUID) -> None:
        self.log(AuditEventBuilder.image_edit_completed(
            mime_type=mime_type,
            correlation_id=correlation_id,
        ))

    def log_image_edit_empty(self, correlation_id: UUID) -> None:
        self.log(AuditEventBuilder.image_edit_empty(correlation_id=correlation_id))

    def log_configuration_error(
        self,
        setting: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a missing or invalid setting."""
        self.log(AuditEventBuilder.configuration_error(
            setting=setting,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_external_service_error(
        self,
        service: str,
        error: Exception,
        correlation_id: UUID,
    ) -> None:
        """Log external service error."""
        self.log(AuditEventBuilder.external_service_error(
            service=service,
            error=error,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., an image edit).
    Pass it through all subsequent operations.
    """
    return uuid4()
