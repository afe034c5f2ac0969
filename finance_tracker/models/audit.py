"""
Audit Models for the Finance Tracker

Every ledger mutation and every image-edit request produces an audit event.
This provides:
1. Traceability of what changed the ledger and when
2. Diagnostics for the silent recovery paths (corrupted local data)
3. A record of external service failures

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Ledger
    LEDGER_LOADED = "ledger_loaded"
    LEDGER_LOAD_FAILED = "ledger_load_failed"
    LEDGER_SAVE_FAILED = "ledger_save_failed"
    LEDGER_FLUSHED = "ledger_flushed"
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_REMOVED = "transaction_removed"

    # Image editing
    IMAGE_EDIT_REQUESTED = "image_edit_requested"
    IMAGE_EDIT_COMPLETED = "image_edit_completed"
    IMAGE_EDIT_EMPTY = "image_edit_empty"

    # System events
    CONFIGURATION_ERROR = "configuration_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'ledger', 'image')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one image edit)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_type: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_type": self.error_type,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_removed(transaction_id)
        event = AuditEventBuilder.ledger_load_failed("finance_transactions", error)
    """

    @staticmethod
    def ledger_loaded(slot_name: str, count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            entity_type="ledger",
            entity_id=slot_name,
            description=f"Ledger loaded with {count} transactions",
            details={"count": count},
        )

    @staticmethod
    def ledger_load_failed(slot_name: str, error: Exception) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOAD_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="ledger",
            entity_id=slot_name,
            description="Stored ledger could not be read; starting with an empty ledger",
            error_type=type(error).__name__,
            error_message=str(error),
        )

    @staticmethod
    def ledger_save_failed(count: int, error: Exception) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="ledger",
            description=f"Ledger write of {count} transactions failed",
            details={"count": count},
            error_type=type(error).__name__,
            error_message=str(error),
        )

    @staticmethod
    def ledger_flushed(count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_FLUSHED,
            entity_type="ledger",
            description=f"Ledger flushed with {count} transactions",
            details={"count": count},
        )

    @staticmethod
    def transaction_added(
        transaction_id: str,
        kind: str,
        amount: str,
        occurred_on: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Transaction added: {kind} {amount} on {occurred_on}",
            details={
                "kind": kind,
                "amount": amount,
                "occurred_on": occurred_on,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_removed(transaction_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_REMOVED,
            entity_type="transaction",
            entity_id=transaction_id,
            description="Transaction removed",
            is_user_action=True,
        )

    @staticmethod
    def image_edit_requested(
        model_name: str,
        mime_type: str,
        instruction_length: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMAGE_EDIT_REQUESTED,
            entity_type="image",
            correlation_id=correlation_id,
            description=f"Image edit requested from {model_name}",
            details={
                "model": model_name,
                "mime_type": mime_type,
                "instruction_length": instruction_length,
            },
            is_user_action=True,
        )

    @staticmethod
    def image_edit_completed(mime_type: str, correlation_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMAGE_EDIT_COMPLETED,
            entity_type="image",
            correlation_id=correlation_id,
            description=f"Edited image received ({mime_type})",
            details={"mime_type": mime_type},
        )

    @staticmethod
    def image_edit_empty(correlation_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMAGE_EDIT_EMPTY,
            severity=AuditSeverity.WARNING,
            entity_type="image",
            correlation_id=correlation_id,
            description="Model returned no image for the instruction",
        )

    @staticmethod
    def configuration_error(
        setting: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONFIGURATION_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Missing or invalid configuration: {setting}",
            error_type="configuration",
            error_message=error_message,
            details={"setting": setting},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error: Exception,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_type=type(error).__name__,
            error_message=str(error),
            details={"service": service},
            correlation_id=correlation_id,
        )
