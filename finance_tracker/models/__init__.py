"""
Data Models Package

This package contains all Pydantic models used in the Finance Tracker.
All data flowing through the system must conform to these schemas.
"""

from finance_tracker.models.transaction import (
    DEFAULT_CATEGORY,
    DailyStat,
    SummaryStats,
    Transaction,
    TransactionDraft,
    TransactionKind,
    new_transaction_id,
)
from finance_tracker.models.image import (
    EditedImage,
    ImageEditResult,
    NoImageReturned,
)
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "DEFAULT_CATEGORY",
    "DailyStat",
    "SummaryStats",
    "Transaction",
    "TransactionDraft",
    "TransactionKind",
    "new_transaction_id",
    # Image models
    "EditedImage",
    "ImageEditResult",
    "NoImageReturned",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
