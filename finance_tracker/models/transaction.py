"""
Core Data Models for the Finance Tracker

These models define the schemas for all ledger data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Keep direction (income/expense) out of the sign of the amount
3. Be serializable for local persistence and logging

DESIGN DECISION: Transactions are frozen. Once added to the store a record
is never edited in place - it is only ever removed and re-added.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)


DEFAULT_CATEGORY = "General"


# =============================================================================
# ENUMS
# =============================================================================

class TransactionKind(str, Enum):
    """Direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"


def new_transaction_id() -> str:
    """Generate a fresh opaque transaction identifier."""
    return str(uuid4())


# =============================================================================
# LEDGER MODELS
# =============================================================================

class TransactionDraft(BaseModel):
    """
    A transaction as entered by the user, before the store assigns an id.

    Blank or missing categories collapse to DEFAULT_CATEGORY here so the
    store never sees an empty category.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    description: str = Field(
        ...,
        min_length=1,
        description="Free-text label"
    )
    amount: Annotated[
        Decimal,
        Field(ge=0, description="Non-negative amount, unit-agnostic")
    ]
    kind: TransactionKind = Field(
        ...,
        description="Income or expense"
    )
    occurred_on: date = Field(
        ...,
        description="Calendar date of the transaction (YYYY-MM-DD)"
    )
    category: str = Field(
        default=DEFAULT_CATEGORY,
        description="Free-text category"
    )

    @field_validator('category', mode='before')
    @classmethod
    def default_blank_category(cls, v: Optional[str]) -> str:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_CATEGORY
        return v


class Transaction(TransactionDraft):
    """
    A transaction held by the store.

    The id is assigned exactly once, at creation, and is never reused.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Opaque unique identifier"
    )

    @classmethod
    def from_draft(cls, draft: TransactionDraft) -> "Transaction":
        """Create a stored transaction from a draft with a fresh id."""
        return cls(id=new_transaction_id(), **draft.model_dump())

    @property
    def is_income(self) -> bool:
        return self.kind == TransactionKind.INCOME


# =============================================================================
# DERIVED MODELS (never persisted)
# =============================================================================

class SummaryStats(BaseModel):
    """Totals over a set of transactions."""
    model_config = ConfigDict(frozen=True)

    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")

    @computed_field
    @property
    def balance(self) -> Decimal:
        """Income minus expense. May be negative."""
        return self.total_income - self.total_expense


class DailyStat(BaseModel):
    """Income and expense sums for one calendar day."""
    model_config = ConfigDict(frozen=True)

    day: date
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")

    @property
    def label(self) -> str:
        """Short DD/MM label used on chart axes."""
        return self.day.strftime("%d/%m")
