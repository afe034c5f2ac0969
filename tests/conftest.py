"""
Shared fixtures.

No test touches the network or the real data directory: storage is
in-memory or under tmp_path, and the Gemini model is a stub object.
"""

from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from typing import Any, Optional

import pytest

from finance_tracker.audit import AuditLogger
from finance_tracker.config import GeminiSettings
from finance_tracker.models.transaction import (
    Transaction,
    TransactionKind,
    new_transaction_id,
)
from finance_tracker.services.storage import (
    InMemoryKeyValueStore,
    LocalTransactionStorage,
)
from finance_tracker.store import TransactionStore


@pytest.fixture
def make_transaction():
    """Factory for stored transactions with sensible defaults."""

    def _make(
        amount="10.00",
        kind=TransactionKind.EXPENSE,
        occurred_on=date(2024, 3, 1),
        description="Coffee",
        category="General",
        id: Optional[str] = None,
    ) -> Transaction:
        if isinstance(occurred_on, str):
            occurred_on = date.fromisoformat(occurred_on)
        return Transaction(
            id=id or new_transaction_id(),
            description=description,
            amount=Decimal(str(amount)),
            kind=kind,
            occurred_on=occurred_on,
            category=category,
        )

    return _make


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def audit_logger() -> AuditLogger:
    return AuditLogger()


@pytest.fixture
def storage(kv_store, audit_logger) -> LocalTransactionStorage:
    return LocalTransactionStorage(kv_store, audit_logger=audit_logger)


@pytest.fixture
def store(storage, audit_logger) -> TransactionStore:
    return TransactionStore(storage, audit_logger=audit_logger)


class StubGeminiModel:
    """
    Minimal stand-in for genai.GenerativeModel.

    Returns a fixed response (or raises a fixed error) and records every
    call so tests can assert what was sent - or that nothing was.
    """

    def __init__(self, response: Any = None, error: Optional[Exception] = None):
        self._response = response
        self._error = error
        self.calls: list[Any] = []

    async def generate_content_async(self, contents):
        self.calls.append(contents)
        if self._error is not None:
            raise self._error
        return self._response


def gemini_response(*parts) -> SimpleNamespace:
    """Build an object shaped like a generate_content response."""
    return SimpleNamespace(
        candidates=[SimpleNamespace(content=SimpleNamespace(parts=list(parts)))]
    )


def image_part(data: bytes, mime_type: Optional[str] = "image/png") -> SimpleNamespace:
    return SimpleNamespace(
        inline_data=SimpleNamespace(data=data, mime_type=mime_type),
        text="",
    )


def text_part(text: str) -> SimpleNamespace:
    return SimpleNamespace(inline_data=None, text=text)


@pytest.fixture
def gemini_settings() -> GeminiSettings:
    return GeminiSettings(api_key="test-key", image_model_name="gemini-test-image")


@pytest.fixture
def unconfigured_gemini_settings() -> GeminiSettings:
    return GeminiSettings(api_key=None)


@pytest.fixture
def gemini_stub_factory():
    """Expose the stub and response builders to tests as one fixture."""
    return SimpleNamespace(
        model=StubGeminiModel,
        response=gemini_response,
        image_part=image_part,
        text_part=text_part,
    )
