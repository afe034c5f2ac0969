"""
Tests for the ledger and image edit flows.

Storage is in-memory (or under tmp_path) and the Gemini model is stubbed.
"""

from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest
import pytest_asyncio
from pydantic import ValidationError

from finance_tracker.config import Settings
from finance_tracker.models.audit import AuditEventType
from finance_tracker.models.transaction import TransactionKind
from finance_tracker.orchestrator import (
    MESSAGES,
    ImageEditFlow,
    ImageEditStatus,
    LedgerFlow,
    create_app_components,
)
from finance_tracker.services.image import GeminiImageEditor, to_data_url


IMAGE_DATA = to_data_url(b"original", "image/png")


class TestLedgerFlow:

    @pytest_asyncio.fixture
    async def flow(self, store):
        await store.open()
        return LedgerFlow(store)

    @pytest.mark.asyncio
    async def test_add_from_form_values(self, flow):
        added = await flow.add_transaction(
            description="  Groceries ",
            amount="50.00",
            kind="expense",
            occurred_on=date(2024, 1, 5),
            category="",
        )

        assert added.description == "Groceries"
        assert added.kind == TransactionKind.EXPENSE
        assert added.category == "General"
        assert flow.store.get(added.id) == added

    @pytest.mark.asyncio
    async def test_invalid_form_values_raise_and_store_nothing(self, flow):
        with pytest.raises(ValidationError):
            await flow.add_transaction(
                description="",
                amount="-3",
                kind=TransactionKind.EXPENSE,
                occurred_on=date(2024, 1, 5),
            )
        assert len(flow.store) == 0

    @pytest.mark.asyncio
    async def test_dashboard_scenario(self, flow):
        await flow.add_transaction("Salary", Decimal("100"), TransactionKind.INCOME, date(2024, 3, 1))
        await flow.add_transaction("Groceries", Decimal("40"), TransactionKind.EXPENSE, date(2024, 3, 1))
        await flow.add_transaction("Refund", Decimal("10"), TransactionKind.INCOME, date(2024, 3, 2))

        snapshot = flow.dashboard()

        assert snapshot.summary.total_income == Decimal("110")
        assert snapshot.summary.total_expense == Decimal("40")
        assert snapshot.summary.balance == Decimal("70")
        assert [(s.day, s.income, s.expense) for s in snapshot.daily] == [
            (date(2024, 3, 1), Decimal("100"), Decimal("40")),
            (date(2024, 3, 2), Decimal("10"), Decimal("0")),
        ]
        assert [t.description for t in snapshot.recent] == ["Salary", "Groceries", "Refund"]

    @pytest.mark.asyncio
    async def test_dashboard_respects_limits(self, store):
        await store.open()
        flow = LedgerFlow(store, chart_days=3, recent_limit=2)
        for offset in range(6):
            await flow.add_transaction(
                f"t{offset}", "1", TransactionKind.INCOME, date(2024, 1, 1) + timedelta(days=offset)
            )

        snapshot = flow.dashboard()

        assert len(snapshot.daily) == 3
        assert [t.description for t in snapshot.recent] == ["t4", "t5"]
        assert snapshot.summary.total_income == Decimal("6")

    @pytest.mark.asyncio
    async def test_delete_updates_views(self, flow):
        added = await flow.add_transaction("Rent", "1200", "expense", date(2024, 2, 1))
        await flow.delete_transaction(added.id)

        assert flow.dashboard().summary.balance == 0
        assert flow.history() == {}

    @pytest.mark.asyncio
    async def test_history_uses_configured_language(self, store):
        await store.open()
        flow = LedgerFlow(store, language="pt")
        await flow.add_transaction("Rent", "1200", "expense", date(2024, 2, 1))
        await flow.add_transaction("Salary", "3000", "income", date(2024, 3, 5))

        assert list(flow.history()) == ["Março de 2024", "Fevereiro de 2024"]


class TestImageEditFlow:

    def _flow(self, settings, model, audit_logger):
        editor = GeminiImageEditor(settings=settings, model=model)
        return ImageEditFlow(editor=editor, audit_logger=audit_logger)

    @pytest.mark.asyncio
    async def test_success(self, gemini_settings, gemini_stub_factory, audit_logger):
        stub = gemini_stub_factory
        model = stub.model(response=stub.response(stub.image_part(b"edited")))
        flow = self._flow(gemini_settings, model, audit_logger)

        outcome = await flow.run(IMAGE_DATA, "make it pop", "image/png")

        assert outcome.status == ImageEditStatus.SUCCESS
        assert outcome.succeeded
        assert outcome.image.image_bytes == b"edited"
        assert [e.event_type for e in audit_logger.recent_events()] == [
            AuditEventType.IMAGE_EDIT_COMPLETED,
            AuditEventType.IMAGE_EDIT_REQUESTED,
        ]

    @pytest.mark.asyncio
    async def test_no_image(self, gemini_settings, gemini_stub_factory, audit_logger):
        stub = gemini_stub_factory
        model = stub.model(response=stub.response(stub.text_part("nope")))
        flow = self._flow(gemini_settings, model, audit_logger)

        outcome = await flow.run(IMAGE_DATA, "make it pop", "image/png")

        assert outcome.status == ImageEditStatus.NO_IMAGE
        assert outcome.message == MESSAGES[ImageEditStatus.NO_IMAGE]
        assert outcome.image is None
        assert audit_logger.recent_events()[0].event_type == AuditEventType.IMAGE_EDIT_EMPTY

    @pytest.mark.asyncio
    async def test_missing_key_is_configuration_error(
        self, unconfigured_gemini_settings, gemini_stub_factory, audit_logger
    ):
        model = gemini_stub_factory.model()
        flow = self._flow(unconfigured_gemini_settings, model, audit_logger)

        outcome = await flow.run(IMAGE_DATA, "make it pop", "image/png")

        assert outcome.status == ImageEditStatus.CONFIGURATION_ERROR
        assert "GEMINI_API_KEY" in outcome.message
        assert model.calls == []
        assert audit_logger.recent_events()[0].event_type == AuditEventType.CONFIGURATION_ERROR

    @pytest.mark.asyncio
    async def test_request_failure_is_generic(
        self, gemini_settings, gemini_stub_factory, audit_logger
    ):
        model = gemini_stub_factory.model(error=RuntimeError("quota exceeded: secret details"))
        flow = self._flow(gemini_settings, model, audit_logger)

        outcome = await flow.run(IMAGE_DATA, "make it pop", "image/png")

        assert outcome.status == ImageEditStatus.FAILED
        assert outcome.message == MESSAGES[ImageEditStatus.FAILED]
        assert "secret" not in outcome.message
        event = audit_logger.recent_events()[0]
        assert event.event_type == AuditEventType.EXTERNAL_SERVICE_ERROR
        assert event.error_type == "RuntimeError"

    @pytest.mark.asyncio
    async def test_invalid_request(self, gemini_settings, gemini_stub_factory, audit_logger):
        model = gemini_stub_factory.model()
        flow = self._flow(gemini_settings, model, audit_logger)

        outcome = await flow.run("%%%", "make it pop", "image/png")

        assert outcome.status == ImageEditStatus.INVALID_REQUEST
        assert model.calls == []

    @pytest.mark.asyncio
    async def test_statuses_are_distinct(self, gemini_settings, unconfigured_gemini_settings,
                                         gemini_stub_factory, audit_logger):
        stub = gemini_stub_factory
        outcomes = [
            await self._flow(gemini_settings, stub.model(response=stub.response(stub.image_part(b"x"))),
                             audit_logger).run(IMAGE_DATA, "a", "image/png"),
            await self._flow(gemini_settings, stub.model(response=stub.response()),
                             audit_logger).run(IMAGE_DATA, "a", "image/png"),
            await self._flow(unconfigured_gemini_settings, stub.model(),
                             audit_logger).run(IMAGE_DATA, "a", "image/png"),
            await self._flow(gemini_settings, stub.model(error=TimeoutError()),
                             audit_logger).run(IMAGE_DATA, "a", "image/png"),
        ]

        assert len({o.status for o in outcomes}) == 4
        assert len({o.message for o in outcomes}) == 4

    @pytest.mark.asyncio
    async def test_correlation_id_is_kept(self, gemini_settings, gemini_stub_factory, audit_logger):
        stub = gemini_stub_factory
        model = stub.model(response=stub.response(stub.image_part(b"edited")))
        flow = self._flow(gemini_settings, model, audit_logger)
        correlation_id = uuid4()

        outcome = await flow.run(IMAGE_DATA, "make it pop", "image/png", correlation_id)

        assert outcome.correlation_id == correlation_id
        assert all(e.correlation_id == correlation_id for e in audit_logger.recent_events())


class TestCreateAppComponents:

    @pytest.fixture
    def settings(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("FINANCE_STORAGE_DATA_DIR", str(tmp_path / "data"))
        monkeypatch.setenv("GEMINI_API_KEY", "")
        monkeypatch.setenv("DISPLAY_LANGUAGE", "pt")
        monkeypatch.setenv("CHART_DAYS", "7")
        return Settings()

    @pytest.mark.asyncio
    async def test_ledger_survives_restart(self, settings, tmp_path):
        components = create_app_components(settings)
        await components.store.open()
        await components.ledger_flow.add_transaction("Salary", "3000", "income", date(2024, 3, 5))
        await components.store.close()

        assert (tmp_path / "data" / "finance_transactions.json").exists()

        restarted = create_app_components(settings)
        await restarted.store.open()
        assert [t.description for t in restarted.store] == ["Salary"]
        assert list(restarted.ledger_flow.history()) == ["Março de 2024"]

    @pytest.mark.asyncio
    async def test_image_flow_without_key(self, settings):
        components = create_app_components(settings)

        outcome = await components.image_edit_flow.run(IMAGE_DATA, "make it pop", "image/png")

        assert outcome.status == ImageEditStatus.CONFIGURATION_ERROR
        assert components.audit_logger.recent_events()[0].event_type == (
            AuditEventType.CONFIGURATION_ERROR
        )
