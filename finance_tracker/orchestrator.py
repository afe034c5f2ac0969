"""
Main Orchestrator for the Finance Tracker

This module ties together all the components and defines the flows for:
1. Ledger (form values → draft → store → dashboard/history recompute)
2. Image editing (upload + instruction → Gemini → outcome for the UI)

DESIGN DECISION: The orchestrator owns the mapping from failures to what
the user sees. Each failure class has its own outcome:
- Missing API key       → actionable configuration message
- Request failure       → generic failure message
- No image in response  → "try a different instruction"
There is no catch-all that merges these.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Union
from uuid import UUID

from finance_tracker.analytics import daily_series, group_by_month, summarize
from finance_tracker.audit import AuditLogger, create_correlation_id
from finance_tracker.config import Settings, get_settings
from finance_tracker.models.image import EditedImage
from finance_tracker.models.transaction import (
    DailyStat,
    SummaryStats,
    Transaction,
    TransactionDraft,
    TransactionKind,
)
from finance_tracker.services.image import (
    GeminiImageEditor,
    ImageEditConfigurationError,
    InvalidEditRequestError,
)
from finance_tracker.services.image.gemini_editor import DEFAULT_INPUT_MIME_TYPE
from finance_tracker.services.storage import (
    FileKeyValueStore,
    LocalTransactionStorage,
)
from finance_tracker.store import TransactionStore


# =============================================================================
# LEDGER FLOW
# =============================================================================

@dataclass(frozen=True)
class DashboardSnapshot:
    """Everything the dashboard renders, recomputed from the store."""
    summary: SummaryStats
    daily: list[DailyStat]
    recent: tuple[Transaction, ...]


class LedgerFlow:
    """
    Orchestrates ledger reads and writes for the UI.

    All derived views are recomputed from the store on every call.
    """

    def __init__(
        self,
        store: TransactionStore,
        chart_days: int = 14,
        recent_limit: int = 5,
        language: str = "en",
    ):
        self._store = store
        self._chart_days = chart_days
        self._recent_limit = recent_limit
        self._language = language

    @property
    def store(self) -> TransactionStore:
        return self._store

    async def add_transaction(
        self,
        description: str,
        amount: Union[Decimal, float, str],
        kind: Union[TransactionKind, str],
        occurred_on: date,
        category: Optional[str] = None,
    ) -> Transaction:
        """
        Add a transaction from form values.

        Raises pydantic.ValidationError if the values are not a valid draft
        (empty description, negative amount, unknown kind).
        """
        draft = TransactionDraft(
            description=description,
            amount=amount,
            kind=kind,
            occurred_on=occurred_on,
            category=category,
        )
        return await self._store.add(draft)

    async def delete_transaction(self, transaction_id: str) -> None:
        await self._store.remove(transaction_id)

    def dashboard(self) -> DashboardSnapshot:
        transactions = self._store.all()
        return DashboardSnapshot(
            summary=summarize(transactions),
            daily=daily_series(transactions, limit=self._chart_days),
            recent=self._store.recent(self._recent_limit),
        )

    def history(self) -> dict[str, list[Transaction]]:
        """Month label → transactions, most recent first."""
        return group_by_month(self._store.all(), language=self._language)


# =============================================================================
# IMAGE EDIT FLOW
# =============================================================================

class ImageEditStatus(str, Enum):
    """How an image edit ended, from the user's point of view."""
    SUCCESS = "success"
    NO_IMAGE = "no_image"
    INVALID_REQUEST = "invalid_request"
    CONFIGURATION_ERROR = "configuration_error"
    FAILED = "failed"


MESSAGES = {
    ImageEditStatus.SUCCESS: "Image edited successfully.",
    ImageEditStatus.NO_IMAGE: (
        "The model did not return an image. Try a different instruction."
    ),
    ImageEditStatus.FAILED: (
        "Something went wrong while editing the image. Please try again."
    ),
}


@dataclass(frozen=True)
class ImageEditOutcome:
    """Result of an image edit, ready for display."""
    status: ImageEditStatus
    message: str
    image: Optional[EditedImage] = None
    correlation_id: Optional[UUID] = None

    @property
    def succeeded(self) -> bool:
        return self.status == ImageEditStatus.SUCCESS


class ImageEditFlow:
    """
    Orchestrates one image edit.

    Flow:
    1. Audit the request
    2. Call the gateway (single attempt)
    3. Map the result or failure to an ImageEditOutcome
    """

    def __init__(
        self,
        editor: Optional[GeminiImageEditor] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._editor = editor or GeminiImageEditor()
        self._audit_logger = audit_logger

    async def run(
        self,
        image_data: str,
        instruction: str,
        mime_type: str = DEFAULT_INPUT_MIME_TYPE,
        correlation_id: Optional[UUID] = None,
    ) -> ImageEditOutcome:
        correlation_id = correlation_id or create_correlation_id()

        if self._audit_logger:
            self._audit_logger.log_image_edit_requested(
                model_name=self._editor.model_name,
                mime_type=mime_type,
                instruction_length=len(instruction),
                correlation_id=correlation_id,
            )

        try:
            result = await self._editor.edit_image(image_data, instruction, mime_type)
        except ImageEditConfigurationError as e:
            if self._audit_logger:
                self._audit_logger.log_configuration_error(
                    setting="GEMINI_API_KEY",
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            return ImageEditOutcome(
                status=ImageEditStatus.CONFIGURATION_ERROR,
                message=str(e),
                correlation_id=correlation_id,
            )
        except InvalidEditRequestError as e:
            return ImageEditOutcome(
                status=ImageEditStatus.INVALID_REQUEST,
                message=str(e),
                correlation_id=correlation_id,
            )
        except Exception as e:
            if self._audit_logger:
                self._audit_logger.log_external_service_error(
                    service="gemini",
                    error=e,
                    correlation_id=correlation_id,
                )
            return ImageEditOutcome(
                status=ImageEditStatus.FAILED,
                message=MESSAGES[ImageEditStatus.FAILED],
                correlation_id=correlation_id,
            )

        if isinstance(result, EditedImage):
            if self._audit_logger:
                self._audit_logger.log_image_edit_completed(
                    mime_type=result.mime_type,
                    correlation_id=correlation_id,
                )
            return ImageEditOutcome(
                status=ImageEditStatus.SUCCESS,
                message=MESSAGES[ImageEditStatus.SUCCESS],
                image=result,
                correlation_id=correlation_id,
            )

        if self._audit_logger:
            self._audit_logger.log_image_edit_empty(correlation_id=correlation_id)
        return ImageEditOutcome(
            status=ImageEditStatus.NO_IMAGE,
            message=MESSAGES[ImageEditStatus.NO_IMAGE],
            correlation_id=correlation_id,
        )


# =============================================================================
# COMPONENT FACTORY
# =============================================================================

@dataclass
class AppComponents:
    """Everything the UI needs, built once per process."""
    store: TransactionStore
    ledger_flow: LedgerFlow
    image_edit_flow: ImageEditFlow
    audit_logger: AuditLogger


def create_app_components(
    settings: Optional[Settings] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    The store is returned unopened: the caller awaits store.open() at
    startup and store.close() at shutdown.
    """
    settings = settings if settings is not None else get_settings()
    app_settings = settings.app
    storage_settings = settings.storage

    audit_logger = AuditLogger()

    storage = LocalTransactionStorage(
        FileKeyValueStore(storage_settings.data_dir),
        slot_name=storage_settings.slot_name,
        audit_logger=audit_logger,
    )
    store = TransactionStore(storage, audit_logger=audit_logger)

    ledger_flow = LedgerFlow(
        store,
        chart_days=app_settings.chart_days,
        recent_limit=app_settings.recent_limit,
        language=app_settings.display_language,
    )
    image_edit_flow = ImageEditFlow(
        editor=GeminiImageEditor(settings.gemini),
        audit_logger=audit_logger,
    )

    return AppComponents(
        store=store,
        ledger_flow=ledger_flow,
        image_edit_flow=image_edit_flow,
        audit_logger=audit_logger,
    )
