"""
Audit Logger

DESIGN DECISION: Every write and every computed view is logged.
This provides:
1. Complete traceability
2. Debugging capability when a figure looks wrong
3. User can see history of their changes

The audit logger:
- Is async to match the storage interface
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Any, Optional
from uuid import UUID, uuid4

import structlog

from budget_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from budget_tracker.services.storage import AuditStorageInterface


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


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through stdlib logging at the given level."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", level=numeric_level)
    # basicConfig is a no-op once handlers exist (e.g. under Streamlit)
    logging.getLogger().setLevel(numeric_level)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence and user visibility), when configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("budget_tracker.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_budget_saved(
        self,
        budget_id: UUID,
        user_id: str,
        monthly_income: float,
        savings_goal: float,
        correlation_id: UUID,
    ) -> None:
        """Log a budget create-or-replace."""
        event = AuditEventBuilder.budget_saved(
            budget_id=budget_id,
            user_id=user_id,
            monthly_income=monthly_income,
            savings_goal=savings_goal,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_budget_not_found(
        self,
        user_id: str,
        view: str,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.budget_not_found(
            user_id=user_id,
            view=view,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_expense_added(
        self,
        expense_id: UUID,
        user_id: str,
        category: str,
        amount: float,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.expense_added(
            expense_id=expense_id,
            user_id=user_id,
            category=category,
            amount=amount,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_expense_updated(
        self,
        expense_id: UUID,
        user_id: str,
        changes: dict[str, Any],
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.expense_updated(
            expense_id=expense_id,
            user_id=user_id,
            changes=changes,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_expense_deleted(
        self,
        expense_id: UUID,
        user_id: str,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.expense_deleted(
            expense_id=expense_id,
            user_id=user_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_expense_not_found(
        self,
        expense_id: UUID,
        user_id: str,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.expense_not_found(
            expense_id=expense_id,
            user_id=user_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_validation_failed(
        self,
        entity_type: str,
        user_id: str,
        issues: list[dict],
        correlation_id: UUID,
    ) -> None:
        """Log a rejected submission."""
        event = AuditEventBuilder.validation_failed(
            entity_type=entity_type,
            user_id=user_id,
            issues=issues,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_view_computed(
        self,
        view: str,
        user_id: str,
        expense_count: int,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.view_computed(
            view=view,
            user_id=user_id,
            expense_count=expense_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_data_exported(
        self,
        user_id: str,
        export_format: str,
        expense_count: int,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.data_exported(
            user_id=user_id,
            export_format=export_format,
            expense_count=expense_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_storage_error(
        self,
        operation: str,
        error_message: str,
        user_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed store call."""
        event = AuditEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
            user_id=user_id,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., saving a budget).
    Pass it through all subsequent operations.
    """
    return uuid4()
