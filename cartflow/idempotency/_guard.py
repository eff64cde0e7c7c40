"""
Completion guard — at most one order completion call per authorization token.

    guard = IdempotentCompletionGuard(service, policy=CheckoutPolicy())
    result = await guard.complete("pay_123", destination_id)

    match result:
        case Ok(confirmation): ...
        case Error(CompletionError(kind=CompletionErrorKind.IN_PROGRESS)): ...

Cases, decided by one synchronous claim before any await:

    SUCCEEDED → cached confirmation, no remote call
    PENDING   → IN_PROGRESS, no remote call
    FAILED    → recorded error, no remote call
    unseen    → PENDING, call service, mark SUCCEEDED / FAILED
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from kungfu import LazyCoroResult, Result, Ok, Error

from cartflow import lift as L
from cartflow._types import AuthToken, DestinationId
from cartflow.domain import OrderConfirmation
from cartflow.policy import CheckoutPolicy
from cartflow.idempotency._types import (
    CompletionAttempt,
    CompletionError,
    CompletionErrorKind,
    CompletionRejected,
)
from cartflow.idempotency._store import AttemptTable, MemoryAttemptTable

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Collaborator
# ═══════════════════════════════════════════════════════════════════════════════


class OrderCompletionService(Protocol):
    """
    Creates the order and clears the cart for one authorization token.

    Raises CompletionRejected with a classified kind; any other exception
    is treated as TRANSIENT.
    """

    async def complete_order(
        self, destination_id: DestinationId, token: AuthToken
    ) -> OrderConfirmation: ...


# ═══════════════════════════════════════════════════════════════════════════════
# Classification
# ═══════════════════════════════════════════════════════════════════════════════


def classify(exc: Exception, token: AuthToken) -> CompletionError:
    """Map a service exception onto a CompletionError."""
    if isinstance(exc, CompletionRejected) and exc.kind is not CompletionErrorKind.IN_PROGRESS:
        return CompletionError(exc.kind, exc.message, token)
    return CompletionError(
        CompletionErrorKind.TRANSIENT,
        str(exc) or type(exc).__name__,
        token,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Guard
# ═══════════════════════════════════════════════════════════════════════════════


class IdempotentCompletionGuard:
    """
    Single chokepoint between payment callbacks and order completion.

    Note: `calls` counts remote calls actually issued.
    """

    def __init__(
        self,
        service: OrderCompletionService,
        *,
        table: AttemptTable | None = None,
        policy: CheckoutPolicy | None = None,
    ) -> None:
        self._service = service
        self._table: AttemptTable = table if table is not None else MemoryAttemptTable()
        self._policy = policy if policy is not None else CheckoutPolicy()
        self.calls = 0

    @property
    def table(self) -> AttemptTable:
        return self._table

    def complete(
        self, token: AuthToken, destination_id: DestinationId
    ) -> LazyCoroResult[OrderConfirmation, CompletionError]:
        """Complete the order for `token` at most once."""

        async def execute() -> Result[OrderConfirmation, CompletionError]:
            # claim and its checks must not be separated by an await
            existing = self._table.claim(token)
            if existing is not None:
                return _replay(existing)

            self.calls += 1
            logger.info(
                "completing order",
                extra={"token": token, "destination_id": destination_id},
            )
            seconds = self._policy.completion_timeout.total_seconds()
            call = L.bounded(
                lambda: self._service.complete_order(destination_id, token),
                seconds=seconds,
                on_error=lambda exc: classify(exc, token),
                on_timeout=lambda s: CompletionError(
                    CompletionErrorKind.TRANSIENT,
                    f"Order completion timed out after {s}s",
                    token,
                ),
            )
            try:
                result = await call
            except asyncio.CancelledError:
                self._table.mark_failed(
                    token,
                    CompletionError(CompletionErrorKind.TRANSIENT, "Order completion cancelled", token),
                )
                raise

            match result:
                case Ok(confirmation):
                    self._table.mark_succeeded(token, confirmation)
                    logger.info(
                        "order completed",
                        extra={"token": token, "order_id": confirmation.order_id},
                    )
                case Error(err):
                    self._table.mark_failed(token, err)
                    logger.warning(
                        "order completion failed",
                        extra={"token": token, "kind": err.kind.name, "reason": err.message},
                    )
            return result

        return LazyCoroResult(execute)


def _replay(existing: CompletionAttempt) -> Result[OrderConfirmation, CompletionError]:
    if existing.is_succeeded and existing.confirmation is not None:
        logger.debug("token already completed", extra={"token": existing.token})
        return Ok(existing.confirmation)
    if existing.is_failed and existing.error is not None:
        logger.debug("token already failed", extra={"token": existing.token})
        return Error(existing.error)
    logger.debug("token in progress", extra={"token": existing.token})
    return Error(
        CompletionError(
            CompletionErrorKind.IN_PROGRESS,
            "Order completion already in progress",
            existing.token,
        )
    )


__all__ = (
    "OrderCompletionService",
    "IdempotentCompletionGuard",
    "classify",
)
