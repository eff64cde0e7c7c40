"""
Idempotency — one authorization token, at most one order.

    from cartflow import idempotency as I

    guard = I.IdempotentCompletionGuard(
        completion_service,
        table=I.MemoryAttemptTable(),
        policy=CheckoutPolicy().with_completion_timeout(seconds=30),
    )
    result = await guard.complete(token, destination_id)

Attempt lifecycle:

    claim(token)
         │
         ▼
      PENDING ──── remote call ────┐
                                   │
                   ┌───────────────┴───────────────┐
                   ▼                               ▼
               SUCCEEDED                         FAILED
        (cached confirmation)           (recorded error, terminal)
"""

from cartflow.idempotency._types import (
    AttemptStatus,
    CompletionAttempt,
    CompletionError,
    CompletionErrorKind,
    CompletionRejected,
)
from cartflow.idempotency._store import (
    AttemptTable,
    MemoryAttemptTable,
)
from cartflow.idempotency._guard import (
    OrderCompletionService,
    IdempotentCompletionGuard,
    classify,
)

__all__ = (
    # Types
    "AttemptStatus",
    "CompletionAttempt",
    "CompletionError",
    "CompletionErrorKind",
    "CompletionRejected",
    # Table
    "AttemptTable",
    "MemoryAttemptTable",
    # Guard
    "OrderCompletionService",
    "IdempotentCompletionGuard",
    "classify",
)
