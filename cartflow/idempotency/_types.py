"""
Completion attempt types — attempt lifecycle and completion errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto

from cartflow._types import AuthToken
from cartflow.domain import OrderConfirmation


# ═══════════════════════════════════════════════════════════════════════════════
# Attempt Status — Completion Lifecycle
# ═══════════════════════════════════════════════════════════════════════════════


class AttemptStatus(Enum):
    """
    Status of a completion attempt.

    Lifecycle:
        PENDING → SUCCEEDED (order created, immutable)
                → FAILED (terminal, never retried with the same token)
    """

    PENDING = auto()
    SUCCEEDED = auto()
    FAILED = auto()


# ═══════════════════════════════════════════════════════════════════════════════
# Completion Error
# ═══════════════════════════════════════════════════════════════════════════════


class CompletionErrorKind(Enum):
    """Kinds of completion errors."""

    IN_PROGRESS = auto()  # Same token already in flight
    CART_EMPTIED_CONCURRENTLY = auto()  # Cart cleared elsewhere, go to cart
    AUTHORIZATION_REJECTED = auto()  # Backend refused the token
    TRANSIENT = auto()  # Timeout, transport or server failure


@dataclass(frozen=True, slots=True)
class CompletionError:
    """
    Classified completion failure.

    Note: Only IN_PROGRESS is silent. Every other kind is shown to the
    shopper; retry means a new payment session and a new token.
    """

    kind: CompletionErrorKind
    message: str
    token: AuthToken | None = None

    @property
    def is_silent(self) -> bool:
        return self.kind is CompletionErrorKind.IN_PROGRESS

    @property
    def is_retryable(self) -> bool:
        return self.kind in (
            CompletionErrorKind.AUTHORIZATION_REJECTED,
            CompletionErrorKind.TRANSIENT,
        )


class CompletionRejected(Exception):
    """
    Raised by an order completion service with a classified reason.

    Anything else raised by the service is treated as TRANSIENT.
    """

    def __init__(self, kind: CompletionErrorKind, message: str = "") -> None:
        self.kind = kind
        self.message = message or kind.name.replace("_", " ").lower()
        super().__init__(self.message)


# ═══════════════════════════════════════════════════════════════════════════════
# Completion Attempt — Stored State
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CompletionAttempt:
    """
    A snapshot of one token's attempt.

    confirmation is set only for SUCCEEDED, error only for FAILED.
    """

    token: AuthToken
    status: AttemptStatus
    started_at: datetime
    confirmation: OrderConfirmation | None = None
    error: CompletionError | None = None
    finished_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == AttemptStatus.PENDING

    @property
    def is_succeeded(self) -> bool:
        return self.status == AttemptStatus.SUCCEEDED

    @property
    def is_failed(self) -> bool:
        return self.status == AttemptStatus.FAILED


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "AttemptStatus",
    "CompletionAttempt",
    "CompletionError",
    "CompletionErrorKind",
    "CompletionRejected",
)
