"""
Attempt table — in-memory map from authorization token to attempt.

Every method is synchronous. On a single event loop a method body runs
without interleaving, so `claim` is an atomic check-and-mark.
A multi-threaded host must wrap the table in a mutex.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

from cartflow._types import AuthToken
from cartflow.domain import OrderConfirmation
from cartflow.idempotency._types import (
    AttemptStatus,
    CompletionAttempt,
    CompletionError,
)


# ═══════════════════════════════════════════════════════════════════════════════
# Table Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class AttemptTable(Protocol):
    """
    Attempt table protocol.

    Note: No method may suspend. An async store would open a window
    between "check" and "mark" where two callbacks for the same token
    both see no attempt.
    """

    def get(self, token: AuthToken) -> CompletionAttempt | None:
        """Current attempt for token, or None if never seen."""
        ...

    def claim(self, token: AuthToken) -> CompletionAttempt | None:
        """
        Create a PENDING attempt unless one exists.

        Returns the existing attempt (caller must not proceed),
        or None if the caller now owns the token.
        """
        ...

    def mark_succeeded(self, token: AuthToken, confirmation: OrderConfirmation) -> CompletionAttempt:
        ...

    def mark_failed(self, token: AuthToken, error: CompletionError) -> CompletionAttempt:
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Table
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class _StoredAttempt:
    """Internal mutable attempt for MemoryAttemptTable."""

    token: AuthToken
    status: AttemptStatus
    started_at: datetime
    confirmation: OrderConfirmation | None = None
    error: CompletionError | None = None
    finished_at: datetime | None = None

    def to_attempt(self) -> CompletionAttempt:
        return CompletionAttempt(
            token=self.token,
            status=self.status,
            started_at=self.started_at,
            confirmation=self.confirmation,
            error=self.error,
            finished_at=self.finished_at,
        )


class MemoryAttemptTable:
    """
    Process-lifetime attempt table.

    Note: Not persisted. A reload forgets every token; the backend's own
    idempotency covers that case.
    """

    def __init__(self) -> None:
        self._attempts: dict[AuthToken, _StoredAttempt] = {}

    def __len__(self) -> int:
        return len(self._attempts)

    def __contains__(self, token: object) -> bool:
        return token in self._attempts

    def get(self, token: AuthToken) -> CompletionAttempt | None:
        stored = self._attempts.get(token)
        return stored.to_attempt() if stored is not None else None

    def claim(self, token: AuthToken) -> CompletionAttempt | None:
        existing = self._attempts.get(token)
        if existing is not None:
            return existing.to_attempt()

        self._attempts[token] = _StoredAttempt(
            token=token,
            status=AttemptStatus.PENDING,
            started_at=datetime.now(timezone.utc),
        )
        return None

    def mark_succeeded(self, token: AuthToken, confirmation: OrderConfirmation) -> CompletionAttempt:
        stored = self._pending(token)
        stored.status = AttemptStatus.SUCCEEDED
        stored.confirmation = confirmation
        stored.finished_at = datetime.now(timezone.utc)
        return stored.to_attempt()

    def mark_failed(self, token: AuthToken, error: CompletionError) -> CompletionAttempt:
        stored = self._pending(token)
        stored.status = AttemptStatus.FAILED
        stored.error = error
        stored.finished_at = datetime.now(timezone.utc)
        return stored.to_attempt()

    def _pending(self, token: AuthToken) -> _StoredAttempt:
        stored = self._attempts.get(token)
        if stored is None:
            raise KeyError(f"No attempt for token: {token}")
        if stored.status is not AttemptStatus.PENDING:
            raise ValueError(f"Attempt for {token} is already {stored.status.name}")
        return stored


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "AttemptTable",
    "MemoryAttemptTable",
)
