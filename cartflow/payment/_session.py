"""
Payment session — one run of the payment widget, one settled outcome.

The widget reports through callbacks that may overlap (success after
dismissal, success twice). The session latches the first settlement into
a future; later callbacks never change it.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Callable
from decimal import Decimal

from cartflow.domain import AuthorizationEvent
from cartflow.payment._amount import to_minor_units
from cartflow.payment._types import (
    Authorized,
    Cancelled,
    LoadFailure,
    AuthorizationOutcome,
    ShopperPrefill,
    WidgetRequest,
    WidgetCallbacks,
    PaymentWidget,
)

logger = logging.getLogger(__name__)

type LateAuthorizationHook = Callable[[AuthorizationEvent], None]

_session_ids = itertools.count(1)


class PaymentSession:
    """
    Single-use wrapper around the payment widget.

    Example:
        session = PaymentSession(widget, on_late_authorization=machine.deliver_authorization)
        match await session.open(order.handle, order.amount, order.currency):
            case Authorized(event): ...
            case Cancelled(): ...
            case LoadFailure(reason): ...

    Note: Success callbacks after the latch are forwarded to
    `on_late_authorization`, so a redelivered or out-of-order token still
    reaches the completion guard.
    """

    def __init__(
        self,
        widget: PaymentWidget,
        *,
        on_late_authorization: LateAuthorizationHook | None = None,
        description: str = "",
        merchant_name: str = "",
    ) -> None:
        self._widget = widget
        self._on_late = on_late_authorization
        self._description = description
        self._merchant_name = merchant_name
        self._future: asyncio.Future[AuthorizationOutcome] | None = None
        self.session_id = next(_session_ids)

    @property
    def is_open(self) -> bool:
        return self._future is not None and not self._future.done()

    @property
    def outcome(self) -> AuthorizationOutcome | None:
        if self._future is None or not self._future.done():
            return None
        return self._future.result()

    async def open(
        self,
        order_handle: str,
        amount: Decimal,
        currency: str,
        *,
        prefill: ShopperPrefill | None = None,
    ) -> AuthorizationOutcome:
        """Open the widget and wait for its one outcome."""
        if self._future is not None:
            raise RuntimeError(f"PaymentSession {self.session_id} was already opened")
        self._future = asyncio.get_running_loop().create_future()

        try:
            request = WidgetRequest(
                handle=order_handle,
                amount_minor_units=to_minor_units(amount, currency),
                currency=currency.upper(),
                description=self._description,
                merchant_name=self._merchant_name,
                prefill=prefill if prefill is not None else ShopperPrefill(),
            )
        except (ValueError, TypeError) as exc:
            self._settle(LoadFailure(f"Invalid payment amount: {exc}"))
            return await self._future

        try:
            await self._widget.load()
        except Exception as exc:
            logger.warning(
                "payment widget failed to load",
                extra={"session_id": self.session_id, "error": str(exc)},
            )
            self._settle(LoadFailure(str(exc) or "Failed to load payment widget"))
            return await self._future

        try:
            self._widget.open(
                request,
                WidgetCallbacks(on_success=self.authorized, on_dismiss=self.dismissed),
            )
        except Exception as exc:
            logger.warning(
                "payment widget failed to open",
                extra={"session_id": self.session_id, "error": str(exc)},
            )
            self._settle(LoadFailure(str(exc) or "Failed to open payment widget"))
        else:
            logger.info(
                "payment widget opened",
                extra={
                    "session_id": self.session_id,
                    "handle": order_handle,
                    "amount_minor_units": request.amount_minor_units,
                    "currency": request.currency,
                },
            )
        return await self._future

    # ═══════════════════════════════════════════════════════════════════════════
    # Widget callbacks
    # ═══════════════════════════════════════════════════════════════════════════

    def authorized(self, token: str) -> None:
        event = AuthorizationEvent(token=token)
        if self._settle(Authorized(event)):
            return
        if self._on_late is None:
            logger.debug(
                "late authorization dropped",
                extra={"session_id": self.session_id, "token": token},
            )
            return
        logger.debug(
            "late authorization forwarded",
            extra={"session_id": self.session_id, "token": token},
        )
        self._on_late(event)

    def dismissed(self) -> None:
        if not self._settle(Cancelled()):
            logger.debug("late dismissal ignored", extra={"session_id": self.session_id})

    def _settle(self, outcome: AuthorizationOutcome) -> bool:
        """Latch `outcome` if nothing settled yet. Returns whether it won."""
        if self._future is None or self._future.done():
            return False
        self._future.set_result(outcome)
        match outcome:
            case Authorized(event):
                logger.info(
                    "payment authorized",
                    extra={"session_id": self.session_id, "token": event.token},
                )
            case Cancelled():
                logger.info("payment cancelled", extra={"session_id": self.session_id})
            case LoadFailure(reason):
                logger.warning(
                    "payment unavailable",
                    extra={"session_id": self.session_id, "reason": reason},
                )
        return True


__all__ = (
    "LateAuthorizationHook",
    "PaymentSession",
)
