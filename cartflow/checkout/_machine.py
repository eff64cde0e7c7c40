"""
Checkout state machine — ADDRESS → REVIEW → CONFIRMATION.

    ADDRESS ──confirm_address ok──▶ REVIEW ──place_order + guard ok──▶ CONFIRMATION
       ▲                              │
       └────────────back──────────────┘

Every failure leaves the machine in ADDRESS or REVIEW with a CheckoutFault.
CONFIRMATION is entered only from a successful completion guard result.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import uuid
from collections.abc import Callable

from kungfu import Result, Ok, Error

from cartflow import lift as L
from cartflow._logging import bind_checkout_id
from cartflow._types import AuthToken, DestinationId
from cartflow.domain import AuthorizationEvent, OrderConfirmation, OrderSummary, PaymentOrder
from cartflow.idempotency import (
    CompletionError,
    CompletionErrorKind,
    IdempotentCompletionGuard,
)
from cartflow.payment import (
    Authorized,
    Cancelled,
    LoadFailure,
    PaymentOutcomeError,
    PaymentOutcomeErrorKind,
    PaymentSession,
    PaymentWidget,
    LateAuthorizationHook,
    ShopperPrefill,
)
from cartflow.policy import CheckoutPolicy
from cartflow.validation import CheckoutValidator, ValidationError
from cartflow.checkout._types import (
    CartSource,
    CheckoutError,
    CheckoutFault,
    CheckoutListener,
    CheckoutRejection,
    CheckoutRejectionKind,
    CheckoutState,
    CheckoutStep,
    PaymentOrderService,
)

logger = logging.getLogger(__name__)

type SessionFactory = Callable[[PaymentWidget, LateAuthorizationHook], PaymentSession]


def _default_session(
    widget: PaymentWidget,
    hook: LateAuthorizationHook,
    *,
    merchant_name: str = "Storefront",
) -> PaymentSession:
    return PaymentSession(
        widget,
        on_late_authorization=hook,
        description="Order checkout",
        merchant_name=merchant_name,
    )


class CheckoutStateMachine:
    """
    Owns the authoritative checkout step and error state.

    Example:
        machine = CheckoutStateMachine(
            cart=cart,
            validator=CheckoutValidator(pricing),
            payment_orders=payment_orders,
            widget=widget,
            guard=IdempotentCompletionGuard(completion),
            listener=page,
        )
        await machine.confirm_address("addr_1")
        match await machine.place_order():
            case Ok(confirmation): ...
            case Error(fault): ...
    """

    def __init__(
        self,
        *,
        cart: CartSource,
        validator: CheckoutValidator,
        payment_orders: PaymentOrderService,
        widget: PaymentWidget,
        guard: IdempotentCompletionGuard,
        listener: CheckoutListener | None = None,
        policy: CheckoutPolicy | None = None,
        session_factory: SessionFactory | None = None,
        merchant_name: str = "Storefront",
    ) -> None:
        self._cart = cart
        self._validator = validator
        self._payment_orders = payment_orders
        self._widget = widget
        self._guard = guard
        self._listener = listener if listener is not None else CheckoutListener()
        self._policy = policy if policy is not None else CheckoutPolicy()
        self._session_factory = (
            session_factory
            if session_factory is not None
            else functools.partial(_default_session, merchant_name=merchant_name)
        )

        self.checkout_id = uuid.uuid4().hex
        self._step = CheckoutStep.ADDRESS
        self._destination_id: DestinationId | None = None
        self._prefill: ShopperPrefill | None = None
        self._summary: OrderSummary | None = None
        self._confirmation: OrderConfirmation | None = None
        self._fault: CheckoutFault | None = None

        self._validation_seq = 0
        self._validating = False
        self._busy = False
        self._session: PaymentSession | None = None
        self._deliveries: dict[AuthToken, asyncio.Task[Result[OrderConfirmation, CompletionError]]] = {}
        self._tasks: set[asyncio.Task[Result[OrderConfirmation, CompletionError]]] = set()

    # ═══════════════════════════════════════════════════════════════════════════
    # State
    # ═══════════════════════════════════════════════════════════════════════════

    @property
    def step(self) -> CheckoutStep:
        return self._step

    @property
    def summary(self) -> OrderSummary | None:
        return self._summary

    @property
    def confirmation(self) -> OrderConfirmation | None:
        return self._confirmation

    @property
    def fault(self) -> CheckoutFault | None:
        return self._fault

    @property
    def is_busy(self) -> bool:
        """A payment session is open or a redelivered authorization is completing."""
        return self._busy or bool(self._tasks)

    @property
    def session(self) -> PaymentSession | None:
        """Payment session of the latest place_order, if any."""
        return self._session

    @property
    def state(self) -> CheckoutState:
        return CheckoutState(
            checkout_id=self.checkout_id,
            step=self._step,
            destination_id=self._destination_id,
            summary=self._summary,
            confirmation=self._confirmation,
            fault=self._fault,
            busy=self.is_busy,
            validating=self._validating,
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # ADDRESS
    # ═══════════════════════════════════════════════════════════════════════════

    async def confirm_address(
        self,
        destination_id: DestinationId,
        *,
        prefill: ShopperPrefill | None = None,
    ) -> Result[OrderSummary, CheckoutFault]:
        """
        Validate the cart for `destination_id` and move to REVIEW.

        `prefill` carries the contact details of the chosen address into
        the payment widget.

        A response for a request superseded by `back` or a newer
        confirmation is discarded.
        """
        with bind_checkout_id(self.checkout_id):
            if self._step is not CheckoutStep.ADDRESS:
                return self._reject(
                    CheckoutRejectionKind.WRONG_STEP,
                    f"Cannot confirm an address in {self._step.name}",
                )

            self._validation_seq += 1
            seq = self._validation_seq
            self._validating = True
            try:
                result = await self._validator.validate(destination_id, self._cart.current())
            finally:
                if seq == self._validation_seq:
                    self._validating = False

            if seq != self._validation_seq or self._step is not CheckoutStep.ADDRESS:
                logger.info(
                    "stale validation discarded",
                    extra={"destination_id": destination_id, "seq": seq},
                )
                return self._reject(
                    CheckoutRejectionKind.SUPERSEDED,
                    "Validation response superseded by a newer request",
                )

            match result:
                case Ok(summary):
                    self._destination_id = destination_id
                    self._prefill = prefill
                    self._summary = summary
                    self._fault = None
                    self._step = CheckoutStep.REVIEW
                    logger.info(
                        "address confirmed",
                        extra={"destination_id": destination_id, "total": str(summary.total)},
                    )
                    self._notify("on_address_confirmed", destination_id)
                    self._notify("on_order_summary_ready", summary)
                    return Ok(summary)
                case Error(err):
                    return Error(self._fail(err))

    def back(self) -> Result[CheckoutStep, CheckoutFault]:
        """
        Return to ADDRESS, discarding the held summary.

        Also abandons a validation still in flight.
        """
        with bind_checkout_id(self.checkout_id):
            if self._step is CheckoutStep.CONFIRMATION:
                return self._reject(CheckoutRejectionKind.WRONG_STEP, "Checkout is complete")
            if self.is_busy:
                return self._reject(CheckoutRejectionKind.BUSY, "Payment is in progress")

            self._validation_seq += 1
            self._validating = False
            self._summary = None
            self._fault = None
            if self._step is CheckoutStep.REVIEW:
                logger.info("back to address")
            self._step = CheckoutStep.ADDRESS
            return Ok(self._step)

    # ═══════════════════════════════════════════════════════════════════════════
    # REVIEW
    # ═══════════════════════════════════════════════════════════════════════════

    async def place_order(self) -> Result[OrderConfirmation, CheckoutFault]:
        """
        Pay for the held summary and complete the order.

        No-op in CONFIRMATION. Rejected locally, with no collaborator
        contacted, when the cart is empty or no summary is held.
        """
        with bind_checkout_id(self.checkout_id):
            if self._confirmation is not None:
                logger.debug("place order ignored, checkout complete")
                return Ok(self._confirmation)
            if self._step is not CheckoutStep.REVIEW:
                return self._reject(
                    CheckoutRejectionKind.WRONG_STEP,
                    f"Cannot place an order in {self._step.name}",
                )
            if self.is_busy:
                return self._reject(CheckoutRejectionKind.BUSY, "Payment is in progress")
            if self._cart.current().is_empty:
                return Error(self._fail(ValidationError.empty_cart()))
            if self._summary is None or self._destination_id is None:
                return Error(self._fail(ValidationError.not_validated()))

            self._busy = True
            self._fault = None
            try:
                return await self._pay(self._summary, self._destination_id)
            finally:
                self._busy = False

    async def _pay(
        self, summary: OrderSummary, destination_id: DestinationId
    ) -> Result[OrderConfirmation, CheckoutFault]:
        ordered = await self._create_payment_order(summary)
        if isinstance(ordered, Error):
            return Error(self._fail(ordered.error))
        order = ordered.value

        session = self._session_factory(self._widget, self.deliver_authorization)
        self._session = session
        outcome = await session.open(
            order.handle, order.amount, order.currency, prefill=self._prefill
        )

        if self._confirmation is not None:
            # a redelivered authorization completed the order meanwhile
            return Ok(self._confirmation)

        match outcome:
            case Authorized(event):
                return await self._complete(event.token, destination_id)
            case Cancelled() | LoadFailure():
                return Error(self._fail(PaymentOutcomeError.from_outcome(outcome)))

    async def _create_payment_order(
        self, summary: OrderSummary
    ) -> Result[PaymentOrder, PaymentOutcomeError]:
        reference = uuid.uuid4().hex

        def on_error(exc: Exception) -> PaymentOutcomeError:
            return PaymentOutcomeError(
                PaymentOutcomeErrorKind.LOAD_FAILURE,
                f"Failed to initiate payment: {str(exc) or type(exc).__name__}",
            )

        return await L.bounded(
            lambda: self._payment_orders.create_order(reference, summary.total, summary.currency),
            seconds=self._policy.payment_order_timeout.total_seconds(),
            on_error=on_error,
            on_timeout=lambda s: PaymentOutcomeError(
                PaymentOutcomeErrorKind.LOAD_FAILURE,
                f"Payment initiation timed out after {s}s",
            ),
        )

    async def _complete(
        self, token: AuthToken, destination_id: DestinationId
    ) -> Result[OrderConfirmation, CheckoutFault]:
        result = await self._guard.complete(token, destination_id)

        match result:
            case Error(CompletionError(kind=CompletionErrorKind.IN_PROGRESS)) if token in self._deliveries:
                # a redelivery of this token claimed it first
                result = await self._deliveries[token]

        if self._confirmation is not None:
            # one checkout, one order
            return Ok(self._confirmation)

        match result:
            case Ok(confirmation):
                self._confirm(confirmation)
                return Ok(confirmation)
            case Error(err):
                if err.kind is CompletionErrorKind.CART_EMPTIED_CONCURRENTLY:
                    self._summary = None
                return Error(self._fail(err))

    # ═══════════════════════════════════════════════════════════════════════════
    # Redelivered authorizations
    # ═══════════════════════════════════════════════════════════════════════════

    def deliver_authorization(self, event: AuthorizationEvent) -> None:
        """
        Route a success callback that arrived after its session settled.

        Runs the token through the completion guard in a background task.
        Only a successful completion changes state; errors are dropped.
        """
        with bind_checkout_id(self.checkout_id):
            if self._step is CheckoutStep.ADDRESS or self._destination_id is None:
                logger.warning(
                    "authorization ignored outside review",
                    extra={"token": event.token},
                )
                return
            task = asyncio.get_running_loop().create_task(
                self._deliver(event.token, self._destination_id)
            )
            self._deliveries.setdefault(event.token, task)
            self._tasks.add(task)
            task.add_done_callback(self._forget)

    def _forget(self, task: asyncio.Task[Result[OrderConfirmation, CompletionError]]) -> None:
        self._tasks.discard(task)
        for token, delivery in list(self._deliveries.items()):
            if delivery is task:
                del self._deliveries[token]

    async def _deliver(
        self, token: AuthToken, destination_id: DestinationId
    ) -> Result[OrderConfirmation, CompletionError]:
        with bind_checkout_id(self.checkout_id):
            result = await self._guard.complete(token, destination_id)
            match result:
                case Ok(confirmation):
                    self._confirm(confirmation)
                case Error(err):
                    logger.debug(
                        "redelivered authorization dropped",
                        extra={"token": token, "kind": err.kind.name},
                    )
            return result

    async def drain(self) -> None:
        """Wait for redelivered authorizations still being processed."""
        while self._tasks:
            await asyncio.gather(*self._tasks)

    # ═══════════════════════════════════════════════════════════════════════════
    # Transitions
    # ═══════════════════════════════════════════════════════════════════════════

    def _confirm(self, confirmation: OrderConfirmation) -> None:
        if self._step is CheckoutStep.CONFIRMATION:
            return
        self._step = CheckoutStep.CONFIRMATION
        self._confirmation = confirmation
        self._fault = None
        logger.info(
            "order confirmed",
            extra={"order_id": confirmation.order_id, "order_number": confirmation.order_number},
        )
        self._notify("on_order_confirmed", confirmation)

    def _fail(self, error: CheckoutError) -> CheckoutFault:
        fault = CheckoutFault.of(error)
        if fault.silent:
            logger.debug("silent fault", extra={"kind": fault.kind.name})
            return fault
        self._fault = fault
        if isinstance(error, PaymentOutcomeError) and error.kind is PaymentOutcomeErrorKind.CANCELLED:
            logger.info("checkout payment cancelled")
        else:
            logger.warning(
                "checkout fault",
                extra={"kind": fault.kind.name, "retry": fault.retry.name, "step": self._step.name},
            )
        self._notify("on_error", fault)
        return fault

    def _reject(self, kind: CheckoutRejectionKind, message: str) -> Error[CheckoutFault]:
        return Error(self._fail(CheckoutRejection(kind, message)))

    def _notify(self, hook: str, payload: object) -> None:
        try:
            getattr(self._listener, hook)(payload)
        except Exception:
            logger.exception("checkout listener failed", extra={"hook": hook})


__all__ = (
    "SessionFactory",
    "CheckoutStateMachine",
)
