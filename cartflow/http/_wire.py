"""Pydantic schemas for the storefront gateway's checkout endpoints.

The gateway answers in snake_case; older deployments answer in camelCase.
Both are accepted. Schemas convert into frozen domain objects and never
leak past the HTTP adapters.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, field_validator

from cartflow.domain import LineItem, OrderConfirmation, OrderSummary, PaymentOrder


def _either(snake: str, camel: str) -> AliasChoices:
    return AliasChoices(snake, camel)


class _Schema(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# ---------------- Requests ---------------- #


class InitiateCheckoutRequest(_Schema):
    shipping_address_id: str


class CreatePaymentOrderRequest(_Schema):
    order_id: str
    amount: Decimal = Field(ge=0)
    currency: str = Field(min_length=3, max_length=3)

    @field_serializer("amount")
    def amount_as_text(self, v: Decimal) -> str:
        # major units, exact decimal string
        return str(v)


class CompleteCheckoutRequest(_Schema):
    shipping_address_id: str
    payment_gateway_transaction_id: str


# ---------------- Responses ---------------- #


class LineItemSchema(_Schema):
    product_id: str = Field(validation_alias=_either("product_id", "productId"))
    sku: str = ""
    name: str = Field(default="", validation_alias=_either("name", "productName"))
    quantity: int = 1
    unit_price: Decimal = Field(default=Decimal("0"), validation_alias=_either("unit_price", "unitPrice"))
    total_price: Decimal = Field(default=Decimal("0"), validation_alias=_either("total_price", "totalPrice"))

    @field_validator("product_id", "sku", mode="before")
    @classmethod
    def ids_as_text(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    def to_domain(self) -> LineItem:
        return LineItem(
            product_id=self.product_id,
            sku=self.sku,
            quantity=self.quantity,
            unit_price=self.unit_price,
            total_price=self.total_price,
            name=self.name,
        )


class CheckoutSummarySchema(_Schema):
    """Response of ``POST /api/v1/checkout/initiate``."""

    items: list[LineItemSchema] = Field(default_factory=list)
    subtotal: Decimal = Decimal("0")
    discount_amount: Decimal = Field(default=Decimal("0"), validation_alias=_either("discount_amount", "discountAmount"))
    tax_amount: Decimal = Field(default=Decimal("0"), validation_alias=_either("tax_amount", "taxAmount"))
    shipping_cost: Decimal = Field(default=Decimal("0"), validation_alias=_either("shipping_cost", "shippingCost"))
    total: Decimal = Decimal("0")
    currency: str | None = None
    is_valid: bool = Field(default=True, validation_alias=_either("is_valid", "isValid"))
    warnings: list[str] = Field(default_factory=list)

    @field_validator("currency", mode="before")
    @classmethod
    def currency_upper(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) and v else None

    def to_domain(self, default_currency: str = "INR") -> OrderSummary:
        return OrderSummary(
            items=tuple(item.to_domain() for item in self.items),
            subtotal=self.subtotal,
            discount_amount=self.discount_amount,
            tax_amount=self.tax_amount,
            shipping_cost=self.shipping_cost,
            total=self.total,
            currency=self.currency or default_currency,
            is_valid=self.is_valid,
            warnings=tuple(self.warnings),
        )


class PaymentOrderSchema(_Schema):
    """Response of ``POST /api/v1/payment/order/create``."""

    order_id: str | None = Field(default=None, validation_alias=_either("order_id", "orderId"))
    razorpay_order_id: str = Field(validation_alias=_either("razorpay_order_id", "razorpayOrderId"))
    amount: Decimal = Decimal("0")
    currency: str | None = None
    status: str = "CREATED"

    def to_domain(self, default_currency: str = "INR") -> PaymentOrder:
        return PaymentOrder(
            handle=self.razorpay_order_id,
            amount=self.amount,
            currency=(self.currency or default_currency).upper(),
        )


class CompletionSchema(_Schema):
    """Response of ``POST /api/v1/checkout/complete``."""

    order_id: str = Field(validation_alias=_either("order_id", "orderId"))
    order_number: str = Field(validation_alias=_either("order_number", "orderNumber"))
    payment_id: str | None = Field(default=None, validation_alias=_either("payment_id", "paymentId"))
    total: Decimal | None = None
    currency: str = "INR"

    @field_validator("order_id", "order_number", mode="before")
    @classmethod
    def ids_as_text(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    def to_domain(self) -> OrderConfirmation:
        return OrderConfirmation(
            order_id=self.order_id,
            order_number=self.order_number,
            payment_id=self.payment_id,
            total=self.total,
            currency=self.currency,
        )


class ErrorSchema(_Schema):
    """Error body; gateways differ on which keys they fill."""

    reason: str | None = Field(default=None, validation_alias=_either("reason", "code"))
    message: str | None = Field(default=None, validation_alias=AliasChoices("message", "detail", "error"))

    @field_validator("reason", "message", mode="before")
    @classmethod
    def as_text(cls, v: Any) -> Any:
        return v if isinstance(v, str) or v is None else str(v)


__all__ = (
    "InitiateCheckoutRequest",
    "CreatePaymentOrderRequest",
    "CompleteCheckoutRequest",
    "LineItemSchema",
    "CheckoutSummarySchema",
    "PaymentOrderSchema",
    "CompletionSchema",
    "ErrorSchema",
)
