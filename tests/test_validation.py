"""Checkout validator: one remote read per call, errors classified."""

from __future__ import annotations

import asyncio

import pytest
from kungfu import Ok, Error

from cartflow.domain import CartSnapshot
from cartflow.policy import CheckoutPolicy
from cartflow.validation import CheckoutValidator, ValidationErrorKind

from conftest import FakePricing, make_cart, make_summary


@pytest.mark.asyncio
async def test_empty_cart_never_reaches_the_service() -> None:
    pricing = FakePricing()
    validator = CheckoutValidator(pricing)

    result = await validator.validate("addr_1", CartSnapshot.empty())

    assert isinstance(result, Error)
    assert result.error.kind is ValidationErrorKind.EMPTY_CART
    assert pricing.calls == []


@pytest.mark.asyncio
async def test_valid_summary_is_returned_as_is() -> None:
    summary = make_summary("2499.00")
    pricing = FakePricing(summaries={"addr_1": summary})

    result = await CheckoutValidator(pricing).validate("addr_1", make_cart())

    assert result == Ok(summary)
    assert pricing.calls == ["addr_1"]


@pytest.mark.asyncio
async def test_every_call_is_a_fresh_read() -> None:
    pricing = FakePricing()
    validator = CheckoutValidator(pricing)

    await validator.validate("addr_1", make_cart())
    await validator.validate("addr_1", make_cart())

    assert pricing.calls == ["addr_1", "addr_1"]


@pytest.mark.asyncio
async def test_invalid_summary_is_stale_pricing_with_warnings() -> None:
    pricing = FakePricing(summaries={"addr_1": make_summary(is_valid=False)})

    result = await CheckoutValidator(pricing).validate("addr_1", make_cart())

    assert isinstance(result, Error)
    assert result.error.kind is ValidationErrorKind.STALE_PRICING
    assert result.error.warnings == ("Kurta is out of stock",)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kind",
    [ValidationErrorKind.ADDRESS_INVALID, ValidationErrorKind.STALE_PRICING, ValidationErrorKind.EMPTY_CART],
)
async def test_service_reasons_pass_through(kind: ValidationErrorKind) -> None:
    pricing = FakePricing(rejections={"addr_1": kind})

    result = await CheckoutValidator(pricing).validate("addr_1", make_cart())

    assert isinstance(result, Error)
    assert result.error.kind is kind


@pytest.mark.asyncio
async def test_slow_service_is_unavailable() -> None:
    pricing = FakePricing(gates={"addr_1": asyncio.Event()})
    validator = CheckoutValidator(pricing, policy=CheckoutPolicy().with_validation_timeout(seconds=0.01))

    result = await validator.validate("addr_1", make_cart())

    assert isinstance(result, Error)
    assert result.error.kind is ValidationErrorKind.UNAVAILABLE


@pytest.mark.asyncio
async def test_transport_failure_is_unavailable() -> None:
    class Broken:
        async def initiate(self, destination_id: str):
            raise ConnectionError("gateway down")

    result = await CheckoutValidator(Broken()).validate("addr_1", make_cart())

    assert isinstance(result, Error)
    assert result.error.kind is ValidationErrorKind.UNAVAILABLE
    assert "gateway down" in result.error.message


def test_policy_rejects_non_positive_timeouts() -> None:
    with pytest.raises(ValueError):
        CheckoutPolicy().with_validation_timeout(seconds=0)
    policy = CheckoutPolicy().with_completion_timeout(seconds=45)
    assert policy.completion_timeout.total_seconds() == 45
    assert policy.validation_timeout.total_seconds() == 10
