"""Storefront API configuration loaded from the environment."""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cartflow.policy import CheckoutPolicy


class ApiSettings(BaseSettings):
    """Gateway connection and checkout deadlines.

    Every field can be overridden with a ``CARTFLOW_`` prefixed variable,
    e.g. ``CARTFLOW_BASE_URL`` or ``CARTFLOW_COMPLETION_TIMEOUT_SECONDS``.
    """

    model_config = SettingsConfigDict(
        env_prefix="CARTFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: str = Field(default="http://localhost:8080", description="Storefront gateway URL")
    access_token: str | None = Field(default=None, description="Bearer token for the shopper")
    http_timeout_seconds: float = Field(default=30.0, gt=0, description="Transport-level timeout")

    validation_timeout_seconds: float = Field(default=10.0, gt=0)
    payment_order_timeout_seconds: float = Field(default=10.0, gt=0)
    completion_timeout_seconds: float = Field(default=30.0, gt=0)

    merchant_name: str = Field(default="Storefront", description="Name shown in the payment widget")
    default_currency: str = Field(default="INR", min_length=3, max_length=3)

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("default_currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()

    def to_policy(self) -> CheckoutPolicy:
        return (
            CheckoutPolicy()
            .with_validation_timeout(seconds=self.validation_timeout_seconds)
            .with_payment_order_timeout(seconds=self.payment_order_timeout_seconds)
            .with_completion_timeout(seconds=self.completion_timeout_seconds)
        )


__all__ = ("ApiSettings",)
