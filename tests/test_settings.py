"""Environment-driven configuration."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from cartflow.http import ApiSettings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "CARTFLOW_BASE_URL",
        "CARTFLOW_ACCESS_TOKEN",
        "CARTFLOW_VALIDATION_TIMEOUT_SECONDS",
        "CARTFLOW_COMPLETION_TIMEOUT_SECONDS",
        "CARTFLOW_DEFAULT_CURRENCY",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = ApiSettings(_env_file=None)

    assert settings.base_url == "http://localhost:8080"
    assert settings.access_token is None
    assert settings.default_currency == "INR"

    policy = settings.to_policy()
    assert policy.validation_timeout.total_seconds() == 10
    assert policy.payment_order_timeout.total_seconds() == 10
    assert policy.completion_timeout.total_seconds() == 30


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CARTFLOW_BASE_URL", "https://api.shop.test/")
    monkeypatch.setenv("CARTFLOW_ACCESS_TOKEN", "tok_live")
    monkeypatch.setenv("CARTFLOW_COMPLETION_TIMEOUT_SECONDS", "45")
    monkeypatch.setenv("CARTFLOW_DEFAULT_CURRENCY", "usd")

    settings = ApiSettings(_env_file=None)

    assert settings.base_url == "https://api.shop.test"
    assert settings.access_token == "tok_live"
    assert settings.default_currency == "USD"
    assert settings.to_policy().completion_timeout.total_seconds() == 45


def test_non_positive_timeout_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CARTFLOW_VALIDATION_TIMEOUT_SECONDS", "0")

    with pytest.raises(ValidationError):
        ApiSettings(_env_file=None)
