"""
Payment-related settings using pydantic-settings v2 with nested env keys.

Kept apart from core.config.Settings; every key is prefixed with PAYMENT__,
e.g. PAYMENT__DEFAULT_PROVIDER or PAYMENT__STRIPE__SECRET_KEY.
"""
from __future__ import annotations

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator


class StripeSettings(BaseModel):
    secret_key: Optional[str] = None


class PaymentSettings(BaseSettings):
    default_provider: str = "stripe"
    currency: str = "USD"
    stripe: StripeSettings = Field(default_factory=StripeSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PAYMENT__",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    @field_validator("currency")
    @classmethod
    def _upper_and_validate_currency(cls, v: str) -> str:
        u = (v or "").upper()
        if len(u) != 3 or not u.isalpha():
            raise ValueError("currency must be ISO-4217 alpha-3")
        return u


payment_settings = PaymentSettings()
