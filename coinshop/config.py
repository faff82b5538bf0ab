"""Runtime settings for the pricing engine, streak policy and settlement handoff."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from datetime import timedelta, timezone
from typing import Literal

from pydantic import BaseModel, Field

from coinshop import logs
from coinshop.cart import RedemptionMode, ShippingPolicy
from coinshop.ledger import MemoryLedger

ENV_PREFIX = "COINSHOP_"


class Settings(BaseModel):
    free_shipping_threshold: int = Field(default=15000, ge=0)
    shipping_fee: int = Field(default=1500, ge=0)
    redemption_mode: Literal["per_line", "shared_balance"] = "per_line"
    installments: int = Field(default=12, ge=1)
    streak_reset_hour: int = Field(default=20, ge=0, le=23)
    streak_utc_offset_hours: int = Field(default=-3, ge=-12, le=14)
    order_destination: str = ""
    message_base_url: str = "https://wa.me/"
    balance_cache_size: int = Field(default=1000, ge=1)
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "info"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from COINSHOP_* variables; unset or blank ones keep defaults."""
        env = os.environ if environ is None else environ
        values: dict[str, str] = {}
        for name in cls.model_fields:
            raw = env.get(f"{ENV_PREFIX}{name.upper()}", "")
            if raw.strip():
                values[name] = raw.strip()
        return cls(**values)

    def shipping_policy(self) -> ShippingPolicy:
        return ShippingPolicy(
            free_threshold=self.free_shipping_threshold,
            flat_fee=self.shipping_fee,
        )

    def mode(self) -> RedemptionMode:
        return RedemptionMode(self.redemption_mode)

    def streak_timezone(self) -> timezone:
        return timezone(timedelta(hours=self.streak_utc_offset_hours))

    def memory_ledger(self, bonus_schedule: Sequence[int]) -> MemoryLedger:
        """In-process ledger using this window hour and offset."""
        return MemoryLedger(
            bonus_schedule,
            reset_hour=self.streak_reset_hour,
            tz=self.streak_timezone(),
        )

    def configure_logging(self, *, json: bool = True) -> None:
        logs.configure(self.log_level, json=json)


__all__ = ("ENV_PREFIX", "Settings")
