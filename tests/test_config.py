"""Tests for settings and logging setup."""

from datetime import timedelta

import pytest
import structlog
from pydantic import ValidationError

from coinshop import logs
from coinshop.cart import RedemptionMode, ShippingPolicy
from coinshop.config import Settings


class TestSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.shipping_policy() == ShippingPolicy(free_threshold=15000, flat_fee=1500)
        assert settings.mode() is RedemptionMode.PER_LINE
        assert settings.streak_reset_hour == 20
        assert settings.streak_timezone().utcoffset(None) == timedelta(hours=-3)

    def test_from_env(self):
        settings = Settings.from_env({
            "COINSHOP_FREE_SHIPPING_THRESHOLD": "20000",
            "COINSHOP_REDEMPTION_MODE": "shared_balance",
            "COINSHOP_INSTALLMENTS": " 10 ",
            "UNRELATED": "x",
        })

        assert settings.free_shipping_threshold == 20000
        assert settings.mode() is RedemptionMode.SHARED_BALANCE
        assert settings.installments == 10

    def test_blank_values_keep_defaults(self):
        settings = Settings.from_env({"COINSHOP_SHIPPING_FEE": "  "})

        assert settings.shipping_fee == 1500

    @pytest.mark.parametrize(
        "name, value",
        [
            ("COINSHOP_REDEMPTION_MODE", "greedy"),
            ("COINSHOP_INSTALLMENTS", "0"),
            ("COINSHOP_STREAK_RESET_HOUR", "24"),
            ("COINSHOP_SHIPPING_FEE", "-1"),
        ],
    )
    def test_invalid_values(self, name, value):
        with pytest.raises(ValidationError):
            Settings.from_env({name: value})


class TestLogs:
    def test_level_from_name(self):
        assert logs.level_from_name(" WARNING ") == 30

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            logs.level_from_name("verbose")

    def test_configure(self):
        logs.configure("debug", json=False)

        try:
            structlog.get_logger("coinshop.test").debug("configured", check=True)
        finally:
            structlog.reset_defaults()


class TestSettingsBuilders:
    def test_memory_ledger_uses_window(self):
        settings = Settings(streak_reset_hour=0, streak_utc_offset_hours=0)

        ledger = settings.memory_ledger((10, 20))

        assert ledger.max_streak == 2

    def test_configure_logging(self):
        try:
            Settings(log_level="warning").configure_logging(json=False)
        finally:
            structlog.reset_defaults()

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            Settings.from_env({"COINSHOP_LOG_LEVEL": "verbose"})
