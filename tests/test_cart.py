"""Tests for cart aggregation, redemption and shipping."""

import pytest

from coinshop.cart import (
    CoinSettings,
    RedemptionMode,
    ShippingPolicy,
    aggregate,
    price_and_aggregate,
)
from coinshop.pricing import price_line

from support import line


def _capped_lines():
    # 100 units × 4% cap = 400 redeemable coins each
    return [price_line(10000, 1, 0, 2, 4), price_line(10000, 1, 0, 2, 4)]


class TestAggregate:
    def test_free_shipping_above_threshold(self):
        totals = aggregate([price_line(10000, 1), price_line(6000, 1)], CoinSettings())

        assert totals.subtotal == 16000
        assert totals.total_discount == 0
        assert totals.shipping_fee == 0
        assert totals.grand_total == 16000

    def test_empty_cart(self):
        totals = aggregate([], CoinSettings())

        assert totals.subtotal == 0
        assert totals.total_discount == 0
        assert totals.final_amount == 0
        assert totals.shipping_fee == 1500
        assert totals.grand_total == 1500
        assert totals.items_count == 0
        assert totals.is_empty

    def test_shipping_threshold_is_inclusive(self):
        at_threshold = aggregate([price_line(15000, 1)], CoinSettings())
        one_cent_below = aggregate([price_line(14999, 1)], CoinSettings())

        assert at_threshold.shipping_fee == 0
        assert one_cent_below.shipping_fee == 1500
        assert one_cent_below.grand_total == 14999 + 1500

    def test_custom_shipping_policy(self):
        policy = ShippingPolicy(free_threshold=5000, flat_fee=990)

        totals = aggregate([price_line(4000, 1)], CoinSettings(), shipping=policy)

        assert totals.shipping_fee == 990
        assert policy.missing_for_free(totals.final_amount) == 1000

    def test_sums_discounts_and_cashback(self):
        totals = aggregate(
            [price_line(10000, 2, 10, 2, 5), price_line(5000, 3)],
            CoinSettings(),
        )

        assert totals.subtotal == 35000
        assert totals.total_discount == 2000
        assert totals.total_coins_earned == 360 + 300
        assert totals.total_coins_needed == 900
        assert totals.final_amount == 33000
        assert totals.items_count == 5

    def test_same_inputs_give_same_totals(self):
        lines = _capped_lines()
        settings = CoinSettings(enabled=True, balance=500)

        assert aggregate(lines, settings) == aggregate(lines, settings)


class TestRedemption:
    def test_each_line_caps_against_full_balance(self):
        totals = aggregate(_capped_lines(), CoinSettings(enabled=True, balance=500))

        assert [p.coins_used for p in totals.lines] == [400, 400]
        assert totals.total_coins_used == 800
        assert totals.total_coins_discount == 800
        assert totals.final_amount == 20000 - 800

    def test_shared_balance_mode_draws_down(self):
        totals = aggregate(
            _capped_lines(),
            CoinSettings(enabled=True, balance=500),
            mode=RedemptionMode.SHARED_BALANCE,
        )

        assert [p.coins_used for p in totals.lines] == [400, 100]
        assert totals.total_coins_used == 500

    @pytest.mark.parametrize("balance", [0, 1, 250, 400, 10_000])
    def test_line_never_uses_more_than_cap_or_balance(self, balance):
        lines = [price_line(10000, 1, 0, 2, 4), price_line(2500, 2, 10, 2, 30)]

        totals = aggregate(lines, CoinSettings(enabled=True, balance=balance))

        for priced in totals.lines:
            assert priced.coins_used <= min(priced.max_redeemable_coins, balance)

    def test_disabled_redemption_uses_nothing(self):
        totals = aggregate(_capped_lines(), CoinSettings(enabled=False, balance=500))

        assert totals.total_coins_used == 0
        assert totals.total_coins_discount == 0
        assert totals.final_amount == 20000

    def test_redeeming_forfeits_cashback(self):
        enabled = aggregate(_capped_lines(), CoinSettings(enabled=True, balance=500))
        disabled = aggregate(_capped_lines(), CoinSettings(enabled=False, balance=500))

        assert enabled.total_coins_earned == disabled.total_coins_earned == 400
        assert enabled.coins_to_credit == 0
        assert enabled.coins_to_debit == 800
        assert disabled.coins_to_credit == 400
        assert disabled.coins_to_debit == 0

    def test_enabled_redemption_forfeits_cashback_even_with_zero_balance(self):
        totals = aggregate(_capped_lines(), CoinSettings(enabled=True, balance=0))

        assert totals.total_coins_used == 0
        assert totals.coins_to_debit == 0
        assert totals.coins_to_credit == 0

    def test_final_amount_never_negative(self):
        # 0.50 rounds up to 1 unit, cap 100% → 100 coins on a 50 cent line
        totals = aggregate([price_line(50, 1, 0, 2, 100)], CoinSettings(enabled=True, balance=1000))

        assert totals.total_coins_used == 100
        assert totals.final_amount == 0
        assert totals.lines[0].final_amount == 0
        assert totals.grand_total == 1500


class TestCartTotals:
    def test_installment(self):
        totals = aggregate(_capped_lines(), CoinSettings(enabled=True, balance=500))

        assert totals.grand_total == 19200
        assert totals.installment() == 1600
        assert totals.installment(10) == 1920

    def test_installment_count_must_be_positive(self):
        totals = aggregate([], CoinSettings())

        with pytest.raises(ValueError):
            totals.installment(0)

    def test_negative_balance_is_zero(self):
        assert CoinSettings(enabled=True, balance=-5).balance == 0

    def test_negative_shipping_config_rejected(self):
        with pytest.raises(ValueError):
            ShippingPolicy(free_threshold=-1)

    def test_price_and_aggregate_from_cart_lines(self):
        totals = price_and_aggregate(
            [line(2, unit_price=4500, cap=10), line(0, unit_price=9999)],
            CoinSettings(enabled=True, balance=50),
        )

        assert totals.subtotal == 9000
        assert totals.items_count == 2
        assert totals.total_coins_used == 50
