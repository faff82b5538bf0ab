"""Tests for the settlement message, order link and the commit/rollback flow."""

import asyncio

import pytest
from kungfu import Error

from coinshop.cart import CoinSettings, price_and_aggregate
from coinshop.ledger import BalanceSnapshots, LedgerErrorKind
from coinshop.settlement import (
    DeliveryError,
    LinkChannel,
    Settlement,
    SettlementErrorKind,
    build_settlement_message,
    message_link,
    movement_for,
)

from support import USER, Calls, err, explode, line, memory_ledger, ok, unavailable, wrap_ledger

DESTINATION = "5527996882090"


class TestBuildSettlementMessage:
    def test_cashback_order(self):
        totals = price_and_aggregate(
            [line(1, product_id="p1", name="DualSense", unit_price=44990)],
            CoinSettings(),
        )

        message = build_settlement_message(totals, CoinSettings())

        assert message == (
            "Olá! Gostaria de pedir os seguintes itens:\n"
            "\n"
            "• DualSense - Qtd: 1 - R$ 449,90\n"
            "\n"
            "Subtotal: R$ 449,90\n"
            "UTI Coins a ganhar: 900\n"
            "Frete: Grátis\n"
            "*Total: R$ 449,90*"
        )

    def test_variant_label_discount_and_shipping(self):
        totals = price_and_aggregate(
            [line(2, product_id="p2", name="Camiseta", unit_price=5990, discount=10, size="M", color="Preto")],
            CoinSettings(),
        )

        message = build_settlement_message(totals, CoinSettings(), labels={"p2": "Oferta"})

        assert "• Camiseta (M, Preto) [Oferta] - Qtd: 2 - R$ 107,82" in message
        assert "Descontos: -R$ 11,98" in message
        assert "UTI Coins a ganhar: 216" in message
        assert "Frete: R$ 15,00" in message
        assert message.endswith("*Total: R$ 122,82*")

    def test_redeemed_coins_replace_cashback(self):
        settings = CoinSettings(enabled=True, balance=1000)
        totals = price_and_aggregate([line(1, unit_price=10000, cap=3)], settings)

        message = build_settlement_message(totals, settings)

        assert "UTI Coins usados: 300 (-R$ 3,00)" in message
        assert "a ganhar" not in message
        assert message.endswith("*Total: R$ 112,00*")

    def test_verification_code(self):
        totals = price_and_aggregate([line(1)], CoinSettings())

        message = build_settlement_message(totals, CoinSettings(), verification_code="ABC123")

        assert message.endswith("🔐 *Código de Verificação:*\nABC123")

    def test_custom_greeting(self):
        totals = price_and_aggregate([line(1)], CoinSettings())

        message = build_settlement_message(totals, CoinSettings(), greeting="Pedido:")

        assert message.startswith("Pedido:\n\n• Produto")


class TestMessageLink:
    def test_encodes_like_uri_component(self):
        link = message_link("+55 (27) 99688-2090", "Olá! a b*")

        assert link == "https://wa.me/5527996882090?text=Ol%C3%A1!%20a%20b*"

    def test_destination_without_digits(self):
        with pytest.raises(ValueError):
            message_link("", "hi")

    def test_link_channel(self):
        result = asyncio.run(LinkChannel().deliver(DESTINATION, "oi"))

        assert ok(result) == "https://wa.me/5527996882090?text=oi"

    def test_link_channel_bad_destination(self):
        result = asyncio.run(LinkChannel().deliver("none", "oi"))

        assert isinstance(err(result), DeliveryError)

    def test_link_channel_opener_failure(self):
        async def opener(link):
            raise OSError("no browser")

        result = asyncio.run(LinkChannel(opener=opener).deliver(DESTINATION, "oi"))

        assert isinstance(err(result).cause, OSError)


class _FailingChannel:
    async def deliver(self, destination, message):
        return Error(DeliveryError("channel offline"))


class _RaisingChannel:
    async def deliver(self, destination, message):
        raise ConnectionError("socket closed")


def _settlement(ledger, channel=None, **kwargs):
    return Settlement(
        ledger,
        BalanceSnapshots(ledger),
        channel or LinkChannel(),
        reference_factory=lambda: "order-1",
        **kwargs,
    )


class TestSettle:
    def test_cashback_is_credited(self):
        ledger = memory_ledger()
        settlement = _settlement(ledger)

        async def scenario():
            receipt = await settlement.settle(
                USER,
                [line(1, name="DualSense", unit_price=44990)],
                CoinSettings(),
                DESTINATION,
            )
            balance = await ledger.get_balance(USER)
            return receipt, balance

        receipt, balance = asyncio.run(scenario())

        receipt = ok(receipt)
        assert receipt.commit.movement.credit_coins == 900
        assert receipt.commit.movement.redeem_coins == 0
        assert receipt.commit.reference == "order-1"
        assert receipt.link.startswith("https://wa.me/5527996882090?text=")
        assert ok(balance).balance == 900

    def test_redemption_is_debited(self):
        ledger = memory_ledger(**{USER.value: 1000})
        settlement = _settlement(ledger)

        async def scenario():
            receipt = await settlement.settle(
                USER,
                [line(1, unit_price=10000, cap=3)],
                CoinSettings(enabled=True, balance=1000),
                DESTINATION,
            )
            balance = await ledger.get_balance(USER)
            return receipt, balance

        receipt, balance = asyncio.run(scenario())

        assert ok(receipt).commit.movement.redeem_coins == 300
        assert ok(receipt).commit.movement.credit_coins == 0
        assert ok(balance).balance == 700

    def test_rejection_recomputes_from_fresh_balance(self):
        ledger = memory_ledger(**{USER.value: 500})
        settlement = _settlement(ledger)

        async def scenario():
            result = await settlement.settle(
                USER,
                [line(1, unit_price=10000, cap=8)],
                CoinSettings(enabled=True, balance=900),
                DESTINATION,
            )
            balance = await ledger.get_balance(USER)
            return result, balance

        result, balance = asyncio.run(scenario())

        error = err(result)
        assert error.kind is SettlementErrorKind.REJECTED
        assert error.ledger_error.kind is LedgerErrorKind.INSUFFICIENT_BALANCE
        assert error.refreshed_totals.total_coins_used == 500
        assert error.refreshed_totals.final_amount == 9500
        assert ok(balance).balance == 500

    def test_delivery_failure_reverts_commit(self):
        ledger = memory_ledger(**{USER.value: 1000})
        settlement = _settlement(ledger, _FailingChannel())

        async def scenario():
            result = await settlement.settle(
                USER,
                [line(1, unit_price=10000, cap=3)],
                CoinSettings(enabled=True, balance=1000),
                DESTINATION,
            )
            balance = await ledger.get_balance(USER)
            return result, balance

        result, balance = asyncio.run(scenario())

        error = err(result)
        assert error.kind is SettlementErrorKind.DELIVERY_FAILED
        assert error.rollback_complete is True
        assert ok(balance).balance == 1000

    def test_failed_revert_is_reported(self):
        base = memory_ledger(**{USER.value: 1000})
        ledger = wrap_ledger(base, Calls(), revert_settlement=unavailable)
        settlement = _settlement(ledger, _FailingChannel())

        result = asyncio.run(settlement.settle(
            USER,
            [line(1, unit_price=10000, cap=3)],
            CoinSettings(enabled=True, balance=1000),
            DESTINATION,
        ))

        assert err(result).rollback_complete is False

    def test_raising_channel_reverts_commit(self):
        ledger = memory_ledger(**{USER.value: 1000})
        snapshots = BalanceSnapshots(ledger)
        settlement = Settlement(ledger, snapshots, _RaisingChannel(), reference_factory=lambda: "order-1")

        async def scenario():
            await snapshots.get(USER)
            result = await settlement.settle(
                USER,
                [line(1, unit_price=10000, cap=10)],
                CoinSettings(enabled=True, balance=1000),
                DESTINATION,
            )
            balance = await ledger.get_balance(USER)
            return result, balance

        result, balance = asyncio.run(scenario())

        error = err(result)
        assert error.kind is SettlementErrorKind.DELIVERY_FAILED
        assert isinstance(error.delivery_error.cause, ConnectionError)
        assert error.rollback_complete is True
        assert ok(balance).balance == 1000
        assert snapshots.peek(USER) is None

    def test_ledger_unavailable(self):
        ledger = wrap_ledger(memory_ledger(), Calls(), commit_settlement=explode)
        settlement = _settlement(ledger)

        result = asyncio.run(settlement.settle(USER, [line(1)], CoinSettings(), DESTINATION))

        error = err(result)
        assert error.kind is SettlementErrorKind.LEDGER_UNAVAILABLE
        assert error.ledger_error.kind is LedgerErrorKind.UNAVAILABLE

    def test_empty_cart(self):
        calls = Calls()
        settlement = _settlement(wrap_ledger(memory_ledger(), calls))

        result = asyncio.run(settlement.settle(USER, [line(0)], CoinSettings(), DESTINATION))

        assert err(result).kind is SettlementErrorKind.EMPTY_CART
        assert calls["commit_settlement"] == 0


class TestMovementFor:
    def test_redeem_or_credit_never_both(self):
        lines = [line(1, unit_price=10000, cap=3)]
        enabled = price_and_aggregate(lines, CoinSettings(enabled=True, balance=1000))
        disabled = price_and_aggregate(lines, CoinSettings())

        assert movement_for(enabled, "r").redeem_coins == 300
        assert movement_for(enabled, "r").credit_coins == 0
        assert movement_for(disabled, "r").redeem_coins == 0
        assert movement_for(disabled, "r").credit_coins == 200
