"""
Settlement message — the order text handed to the intake channel.

Pure formatting. Amounts come from CartTotals as-is; nothing is recomputed.

Example:
    text = build_settlement_message(totals, CoinSettings(enabled=True, balance=900))
    link = message_link("5527996882090", text)
"""

from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import quote

from coinshop.cart import CartTotals, CoinSettings
from coinshop.pricing import PricedLine, format_coins, format_currency

DEFAULT_GREETING = "Olá! Gostaria de pedir os seguintes itens:"
DEFAULT_BASE_URL = "https://wa.me/"

# encodeURIComponent leaves these unescaped
_URI_COMPONENT_SAFE = "-_.!~*'()"


def _line_text(line: PricedLine, labels: Mapping[str, str]) -> str:
    name = line.product_name or line.product_id or "Produto"
    variant = line.line.variant_label if line.line is not None else ""
    if variant:
        name = f"{name} ({variant})"
    label = labels.get(line.product_id)
    if label:
        name = f"{name} [{label}]"
    return f"• {name} - Qtd: {line.quantity} - R$ {format_currency(line.discounted_amount)}"


def build_settlement_message(
    totals: CartTotals,
    coin_settings: CoinSettings,
    *,
    labels: Mapping[str, str] | None = None,
    greeting: str = DEFAULT_GREETING,
    verification_code: str | None = None,
) -> str:
    """
    Render the order message.

    Exactly one coin line is written: coins redeemed when redemption is on
    and used, otherwise the cashback the order will earn.
    """
    labels = labels or {}
    parts: list[str] = [greeting, ""]
    parts.extend(_line_text(line, labels) for line in totals.lines)
    parts.append("")

    parts.append(f"Subtotal: R$ {format_currency(totals.subtotal)}")
    if totals.total_discount > 0:
        parts.append(f"Descontos: -R$ {format_currency(totals.total_discount)}")

    if coin_settings.enabled and totals.coins_to_debit > 0:
        parts.append(
            f"UTI Coins usados: {format_coins(totals.coins_to_debit)}"
            f" (-R$ {format_currency(totals.total_coins_discount)})"
        )
    elif totals.coins_to_credit > 0:
        parts.append(f"UTI Coins a ganhar: {format_coins(totals.coins_to_credit)}")

    shipping = "Grátis" if totals.shipping_fee == 0 else f"R$ {format_currency(totals.shipping_fee)}"
    parts.append(f"Frete: {shipping}")
    parts.append(f"*Total: R$ {format_currency(totals.grand_total)}*")

    if verification_code:
        parts.extend(["", "🔐 *Código de Verificação:*", verification_code])

    return "\n".join(parts)


def message_link(destination: str, message: str, base_url: str = DEFAULT_BASE_URL) -> str:
    """Prefilled message link: https://wa.me/<digits>?text=<encoded>."""
    digits = "".join(ch for ch in destination if ch.isdigit())
    if not digits:
        raise ValueError(f"destination has no digits: {destination!r}")
    return f"{base_url}{digits}?text={quote(message, safe=_URI_COMPONENT_SAFE)}"


__all__ = (
    "DEFAULT_GREETING",
    "DEFAULT_BASE_URL",
    "build_settlement_message",
    "message_link",
)
