"""
Pricing types — catalog config, cart lines and priced lines.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from coinshop._types import Cents, Coins
from coinshop.pricing._money import percent, units_to_cents, whole

DEFAULT_DISCOUNT_PERCENTAGE: float = 0.0
DEFAULT_CASHBACK_PERCENTAGE: float = 2.0
DEFAULT_REDEMPTION_CAP_PERCENTAGE: float = 0.0


# ═══════════════════════════════════════════════════════════════════════════════
# Product Pricing Config — owned by the catalog, read-only here
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ProductPricing:
    """
    Discount, cashback and redemption configuration of one product.

    Defaults are applied here, at the boundary, instead of being scattered
    through the calculation.
    """

    product_id: str
    name: str
    unit_price: Cents
    discount_percentage: float = DEFAULT_DISCOUNT_PERCENTAGE
    cashback_percentage: float = DEFAULT_CASHBACK_PERCENTAGE
    redemption_cap_percentage: float = DEFAULT_REDEMPTION_CAP_PERCENTAGE

    @classmethod
    def from_record(cls, record: Mapping[str, object]) -> ProductPricing:
        """
        Normalize a raw catalog record.

        Understands the storefront's column names. `price` is in currency
        units (399.99); missing, NaN or negative numbers fall back to the
        defaults. A zero cashback percentage also falls back to 2, as the
        storefront always did.
        """
        cashback = percent(record.get("uti_coins_cashback_percentage"), 0)
        if cashback == 0:
            cashback = percent(DEFAULT_CASHBACK_PERCENTAGE)
        return cls(
            product_id=str(record.get("id") or ""),
            name=str(record.get("name") or ""),
            unit_price=units_to_cents(record.get("price")),
            discount_percentage=float(percent(record.get("discount_percentage"))),
            cashback_percentage=float(cashback),
            redemption_cap_percentage=float(
                percent(record.get("uti_coins_discount_percentage"))
            ),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Cart Line — owned by the cart state holder
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartLine:
    product: ProductPricing
    quantity: int
    size: str | None = None
    color: str | None = None

    @property
    def variant_label(self) -> str:
        return ", ".join(part for part in (self.size, self.color) if part)

    @classmethod
    def from_record(cls, record: Mapping[str, object]) -> CartLine:
        """Build from a cart-holder record: {'product': {...}, 'quantity': 2, 'size': ...}."""
        product = record.get("product")
        return cls(
            product=ProductPricing.from_record(product if isinstance(product, Mapping) else {}),
            quantity=whole(record.get("quantity")),
            size=_optional_str(record.get("size")),
            color=_optional_str(record.get("color")),
        )


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# ═══════════════════════════════════════════════════════════════════════════════
# Priced Line — derived, recomputed on every render
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PricedLine:
    """
    One cart line after pricing.

    coins_used and applied_redemption_amount stay 0 until the cart
    aggregator applies redemption.
    """

    unit_price: Cents
    quantity: int
    discount_percentage: float
    cashback_percentage: float
    redemption_cap_percentage: float
    original_amount: Cents
    discount_amount: Cents
    discounted_amount: Cents
    cashback_coins: Coins
    max_redeemable_coins: Coins
    coins_used: Coins = 0
    applied_redemption_amount: Cents = 0
    line: CartLine | None = None

    @property
    def final_amount(self) -> Cents:
        return max(0, self.discounted_amount - self.applied_redemption_amount)

    @property
    def product_name(self) -> str:
        return self.line.product.name if self.line is not None else ""

    @property
    def product_id(self) -> str:
        return self.line.product.product_id if self.line is not None else ""


__all__ = (
    "DEFAULT_DISCOUNT_PERCENTAGE",
    "DEFAULT_CASHBACK_PERCENTAGE",
    "DEFAULT_REDEMPTION_CAP_PERCENTAGE",
    "ProductPricing",
    "CartLine",
    "PricedLine",
)
