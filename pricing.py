from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Dict, Iterable, List, Optional, Sequence

from schemas import CartTotals, PricingTier

PAYPAL_FEE_RATE = Decimal("0.03")
CENT = Decimal("0.01")


def _to_decimal(value) -> Decimal:
    # str() keeps the shortest float repr, so 19.99 stays 19.99
    return Decimal(str(value))


def _quantize_cents(value) -> Decimal:
    d = _to_decimal(value)
    if not d.is_finite():
        return d
    # Enough digits for the whole part plus two decimals
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, d.adjusted() + 3)
        return d.quantize(CENT, rounding=ROUND_HALF_UP)


def round_cents(value) -> float:
    return float(_quantize_cents(value))


# ---------------------- Tiers ----------------------

def resolve_tier(tiers: Sequence[PricingTier], quantity: int) -> Optional[PricingTier]:
    """First tier whose range contains quantity, scanning in the given order.

    Returns None when nothing matches; callers fall back to the first tier's
    price (see price_for_quantity). Quantity is not validated here.
    """
    for t in tiers:
        if quantity >= t.min_qty and (t.max_qty is None or quantity <= t.max_qty):
            return t
    return None


def price_for_quantity(tiers: Sequence[PricingTier], quantity: int) -> float:
    tier = resolve_tier(tiers, quantity)
    if tier is None:
        return tiers[0].price_per_unit
    return tier.price_per_unit


def tier_label(tier: PricingTier) -> str:
    if tier.max_qty is None:
        return f"{tier.min_qty}+ units"
    if tier.min_qty == tier.max_qty:
        return f"{tier.min_qty} unit"
    return f"{tier.min_qty}-{tier.max_qty} units"


def savings_label(tier: PricingTier) -> Optional[str]:
    if tier.discount_percent > 0:
        return f"Save {tier.discount_percent}%"
    return None


def pricing_table(tiers: Iterable[PricingTier]) -> List[Dict[str, Any]]:
    return [
        {
            "label": tier_label(t),
            "unitPrice": t.price_per_unit,
            "priceDisplay": format_currency(t.price_per_unit),
            "discountPercent": t.discount_percent,
            "savings": savings_label(t),
        }
        for t in tiers
    ]


# ---------------------- Totals ----------------------

def compute_line_total(unit_price: float, quantity: int) -> float:
    return round_cents(_to_decimal(unit_price) * quantity)


def compute_paypal_fee(subtotal: float) -> float:
    return round_cents(_to_decimal(subtotal) * PAYPAL_FEE_RATE)


def _line_total_of(item) -> float:
    if isinstance(item, dict):
        return item.get("line_total", item.get("lineTotal", 0))
    return item.line_total


def compute_cart_totals(items, payment_method: str, shipping_cost: float = 0) -> CartTotals:
    """Subtotal, PayPal surcharge, shipping and grand total for a cart.

    Items only need a line total (already rounded per item). The 3% fee is
    charged for "paypal" only; wire, ach and cash pay nothing extra.
    """
    subtotal = sum((_to_decimal(_line_total_of(i)) for i in items), Decimal(0))
    paypal_fee = compute_paypal_fee(subtotal) if payment_method == "paypal" else 0
    total = subtotal + _to_decimal(paypal_fee) + _to_decimal(shipping_cost)

    return CartTotals(
        subtotal=round_cents(subtotal),
        paypal_fee=round_cents(paypal_fee),
        shipping_cost=round_cents(shipping_cost),
        total=round_cents(total),
    )


# ---------------------- Display ----------------------

def format_currency(amount: float) -> str:
    """US dollars, e.g. 1234.5 -> "$1,234.50" and -5 -> "-$5.00".

    NaN and infinity render as "$0.00".
    """
    cents = _quantize_cents(amount)
    if not cents.is_finite():
        return "$0.00"
    sign = "-" if cents < 0 else ""
    return f"{sign}${cents.copy_abs():,.2f}"
