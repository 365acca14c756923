import pytest

from pricing import (
    compute_cart_totals,
    compute_line_total,
    compute_paypal_fee,
    format_currency,
    price_for_quantity,
    pricing_table,
    resolve_tier,
    savings_label,
    tier_label,
)
from schemas import OrderItem, PricingTier


@pytest.fixture
def tiers():
    return [
        PricingTier(tier="single", min_qty=1, max_qty=4, price_per_unit=49.99),
        PricingTier(tier="bulk5", min_qty=5, max_qty=9, price_per_unit=44.99, discount_percent=10),
        PricingTier(tier="bulk10", min_qty=10, max_qty=None, price_per_unit=39.99, discount_percent=20),
    ]


@pytest.mark.parametrize("quantity,expected", [(1, "single"), (4, "single"), (5, "bulk5"), (9, "bulk5"), (10, "bulk10"), (500, "bulk10")])
def test_resolve_tier_picks_matching_range(tiers, quantity, expected):
    assert resolve_tier(tiers, quantity).tier == expected


def test_resolve_tier_below_all_ranges_falls_back_to_first_price():
    tiers = [
        PricingTier(min_qty=5, max_qty=9, price_per_unit=20),
        PricingTier(min_qty=10, max_qty=None, price_per_unit=15),
    ]
    assert resolve_tier(tiers, 2) is None
    assert price_for_quantity(tiers, 2) == 20


def test_resolve_tier_first_match_wins_on_overlap():
    tiers = [
        PricingTier(tier="a", min_qty=1, max_qty=10, price_per_unit=5),
        PricingTier(tier="b", min_qty=5, max_qty=None, price_per_unit=4),
    ]
    assert resolve_tier(tiers, 7).tier == "a"


def test_tier_accepts_camel_case_keys():
    t = PricingTier.model_validate({"minQty": 10, "maxQty": None, "pricePerUnit": 39.99, "discountPercent": 20})
    assert t.min_qty == 10
    assert t.max_qty is None


def test_price_for_quantity(tiers):
    assert price_for_quantity(tiers, 7) == 44.99


def test_compute_line_total():
    assert compute_line_total(19.99, 3) == 59.97
    assert compute_line_total(10, 0) == 0
    assert compute_line_total(0.1, 3) == 0.3
    assert compute_line_total(44.99, 5) == 224.95


def test_compute_line_total_rounds_half_up():
    assert compute_line_total(1.005, 1) == 1.01
    assert compute_line_total(0.125, 1) == 0.13


def test_compute_paypal_fee():
    assert compute_paypal_fee(100) == 3
    assert compute_paypal_fee(399.9) == 12.0
    assert compute_paypal_fee(0) == 0


def test_cart_totals_paypal():
    totals = compute_cart_totals([{"lineTotal": 100}], "paypal", 0)
    assert totals.model_dump() == {"subtotal": 100, "paypal_fee": 3, "shipping_cost": 0, "total": 103}


def test_cart_totals_wire_with_shipping():
    totals = compute_cart_totals([{"lineTotal": 50}, {"lineTotal": 25}], "wire", 10)
    assert totals.model_dump() == {"subtotal": 75, "paypal_fee": 0, "shipping_cost": 10, "total": 85}


def test_cart_totals_accepts_order_items():
    items = [
        OrderItem(sku="A", name="A", quantity=3, unit_price=19.99, line_total=59.97),
        OrderItem(sku="B", name="B", quantity=1, unit_price=0.1, line_total=0.1),
    ]
    totals = compute_cart_totals(items, "ach")
    assert totals.subtotal == 60.07
    assert totals.total == 60.07
    assert totals.paypal_fee == 0


def test_cart_totals_total_never_below_subtotal():
    for method in ("wire", "ach", "paypal", "cash"):
        totals = compute_cart_totals([{"line_total": 12.34}], method, 5)
        assert totals.total >= totals.subtotal


def test_cart_totals_serialize_camel_case():
    totals = compute_cart_totals([{"line_total": 10}], "paypal")
    assert totals.model_dump(by_alias=True) == {"subtotal": 10, "paypalFee": 0.3, "shippingCost": 0, "total": 10.3}


@pytest.mark.parametrize("amount,expected", [
    (1234.5, "$1,234.50"),
    (0, "$0.00"),
    (19.99, "$19.99"),
    (1000000, "$1,000,000.00"),
    (-5, "-$5.00"),
])
def test_format_currency(amount, expected):
    assert format_currency(amount) == expected


def test_tier_label():
    assert tier_label(PricingTier(min_qty=10, max_qty=None, price_per_unit=1)) == "10+ units"
    assert tier_label(PricingTier(min_qty=5, max_qty=5, price_per_unit=1)) == "5 unit"
    assert tier_label(PricingTier(min_qty=1, max_qty=4, price_per_unit=1)) == "1-4 units"


def test_savings_label(tiers):
    assert savings_label(tiers[0]) is None
    assert savings_label(tiers[2]) == "Save 20%"


def test_pricing_table_keeps_tier_order(tiers):
    rows = pricing_table(tiers)
    assert [r["label"] for r in rows] == ["1-4 units", "5-9 units", "10+ units"]
    assert rows[1]["priceDisplay"] == "$44.99"
    assert rows[1]["savings"] == "Save 10%"
    assert rows[0]["savings"] is None


def test_large_amounts_round_without_error():
    assert compute_line_total(1e30, 2) == 2e30
    assert compute_line_total(1e300, 1) == 1e300
    totals = compute_cart_totals([{"line_total": 1e30}], "paypal")
    assert totals.paypal_fee == 3e28
    assert totals.total == 1.03e30


def test_format_currency_large_and_non_finite():
    assert format_currency(1e30) == f"${10 ** 30:,}.00"
    assert format_currency(float("inf")) == "$0.00"
    assert format_currency(float("nan")) == "$0.00"
