import math
from decimal import Decimal

import pytest

from zenstore.common.errors import InvalidInput
from zenstore.common.services.pricing import (
    CA_TAX_RATE,
    COMMISSION_RATE,
    DISCOUNT_PERCENTAGE,
    EXCHANGE_RATE,
    RECYCLE_FEE,
    SHIPPING_FEE,
    calculate_price_from_usd,
    has_percentage,
    original_price_for,
    original_price_from_discount,
    round_to_nearest,
)


class TestCalculatePriceFromUsd:
    def test_breakdown_for_999(self):
        calc = calculate_price_from_usd(999)

        assert calc.base_price == 999
        assert calc.tax_amount == pytest.approx(92.4075)
        assert calc.subtotal_with_tax == pytest.approx(1096.4075)
        assert calc.recycle_fee == 5
        assert calc.commission_fee == pytest.approx(99.9)
        assert calc.shipping_fee == 20
        assert calc.total_usd == pytest.approx(1216.3075)
        assert calc.total_mnt == 4381140
        assert calc.final_price_mnt == calc.total_mnt
        assert calc.discount_percentage == 10

    def test_constants(self):
        assert CA_TAX_RATE == 0.0925
        assert RECYCLE_FEE == 5
        assert COMMISSION_RATE == 0.10
        assert SHIPPING_FEE == 20
        assert EXCHANGE_RATE == 3602.00
        assert DISCOUNT_PERCENTAGE == 10

    @pytest.mark.parametrize("base", [1, 49.99, 250, 999, 1899.5, 4200])
    def test_totals_are_consistent(self, base):
        calc = calculate_price_from_usd(base)

        assert calc.tax_amount == pytest.approx(base * CA_TAX_RATE)
        assert calc.subtotal_with_tax == pytest.approx(base + calc.tax_amount + RECYCLE_FEE)
        assert calc.total_usd == pytest.approx(calc.subtotal_with_tax + calc.commission_fee + SHIPPING_FEE)
        assert calc.total_mnt == math.floor(calc.total_usd * EXCHANGE_RATE + 0.5)
        assert isinstance(calc.total_mnt, int)
        assert calc.total_usd > base

    def test_is_monotonic(self):
        totals = [calculate_price_from_usd(b).total_mnt for b in (100, 200, 300, 1000)]
        assert totals == sorted(totals)
        assert len(set(totals)) == len(totals)

    def test_same_input_same_result(self):
        assert calculate_price_from_usd(749) == calculate_price_from_usd(749)

    @pytest.mark.parametrize("value", ["999", " 999 ", Decimal("999"), 999.0])
    def test_accepts_numeric_forms(self, value):
        assert calculate_price_from_usd(value).total_mnt == 4381140

    @pytest.mark.parametrize("value", [0, -5, "abc", "", None, True, float("nan"), float("inf"), [999]])
    def test_rejects_invalid(self, value):
        with pytest.raises(InvalidInput):
            calculate_price_from_usd(value)

    def test_to_dict(self):
        data = calculate_price_from_usd(999).to_dict()
        assert data["total_mnt"] == 4381140
        assert set(data) == {
            "base_price",
            "tax_amount",
            "subtotal_with_tax",
            "recycle_fee",
            "commission_fee",
            "shipping_fee",
            "total_usd",
            "total_mnt",
            "discount_percentage",
            "final_price_mnt",
        }


class TestPresentationHelpers:
    def test_round_to_nearest(self):
        assert round_to_nearest(4381140) == 4381100
        assert round_to_nearest(4381150) == 4381200
        assert round_to_nearest(1234, 1000) == 1000

    def test_round_to_nearest_rejects_bad_step(self):
        with pytest.raises(InvalidInput):
            round_to_nearest(100, 0)

    def test_original_price_for(self):
        assert original_price_for(4381100) == 4819200
        assert original_price_for(1000) == 1100

    def test_has_percentage(self):
        assert has_percentage("15%")
        assert not has_percentage("$50")
        assert not has_percentage(None)

    def test_original_from_percentage(self):
        assert original_price_from_discount(85, "15%") == 100.0
        assert original_price_from_discount(900, "10 %") == 1000.0

    def test_original_from_fixed_amount(self):
        assert original_price_from_discount(100, "$50") == 150.0
        assert original_price_from_discount(100, "50") == 150.0

    @pytest.mark.parametrize("label", [None, "", "abc", "100%", "0%", "-5%", "nan%", "$-3", "$"])
    def test_unusable_label_keeps_price(self, label):
        assert original_price_from_discount(120, label) == 120.0
