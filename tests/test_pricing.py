"""
Tests for the pricing engine.

Values are pinned exactly; every derived field is a 2-place Decimal.
"""

from decimal import Decimal

import pytest

from hisaab.models.invoice import InvoiceItem, PaidAmount
from hisaab.pricing import (
    calculate_balance,
    calculate_grand_total,
    calculate_total_paid,
    compute_row,
    round_money,
)


class TestComputeRow:
    """Tests for compute_row."""

    def test_no_adjustment(self):
        """rate=100, qty=2, no discount uses the 14.5% markdown."""
        result = compute_row(100, 2, 0)
        assert result.tp == Decimal("85.50")
        assert result.total_price_per_piece == Decimal("85.50")
        assert result.row_total == Decimal("171.00")

    def test_surcharge(self):
        """+10% is applied on the 15% trade price."""
        result = compute_row(100, 2, 10)
        assert result.tp == Decimal("85.00")
        assert result.total_price_per_piece == Decimal("93.50")
        assert result.row_total == Decimal("187.00")

    def test_discount(self):
        """-10% is applied on the 15% trade price."""
        result = compute_row(100, 2, -10)
        assert result.tp == Decimal("85.00")
        assert result.total_price_per_piece == Decimal("76.50")
        assert result.row_total == Decimal("153.00")

    def test_unset_discount_same_as_zero(self):
        """None and "" take the no-adjustment branch."""
        assert compute_row(100, 1, None) == compute_row(100, 1, 0)
        assert compute_row(100, 1, "") == compute_row(100, 1, 0)

    def test_all_unset(self):
        """Nothing entered yet prices to zero."""
        result = compute_row(None, None, None)
        assert result.tp == 0
        assert result.total_price_per_piece == 0
        assert result.row_total == 0

    def test_empty_strings(self):
        result = compute_row("", "", "")
        assert result == compute_row(None, None, None)

    def test_rate_without_qty(self):
        """Unit prices are shown even before a quantity is entered."""
        result = compute_row(100, None, 0)
        assert result.tp == Decimal("85.50")
        assert result.row_total == Decimal("0.00")

    def test_zero_rate_in_adjustment_branch(self):
        result = compute_row(0, 5, 25)
        assert result.tp == 0
        assert result.total_price_per_piece == 0
        assert result.row_total == 0

    def test_half_cent_ties_round_on_binary_value(self):
        """3 * 0.855 is stored as 2.56499999..., so T.P is 2.56."""
        assert compute_row(3, 1, 0).tp == Decimal("2.56")

    def test_adjusted_half_cent_tie(self):
        """1.5 * 0.85 sits just below 1.275."""
        assert compute_row(Decimal("1.5"), 1, 5).tp == Decimal("1.27")

    def test_row_total_half_cent_tie(self):
        result = compute_row(Decimal("0.5"), 2, 0)
        assert result.tp == Decimal("0.43")
        assert result.row_total == Decimal("0.85")

    def test_round_money_on_float_uses_exact_value(self):
        assert round_money(2.675) == Decimal("2.67")
        assert round_money(0.125) == Decimal("0.13")
        assert round_money(-0.125) == Decimal("-0.13")

    def test_negative_zero_is_stored_as_zero(self):
        result = compute_row(0, -1, 0)
        assert str(result.row_total) == "0.00"

    def test_row_total_uses_unrounded_unit_price(self):
        """1.02 * 0.855 = 0.8721: unit 0.87, but 100 units total 87.21."""
        result = compute_row(Decimal("1.02"), 100, 0)
        assert result.total_price_per_piece == Decimal("0.87")
        assert result.row_total == Decimal("87.21")

    def test_float_input_keeps_printed_value(self):
        """A float rate prices the same as its Decimal spelling."""
        result = compute_row(19.99, 3, 0)
        assert result.tp == Decimal("17.09")
        assert result.row_total == Decimal("51.27")

    def test_numeric_strings(self):
        assert compute_row("100", "2", "10") == compute_row(100, 2, 10)

    def test_negative_quantity_is_not_rejected(self):
        """Negative input propagates arithmetically (returns, credit notes)."""
        assert compute_row(100, -1, 0).row_total == Decimal("-85.50")

    def test_negative_rate_is_not_rejected(self):
        assert compute_row(-100, 1, 10).total_price_per_piece == Decimal("-93.50")

    @pytest.mark.parametrize("rate", ["0.5", "7", "12.34", "99.99", "250", "1234.56"])
    @pytest.mark.parametrize("qty", ["1", "3", "12", "0.5"])
    def test_no_adjustment_formula(self, rate, qty):
        """tp == total/unit == rate * (1 - 0.145) rounded in binary."""
        result = compute_row(Decimal(rate), Decimal(qty), 0)
        expected_unit = float(rate) * (1 - 0.145)
        assert result.tp == round_money(expected_unit)
        assert result.total_price_per_piece == result.tp
        assert result.row_total == round_money(expected_unit * float(qty))

    @pytest.mark.parametrize("rate", ["0.5", "7", "12.34", "99.99", "250"])
    @pytest.mark.parametrize("disc", ["-50", "-2.5", "1", "5", "12.5"])
    def test_adjustment_formula(self, rate, disc):
        """tp == round(rate * 0.85, 2), total/unit applies the adjustment."""
        result = compute_row(Decimal(rate), 1, Decimal(disc))
        base = float(rate) * (1 - 0.15)
        assert result.tp == round_money(base)
        assert result.total_price_per_piece == round_money(
            base * (1 + float(disc) / 100)
        )


class TestAggregates:
    """Tests for grand total, total paid and balance."""

    def test_grand_total_of_nothing(self):
        assert calculate_grand_total([]) == 0

    def test_grand_total_sums_rounded_row_totals(self):
        """Rounded rows are summed as stored, not re-rounded."""
        items = [
            InvoiceItem(rate=Decimal("1.02"), qty=100),   # 87.21
            InvoiceItem(rate=3, qty=1),                   # 2.56
        ]
        assert calculate_grand_total(items) == Decimal("89.77")

    def test_total_paid_ignores_unset(self):
        payments = [
            PaidAmount(narration="Cash", amount=Decimal("100")),
            PaidAmount(narration="Pending cheque"),
        ]
        assert calculate_total_paid(payments) == Decimal("100")

    def test_invoice_scenario(self):
        """Rows 171 + 187 with one payment of 100 leave 258 owed."""
        items = [
            InvoiceItem(rate=100, qty=2, discount_percent=0),
            InvoiceItem(rate=100, qty=2, discount_percent=10),
        ]
        grand_total = calculate_grand_total(items)
        total_paid = calculate_total_paid([PaidAmount(amount=100)])
        assert grand_total == Decimal("358.00")
        assert total_paid == Decimal("100")
        assert calculate_balance(grand_total, total_paid) == Decimal("258.00")

    def test_overpayment_gives_negative_balance(self):
        assert calculate_balance(Decimal("50"), Decimal("80")) == Decimal("-30")
