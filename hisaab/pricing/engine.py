"""
Pricing Engine

Converts the raw inputs of an invoice row (rate, quantity, adjustment
percent) into its derived money fields, and rolls rows and payments up
into invoice aggregates.

PRICING POLICY:
- No adjustment entered: T.P is rate less 14.5%, and that is the unit price.
- Adjustment entered (+/- %): T.P is rate less 15%, and the adjustment is
  applied on top of it (+5 is a 5% surcharge, -5 a 5% discount).

The two markdowns differ on purpose. Do not unify them.

ROUNDING:
Row arithmetic runs in binary floating point, and each derived value is
rounded half away from zero on its exact binary value. A product that
prints as a half cent but is stored just below it rounds down:
3 * 0.855 is 2.56499999... and gives 2.56. Invoices priced by earlier
versions of the tool carry these values, so they must reproduce exactly.

Every derived value is rounded to 2 places on its own, and aggregates
sum the rounded row totals as Decimals. Nothing here does I/O or raises
for numeric input.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, NamedTuple, Optional, Protocol, Union


TRADE_MARKDOWN = 0.145
ADJUSTED_TRADE_MARKDOWN = 0.15

CENT = Decimal("0.01")
ZERO = Decimal("0")

# Values the editor hands us: numbers, numeric strings, or unset
NumericInput = Union[Decimal, int, float, str, None]


class RowPricing(NamedTuple):
    """Derived fields of one invoice row."""
    tp: Decimal
    total_price_per_piece: Decimal
    row_total: Decimal


class PricedRow(Protocol):
    row_total: Decimal


class Payment(Protocol):
    amount: Optional[Decimal]


def to_float(value: NumericInput) -> float:
    """Coerce an input value to float, treating unset as zero."""
    if value is None:
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    return float(value)


def round_money(value: Union[Decimal, float]) -> Decimal:
    """
    Round to 2 places, halves away from zero.

    A float is rounded on its exact binary expansion, never on its
    shortest printed form.
    """
    rounded = Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    # -0.00 is stored as 0.00
    return rounded.copy_abs() if rounded.is_zero() else rounded


def compute_row(
    rate: NumericInput,
    qty: NumericInput,
    discount_percent: NumericInput,
) -> RowPricing:
    """
    Compute tp, total price per piece and row total for one row.

    Args:
        rate: Retail price per unit, or None if unset
        qty: Quantity, or None if unset
        discount_percent: Signed adjustment in percent, or None if unset

    Returns:
        RowPricing with every field rounded to 2 places
    """
    numeric_rate = to_float(rate)
    numeric_qty = to_float(qty)
    numeric_disc = to_float(discount_percent)

    if numeric_disc == 0:
        tp = numeric_rate * (1 - TRADE_MARKDOWN)
        total_price_per_piece = tp
    else:
        base_tp = numeric_rate * (1 - ADJUSTED_TRADE_MARKDOWN)
        tp = base_tp
        total_price_per_piece = base_tp * (1 + numeric_disc / 100)

    # Row total uses the unrounded unit price
    row_total = total_price_per_piece * numeric_qty

    return RowPricing(
        tp=round_money(tp),
        total_price_per_piece=round_money(total_price_per_piece),
        row_total=round_money(row_total),
    )


def calculate_grand_total(items: Iterable[PricedRow]) -> Decimal:
    """Sum the stored row totals. Empty input gives 0."""
    return sum((item.row_total for item in items), ZERO)


def calculate_total_paid(paid_amounts: Iterable[Payment]) -> Decimal:
    """Sum payment amounts; unset amounts count as 0."""
    return sum(
        (p.amount for p in paid_amounts if p.amount is not None),
        ZERO,
    )


def calculate_balance(grand_total: Decimal, total_paid: Decimal) -> Decimal:
    return grand_total - total_paid
