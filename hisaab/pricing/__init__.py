"""Pricing engine package."""

from hisaab.pricing.engine import (
    ADJUSTED_TRADE_MARKDOWN,
    TRADE_MARKDOWN,
    RowPricing,
    calculate_balance,
    calculate_grand_total,
    calculate_total_paid,
    compute_row,
    round_money,
    to_float,
)

__all__ = [
    "ADJUSTED_TRADE_MARKDOWN",
    "TRADE_MARKDOWN",
    "RowPricing",
    "calculate_balance",
    "calculate_grand_total",
    "calculate_total_paid",
    "compute_row",
    "round_money",
    "to_float",
]
