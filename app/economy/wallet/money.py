from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

_CENTS = Decimal("0.01")


def to_money(value: Decimal | int | str) -> Decimal:
    return Decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP)


def format_rupees(value: Decimal | int) -> str:
    amount = to_money(value)
    if amount == amount.to_integral_value():
        return f"₹{int(amount)}"
    return f"₹{amount}"
