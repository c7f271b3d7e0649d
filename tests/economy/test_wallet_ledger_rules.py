from __future__ import annotations

from decimal import Decimal

import pytest

from app.economy.wallet.constants import DIRECTION_CREDIT, DIRECTION_DEBIT
from app.economy.wallet.errors import (
    InsufficientBalanceError,
    WalletError,
    WalletValidationError,
)
from app.economy.wallet.ledger import compute_new_balance
from app.economy.wallet.money import format_rupees, to_money


def test_to_money_rounds_half_up_to_paise() -> None:
    assert to_money("10.005") == Decimal("10.01")
    assert to_money(Decimal("10.004")) == Decimal("10.00")
    assert to_money(7) == Decimal("7.00")


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (Decimal("40"), "₹40"),
        (Decimal("40.00"), "₹40"),
        (Decimal("40.5"), "₹40.50"),
        (0, "₹0"),
    ],
)
def test_format_rupees(value: Decimal | int, expected: str) -> None:
    assert format_rupees(value) == expected


def test_compute_new_balance_credit_and_debit() -> None:
    assert compute_new_balance(
        current=Decimal("60.00"),
        amount=Decimal("50"),
        direction=DIRECTION_CREDIT,
    ) == Decimal("110.00")
    assert compute_new_balance(
        current=Decimal("100.00"),
        amount=Decimal("40"),
        direction=DIRECTION_DEBIT,
    ) == Decimal("60.00")


def test_compute_new_balance_allows_debit_to_exactly_zero() -> None:
    assert compute_new_balance(
        current=Decimal("40.00"),
        amount=Decimal("40.00"),
        direction=DIRECTION_DEBIT,
    ) == Decimal("0.00")


def test_compute_new_balance_rejects_overdraft() -> None:
    with pytest.raises(InsufficientBalanceError):
        compute_new_balance(
            current=Decimal("39.99"),
            amount=Decimal("40.00"),
            direction=DIRECTION_DEBIT,
        )


@pytest.mark.parametrize(
    ("amount", "direction"),
    [
        (Decimal("0"), DIRECTION_CREDIT),
        (Decimal("-5"), DIRECTION_DEBIT),
        (Decimal("5"), "REFUND"),
    ],
)
def test_compute_new_balance_rejects_invalid_input(amount: Decimal, direction: str) -> None:
    with pytest.raises(WalletValidationError):
        compute_new_balance(current=Decimal("10"), amount=amount, direction=direction)


def test_wallet_errors_carry_user_facing_message() -> None:
    assert InsufficientBalanceError().message == "Insufficient wallet balance."
    assert str(InsufficientBalanceError("Insufficient funds for debit.")) == (
        "Insufficient funds for debit."
    )
    assert isinstance(WalletValidationError(), WalletError)
