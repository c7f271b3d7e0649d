from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID


@dataclass(slots=True)
class BalanceChangeResult:
    user_id: str
    direction: str
    amount: Decimal
    balance_before: Decimal
    balance_after: Decimal
    transaction_id: int
    idempotent_replay: bool


@dataclass(slots=True)
class WalletTransactionSnapshot:
    transaction_id: int
    user_id: str
    amount: Decimal
    direction: str
    status: str
    entry_type: str
    description: str
    balance_after: Decimal
    reference_id: str | None
    created_at: datetime


@dataclass(slots=True)
class WalletRequestSnapshot:
    request_id: UUID
    user_id: str
    amount: Decimal
    utr: str
    status: str
    created_at: datetime
    resolved_at: datetime | None


@dataclass(slots=True)
class WithdrawalRequestSnapshot:
    request_id: UUID
    user_id: str
    amount: Decimal
    upi_id: str
    status: str
    created_at: datetime
    resolved_at: datetime | None


@dataclass(slots=True)
class RequestResolutionResult:
    request_id: UUID
    user_id: str
    status: str
    balance_after: Decimal | None
