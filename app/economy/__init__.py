from app.economy.wallet.requests import (
    list_wallet_requests,
    list_withdrawal_requests,
    submit_wallet_request,
    submit_withdrawal_request,
    update_wallet_request_status,
    update_withdrawal_request_status,
)
from app.economy.wallet.service import list_wallet_transactions, update_wallet_balance

__all__ = [
    "list_wallet_requests",
    "list_wallet_transactions",
    "list_withdrawal_requests",
    "submit_wallet_request",
    "submit_withdrawal_request",
    "update_wallet_balance",
    "update_wallet_request_status",
    "update_withdrawal_request_status",
]
