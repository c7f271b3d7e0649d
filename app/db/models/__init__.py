from app.db.models.entries import Entry
from app.db.models.notification_reads import NotificationRead
from app.db.models.notifications import Notification
from app.db.models.outbox_events import OutboxEvent
from app.db.models.payment_settings import PaymentSettings
from app.db.models.tournament_results import TournamentResult
from app.db.models.tournaments import Tournament
from app.db.models.users import User
from app.db.models.wallet_requests import WalletRequest
from app.db.models.wallet_transactions import WalletTransaction
from app.db.models.withdrawal_requests import WithdrawalRequest

__all__ = [
    "Entry",
    "Notification",
    "NotificationRead",
    "OutboxEvent",
    "PaymentSettings",
    "Tournament",
    "TournamentResult",
    "User",
    "WalletRequest",
    "WalletTransaction",
    "WithdrawalRequest",
]
