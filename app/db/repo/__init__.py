from app.db.repo.entries_repo import EntriesRepo
from app.db.repo.notifications_repo import NotificationsRepo
from app.db.repo.outbox_events_repo import OutboxEventsRepo
from app.db.repo.payment_settings_repo import PaymentSettingsRepo
from app.db.repo.tournament_results_repo import TournamentResultsRepo
from app.db.repo.tournaments_repo import TournamentsRepo
from app.db.repo.users_repo import UsersRepo
from app.db.repo.wallet_requests_repo import WalletRequestsRepo
from app.db.repo.wallet_transactions_repo import WalletTransactionsRepo
from app.db.repo.withdrawal_requests_repo import WithdrawalRequestsRepo

__all__ = [
    "EntriesRepo",
    "NotificationsRepo",
    "OutboxEventsRepo",
    "PaymentSettingsRepo",
    "TournamentResultsRepo",
    "TournamentsRepo",
    "UsersRepo",
    "WalletRequestsRepo",
    "WalletTransactionsRepo",
    "WithdrawalRequestsRepo",
]
