DIRECTION_CREDIT = "CREDIT"
DIRECTION_DEBIT = "DEBIT"
DIRECTIONS = frozenset({DIRECTION_CREDIT, DIRECTION_DEBIT})

TRANSACTION_STATUS_SUCCESS = "SUCCESS"

ENTRY_TYPE_TOURNAMENT_ENTRY = "TOURNAMENT_ENTRY"
ENTRY_TYPE_PRIZE = "PRIZE"
ENTRY_TYPE_DEPOSIT = "DEPOSIT"
ENTRY_TYPE_WITHDRAWAL = "WITHDRAWAL"
ENTRY_TYPE_ADMIN_ADJUSTMENT = "ADMIN_ADJUSTMENT"

REQUEST_STATUS_PENDING = "PENDING"
REQUEST_STATUS_APPROVED = "APPROVED"
REQUEST_STATUS_REJECTED = "REJECTED"
REQUEST_STATUSES = frozenset(
    {REQUEST_STATUS_PENDING, REQUEST_STATUS_APPROVED, REQUEST_STATUS_REJECTED}
)
REQUEST_RESOLUTION_STATUSES = frozenset({REQUEST_STATUS_APPROVED, REQUEST_STATUS_REJECTED})

DEFAULT_LIST_LIMIT = 100
