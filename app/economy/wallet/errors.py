class WalletError(Exception):
    message = "Wallet operation failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class WalletValidationError(WalletError):
    message = "Invalid wallet request."


class WalletUserNotFoundError(WalletError):
    message = "User not found."


class InsufficientBalanceError(WalletError):
    message = "Insufficient wallet balance."


class WalletIdempotencyConflictError(WalletError):
    message = "Idempotency key was already used for a different operation."


class DuplicateUtrError(WalletError):
    message = "This UTR has already been submitted."


class WalletRequestNotFoundError(WalletError):
    message = "Request not found."


class WalletRequestMismatchError(WalletError):
    message = "Request details do not match."


class WalletRequestAlreadyResolvedError(WalletError):
    message = "Request has already been resolved."
