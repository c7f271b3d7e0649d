class TournamentError(Exception):
    message = "Tournament operation failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class TournamentNotFoundError(TournamentError):
    message = "Tournament not found."


class TournamentUserNotFoundError(TournamentError):
    message = "User not found."


class TournamentAlreadyJoinedError(TournamentError):
    message = "You have already joined this tournament."


class TournamentClosedError(TournamentError):
    message = "This tournament is not open for registration."


class TournamentFullError(TournamentError):
    message = "This tournament is full."


class TournamentValidationError(TournamentError):
    message = "Invalid tournament data."


class TournamentHasEntriesError(TournamentError):
    message = "Tournament has entries and cannot be deleted. Cancel it instead."


class ResultAlreadyDeclaredError(TournamentError):
    message = "Result has already been declared for this tournament."


class ResultNotFoundError(TournamentError):
    message = "Result not found."
