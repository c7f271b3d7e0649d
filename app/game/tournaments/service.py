from app.game.tournaments.admin import create_or_update_tournament, delete_tournament
from app.game.tournaments.join import get_join_status, join_tournament
from app.game.tournaments.queries import get_tournament, list_tournaments
from app.game.tournaments.results import declare_result, get_result

__all__ = [
    "create_or_update_tournament",
    "declare_result",
    "delete_tournament",
    "get_join_status",
    "get_result",
    "get_tournament",
    "join_tournament",
    "list_tournaments",
]
