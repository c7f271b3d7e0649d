from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from app.economy.wallet.money import to_money
from app.game.tournaments.types import PlayerScore, RankedPlayer, WinnerPrize

_ORDINAL_SUFFIXES = {1: "st", 2: "nd", 3: "rd"}


def ordinal_label(rank: int) -> str:
    if 10 <= rank % 100 <= 20:
        suffix = "th"
    else:
        suffix = _ORDINAL_SUFFIXES.get(rank % 10, "th")
    return f"{rank}{suffix}"


def _normalize_label(label: str) -> str:
    return label.strip().lower()


def prize_for_rank(rank: int, winner_prizes: Iterable[WinnerPrize]) -> Decimal:
    label = ordinal_label(rank)
    for item in winner_prizes:
        if _normalize_label(item.rank) == label:
            return to_money(item.prize)
    return Decimal("0.00")


def assign_ranks(
    scores: Sequence[PlayerScore],
    winner_prizes: Iterable[WinnerPrize],
) -> list[RankedPlayer]:
    """Rank players by descending points.

    ``sorted`` is stable, so players on equal points keep their input order and
    still receive distinct consecutive ranks.
    """
    prizes = tuple(winner_prizes)
    ordered = sorted(scores, key=lambda item: item.points, reverse=True)
    return [
        RankedPlayer(
            user_id=item.user_id,
            points=item.points,
            rank=position,
            prize=prize_for_rank(position, prizes),
        )
        for position, item in enumerate(ordered, start=1)
    ]
