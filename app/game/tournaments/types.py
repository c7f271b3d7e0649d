from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID


@dataclass(slots=True)
class WinnerPrize:
    rank: str
    prize: Decimal


@dataclass(slots=True)
class TournamentForm:
    title: str
    starts_at: datetime | None
    game_type: str
    entry_fee: Decimal
    slots: int
    prize: Decimal
    rules: tuple[str, ...]
    status: str
    is_mega: bool
    image_url: str
    room_id: str
    room_password: str
    winner_prizes: tuple[WinnerPrize, ...]


@dataclass(slots=True)
class TournamentSnapshot:
    tournament_id: UUID
    title: str
    game_type: str
    starts_at: datetime | None
    entry_fee: Decimal
    slots: int
    prize: Decimal
    rules: tuple[str, ...]
    status: str
    is_mega: bool
    image_url: str
    room_id: str | None
    room_password: str | None
    winner_prizes: tuple[WinnerPrize, ...]
    joined_count: int
    viewer_joined: bool
    created_at: datetime


@dataclass(slots=True)
class TournamentJoinResult:
    tournament_id: UUID
    user_id: str
    entry_fee: Decimal
    balance_after: Decimal
    joined_count: int


@dataclass(slots=True)
class PlayerScore:
    user_id: str
    points: int


@dataclass(slots=True)
class RankedPlayer:
    user_id: str
    points: int
    rank: int
    prize: Decimal


@dataclass(slots=True)
class TournamentResultSnapshot:
    tournament_id: UUID
    tournament_title: str
    is_mega: bool
    results: tuple[RankedPlayer, ...]
    declared_at: datetime
