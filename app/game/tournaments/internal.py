from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from app.db.models.tournaments import Tournament
from app.economy.wallet.money import to_money
from app.game.tournaments.constants import (
    TOURNAMENT_DATE_FORMAT,
    TOURNAMENT_DEFAULT_GAME_TYPE,
    TOURNAMENT_DEFAULT_SLOTS,
    TOURNAMENT_MEGA_IMAGE_URL,
    TOURNAMENT_REGULAR_IMAGE_URL,
    TOURNAMENT_SCHEDULE_TZ,
    TOURNAMENT_STATUS_DRAFT,
    TOURNAMENT_STATUS_LIVE,
    TOURNAMENT_STATUSES,
    TOURNAMENT_TIME_FORMAT,
)
from app.game.tournaments.errors import TournamentValidationError
from app.game.tournaments.types import TournamentForm, TournamentSnapshot, WinnerPrize


def parse_schedule(date_value: str | None, time_value: str | None) -> datetime | None:
    resolved_date = (date_value or "").strip()
    resolved_time = (time_value or "").strip()
    if not resolved_date and not resolved_time:
        return None
    if not resolved_date or not resolved_time:
        raise TournamentValidationError("Both date and time are required.")
    try:
        local = datetime.strptime(
            f"{resolved_date} {resolved_time}",
            f"{TOURNAMENT_DATE_FORMAT} {TOURNAMENT_TIME_FORMAT}",
        )
    except ValueError as exc:
        raise TournamentValidationError("Invalid date or time format.") from exc
    return local.replace(tzinfo=TOURNAMENT_SCHEDULE_TZ).astimezone(timezone.utc)


def normalize_rules(rules: str | Sequence[str] | None) -> tuple[str, ...]:
    if rules is None:
        return ()
    lines = rules.splitlines() if isinstance(rules, str) else list(rules)
    return tuple(line.strip() for line in lines if line and line.strip())


def normalize_winner_prizes(rows: Iterable[WinnerPrize]) -> tuple[WinnerPrize, ...]:
    return tuple(
        WinnerPrize(rank=row.rank.strip(), prize=to_money(row.prize))
        for row in rows
        if row.rank.strip() and to_money(row.prize) > 0
    )


def winner_prizes_from_json(raw: object) -> tuple[WinnerPrize, ...]:
    if not isinstance(raw, list):
        return ()
    prizes: list[WinnerPrize] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        rank = item.get("rank")
        if not isinstance(rank, str):
            continue
        try:
            prize = to_money(Decimal(str(item.get("prize", "0"))))
        except InvalidOperation:
            continue
        prizes.append(WinnerPrize(rank=rank, prize=prize))
    return tuple(prizes)


def winner_prizes_to_json(prizes: Iterable[WinnerPrize]) -> list[dict[str, object]]:
    return [{"rank": item.rank, "prize": str(item.prize)} for item in prizes]


def build_tournament_form(
    *,
    title: str,
    date_value: str | None,
    time_value: str | None,
    game_type: str | None,
    entry_fee: Decimal,
    slots: int | None,
    prize: Decimal,
    rules: str | Sequence[str] | None,
    status: str | None,
    is_mega: bool,
    image_url: str | None,
    room_id: str | None,
    room_password: str | None,
    winner_prizes: Iterable[WinnerPrize],
) -> TournamentForm:
    resolved_title = title.strip()
    if not resolved_title:
        raise TournamentValidationError("Title is required.")

    resolved_status = (status or TOURNAMENT_STATUS_DRAFT).strip().upper()
    if resolved_status not in TOURNAMENT_STATUSES:
        raise TournamentValidationError("Unknown tournament status.")

    starts_at = parse_schedule(date_value, time_value)
    if starts_at is None and resolved_status != TOURNAMENT_STATUS_DRAFT:
        raise TournamentValidationError("Date and time are required unless saving as draft.")

    resolved_entry_fee = to_money(entry_fee)
    resolved_prize = to_money(prize)
    if resolved_entry_fee < 0 or resolved_prize < 0:
        raise TournamentValidationError("Entry fee and prize cannot be negative.")

    resolved_slots = TOURNAMENT_DEFAULT_SLOTS if slots is None else int(slots)
    if resolved_slots < 1:
        raise TournamentValidationError("Slots must be at least 1.")

    resolved_image_url = (image_url or "").strip()
    if not resolved_image_url:
        resolved_image_url = (
            TOURNAMENT_MEGA_IMAGE_URL if is_mega else TOURNAMENT_REGULAR_IMAGE_URL
        )

    return TournamentForm(
        title=resolved_title,
        starts_at=starts_at,
        game_type=(game_type or "").strip() or TOURNAMENT_DEFAULT_GAME_TYPE,
        entry_fee=resolved_entry_fee,
        slots=resolved_slots,
        prize=resolved_prize,
        rules=normalize_rules(rules),
        status=resolved_status,
        is_mega=bool(is_mega),
        image_url=resolved_image_url,
        room_id=(room_id or "").strip(),
        room_password=(room_password or "").strip(),
        winner_prizes=normalize_winner_prizes(winner_prizes),
    )


def can_view_room_credentials(
    *,
    tournament: Tournament,
    viewer_joined: bool,
    viewer_is_admin: bool,
) -> bool:
    if viewer_is_admin:
        return True
    return viewer_joined and tournament.status == TOURNAMENT_STATUS_LIVE


def build_tournament_snapshot(
    tournament: Tournament,
    *,
    viewer_joined: bool = False,
    viewer_is_admin: bool = False,
) -> TournamentSnapshot:
    reveal = can_view_room_credentials(
        tournament=tournament,
        viewer_joined=viewer_joined,
        viewer_is_admin=viewer_is_admin,
    )
    return TournamentSnapshot(
        tournament_id=tournament.id,
        title=tournament.title,
        game_type=tournament.game_type,
        starts_at=tournament.starts_at,
        entry_fee=Decimal(tournament.entry_fee),
        slots=int(tournament.slots),
        prize=Decimal(tournament.prize),
        rules=tuple(str(item) for item in (tournament.rules or [])),
        status=tournament.status,
        is_mega=bool(tournament.is_mega),
        image_url=tournament.image_url,
        room_id=tournament.room_id if reveal else None,
        room_password=tournament.room_password if reveal else None,
        winner_prizes=winner_prizes_from_json(tournament.winner_prizes),
        joined_count=int(tournament.joined_count or 0),
        viewer_joined=viewer_joined,
        created_at=tournament.created_at,
    )
