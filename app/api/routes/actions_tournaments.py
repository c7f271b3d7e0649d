from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from app.api.actions import ActionResult, run_action
from app.db.session import SessionLocal
from app.game.tournaments.internal import build_tournament_form
from app.game.tournaments.service import (
    create_or_update_tournament,
    declare_result,
    delete_tournament,
    get_join_status,
    get_result,
    get_tournament,
    join_tournament,
    list_tournaments,
)
from app.game.tournaments.types import PlayerScore, WinnerPrize
from app.services.internal_auth import assert_internal_access

from .action_models import (
    DeclareResultRequest,
    TournamentFormRequest,
    TournamentIdRequest,
    TournamentListRequest,
    TournamentUserRequest,
    TournamentViewRequest,
)

router = APIRouter(
    prefix="/actions/tournaments",
    tags=["actions", "tournaments"],
    dependencies=[Depends(assert_internal_access)],
)


@router.post("/save", response_model=ActionResult)
async def save_tournament_action(payload: TournamentFormRequest) -> ActionResult:
    async def _save():
        form = build_tournament_form(
            title=payload.title,
            date_value=payload.date,
            time_value=payload.time,
            game_type=payload.game_type,
            entry_fee=payload.entry_fee,
            slots=payload.slots,
            prize=payload.prize,
            rules=payload.rules,
            status=payload.status,
            is_mega=payload.is_mega,
            image_url=payload.image_url,
            room_id=payload.room_id,
            room_password=payload.room_password,
            winner_prizes=[
                WinnerPrize(rank=row.rank, prize=row.prize) for row in payload.winner_prizes
            ],
        )
        async with SessionLocal.begin() as session:
            return await create_or_update_tournament(
                session,
                form=form,
                now_utc=datetime.now(timezone.utc),
                tournament_id=payload.id,
            )

    return await run_action("save_tournament", _save, failure_message="Failed to save tournament.")


@router.post("/delete", response_model=ActionResult)
async def delete_tournament_action(payload: TournamentIdRequest) -> ActionResult:
    async def _delete() -> None:
        async with SessionLocal.begin() as session:
            await delete_tournament(session, tournament_id=payload.tournament_id)

    return await run_action(
        "delete_tournament",
        _delete,
        failure_message="Failed to delete tournament.",
    )


@router.post("/join", response_model=ActionResult)
async def join_tournament_action(payload: TournamentUserRequest) -> ActionResult:
    async def _join():
        async with SessionLocal.begin() as session:
            return await join_tournament(
                session,
                tournament_id=payload.tournament_id,
                user_id=payload.user_id,
                now_utc=datetime.now(timezone.utc),
            )

    return await run_action("join_tournament", _join, failure_message="Failed to join tournament.")


@router.post("/join-status", response_model=ActionResult)
async def join_status_action(payload: TournamentUserRequest) -> ActionResult:
    async def _status() -> dict[str, bool]:
        async with SessionLocal() as session:
            is_joined = await get_join_status(
                session,
                tournament_id=payload.tournament_id,
                user_id=payload.user_id,
            )
        return {"is_joined": is_joined}

    return await run_action(
        "get_join_status",
        _status,
        failure_message="Failed to check join status.",
    )


@router.post("/list", response_model=ActionResult)
async def list_tournaments_action(payload: TournamentListRequest) -> ActionResult:
    async def _list():
        async with SessionLocal() as session:
            return await list_tournaments(
                session,
                viewer_id=payload.viewer_id,
                is_mega=payload.is_mega,
                limit=payload.limit,
            )

    return await run_action(
        "list_tournaments",
        _list,
        failure_message="Failed to load tournaments.",
    )


@router.post("/get", response_model=ActionResult)
async def get_tournament_action(payload: TournamentViewRequest) -> ActionResult:
    async def _get():
        async with SessionLocal() as session:
            return await get_tournament(
                session,
                tournament_id=payload.tournament_id,
                viewer_id=payload.viewer_id,
            )

    return await run_action("get_tournament", _get, failure_message="Failed to load tournament.")


@router.post("/declare-result", response_model=ActionResult)
async def declare_result_action(payload: DeclareResultRequest) -> ActionResult:
    async def _declare():
        async with SessionLocal.begin() as session:
            return await declare_result(
                session,
                tournament_id=payload.tournament_id,
                title=payload.title,
                is_mega=payload.is_mega,
                scores=[
                    PlayerScore(user_id=row.user_id, points=row.points)
                    for row in payload.results
                ],
                now_utc=datetime.now(timezone.utc),
            )

    return await run_action("declare_result", _declare, failure_message="Failed to declare result.")


@router.post("/result", response_model=ActionResult)
async def get_result_action(payload: TournamentIdRequest) -> ActionResult:
    async def _get():
        async with SessionLocal() as session:
            return await get_result(session, tournament_id=payload.tournament_id)

    return await run_action("get_result", _get, failure_message="Failed to load result.")
