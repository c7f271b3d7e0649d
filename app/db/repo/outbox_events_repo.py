from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.outbox_events import OutboxEvent


class OutboxEventsRepo:
    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        event_type: str,
        payload: dict[str, object],
        available_at: datetime,
    ) -> OutboxEvent:
        event = OutboxEvent(
            event_type=event_type,
            payload=payload,
            status="PENDING",
            attempts=0,
            available_at=available_at,
            last_error=None,
            created_at=available_at,
        )
        session.add(event)
        await session.flush()
        return event

    @staticmethod
    async def list_due_for_update(
        session: AsyncSession,
        *,
        now_utc: datetime,
        limit: int,
    ) -> list[OutboxEvent]:
        stmt = (
            select(OutboxEvent)
            .where(
                OutboxEvent.status == "PENDING",
                OutboxEvent.available_at <= now_utc,
            )
            .order_by(OutboxEvent.available_at.asc(), OutboxEvent.id.asc())
            .limit(max(1, int(limit)))
            .with_for_update(skip_locked=True)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def count_by_status(session: AsyncSession) -> dict[str, int]:
        stmt = select(OutboxEvent.status, func.count(OutboxEvent.id)).group_by(OutboxEvent.status)
        result = await session.execute(stmt)
        return {str(status): int(total) for status, total in result.all()}

    @staticmethod
    async def delete_dispatched_before(
        session: AsyncSession,
        *,
        cutoff_utc: datetime,
        limit: int,
    ) -> int:
        resolved_limit = max(1, int(limit))
        candidate_ids = (
            select(OutboxEvent.id)
            .where(
                OutboxEvent.status == "DISPATCHED",
                OutboxEvent.dispatched_at < cutoff_utc,
            )
            .order_by(OutboxEvent.dispatched_at.asc(), OutboxEvent.id.asc())
            .limit(resolved_limit)
            .scalar_subquery()
        )
        stmt = (
            delete(OutboxEvent).where(OutboxEvent.id.in_(candidate_ids)).returning(OutboxEvent.id)
        )
        result = await session.execute(stmt)
        return len(list(result.scalars()))

    @staticmethod
    async def mark_dispatched(
        session: AsyncSession,
        *,
        event_id: int,
        dispatched_at: datetime,
    ) -> int:
        stmt = (
            update(OutboxEvent)
            .where(OutboxEvent.id == event_id)
            .values(status="DISPATCHED", dispatched_at=dispatched_at, last_error=None)
            .returning(OutboxEvent.id)
        )
        result = await session.execute(stmt)
        return int(result.scalar_one_or_none() is not None)

    @staticmethod
    async def record_failed_attempt(
        session: AsyncSession,
        *,
        event_id: int,
        attempts: int,
        last_error: str,
        available_at: datetime,
        give_up: bool,
    ) -> int:
        stmt = (
            update(OutboxEvent)
            .where(OutboxEvent.id == event_id)
            .values(
                status="FAILED" if give_up else "PENDING",
                attempts=attempts,
                last_error=last_error,
                available_at=available_at,
            )
            .returning(OutboxEvent.id)
        )
        result = await session.execute(stmt)
        return int(result.scalar_one_or_none() is not None)
