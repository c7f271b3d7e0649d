from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.services import notification_outbox
from app.services.notification_outbox import (
    EVENT_ADMIN_NOTICE,
    OutboxPayloadError,
    _require_text,
    enqueue_admin_notice,
    retry_delay,
)


@pytest.mark.parametrize(
    ("attempts", "expected"),
    [
        (0, timedelta(seconds=30)),
        (1, timedelta(seconds=30)),
        (2, timedelta(seconds=60)),
        (3, timedelta(seconds=120)),
        (7, timedelta(seconds=1920)),
        (8, timedelta(hours=1)),
        (50, timedelta(hours=1)),
    ],
)
def test_retry_delay_backs_off_exponentially_up_to_one_hour(
    attempts: int,
    expected: timedelta,
) -> None:
    assert retry_delay(attempts) == expected


def test_require_text_rejects_missing_or_blank_values() -> None:
    assert _require_text({"title": "Hi"}, "title") == "Hi"
    with pytest.raises(OutboxPayloadError, match="title"):
        _require_text({"title": "  "}, "title")
    with pytest.raises(OutboxPayloadError, match="message"):
        _require_text({"message": 5}, "message")


@pytest.mark.asyncio
async def test_admin_notice_reaches_every_admin(monkeypatch) -> None:
    captured: dict[str, object] = {}

    async def fake_create(session, **kwargs):
        captured.update(kwargs)
        return kwargs

    async def fake_admin_ids(session):
        return ["admin-1", "admin-2"]

    monkeypatch.setattr(notification_outbox.OutboxEventsRepo, "create", staticmethod(fake_create))
    monkeypatch.setattr(notification_outbox.UsersRepo, "list_admin_ids", staticmethod(fake_admin_ids))

    await enqueue_admin_notice(
        None,
        title="New Tournament Entry",
        message="Asha joined Weekend Cup.",
        now_utc=datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc),
    )
    recipients = await notification_outbox._resolve_recipients(
        None,
        event_type=EVENT_ADMIN_NOTICE,
        payload=captured["payload"],
    )

    assert captured["payload"] == {
        "title": "New Tournament Entry",
        "message": "Asha joined Weekend Cup.",
    }
    assert recipients == ["admin-1", "admin-2"]
