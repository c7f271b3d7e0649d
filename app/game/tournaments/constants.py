from __future__ import annotations

from datetime import timedelta, timezone

TOURNAMENT_STATUS_DRAFT = "DRAFT"
TOURNAMENT_STATUS_PUBLISHED = "PUBLISHED"
TOURNAMENT_STATUS_LIVE = "LIVE"
TOURNAMENT_STATUS_COMPLETED = "COMPLETED"
TOURNAMENT_STATUS_CANCELLED = "CANCELLED"

TOURNAMENT_STATUSES: frozenset[str] = frozenset(
    {
        TOURNAMENT_STATUS_DRAFT,
        TOURNAMENT_STATUS_PUBLISHED,
        TOURNAMENT_STATUS_LIVE,
        TOURNAMENT_STATUS_COMPLETED,
        TOURNAMENT_STATUS_CANCELLED,
    }
)
TOURNAMENT_PLAYER_VISIBLE_STATUSES: tuple[str, ...] = (
    TOURNAMENT_STATUS_PUBLISHED,
    TOURNAMENT_STATUS_LIVE,
    TOURNAMENT_STATUS_COMPLETED,
    TOURNAMENT_STATUS_CANCELLED,
)
TOURNAMENT_ALL_STATUSES: tuple[str, ...] = (
    TOURNAMENT_STATUS_DRAFT,
    *TOURNAMENT_PLAYER_VISIBLE_STATUSES,
)

TOURNAMENT_DEFAULT_GAME_TYPE = "Solo"
TOURNAMENT_DEFAULT_SLOTS = 100
TOURNAMENT_DEFAULT_LIST_LIMIT = 100
TOURNAMENT_MEGA_IMAGE_URL = "/tournaments/MegaTournaments.jpg"
TOURNAMENT_REGULAR_IMAGE_URL = "/tournaments/RegularTournaments.jpg"

# Form dates and times are entered in Indian Standard Time.
TOURNAMENT_SCHEDULE_TZ = timezone(timedelta(hours=5, minutes=30))
TOURNAMENT_DATE_FORMAT = "%Y-%m-%d"
TOURNAMENT_TIME_FORMAT = "%H:%M"
