from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import asdict, is_dataclass
from decimal import Decimal
from typing import Any

import structlog
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel

from app.economy.wallet.errors import WalletError
from app.game.tournaments.errors import TournamentError
from app.services.errors import ServiceError

ACTIONS_PATH_PREFIX = "/actions/"
DOMAIN_ERRORS: tuple[type[Exception], ...] = (WalletError, TournamentError, ServiceError)

logger = structlog.get_logger(__name__)


class ActionResult(BaseModel):
    success: bool
    error: str | None = None
    data: Any = None


def to_payload(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        value = asdict(value)
    elif isinstance(value, list):
        value = [asdict(item) if is_dataclass(item) else item for item in value]
    return jsonable_encoder(value, custom_encoder={Decimal: str})


async def run_action(
    action: str,
    operation: Callable[[], Awaitable[Any]],
    *,
    failure_message: str,
) -> ActionResult:
    try:
        value = await operation()
    except DOMAIN_ERRORS as exc:
        logger.info("action_rejected", action=action, reason=type(exc).__name__)
        return ActionResult(success=False, error=getattr(exc, "message", str(exc)))
    except Exception:
        logger.exception("action_failed", action=action)
        return ActionResult(success=False, error=failure_message)
    return ActionResult(success=True, data=to_payload(value))


def first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part != "body"]
    message = str(first.get("msg", "Invalid value"))
    if not location:
        return message
    return f"{'.'.join(location)}: {message}"
