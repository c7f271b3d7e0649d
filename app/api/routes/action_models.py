from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

Amount = Annotated[Decimal, Field(gt=0, max_digits=12, decimal_places=2)]


class ActionRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")


class WinnerPrizeRow(ActionRequest):
    rank: str = Field(default="", max_length=16)
    prize: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)


class TournamentFormRequest(ActionRequest):
    id: UUID | None = None
    title: str = Field(min_length=1, max_length=128)
    date: str | None = Field(default=None, max_length=10)
    time: str | None = Field(default=None, max_length=5)
    game_type: str | None = Field(default=None, max_length=32)
    entry_fee: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    slots: int | None = Field(default=None, ge=1, le=100_000)
    prize: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    rules: str | list[str] | None = None
    status: str | None = Field(default=None, max_length=16)
    is_mega: bool = False
    image_url: str | None = Field(default=None, max_length=2048)
    room_id: str | None = Field(default=None, max_length=64)
    room_password: str | None = Field(default=None, max_length=64)
    winner_prizes: list[WinnerPrizeRow] = Field(default_factory=list, max_length=100)


class TournamentIdRequest(ActionRequest):
    tournament_id: UUID


class TournamentUserRequest(ActionRequest):
    tournament_id: UUID
    user_id: str = Field(min_length=1, max_length=128)


class TournamentViewRequest(ActionRequest):
    tournament_id: UUID
    viewer_id: str | None = Field(default=None, max_length=128)


class TournamentListRequest(ActionRequest):
    viewer_id: str | None = Field(default=None, max_length=128)
    is_mega: bool | None = None
    limit: int = Field(default=100, ge=1, le=500)


class ResultRow(ActionRequest):
    user_id: str = Field(min_length=1, max_length=128)
    points: int = Field(ge=0)


class DeclareResultRequest(ActionRequest):
    tournament_id: UUID
    title: str = Field(default="", max_length=128)
    is_mega: bool = False
    results: list[ResultRow] = Field(max_length=10_000)


class WalletAdjustRequest(ActionRequest):
    user_id: str = Field(min_length=1, max_length=128)
    amount: Amount
    type: Literal["credit", "debit"]
    idempotency_key: str | None = Field(default=None, min_length=1, max_length=96)
    actor_id: str | None = Field(default=None, max_length=128)


class WalletRequestSubmitRequest(ActionRequest):
    user_id: str = Field(min_length=1, max_length=128)
    amount: Amount
    utr: str = Field(min_length=1, max_length=64)


class WithdrawalSubmitRequest(ActionRequest):
    user_id: str = Field(min_length=1, max_length=128)
    amount: Amount
    upi_id: str = Field(min_length=1, max_length=128)


class RequestResolutionRequest(ActionRequest):
    request_id: UUID
    user_id: str = Field(min_length=1, max_length=128)
    amount: Amount
    new_status: Literal["approved", "rejected"]
    actor_id: str | None = Field(default=None, max_length=128)


class RequestListRequest(ActionRequest):
    status: Literal["pending", "approved", "rejected"] | None = None
    user_id: str | None = Field(default=None, max_length=128)
    limit: int = Field(default=100, ge=1, le=500)


class UserRequest(ActionRequest):
    user_id: str = Field(min_length=1, max_length=128)


class UserListRequest(ActionRequest):
    user_id: str = Field(min_length=1, max_length=128)
    limit: int = Field(default=100, ge=1, le=500)


class FollowUpRequestPayload(ActionRequest):
    request_id: str = Field(min_length=1, max_length=64)
    user_id: str = Field(min_length=1, max_length=128)
    amount: Amount
    utr: str = Field(min_length=1, max_length=64)
    timestamp: datetime


class FollowUpResponse(BaseModel):
    follow_up_message: str | None


class SendNotificationRequest(ActionRequest):
    target: str = Field(min_length=1, max_length=128)
    title: str = Field(default="", max_length=256)
    message: str = Field(default="", max_length=4000)


class NotificationUserRequest(ActionRequest):
    notification_id: int = Field(gt=0)
    user_id: str = Field(min_length=1, max_length=128)


class DeleteNotificationsRequest(ActionRequest):
    user_id: str = Field(default="", max_length=128)


class EnsureProfileRequest(ActionRequest):
    user_id: str = Field(min_length=1, max_length=128)
    name: str | None = Field(default=None, max_length=128)
    email: str | None = Field(default=None, max_length=320)
    photo_url: str | None = Field(default=None, max_length=2048)


class UpdateProfileNameRequest(ActionRequest):
    user_id: str = Field(min_length=1, max_length=128)
    new_name: str = Field(max_length=256)


class SetUserRoleRequest(ActionRequest):
    actor_id: str = Field(min_length=1, max_length=128)
    target_user_id: str = Field(min_length=1, max_length=128)
    role: Literal["user", "admin"]


class UpdatePaymentSettingsRequest(ActionRequest):
    upi_id: str = Field(default="", max_length=128)
    qr_image_url: str = Field(default="", max_length=2048)
    actor_id: str = Field(min_length=1, max_length=128)
