"""Pydantic DTOs for the user record endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from salespro_sync.domain.entities import UserRecord, UserRole


class UserRecordBody(BaseModel):
    """Schema for saving a user record — the external id comes from the path."""

    name: str = Field("Guest", max_length=255)
    role: UserRole = UserRole.STUDENT
    xp: int = Field(0, ge=0)
    level: int = Field(1, ge=1)
    username: str | None = None
    completed_lesson_ids: list[str] = Field(default_factory=list)
    submitted_homeworks: list[dict[str, Any]] = Field(default_factory=list)
    chat_history: list[dict[str, Any]] = Field(default_factory=list)
    notebook: list[dict[str, Any]] = Field(default_factory=list)
    habits: list[dict[str, Any]] = Field(default_factory=list)
    goals: list[dict[str, Any]] = Field(default_factory=list)
    preferences: dict[str, Any] = Field(default_factory=lambda: {"theme": "dark", "notifications": True})
    remote_row_id: str | None = None
    extra: dict[str, Any] = Field(default_factory=dict)

    def to_entity(self, external_id: str) -> UserRecord:
        return UserRecord.from_dict({"external_id": external_id, **self.model_dump(mode="json")})


class UserRecordResponse(UserRecordBody):
    """Schema returned to the client."""

    external_id: str
    last_sync_timestamp: int

    @classmethod
    def from_entity(cls, user: UserRecord) -> "UserRecordResponse":
        return cls.model_validate(user.to_dict())
