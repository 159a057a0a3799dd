"""Pydantic DTOs for the content, notification and config endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class ContentBundleResponse(BaseModel):
    """All read-mostly collections, as plain dicts."""

    modules: list[dict[str, Any]]
    materials: list[dict[str, Any]]
    streams: list[dict[str, Any]]
    events: list[dict[str, Any]]
    scenarios: list[dict[str, Any]]


class CollectionUpdate(BaseModel):
    """Payload replacing one collection's local snapshot."""

    items: list[dict[str, Any]]


class NotificationCreate(BaseModel):
    id: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1, max_length=255)
    message: str = ""
    type: str = "INFO"
    date: str = ""
    target_role: str | None = None


class AppConfigBody(BaseModel):
    feature_flags: dict[str, bool] = Field(default_factory=dict)
    integrations: dict[str, Any] = Field(default_factory=dict)
    extra: dict[str, Any] = Field(default_factory=dict)
