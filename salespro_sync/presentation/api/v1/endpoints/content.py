"""Content, notification and global config endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from salespro_sync.application.schemas import (
    AppConfigBody,
    CollectionUpdate,
    ContentBundleResponse,
    NotificationCreate,
)
from salespro_sync.application.services import ContentCache, SSEManager
from salespro_sync.domain.entities import AppConfig, AppNotification, SyncEvent
from salespro_sync.domain.exceptions import UnknownCollectionError
from salespro_sync.infrastructure.dependencies import get_content_cache, get_sse_manager

router = APIRouter(tags=["Content"])


@router.get("/content", response_model=ContentBundleResponse)
async def get_content(
    cache: ContentCache = Depends(get_content_cache),
) -> ContentBundleResponse:
    """Resolve every collection through remote → local → defaults."""
    bundle = await cache.fetch_all_content()
    return ContentBundleResponse(**bundle.to_dict())


@router.put("/content/{collection}")
async def put_collection(
    collection: str,
    body: CollectionUpdate,
    cache: ContentCache = Depends(get_content_cache),
    sse: SSEManager = Depends(get_sse_manager),
) -> list[dict[str, Any]]:
    """Replace a collection's local snapshot."""
    try:
        items = await cache.save_collection(collection, body.items)
    except UnknownCollectionError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    sse.on_sync(SyncEvent())
    return [item.to_dict() for item in items]


@router.get("/notifications")
async def list_notifications(
    cache: ContentCache = Depends(get_content_cache),
) -> list[dict[str, Any]]:
    notifications = await cache.fetch_notifications()
    return [n.to_dict() for n in notifications]


@router.post("/notifications", status_code=status.HTTP_201_CREATED)
async def send_notification(
    body: NotificationCreate,
    cache: ContentCache = Depends(get_content_cache),
    sse: SSEManager = Depends(get_sse_manager),
) -> list[dict[str, Any]]:
    """Broadcast a notification to every context."""
    notifications = await cache.send_broadcast(AppNotification(**body.model_dump()))
    sse.on_sync(SyncEvent())
    return [n.to_dict() for n in notifications]


@router.get("/config")
async def get_config(
    cache: ContentCache = Depends(get_content_cache),
) -> dict[str, Any]:
    config = await cache.fetch_global_config()
    return config.to_dict()


@router.put("/config")
async def put_config(
    body: AppConfigBody,
    cache: ContentCache = Depends(get_content_cache),
    sse: SSEManager = Depends(get_sse_manager),
) -> dict[str, Any]:
    config = await cache.save_global_config(AppConfig.from_dict(body.model_dump()))
    sse.on_sync(SyncEvent())
    return config.to_dict()
