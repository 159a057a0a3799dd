"""User record and leaderboard endpoints."""

from fastapi import APIRouter, Depends

from salespro_sync.application.schemas import UserRecordBody, UserRecordResponse
from salespro_sync.application.services import SSEManager, SyncEngine
from salespro_sync.domain.entities import SyncEvent
from salespro_sync.infrastructure.dependencies import get_sse_manager, get_sync_engine

router = APIRouter(tags=["Users"])


@router.get("/users/{external_id}", response_model=UserRecordResponse)
async def load_user(
    external_id: str,
    engine: SyncEngine = Depends(get_sync_engine),
) -> UserRecordResponse:
    """Load and reconcile the record for an external identity."""
    user = await engine.load_user(external_id)
    return UserRecordResponse.from_entity(user)


@router.put("/users/{external_id}", response_model=UserRecordResponse)
async def save_user(
    external_id: str,
    body: UserRecordBody,
    engine: SyncEngine = Depends(get_sync_engine),
    sse: SSEManager = Depends(get_sse_manager),
) -> UserRecordResponse:
    """Save locally and propagate to the remote in the background."""
    user = await engine.save_user(body.to_entity(external_id))
    sse.on_sync(SyncEvent())
    return UserRecordResponse.from_entity(user)


@router.get("/leaderboard", response_model=list[UserRecordResponse])
async def leaderboard(
    engine: SyncEngine = Depends(get_sync_engine),
) -> list[UserRecordResponse]:
    """Full roster, sorted by experience points."""
    users = await engine.get_leaderboard()
    return [UserRecordResponse.from_entity(u) for u in users]
