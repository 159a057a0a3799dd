"""Server-Sent Events stream of sync signals."""

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from salespro_sync.application.services import SSEManager
from salespro_sync.infrastructure.dependencies import get_sse_manager

router = APIRouter(prefix="/sync", tags=["Sync"])


@router.get("/events")
async def sync_events(sse: SSEManager = Depends(get_sse_manager)) -> StreamingResponse:
    """Each ``sync`` event means: re-read current state."""
    return StreamingResponse(
        sse.subscribe(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
