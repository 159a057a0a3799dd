"""Health check endpoint — always available, reports sync state when wired."""

from fastapi import APIRouter, Request

from salespro_sync.config import get_settings

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(request: Request) -> dict:
    """Application status plus the state of this process's sync context."""
    settings = get_settings()
    context = getattr(request.app.state, "sync_context", None)
    sync = None
    if context is not None:
        sync = {
            "channel": context.bus.name,
            "remote_configured": context.remote.is_configured(),
            "pending_pushes": context.tasks.pending,
        }
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.app_env,
        "sync": sync,
    }
