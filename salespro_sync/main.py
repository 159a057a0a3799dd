"""FastAPI application factory."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from salespro_sync.config import get_settings
from salespro_sync.infrastructure.dependencies import build_sync_context
from salespro_sync.infrastructure.logging.log_config import setup_logging
from salespro_sync.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — build the sync context, warm caches, close on exit."""
    settings = get_settings()
    setup_logging(settings)

    context = build_sync_context(settings)
    app.state.sync_context = context

    # Warm the local snapshots; never blocks startup on a failed remote
    try:
        await context.content.fetch_global_config()
        await context.content.fetch_all_content()
    except Exception:
        logger.exception("Initial content sync failed; continuing with local data")

    yield

    # Let in-flight pushes finish; whatever is still pending gets cancelled
    try:
        await asyncio.wait_for(context.tasks.drain(), timeout=settings.remote_timeout_seconds)
    except asyncio.TimeoutError:
        logger.warning("Pending remote pushes did not finish before shutdown")
    await context.aclose()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "salespro_sync.main:app",
        host="127.0.0.1",
        port=8020,
        reload=True,
    )
