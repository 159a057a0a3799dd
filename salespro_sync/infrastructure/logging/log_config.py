"""Centralized logging configuration.

Per-category levels come from Settings, so outbound HTTP chatter can be
silenced while the remote client and the sync services stay verbose (or the
other way round).

Usage:
    from salespro_sync.infrastructure.logging.log_config import setup_logging
    setup_logging()   # once, from the application lifespan
"""

import logging
import sys

from salespro_sync.config import Settings, get_settings

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Settings field → logger names it governs
_CATEGORY_MAP: dict[str, tuple[str, ...]] = {
    "log_level_http": ("httpx", "httpcore"),
    "log_level_uvicorn": ("uvicorn", "uvicorn.access", "uvicorn.error"),
    "log_level_remote": ("salespro_sync.infrastructure.remote",),
    "log_level_sync": (
        "salespro_sync.application.services",
        "salespro_sync.infrastructure.broadcast",
        "salespro_sync.infrastructure.storage",
        "SyncPipeline",
    ),
}


def _parse_level(raw: str) -> int:
    """Level name → logging constant; unknown names mean INFO."""
    level = logging.getLevelName(str(raw).upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(settings: Settings | None = None) -> None:
    """Apply root and per-category levels from ``settings``."""
    settings = settings or get_settings()

    root = logging.getLogger()
    root.setLevel(_parse_level(settings.log_level))
    # uvicorn installs its own handlers; bare scripts and tests do not
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)

    applied: dict[str, str] = {}
    for field_name, logger_names in _CATEGORY_MAP.items():
        raw_level = getattr(settings, field_name, "INFO")
        for name in logger_names:
            logging.getLogger(name).setLevel(_parse_level(raw_level))
        applied[field_name.removeprefix("log_level_")] = raw_level

    logging.getLogger(__name__).debug(
        "Logging configured: root=%s %s",
        settings.log_level,
        " ".join(f"{category}={level}" for category, level in applied.items()),
    )
