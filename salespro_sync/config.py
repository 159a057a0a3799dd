import logging
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

_config_logger = logging.getLogger(__name__)

_PROJECT_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _PROJECT_DIR / ".env",
    ".env",
)
_DEFAULT_CONTENT_FILE = Path(__file__).resolve().parent / "infrastructure" / "defaults" / "default_content.yaml"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "SalesPro Sync API"
    app_version: str = "0.1.0"
    app_env: str = "development"
    cors_origins: list[str] = ["http://localhost:5173"]

    # Local durable cache
    store_dir: str = "data/store"

    # Cross-context broadcast
    sync_channel_name: str = "salespro_sync_channel"

    # Conflict resolution: timestamp difference (ms) treated as "already in sync"
    sync_tolerance_ms: int = 2000

    # Remote tabular backend (Airtable-compatible). Values stored in the
    # global config take precedence; these are the bootstrap fallback.
    remote_base_url: str = "https://api.airtable.com/v0"
    remote_api_key: str = ""
    remote_base_id: str = ""
    remote_users_table: str = "Users"
    remote_timeout_seconds: float = 30.0

    # Server-Sent Events: seconds between keep-alive comments
    sse_keepalive_seconds: float = 15.0

    # Built-in default dataset
    default_content_file: str = str(_DEFAULT_CONTENT_FILE)

    # Logging — per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_http: str = "WARNING"          # httpx / httpcore — outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_remote: str = "INFO"           # Remote table client
    log_level_sync: str = "INFO"             # SyncEngine / ContentCache / bus

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }

    def model_post_init(self, __context: object) -> None:
        """Clamp nonsensical tuning values instead of failing startup."""
        if self.sync_tolerance_ms < 0:
            _config_logger.warning(
                "SYNC_TOLERANCE_MS=%d is negative; using 0", self.sync_tolerance_ms
            )
            object.__setattr__(self, "sync_tolerance_ms", 0)


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
