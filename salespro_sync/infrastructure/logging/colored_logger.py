"""Colored sync logger — ANSI-colored console output for the sync layer.

Each tier of a fetch gets its own color, so a single content refresh reads
as a short trace: blue for the remote, green for local writes, yellow when a
fallback tier answered, red for failures, gray for per-item details.
"""

import logging
import time
from contextlib import contextmanager
from typing import Any, NamedTuple

_RESET = "\033[0m"
_BOLD = "\033[1m"
_DIM = "\033[2m"
_RED = "\033[91m"
_GREEN = "\033[92m"
_YELLOW = "\033[93m"
_BLUE = "\033[94m"
_CYAN = "\033[96m"
_WHITE = "\033[97m"
_GRAY = "\033[90m"


class Stage(NamedTuple):
    label: str
    color: str
    icon: str


class SyncStage:
    """Stages a sync trace can be in."""

    REMOTE = Stage("REMOTE", _BLUE, "🔄")
    CACHE = Stage("CACHE", _GREEN, "💾")
    FALLBACK = Stage("FALLBACK", _YELLOW, "📦")
    USER = Stage("USER", _CYAN, "👤")
    CONTENT = Stage("CONTENT", _WHITE, "📚")
    ERROR = Stage("ERROR", _RED, "❌")


def _suffix(fields: dict[str, Any], tone: str = _GRAY) -> str:
    if not fields:
        return ""
    joined = " | ".join(f"{key}={value}" for key, value in fields.items())
    return f" {tone}({joined}){_RESET}"


class SyncLogger:
    """Stage-colored wrapper around a stdlib logger.

    Usage:
        log = SyncLogger("SyncPipeline")
        with log.timed_step(SyncStage.CONTENT, "Fetching all content"):
            ...
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)

    def _emit(self, level: int, stage: Stage, body: str, fields: dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(level, f"{stage.color}{stage.icon} [{stage.label}]{_RESET} {body}{_suffix(fields)}")

    def step_start(self, stage: Stage, message: str, **fields: Any) -> None:
        self._emit(logging.INFO, stage, f"{_BOLD}{stage.color}{message}{_RESET}", fields)

    def step_complete(self, stage: Stage, message: str, **fields: Any) -> None:
        self._emit(logging.INFO, stage, f"{_GREEN}✓ {message}{_RESET}", fields)

    def step_warning(self, stage: Stage, message: str, **fields: Any) -> None:
        """A degraded but handled step, e.g. a fallback tier answered."""
        self._emit(logging.WARNING, stage, f"{_YELLOW}{message}{_RESET}", fields)

    def step_error(self, stage: Stage, message: str, error: Exception | None = None) -> None:
        body = f"{_RED}{message}{_RESET}"
        if error is not None:
            body += f" {_DIM}→ {type(error).__name__}: {error}{_RESET}"
        self._emit(logging.ERROR, SyncStage.ERROR._replace(label=stage.label), body, {})

    def detail(self, message: str, **fields: Any) -> None:
        if self._logger.isEnabledFor(logging.DEBUG):
            self._logger.debug(f"   {_GRAY}├─ {message}{_RESET}{_suffix(fields, _DIM)}")

    @contextmanager
    def timed_step(self, stage: Stage, message: str, **fields: Any):
        """Log the start of a step, then its outcome and elapsed seconds."""
        self.step_start(stage, message, **fields)
        started = time.perf_counter()
        try:
            yield
        except Exception as exc:
            self.step_error(stage, f"{message} failed after {time.perf_counter() - started:.2f}s", error=exc)
            raise
        self.step_complete(stage, f"{message} ({time.perf_counter() - started:.2f}s)", **fields)
