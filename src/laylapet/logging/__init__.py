"""Structured logging for the chat service.

Provides structured logging for:
- Chat turns (message, intent summary, recommendations)
- Ranking runs (candidate counts, exclusions, fallback mode)
- External calls (catalog fetches, language model completions)
- API requests and errors

Supports:
- Console logging (development: colored, production: JSON)
- File logging with rotation
"""

import logging
import os
import sys
import time
from contextvars import ContextVar
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import structlog

# Request context for correlating logs
_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_session_id: ContextVar[Optional[str]] = ContextVar("session_id", default=None)


class EventCategory(str, Enum):
    """Categories of logged events."""
    CHAT = "chat"
    RANKING = "ranking"
    CATALOG = "catalog"
    LLM = "llm"
    SYSTEM = "system"
    ERROR = "error"
    PERFORMANCE = "performance"


class LogConfig:
    """Logging configuration from environment variables."""

    # Environment: development, staging, production
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Log level: DEBUG, INFO, WARNING, ERROR
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Log format: json or text
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json" if ENVIRONMENT == "production" else "text")

    # File logging
    LOG_TO_FILE: bool = os.getenv("LOG_TO_FILE", "false").lower() == "true"
    LOG_DIR: Path = Path(os.getenv("LOG_DIR", "logs"))
    LOG_FILE_MAX_BYTES: int = int(os.getenv("LOG_FILE_MAX_BYTES", 10 * 1024 * 1024))  # 10MB
    LOG_FILE_BACKUP_COUNT: int = int(os.getenv("LOG_FILE_BACKUP_COUNT", 5))


def _rotating_handler(filename: str, level: int) -> logging.Handler:
    LogConfig.LOG_DIR.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        LogConfig.LOG_DIR / filename,
        maxBytes=LogConfig.LOG_FILE_MAX_BYTES,
        backupCount=LogConfig.LOG_FILE_BACKUP_COUNT,
    )
    handler.setFormatter(logging.Formatter('%(message)s'))
    handler.setLevel(level)
    return handler


def setup_file_logging() -> Optional[logging.Handler]:
    """Set up the main log file with rotation."""
    if not LogConfig.LOG_TO_FILE:
        return None
    return _rotating_handler("app.log", getattr(logging, LogConfig.LOG_LEVEL))


def setup_error_file_logging() -> Optional[logging.Handler]:
    """Set up a separate error log file."""
    if not LogConfig.LOG_TO_FILE:
        return None
    return _rotating_handler("error.log", logging.ERROR)


def configure_production_logging():
    """Configure structured logging for all environments."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, LogConfig.LOG_LEVEL))

    # Clear existing handlers
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, LogConfig.LOG_LEVEL))
    root_logger.addHandler(console_handler)

    for handler in (setup_file_logging(), setup_error_file_logging()):
        if handler:
            root_logger.addHandler(handler)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        add_request_context,
        add_environment_context,
    ]

    # JSON for production, colored console for dev
    if LogConfig.LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger(__name__)
    logger.info(
        "logging_configured",
        environment=LogConfig.ENVIRONMENT,
        log_level=LogConfig.LOG_LEVEL,
        log_format=LogConfig.LOG_FORMAT,
        file_logging=LogConfig.LOG_TO_FILE,
        log_dir=str(LogConfig.LOG_DIR) if LogConfig.LOG_TO_FILE else None,
    )


def add_request_context(logger, method_name, event_dict):
    """Add request context to log events."""
    request_id = _request_id.get()
    session_id = _session_id.get()

    if request_id:
        event_dict["request_id"] = request_id
    if session_id:
        event_dict["session_id"] = session_id

    return event_dict


def add_environment_context(logger, method_name, event_dict):
    """Add environment info to log events."""
    event_dict["env"] = LogConfig.ENVIRONMENT
    return event_dict


def set_request_context(
    request_id: Optional[str] = None,
    session_id: Optional[str] = None,
):
    """Set request context for correlation."""
    if request_id:
        _request_id.set(request_id)
    if session_id:
        _session_id.set(session_id)


def clear_request_context():
    """Clear request context."""
    _request_id.set(None)
    _session_id.set(None)


logger = structlog.get_logger(__name__)


# High-level logging functions

def log_chat_turn(
    message: str,
    intent: dict,
    candidates: int,
    recommended: list[str],
    duration_ms: float,
    fallback_reply: bool = False,
):
    """Log a completed chat turn.

    Args:
        message: Raw customer message (truncated)
        intent: Compact summary of the extracted intent
        candidates: Number of products forwarded to the language model
        recommended: Slugs of the grounded recommendations
        duration_ms: Turn duration in milliseconds
        fallback_reply: Whether the fixed no-results reply was used
    """
    logger.info(
        "chat_turn",
        category=EventCategory.CHAT.value,
        message=message[:200],
        intent=intent,
        candidates=candidates,
        recommended=recommended,
        duration_ms=duration_ms,
        fallback_reply=fallback_reply,
    )


def log_ranking(
    catalog_size: int,
    ranked: int,
    excluded: int,
    fallback_mode: bool,
    top_scores: list[int],
):
    """Log the outcome of scoring a catalog."""
    logger.debug(
        "ranking",
        category=EventCategory.RANKING.value,
        catalog_size=catalog_size,
        ranked=ranked,
        excluded=excluded,
        fallback_mode=fallback_mode,
        top_scores=top_scores,
    )


def log_catalog_fetch(
    shop_domain: str,
    products: int,
    duration_ms: float,
    cached: bool = False,
    error: Optional[str] = None,
):
    """Log a catalog fetch.

    Args:
        shop_domain: Shop the catalog belongs to
        products: Number of normalized products
        duration_ms: Fetch duration in milliseconds
        cached: Whether the catalog came from cache
        error: Error message if the fetch failed
    """
    level = "info" if error is None else "warning"
    getattr(logger, level)(
        "catalog_fetch",
        category=EventCategory.CATALOG.value,
        shop_domain=shop_domain,
        products=products,
        duration_ms=duration_ms,
        cached=cached,
        success=error is None,
        error=error,
    )


def log_llm_call(
    model: str,
    prompt_chars: int,
    reply_chars: int,
    duration_ms: float,
    error: Optional[str] = None,
):
    """Log a language model completion."""
    level = "info" if error is None else "warning"
    getattr(logger, level)(
        "llm_call",
        category=EventCategory.LLM.value,
        model=model,
        prompt_chars=prompt_chars,
        reply_chars=reply_chars,
        duration_ms=duration_ms,
        success=error is None,
        error=error,
    )


def log_api_request(
    method: str,
    path: str,
    status_code: int,
    duration_ms: float,
    user_agent: Optional[str] = None,
    error: Optional[str] = None,
):
    """Log API request.

    Args:
        method: HTTP method
        path: Request path
        status_code: Response status code
        duration_ms: Request duration
        user_agent: Client user agent
        error: Error message if failed
    """
    level = "info" if status_code < 400 else "warning" if status_code < 500 else "error"
    getattr(logger, level)(
        "api_request",
        category=EventCategory.SYSTEM.value,
        method=method,
        path=path,
        status_code=status_code,
        duration_ms=duration_ms,
        user_agent=user_agent[:100] if user_agent else None,
        error=error,
    )


def log_error(
    error_type: str,
    message: str,
    context: Optional[dict] = None,
):
    """Log an error.

    Args:
        error_type: Type/class of error
        message: Error message
        context: Additional context
    """
    logger.error(
        "error",
        category=EventCategory.ERROR.value,
        error_type=error_type,
        message=message,
        context=context or {},
    )


class LogTimer:
    """Context manager timing one stage of a chat turn.

    ``elapsed_ms`` can be read while the block is still running; on exit
    the stage is logged as a performance event with its final duration.
    """

    def __init__(
        self,
        stage: str,
        category: EventCategory = EventCategory.PERFORMANCE,
        **extra_fields,
    ):
        self.stage = stage
        self.category = category
        self.extra_fields = extra_fields
        self.start_time: float = 0
        self.duration_ms: Optional[float] = None

    @property
    def elapsed_ms(self) -> float:
        if self.duration_ms is not None:
            return self.duration_ms
        return (time.perf_counter() - self.start_time) * 1000

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.duration_ms = None
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration_ms = (time.perf_counter() - self.start_time) * 1000

        if exc_type is not None:
            logger.warning(
                "stage_failed",
                category=self.category.value,
                stage=self.stage,
                duration_ms=round(self.duration_ms, 2),
                error_type=exc_type.__name__,
                **self.extra_fields,
            )
        else:
            logger.debug(
                "stage_completed",
                category=self.category.value,
                stage=self.stage,
                duration_ms=round(self.duration_ms, 2),
                **self.extra_fields,
            )
        return False
