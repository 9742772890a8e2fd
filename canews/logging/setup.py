import sys
import logging
from typing import Any, List, Optional

from loguru import logger

from canews.config.settings import settings

MASK = "********"
SENSITIVE_KEY_PARTS = ("key", "token", "password", "secret")
# Standard-library loggers that would otherwise bypass loguru
INTERCEPTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi")

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def _configured_secrets() -> List[str]:
    return [s for s in (settings.supabase_key, settings.supabase_service_key) if s]


def _mask_extra(value: Any) -> Any:
    if isinstance(value, dict):
        masked = {}
        for k, v in value.items():
            if any(part in str(k).lower() for part in SENSITIVE_KEY_PARTS):
                masked[k] = MASK
            else:
                masked[k] = _mask_extra(v)
        return masked
    if isinstance(value, list):
        return [_mask_extra(item) for item in value]
    return value


def sensitive_data_filter(record: dict[str, Any]) -> bool:
    """Masks Supabase keys and secret-looking ``extra`` fields before a record is emitted."""
    if isinstance(record.get("extra"), dict):
        record["extra"] = _mask_extra(record["extra"])

    message = record["message"]
    for secret in _configured_secrets():
        if secret in message:
            message = message.replace(secret, MASK)
    record["message"] = message

    return True  # Never drop, only mask


class InterceptHandler(logging.Handler):
    """Forwards standard logging records into loguru at the caller's depth."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk out of the logging module to find the real caller
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: Optional[str] = None) -> None:
    """Configures the loguru stderr sink and routes standard logging into it.

    ``level`` overrides ``settings.log_level`` when given.
    """
    effective_level = (level or settings.log_level).upper()
    logger.remove()

    logger.add(
        sys.stderr,
        level=effective_level,
        format=LOG_FORMAT,
        colorize=True,
        backtrace=True,
        diagnose=False,  # Raw documents can be large; keep tracebacks short
        filter=sensitive_data_filter,
    )
    logger.info(f"Logging initialized with level: {effective_level}")

    handler = InterceptHandler()
    logging.basicConfig(handlers=[handler], level=0, force=True)
    for name in INTERCEPTED_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [handler]
        std_logger.propagate = False
    logger.info(f"Standard logging intercepted ({', '.join(INTERCEPTED_LOGGERS)}).")
