import sys
import logging
from typing import Any, Callable, Iterable

from loguru import logger

SENSITIVE_KEYS = ["key", "token", "password", "secret", "authorization"]


def _mask(value: str) -> str:
    if len(value) > 8:
        return value[:4] + "****" + value[-4:]
    return "********"


def make_sensitive_data_filter(
    secrets: Iterable[str],
) -> Callable[[dict[str, Any]], bool]:
    """Builds a filter that masks configured secrets and sensitive extras."""
    known_secrets = [s for s in secrets if s]

    def sensitive_data_filter(record: dict[str, Any]) -> bool:
        extra = record.get("extra")
        if isinstance(extra, dict):
            for extra_key, extra_value in extra.items():
                if isinstance(extra_value, str) and any(
                    sk in extra_key.lower() for sk in SENSITIVE_KEYS
                ):
                    extra[extra_key] = _mask(extra_value)

        for secret in known_secrets:
            if secret in record["message"]:
                record["message"] = record["message"].replace(secret, "********")

        return True  # Keep the record after masking

    return sensitive_data_filter


class InterceptHandler(logging.Handler):
    """Routes standard logging records (httpx, supabase) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        level = _loguru_level(record)
        # Skip the logging module's own frames so loguru reports the real caller
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.bind(stdlib_logger=record.name).opt(
            depth=depth, exception=record.exc_info
        ).log(level, record.getMessage())


def _loguru_level(record: logging.LogRecord):
    try:
        return logger.level(record.levelname).name
    except ValueError:
        return record.levelno


def setup_logging(level: str = "INFO", secrets: Iterable[str] = ()) -> None:
    """Configures Loguru logger for console output."""
    logger.remove()  # Remove default handler

    logger.add(
        sys.stderr,
        level=level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
        backtrace=True,
        diagnose=False,  # Locals would leak the API key into tracebacks
        filter=make_sensitive_data_filter(secrets),
    )

    logger.info(f"Logging initialized with level: {level.upper()}")

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logger.debug("Standard logging intercepted.")
