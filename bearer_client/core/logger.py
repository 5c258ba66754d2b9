import logging
import os
import sys
import uuid
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from loguru import logger

from bearer_client.core.config import Environment, settings

if TYPE_CHECKING:
    from loguru import Record

# ============================================
# CONTEXT VARIABLES FOR REQUEST TRACKING
# ============================================
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


# ============================================
# LOG DIRECTORY AND FILE PATHS
# ============================================
LOG_DIR = Path("logs")

LOG_FILE = LOG_DIR / "bearer_client.log"


# ============================================
# LOG LEVEL MAPPING
# ============================================

LOG_LEVELs = {
    50: "CRITICAL",
    40: "ERROR",
    30: "WARNING",
    20: "INFO",
    10: "DEBUG",
    0: "NOTSET",
}


def new_request_id() -> str:
    """
    Generate a short correlation ID for one outbound call.

    The caller scopes it with ``request_id_var.set()`` and ``reset()``.

    Returns:
        str: The 8-character request ID.
    """
    return str(uuid.uuid4())[:8]


def mask_token(token: str | None) -> str:
    """
    Shorten a bearer token for log output. Never log full tokens.
    """
    if not token:
        return "<none>"

    return f"{token[:6]}..."


# ============================================
# CUSTOM FILTER FOR CORRELATION AND PROCESS ID
# ============================================


def correlation_filter(record: "Record") -> bool:
    """
    Add correlation ID and process ID to log records.
    Lets the lines of one outbound call, including its replay after a
    token refresh, be grouped together.

    Args:
        record (Record): Log record from Loguru.

    Returns:
        bool: Always True, nothing is filtered out.
    """
    record["extra"]["request_id"] = request_id_var.get() or "-"
    record["extra"]["process_id"] = os.getpid()

    return True


# ============================================
# INTERCEPT HANDLER FOR STANDARD LOGGING
# ============================================


class InterceptHandler(logging.Handler):
    """
    Intercepts standard logging and redirects to Loguru.
    Used to route httpx and httpcore logs through our Loguru configuration.
    """

    def emit(self, record: logging.LogRecord):
        """
        Process a log record and redirect it to Loguru.
        """
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller from where the logging call originated
        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


# ============================================
# MAIN LOGGER SETUP FUNCTION
# ============================================


def setup_logger():
    """
    Configure Loguru for the client.

    Features:
    - Colored console output with request IDs
    - Optional file output, 10MB rotation, 1 month retention, gzip compression

    Call once at application startup. Library code only logs, it never
    configures sinks on import.
    """
    logger.remove()

    log_level = LOG_LEVELs[settings.log_level]

    # ============================================
    # CONSOLE OUTPUT: Simplified, colored format
    # ============================================
    console_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<magenta>PID:{extra[process_id]}</magenta> | "
        "<yellow>ReqID:{extra[request_id]}</yellow> | "
        "<cyan>{name}:{function}:{line}</cyan> | "
        "<level>{message}</level>"
    )

    logger.add(
        sys.stderr,
        format=console_format,
        level=logging.DEBUG if settings.current_environment == Environment.DEV else log_level,
        colorize=True,
        filter=correlation_filter,
    )

    # ============================================
    # FILE OUTPUT: Detailed format with full context
    # ============================================
    if settings.log_to_file:
        LOG_DIR.mkdir(exist_ok=True)

        file_format = (
            "{time:YYYY-MM-DD HH:mm:ss!UTC} | "
            "{level: <8} | "
            "PID:{extra[process_id]} | "
            "ReqID:{extra[request_id]} | "
            "{name}:{function}:{line} | "
            "{message}"
        )

        logger.add(
            LOG_FILE,
            format=file_format,
            level=log_level,
            rotation="10 MB",
            retention="1 month",
            compression="gz",
            enqueue=True,
            filter=correlation_filter,
            backtrace=True,
            diagnose=False,  # Locals may hold tokens
        )

    logger.info(
        f"Logger initialized | "
        f"Environment: {settings.current_environment.value} | "
        f"Level: {log_level} | "
        f"File: {LOG_FILE if settings.log_to_file else 'disabled'}"
    )


# ============================================
# HTTPX LOGGER CONFIGURATION
# ============================================


def configure_httpx_logging():
    """
    Replace the standard library handlers of httpx and httpcore with Loguru.

    Call after setup_logger().
    """
    for name in ("httpx", "httpcore"):
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False

    logger.debug("httpx logging configured to use Loguru")


# ============================================
# SHUTDOWN HANDLER
# ============================================


def shutdown_logger():
    """
    Flush all pending logs. Call at application shutdown.
    """
    logger.info("Shutting down logger...")

    logger.complete()
