import logging
import os
import sys
from contextvars import ContextVar
from typing import TYPE_CHECKING, Optional

from loguru import logger

from accounts.core.config import Environment, settings

if TYPE_CHECKING:
    from loguru import Record

# Set by LoggingMiddleware for the duration of a request
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

LOG_LEVELS = {
    50: "CRITICAL",
    40: "ERROR",
    30: "WARNING",
    20: "INFO",
    10: "DEBUG",
    5: "TRACE",
    0: "NOTSET",
}


def correlation_filter(record: "Record") -> bool:
    """
    Add the request ID and process ID to log records, so lines from
    different requests and worker processes can be told apart.

    Args:
        record (Record): Log record from Loguru.

    Returns:
        bool: Always True, nothing is filtered out.
    """
    record["extra"]["request_id"] = request_id_var.get() or "-"
    record["extra"]["process_id"] = os.getpid()

    return True


class InterceptHandler(logging.Handler):
    """
    Redirects standard logging records to Loguru, keeping the
    original caller so locations in the output stay meaningful.
    """

    def emit(self, record: logging.LogRecord):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logger():
    """
    Configure Loguru sinks for a multi-worker deployment.

    - Console sink: colored, short format
    - File sink: one file shared by all workers (enqueue=True makes this
      process safe), rotated at 10 MB, kept for 3 months, gzipped

    Call once at startup, from the application lifespan.
    """
    logger.remove()

    log_level = LOG_LEVELS.get(settings.log_level, "INFO")

    console_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<magenta>PID:{extra[process_id]}</magenta> | "
        "<yellow>ReqID:{extra[request_id]}</yellow> | "
        "<cyan>{name}:{function}:{line}</cyan> | "
        "<level>{message}</level>"
    )

    logger.add(
        sys.stdout,
        format=console_format,
        level="DEBUG" if settings.current_environment == Environment.DEV else log_level,
        colorize=True,
        enqueue=True,
        filter=correlation_filter,
    )

    settings.log_dir.mkdir(parents=True, exist_ok=True)

    file_format = (
        "{time:YYYY-MM-DD HH:mm:ss!UTC} | "
        "{level: <8} | "
        "PID:{extra[process_id]} | "
        "ReqID:{extra[request_id]} | "
        "{name}:{function}:{line} | "
        "{message}"
    )

    logger.add(
        settings.log_dir / "accounts.log",
        format=file_format,
        level=log_level,
        rotation="10 MB",
        retention="3 months",
        compression="gz",
        enqueue=True,
        filter=correlation_filter,
        backtrace=True,
        # Variable values in tracebacks could include passwords
        diagnose=False,
    )

    logger.info(
        f"Logger initialized | Environment: {settings.current_environment.value} | "
        f"Level: {log_level}"
    )


def configure_uvicorn_logging():
    """
    Route standard library logging, uvicorn's included, through Loguru.

    Call after setup_logger().
    """
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for name in logging.root.manager.loggerDict.keys():
        if name.startswith("uvicorn"):
            logging.getLogger(name).handlers = [InterceptHandler()]
            logging.getLogger(name).propagate = False

    logger.debug("Uvicorn logging configured to use Loguru")


async def shutdown_logger():
    """Flush queued log messages. Call on application shutdown."""
    logger.info("Shutting down logger...")
    await logger.complete()
