import logging
import sys
from pathlib import Path

from loguru import logger

from app.core.config import Settings

# Third-party loggers that use the standard logging module
INTERCEPTED_LOGGERS = (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "fastapi",
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "asyncpg",
)


class InterceptHandler(logging.Handler):
    """
    Redirect standard logging records to Loguru.

    uvicorn, sqlalchemy and asyncpg log through the built-in logging module;
    this handler forwards their records so that every line shares one format
    and one set of sinks.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk back to the frame that issued the logging call
        frame, depth = sys._getframe(6), 6
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(settings: Settings) -> None:
    """
    Configure Loguru sinks from application settings.

    - Replaces the default Loguru handler with a stderr sink
    - Adds a rotating file sink when ``log_file`` is set
    - Routes the standard-library loggers in ``INTERCEPTED_LOGGERS`` to Loguru

    Args:
        settings: Application settings holding the logging options
    """
    logger.remove()

    # =========================================================================
    # CONSOLE SINK
    # =========================================================================
    console_format = settings.log_format if not settings.log_serialize else "{message}"

    logger.add(
        sys.stderr,
        format=console_format,
        level=settings.effective_console_log_level,
        colorize=not settings.log_serialize,
        serialize=settings.log_serialize,
        backtrace=settings.log_backtrace,
        diagnose=settings.log_diagnose,
    )

    # =========================================================================
    # FILE SINK
    # =========================================================================
    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            str(log_path),
            format=settings.log_format,
            level=settings.effective_file_log_level,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
            compression=settings.log_compression or None,
            serialize=settings.log_serialize,
            backtrace=settings.log_backtrace,
            diagnose=settings.log_diagnose,
        )

    # =========================================================================
    # INTERCEPT STANDARD LOGGING
    # =========================================================================
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for logger_name in INTERCEPTED_LOGGERS:
        std_logger = logging.getLogger(logger_name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False

    logger.info(
        f"Logging configured: console={settings.effective_console_log_level}, "
        f"file={settings.effective_file_log_level if settings.log_file else 'disabled'}, "
        f"serialize={settings.log_serialize}"
    )
