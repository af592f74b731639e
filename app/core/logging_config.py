import os
import sys

from loguru import logger

from app.core.config import Settings

LOG_FORMAT = "{time} | {level} | {message}"


def configure_logging(settings: Settings):
    """(Re)install the loguru sinks for this process."""
    log_dir = settings.log_dir

    # Create folder if missing
    if not os.path.exists(log_dir):
        os.makedirs(log_dir)

    # Remove default handler
    logger.remove()

    if settings.is_development:
        logger.add(sys.stderr, level="DEBUG", colorize=True)

    # General application log
    logger.add(
        f"{log_dir}/app.log",
        rotation="1 week",
        retention="4 weeks",
        level=settings.log_level,
        enqueue=True,
        format=LOG_FORMAT,
    )

    # Admin activity logs (sign-ins, notice / gallery writes)
    logger.add(
        f"{log_dir}/admin.log",
        rotation="1 week",
        retention="4 weeks",
        level="INFO",
        enqueue=True,
        filter=lambda record: record["extra"].get("log_type") == "admin",
        format=LOG_FORMAT,
    )

    # Storage logs (uploads, deletes, compensating deletes)
    logger.add(
        f"{log_dir}/storage.log",
        rotation="1 week",
        retention="4 weeks",
        level="INFO",
        enqueue=True,
        filter=lambda record: record["extra"].get("log_type") == "storage",
        format=LOG_FORMAT,
    )

    # Error logs
    logger.add(
        f"{log_dir}/errors.log",
        rotation="1 week",
        retention="8 weeks",
        level="ERROR",
        enqueue=True,
    )

    return logger


def get_logger():
    return logger
