from loguru import logger
from pathlib import Path
import sys

from ..config import settings


CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[component]} | "
    "{name}:{function}:{line} - {message}"
)


def setup_logging(log_level: str = "INFO", log_file: str = "logs/app.log"):
    """Setup logging configuration."""
    # Remove default logger
    logger.remove()
    logger.configure(extra={"component": "app"})

    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger.add(sys.stdout, format=CONSOLE_FORMAT, level=log_level.upper(), colorize=True)

    # Analysis workers log from several threads
    logger.add(
        log_path,
        format=FILE_FORMAT,
        level=log_level.upper(),
        rotation="10 MB",
        retention="30 days",
        compression="zip",
        enqueue=True,
    )

    return logger


def get_logger(component: str):
    """Logger tagged with the collaborator that emits it."""
    return logger.bind(component=component)


# Initialize logger
app_logger = setup_logging(settings.log_level, settings.log_file)
