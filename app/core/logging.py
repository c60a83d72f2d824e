"""
Structured logging configuration using loguru.
"""
import sys
from loguru import logger
from app.core.config import settings

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"

# Remove default handler
logger.remove()

logger.add(
    sys.stdout,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    level="DEBUG" if settings.ENVIRONMENT == "development" else "INFO",
    colorize=settings.ENVIRONMENT != "test",
)

# Add file handlers for production; admission/release decisions also get their own file
if settings.ENVIRONMENT == "production":
    logger.add(
        "logs/app.log",
        rotation="500 MB",
        retention="10 days",
        compression="zip",
        format=LOG_FORMAT,
        level="INFO",
    )
    logger.add(
        "logs/reservations.log",
        rotation="100 MB",
        retention="30 days",
        compression="zip",
        format=LOG_FORMAT,
        level="INFO",
        filter=lambda record: record["extra"].get("audit") == "reservation",
    )

# Bound logger for admission/release decisions
audit_logger = logger.bind(audit="reservation")

__all__ = ["logger", "audit_logger"]
