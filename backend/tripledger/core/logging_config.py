"""
Logging setup for the application.
"""
import logging
from tripledger.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = None) -> None:
    """Configure root logging from LOG_LEVEL (or an explicit level)."""
    level_name = (level or settings.LOG_LEVEL or "INFO").upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)

    # httpx logs every request at INFO
    if not settings.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)
