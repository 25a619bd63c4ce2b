import logging
import sys

from scorecard.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def configure_logging(level: str = None) -> None:
    """Configure root logging once for the API process and Celery workers."""
    global _configured
    if _configured:
        return
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    _configured = True
