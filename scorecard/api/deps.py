import logging
import secrets
from typing import Optional

from fastapi import Header, HTTPException, status

from scorecard.core.config import settings
from scorecard.db.session import get_db  # noqa: F401

logger = logging.getLogger(__name__)


def verify_cron_secret(x_cron_auth: Optional[str] = Header(None, alias="x-cron-auth")) -> None:
    """Only the scheduler may call cron endpoints."""
    if not settings.CRON_SECRET:
        logger.error("CRON_SECRET is not configured; refusing cron request")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server configuration error: CRON_SECRET missing",
        )
    if not x_cron_auth or not secrets.compare_digest(x_cron_auth, settings.CRON_SECRET):
        logger.warning("Unauthorized cron job access attempt")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
