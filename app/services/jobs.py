import logging
from typing import List

from app.core.config import settings
from app.db.session import SessionLocal, session_scope
from app.services.billing import run_monthly_billing
from app.services.promotions import activate_promotions, expire_promotions
from app.utils.scheduler import PeriodicTask

logger = logging.getLogger(__name__)


def build_jobs(session_factory=SessionLocal) -> List[PeriodicTask]:
    """The background jobs started with the application."""

    def promotion_activation() -> None:
        with session_scope(session_factory) as db:
            count = activate_promotions(db)
            if count:
                logger.info("Activated %d promotion(s).", count)

    def promotion_expiry() -> None:
        with session_scope(session_factory) as db:
            count = expire_promotions(db)
            if count:
                logger.info("Expired %d promotion(s).", count)

    def commission_billing() -> None:
        with session_scope(session_factory) as db:
            run_monthly_billing(db)

    return [
        PeriodicTask("promotion-activation", settings.PROMOTION_JOB_INTERVAL_SECONDS, promotion_activation),
        PeriodicTask("promotion-expiry", settings.PROMOTION_JOB_INTERVAL_SECONDS, promotion_expiry),
        PeriodicTask("commission-billing", settings.BILLING_JOB_INTERVAL_SECONDS, commission_billing),
    ]
