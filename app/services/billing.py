"""Monthly commission totals per location admin, pushed to the payment webhook."""

import logging
import math
from datetime import date
from decimal import Decimal
from typing import Dict, Optional

import httpx
from sqlalchemy import extract, func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.booking import LocationBooking
from app.models.enums import BookingStatus, RoleType
from app.models.location import Location
from app.models.user import User

logger = logging.getLogger(__name__)

COMMISSION_WEBHOOK_PATH = "/api/v1/notifications/commission-monthly-payment"


def calculate_monthly_payment(db: Session, admin_id: int, month: int, year: int) -> Decimal:
    """Sum the commission of SUCCESSFUL bookings at the admin's locations for one month."""
    total = (
        db.query(func.coalesce(func.sum(LocationBooking.commission), 0))
        .join(Location, Location.id == LocationBooking.location_id)
        .filter(
            Location.user_id == admin_id,
            LocationBooking.status == BookingStatus.SUCCESSFUL,
            extract("month", LocationBooking.booking_date) == month,
            extract("year", LocationBooking.booking_date) == year,
        )
        .scalar()
    )
    return Decimal(str(total or 0))


def send_webhook_notification(client: httpx.Client, month: int, year: int, total_amount: int) -> None:
    response = client.post(
        COMMISSION_WEBHOOK_PATH,
        json={"month": month, "year": year, "totalAmount": total_amount},
    )
    response.raise_for_status()


def run_monthly_billing(db: Session, client: Optional[httpx.Client] = None, today: Optional[date] = None) -> Dict[int, int]:
    """
    Push the current month's floored commission total for every location admin.

    A failed push is logged and skipped; the remaining admins are still
    processed. Returns ``{admin_id: total}`` for the pushes that succeeded.
    """
    today = today or date.today()
    admin_ids = [
        row.id
        for row in db.query(User.id).filter(User.role == RoleType.LOCATION_ADMIN).order_by(User.id).all()
    ]

    owns_client = client is None
    if owns_client:
        client = httpx.Client(
            base_url=settings.WEBHOOK_URL_PREFIX,
            timeout=settings.WEBHOOK_TIMEOUT_SECONDS,
        )

    sent: Dict[int, int] = {}
    try:
        for admin_id in admin_ids:
            total = math.floor(calculate_monthly_payment(db, admin_id, today.month, today.year))
            try:
                send_webhook_notification(client, today.month, today.year, total)
            except httpx.HTTPError as e:
                logger.warning("Commission push for admin %s failed: %s", admin_id, e)
                continue
            sent[admin_id] = total
    finally:
        if owns_client:
            client.close()

    logger.info("Monthly billing %02d/%d pushed for %d of %d admin(s).", today.month, today.year, len(sent), len(admin_ids))
    return sent
