import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, ValidationConflictError
from app.models.enums import OfferStatus
from app.models.location import Location
from app.models.offer import Promotion
from app.schemas.promotion import PromotionCreate, PromotionUpdate
from app.services.discounts import get_promotion_or_404
from app.utils.filters import InRule, ContainsRule, RangeRule, build_filter

logger = logging.getLogger(__name__)

# start_date alone: starts after; end_date alone: ends before; both: ends within the range
PROMOTION_FILTERS = (
    InRule("status"),
    RangeRule("start_date", "end_date", "start_date", "end_date"),
    ContainsRule("title"),
    ContainsRule("description"),
    ContainsRule("condition"),
)


def _validate(db: Session, data: PromotionCreate) -> None:
    if data.start_date > data.end_date:
        raise ValidationConflictError("Promotion start date must not be after its end date!")
    if not db.query(Location.id).filter(Location.id == data.location_id).first():
        raise NotFoundError("Location", "id", data.location_id)


def create_promotion(db: Session, data: PromotionCreate) -> Promotion:
    """New promotions start INACTIVE; the activation job opens them when their window starts."""
    _validate(db, data)
    promotion = Promotion(**data.model_dump(), status=OfferStatus.INACTIVE)
    db.add(promotion)
    db.commit()
    db.refresh(promotion)
    logger.info("Promotion %s created for location %s.", promotion.id, promotion.location_id)
    return promotion


def update_promotion(db: Session, data: PromotionUpdate) -> Promotion:
    promotion = get_promotion_or_404(db, data.id)
    if promotion.status != OfferStatus.INACTIVE:
        raise ValidationConflictError("Cannot update this Promotion!")
    _validate(db, data)

    for field, value in data.model_dump(exclude={"id"}).items():
        setattr(promotion, field, value)
    db.commit()
    db.refresh(promotion)
    return promotion


def disable_promotion(db: Session, promotion_id: int) -> Promotion:
    # Bookings keep pointing at the promotion, so it is never deleted
    promotion = get_promotion_or_404(db, promotion_id)
    promotion.status = OfferStatus.DISABLED
    db.commit()
    db.refresh(promotion)
    return promotion


def search_promotions(db: Session, params: Optional[dict] = None):
    return db.query(Promotion).filter(build_filter(Promotion, params, PROMOTION_FILTERS))


# ---------------------------------------------------------------------------
# Scheduled status changes
# ---------------------------------------------------------------------------


def activate_promotions(db: Session, now: Optional[datetime] = None) -> int:
    """
    Flip INACTIVE promotions whose window has opened to ACTIVE.

    Returns the number of promotions activated.
    """
    now = now or datetime.now()
    due = (
        db.query(Promotion)
        .filter(Promotion.status == OfferStatus.INACTIVE, Promotion.start_date <= now)
        .all()
    )
    if not due:
        return 0

    for promotion in due:
        promotion.status = OfferStatus.ACTIVE
    db.commit()
    return len(due)


def expire_promotions(db: Session, now: Optional[datetime] = None) -> int:
    """
    Flip ACTIVE promotions whose window has closed to EXPIRE.

    Returns the number of promotions expired.
    """
    now = now or datetime.now()
    stale = (
        db.query(Promotion)
        .filter(Promotion.status == OfferStatus.ACTIVE, Promotion.end_date <= now)
        .all()
    )
    if not stale:
        return 0

    for promotion in stale:
        promotion.status = OfferStatus.EXPIRE
    db.commit()
    return len(stale)
