"""
Promotion and voucher discounts for a booking subtotal.

Both discounts are taken from the same subtotal (never compounded). A booking
carries at most one promotion and at most one voucher; the voucher part is
capped so the two together never exceed the subtotal.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationConflictError
from app.models.enums import DiscountType, OfferStatus
from app.models.offer import Promotion, UserVoucher
from app.models.user import User

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


def _money(value) -> Decimal:
    if value is None:
        return ZERO
    return value if isinstance(value, Decimal) else Decimal(str(value))


def compute_discount(subtotal, discount_type: DiscountType, value, cap=None) -> Decimal:
    """
    Percentage rules take ``value`` percent of the subtotal, limited by ``cap``
    when one is set; fixed rules take ``value``. The result is clamped to
    ``[0, subtotal]``.
    """
    subtotal = _money(subtotal)
    if discount_type == DiscountType.PERCENTAGE:
        discount = subtotal * _money(value) / Decimal(100)
        if cap is not None:
            discount = min(discount, _money(cap))
    else:
        discount = _money(value)
    discount = max(ZERO, min(discount, subtotal))
    return discount.quantize(CENT, rounding=ROUND_HALF_UP)


def _within(start: datetime, end: datetime, moment: datetime) -> bool:
    return start <= moment <= end


@dataclass
class DiscountResult:
    promotion: Optional[Promotion] = None
    user_voucher: Optional[UserVoucher] = None
    promotion_discount: Decimal = ZERO
    voucher_discount: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.promotion_discount + self.voucher_discount


# ---------------------------------------------------------------------------
# Promotion
# ---------------------------------------------------------------------------


def get_promotion_or_404(db: Session, promotion_id: int) -> Promotion:
    promotion = db.query(Promotion).filter(Promotion.id == promotion_id).first()
    if not promotion:
        raise NotFoundError("Promotion", "id", promotion_id)
    return promotion


def apply_promotion(
    promotion: Promotion,
    subtotal,
    guest_count: int,
    booking_date: date,
    booking_time: time,
    location_id: Optional[int] = None,
) -> Decimal:
    """Validate promotion eligibility for a booking and return its discount."""
    subtotal = _money(subtotal)

    if promotion.status != OfferStatus.ACTIVE:
        raise ValidationConflictError("This promotion is not active!")
    if not _within(promotion.start_date, promotion.end_date, datetime.combine(booking_date, booking_time)):
        raise ValidationConflictError("This promotion is not valid for the selected booking time!")
    if location_id is not None and promotion.location_id != location_id:
        raise ValidationConflictError("This promotion is not available for this restaurant!")
    if promotion.min_order_amount is not None and subtotal < _money(promotion.min_order_amount):
        raise ValidationConflictError(
            f"Order must be at least {promotion.min_order_amount} to use this promotion!"
        )
    if promotion.min_guest is not None and guest_count < promotion.min_guest:
        raise ValidationConflictError(
            f"This promotion requires at least {promotion.min_guest} guests!"
        )

    return compute_discount(subtotal, promotion.discount_type, promotion.discount_value, promotion.max_discount)


# ---------------------------------------------------------------------------
# Voucher
# ---------------------------------------------------------------------------


def get_user_voucher_or_404(db: Session, user_id: int, voucher_id: int, lock: bool = False) -> UserVoucher:
    query = (
        db.query(UserVoucher)
        .options(joinedload(UserVoucher.voucher))
        .filter(UserVoucher.user_id == user_id, UserVoucher.voucher_id == voucher_id)
    )
    if lock:
        query = query.with_for_update(of=UserVoucher)
    user_voucher = query.first()
    if not user_voucher:
        raise NotFoundError("Voucher", "id", voucher_id)
    return user_voucher


def apply_voucher(
    user_voucher: UserVoucher,
    subtotal,
    item_count: int,
    now: Optional[datetime] = None,
    requires_food: Optional[bool] = None,
) -> Decimal:
    """Validate that the holder may redeem the voucher now and return its discount."""
    voucher = user_voucher.voucher
    now = now or datetime.now()
    if requires_food is None:
        requires_food = settings.VOUCHER_REQUIRES_FOOD

    if user_voucher.quantity_available <= 0:
        raise ValidationConflictError("You have no remaining uses of this voucher!")
    if voucher.status != OfferStatus.ACTIVE:
        raise ValidationConflictError("This voucher is not active!")
    if not _within(voucher.start_date, voucher.end_date, now):
        raise ValidationConflictError("This voucher is not valid at this time!")
    if requires_food and voucher.discount_type == DiscountType.FIXED and item_count == 0:
        raise ValidationConflictError("Please pre-order food to use this voucher!")

    return compute_discount(subtotal, voucher.discount_type, voucher.discount_value, voucher.max_discount)


def redeem_voucher(db: Session, user_voucher: UserVoucher) -> None:
    """
    Take one use off the holder's quantity.

    The decrement is a conditional UPDATE, so two concurrent redemptions of
    the last use cannot both succeed.
    """
    updated = (
        db.query(UserVoucher)
        .filter(UserVoucher.id == user_voucher.id, UserVoucher.quantity_available > 0)
        .update(
            {UserVoucher.quantity_available: UserVoucher.quantity_available - 1},
            synchronize_session="fetch",
        )
    )
    if updated != 1:
        raise ValidationConflictError("You have no remaining uses of this voucher!")


# ---------------------------------------------------------------------------
# Combined
# ---------------------------------------------------------------------------


def apply_discounts(
    db: Session,
    user: User,
    subtotal,
    promotion_id: Optional[int],
    voucher_id: Optional[int],
    guest_count: int,
    booking_date: date,
    booking_time: time,
    location_id: Optional[int] = None,
    item_count: int = 0,
    now: Optional[datetime] = None,
) -> DiscountResult:
    """
    Resolve and apply the optional promotion and voucher for one booking.

    Redeeming the voucher happens inside the caller's transaction; nothing is
    committed here.
    """
    subtotal = _money(subtotal)
    result = DiscountResult()

    if promotion_id:
        result.promotion = get_promotion_or_404(db, promotion_id)
        result.promotion_discount = apply_promotion(
            result.promotion, subtotal, guest_count, booking_date, booking_time, location_id
        )

    if voucher_id:
        user_voucher = get_user_voucher_or_404(db, user.id, voucher_id, lock=True)
        discount = apply_voucher(user_voucher, subtotal, item_count, now=now)
        result.voucher_discount = min(discount, subtotal - result.promotion_discount)
        redeem_voucher(db, user_voucher)
        result.user_voucher = user_voucher

    return result


def check_promotion(db: Session, promotion_id: int, subtotal, guest_count: int, booking_date: date, booking_time: time) -> Decimal:
    """Preview a promotion's discount without touching any state."""
    return apply_promotion(get_promotion_or_404(db, promotion_id), subtotal, guest_count, booking_date, booking_time)


def check_voucher(db: Session, user: User, voucher_id: int, subtotal, item_count: int) -> Decimal:
    """Preview a voucher's discount for the caller without redeeming it."""
    return apply_voucher(get_user_voucher_or_404(db, user.id, voucher_id), subtotal, item_count)
