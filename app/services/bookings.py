"""
Location booking workflow.

``create_booking`` runs as one unit of work: the booking shell is flushed to
get an id, line items and discounts are attached, and a single commit makes
everything (including the voucher redemption) visible. Any failure rolls the
whole thing back. Mail goes out only after the commit and never undoes it.

Status lifecycle::

    PENDING -> CONFIRMED -> SUCCESSFUL
    PENDING -> CANCELLED
    CONFIRMED -> CANCELLED
"""

import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from app.core.config import settings
from app.core.exceptions import (
    AuthorizationDeniedError,
    BookingStateError,
    NotFoundError,
    ValidationConflictError,
)
from app.models.booking import LocationBooking, FoodBooking
from app.models.enums import BookingStatus, DayInWeek, EntityStatus
from app.models.food import Food
from app.models.location import Location, WorkingHour
from app.models.user import User
from app.schemas.booking import BookingCreate
from app.services.authorization import ensure_location_access, is_authorized_for_location
from app.services.discounts import apply_discounts
from app.services.notifications import (
    booking_confirmed_message,
    booking_pending_message,
    notify_safely,
)
from app.utils.filters import InRule, ContainsRule, RangeRule, build_filter

logger = logging.getLogger(__name__)

BOOKING_FILTERS = (
    InRule("status"),
    RangeRule("start_date", "end_date", "booking_date"),
    RangeRule("start_time", "end_time", "booking_time"),
    RangeRule("start_number_of_guest", "end_number_of_guest", "number_of_guest"),
    ContainsRule("name"),
    ContainsRule("address"),
    ContainsRule("phone"),
)

ALLOWED_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.SUCCESSFUL, BookingStatus.CANCELLED},
    BookingStatus.SUCCESSFUL: set(),
    BookingStatus.CANCELLED: set(),
}


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, set())


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _booking_query(db: Session):
    return db.query(LocationBooking).options(
        joinedload(LocationBooking.location),
        joinedload(LocationBooking.user),
        joinedload(LocationBooking.promotion),
        joinedload(LocationBooking.food_bookings).joinedload(FoodBooking.food),
    )


def get_booking(db: Session, booking_id: int) -> LocationBooking:
    booking = _booking_query(db).filter(LocationBooking.id == booking_id).first()
    if not booking:
        raise NotFoundError("Booking", "id", booking_id)
    return booking


def _ensure_open_location(db: Session, location_id: int) -> Location:
    location = db.query(Location).filter(Location.id == location_id).first()
    if not location:
        raise NotFoundError("Location", "id", location_id)
    if location.status != EntityStatus.ACTIVE:
        raise ValidationConflictError("Restaurant is not available for booking!")
    return location


def _ensure_within_working_hours(db: Session, location: Location, data: BookingCreate) -> None:
    day = DayInWeek.of(data.booking_date)
    working_hour = (
        db.query(WorkingHour)
        .filter(WorkingHour.location_id == location.id, WorkingHour.day == day)
        .first()
    )
    if not working_hour:
        raise NotFoundError("WorkingHour", "day", day.value)
    if data.booking_time < working_hour.start_time or data.booking_time > working_hour.end_time:
        raise ValidationConflictError("Please book another time!")


def _ensure_not_in_past(data: BookingCreate, now: datetime) -> None:
    today = now.date()
    if data.booking_date < today or (
        data.booking_date == today and data.booking_time < now.time()
    ):
        raise ValidationConflictError("You cannot book in the past!")


def _add_food_lines(db: Session, booking: LocationBooking, location: Location, data: BookingCreate) -> Decimal:
    """Attach one FoodBooking per requested dish and return the subtotal."""
    subtotal = Decimal("0.00")
    for item in data.food_bookings:
        food = db.query(Food).filter(Food.id == item.food_id).first()
        if not food:
            raise NotFoundError("Food", "id", item.food_id)
        if food.location_id != location.id:
            raise ValidationConflictError(f"{food.name} is not available for this restaurant!")
        if food.status != EntityStatus.ACTIVE:
            raise ValidationConflictError(f"{food.name} is not available to pre-order!")

        line_amount = Decimal(str(food.price)) * item.quantity
        booking.food_bookings.append(FoodBooking(food=food, quantity=item.quantity, amount=line_amount))
        subtotal += line_amount
    return subtotal


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


def create_booking(
    db: Session,
    user: User,
    data: BookingCreate,
    notifier=None,
    now: Optional[datetime] = None,
) -> LocationBooking:
    """
    Validate and persist a new PENDING booking.

    Checks run in order and the first failure aborts: location exists and is
    active, time inside that weekday's working hours, date/time not in the
    past, each dish belongs to the location and is active, promotion and
    voucher are eligible.
    """
    now = now or datetime.now()

    try:
        location = _ensure_open_location(db, data.location_id)
        _ensure_within_working_hours(db, location, data)
        _ensure_not_in_past(data, now)

        booking = LocationBooking(
            name=data.name,
            address=data.address,
            phone=data.phone,
            booking_date=data.booking_date,
            booking_time=data.booking_time,
            number_of_adult=data.number_of_adult,
            number_of_children=data.number_of_children,
            number_of_guest=data.number_of_adult + data.number_of_children,
            status=BookingStatus.PENDING,
            user=user,
            location=location,
        )
        db.add(booking)
        db.flush()  # get booking.id

        subtotal = _add_food_lines(db, booking, location, data)

        discounts = apply_discounts(
            db,
            user,
            subtotal,
            promotion_id=data.promotion_id,
            voucher_id=data.voucher_id,
            guest_count=booking.number_of_guest,
            booking_date=data.booking_date,
            booking_time=data.booking_time,
            location_id=location.id,
            item_count=len(booking.food_bookings),
            now=now,
        )
        if discounts.promotion:
            # back_populates registers the booking on promotion.bookings
            booking.promotion = discounts.promotion
        if discounts.user_voucher:
            booking.voucher = discounts.user_voucher.voucher

        booking.subtotal = subtotal
        booking.promotion_discount = discounts.promotion_discount
        booking.voucher_discount = discounts.voucher_discount
        booking.amount = subtotal - discounts.total

        db.commit()
    except Exception:
        db.rollback()
        raise

    booking = get_booking(db, booking.id)
    logger.info(
        "Booking %s created for user %s at location %s (amount %s).",
        booking.id, user.id, booking.location_id, booking.amount,
    )

    notify_safely(notifier, user.email, *booking_pending_message(booking))
    return booking


# ---------------------------------------------------------------------------
# Status transitions
# ---------------------------------------------------------------------------


def _transition(db: Session, booking: LocationBooking, target: BookingStatus, message: str) -> LocationBooking:
    if not can_transition(booking.status, target):
        raise BookingStateError(message)
    previous = booking.status
    booking.status = target
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(booking)
    logger.info("Booking %s moved %s -> %s.", booking.id, previous.value, target.value)
    return booking


def approve_booking(db: Session, booking_id: int, actor: User, notifier=None) -> LocationBooking:
    booking = get_booking(db, booking_id)
    ensure_location_access(db, actor, booking.location_id)

    booking = _transition(
        db, booking, BookingStatus.CONFIRMED,
        "Only pending bookings are able to be approved",
    )
    notify_safely(notifier, booking.user.email, *booking_confirmed_message(booking))
    return booking


def cancel_booking(db: Session, booking_id: int, actor: User) -> LocationBooking:
    """Cancel from PENDING or CONFIRMED. Allowed for the guest and the location's managers."""
    booking = get_booking(db, booking_id)
    if booking.user_id != actor.id and not is_authorized_for_location(db, actor, booking.location_id):
        raise AuthorizationDeniedError("You are not allowed to cancel this booking")

    return _transition(db, booking, BookingStatus.CANCELLED, "This booking cannot be cancelled!")


def complete_booking(db: Session, booking_id: int, actor: User) -> LocationBooking:
    """Mark a confirmed booking as served and record the platform commission."""
    booking = get_booking(db, booking_id)
    ensure_location_access(db, actor, booking.location_id)

    if can_transition(booking.status, BookingStatus.SUCCESSFUL):
        booking.commission = (
            Decimal(str(booking.amount)) * settings.COMMISSION_RATE
        ).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return _transition(db, booking, BookingStatus.SUCCESSFUL, "Only confirmed bookings can be completed")


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def list_all(db: Session, params: Optional[dict] = None):
    return _booking_query(db).filter(build_filter(LocationBooking, params, BOOKING_FILTERS))


def list_by_location(db: Session, actor: User, location_id: int, params: Optional[dict] = None):
    # Denial is reported as "not found" so other owners' locations stay invisible
    if not is_authorized_for_location(db, actor, location_id):
        raise NotFoundError("Location", "id", location_id)
    return list_all(db, params).filter(LocationBooking.location_id == location_id)


def list_by_user(db: Session, user: User, params: Optional[dict] = None):
    return list_all(db, params).filter(LocationBooking.user_id == user.id)
