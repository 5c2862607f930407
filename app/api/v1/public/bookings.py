from typing import List, Optional
from datetime import date, time

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import get_current_user, get_notifier
from app.core.exceptions import NotFoundError
from app.models.user import User
from app.models.booking import LocationBooking
from app.models.enums import BookingStatus
from app.schemas.booking import (
    BookingCreate,
    Booking as BookingSchema,
    FoodBookingResponse,
)
from app.schemas.common import PaginatedResponse
from app.services import bookings as booking_service
from app.utils.filters import search_params
from app.utils.pagination import paginate

router = APIRouter(prefix="/bookings", tags=["Bookings"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def booking_filters(
    status: Optional[List[BookingStatus]] = Query(None, description="One or more of PENDING, CONFIRMED, SUCCESSFUL, CANCELLED"),
    start_date: Optional[date] = Query(None, description="Booked after this date (YYYY-MM-DD); with end_date, on or between both dates"),
    end_date: Optional[date] = Query(None, description="Booked before this date (YYYY-MM-DD); with start_date, on or between both dates"),
    start_time: Optional[time] = Query(None),
    end_time: Optional[time] = Query(None),
    start_number_of_guest: Optional[int] = Query(None, ge=0),
    end_number_of_guest: Optional[int] = Query(None, ge=0),
    name: Optional[str] = Query(None),
    address: Optional[str] = Query(None),
    phone: Optional[str] = Query(None),
) -> dict:
    """Booking search parameters shared by every booking list endpoint."""
    return search_params(
        status=status,
        start_date=start_date,
        end_date=end_date,
        start_time=start_time,
        end_time=end_time,
        start_number_of_guest=start_number_of_guest,
        end_number_of_guest=end_number_of_guest,
        name=name,
        address=address,
        phone=phone,
    )


def serialize_booking(booking: LocationBooking) -> BookingSchema:
    """Convert a LocationBooking ORM object to its schema representation."""
    foods_out = [
        FoodBookingResponse(
            food_id=fb.food_id,
            food_name=fb.food.name if fb.food else "",
            quantity=fb.quantity,
            amount=fb.amount,
        )
        for fb in booking.food_bookings
    ]

    return BookingSchema(
        id=booking.id,
        name=booking.name,
        address=booking.address,
        phone=booking.phone,
        booking_date=booking.booking_date,
        booking_time=booking.booking_time,
        number_of_adult=booking.number_of_adult,
        number_of_children=booking.number_of_children,
        number_of_guest=booking.number_of_guest,
        subtotal=booking.subtotal,
        promotion_discount=booking.promotion_discount,
        voucher_discount=booking.voucher_discount,
        amount=booking.amount,
        commission=booking.commission,
        status=booking.status,
        promotion_id=booking.promotion_id,
        voucher_id=booking.voucher_id,
        free_item=booking.promotion.free_item if booking.promotion else None,
        user_id=booking.user_id,
        location_id=booking.location_id,
        location_name=booking.location.name if booking.location else None,
        created_at=booking.created_at,
        food_bookings=foods_out,
    )


# ---------------------------------------------------------------------------
# POST /bookings: create a booking (PENDING)
# ---------------------------------------------------------------------------


@router.post("/", response_model=BookingSchema, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    notifier=Depends(get_notifier),
):
    """
    Book a table, optionally pre-ordering food.

    - `booking_time` must fall inside the restaurant's working hours for that weekday.
    - `promotion_id` / `voucher_id` are optional and can be combined; both
      discounts are taken from the same food subtotal.
    - The booking starts as **PENDING** until the restaurant approves it.
    """
    booking = booking_service.create_booking(db, current_user, data, notifier=notifier)
    return serialize_booking(booking)


# ---------------------------------------------------------------------------
# GET /bookings: list current user's bookings
# ---------------------------------------------------------------------------


@router.get("/", response_model=PaginatedResponse[BookingSchema])
def list_my_bookings(
    filters: dict = Depends(booking_filters),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    sort_by: str = Query("id"),
    sort_dir: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Return the authenticated user's bookings, newest first by default."""
    query = booking_service.list_by_user(db, current_user, filters)
    return paginate(query, LocationBooking, page, limit, sort_by, sort_dir, serialize=serialize_booking)


# ---------------------------------------------------------------------------
# GET /bookings/{id}: single booking detail
# ---------------------------------------------------------------------------


@router.get("/{booking_id}", response_model=BookingSchema)
def get_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Return a single booking. Only the owning user can access it."""
    booking = booking_service.get_booking(db, booking_id)
    if booking.user_id != current_user.id:
        raise NotFoundError("Booking", "id", booking_id)
    return serialize_booking(booking)


# ---------------------------------------------------------------------------
# PATCH /bookings/{id}/cancel
# ---------------------------------------------------------------------------


@router.patch("/{booking_id}/cancel", response_model=BookingSchema)
def cancel_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Cancel one of your own PENDING or CONFIRMED bookings."""
    booking = booking_service.get_booking(db, booking_id)
    if booking.user_id != current_user.id:
        raise NotFoundError("Booking", "id", booking_id)
    return serialize_booking(booking_service.cancel_booking(db, booking_id, current_user))
