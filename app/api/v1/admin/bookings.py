from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import get_current_admin_user, get_location_manager, get_notifier
from app.api.v1.public.bookings import booking_filters, serialize_booking
from app.models.user import User
from app.models.booking import LocationBooking
from app.schemas.booking import Booking as BookingSchema
from app.schemas.common import PaginatedResponse
from app.services import bookings as booking_service
from app.services.authorization import ensure_location_access
from app.utils.pagination import paginate

router = APIRouter(prefix="/admin/bookings", tags=["Admin - Bookings"])
location_bookings_router = APIRouter(prefix="/admin/locations", tags=["Admin - Bookings"])


@router.get("/", response_model=PaginatedResponse[BookingSchema])
def list_all_bookings(
    filters: dict = Depends(booking_filters),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    sort_by: str = Query("id"),
    sort_dir: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    """Return bookings across every location. Supports the shared booking filters."""
    query = booking_service.list_all(db, filters)
    return paginate(query, LocationBooking, page, limit, sort_by, sort_dir, serialize=serialize_booking)


@location_bookings_router.get("/{location_id}/bookings", response_model=PaginatedResponse[BookingSchema])
def list_location_bookings(
    location_id: int,
    filters: dict = Depends(booking_filters),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    sort_by: str = Query("id"),
    sort_dir: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_location_manager),
):
    """Bookings of one location. Location admins only see their own locations."""
    query = booking_service.list_by_location(db, current_user, location_id, filters)
    return paginate(query, LocationBooking, page, limit, sort_by, sort_dir, serialize=serialize_booking)


@router.get("/{booking_id}", response_model=BookingSchema)
def get_booking_detail(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_location_manager),
):
    booking = booking_service.get_booking(db, booking_id)
    ensure_location_access(db, current_user, booking.location_id)
    return serialize_booking(booking)


@router.patch("/{booking_id}/approve", response_model=BookingSchema)
def approve_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_location_manager),
    notifier=Depends(get_notifier),
):
    """PENDING → CONFIRMED. The guest is emailed once the change is saved."""
    booking = booking_service.approve_booking(db, booking_id, current_user, notifier=notifier)
    return serialize_booking(booking)


@router.patch("/{booking_id}/cancel", response_model=BookingSchema)
def cancel_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_location_manager),
):
    """PENDING or CONFIRMED → CANCELLED."""
    return serialize_booking(booking_service.cancel_booking(db, booking_id, current_user))


@router.patch("/{booking_id}/complete", response_model=BookingSchema)
def complete_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_location_manager),
):
    """CONFIRMED → SUCCESSFUL. Records the commission billed to the location."""
    return serialize_booking(booking_service.complete_booking(db, booking_id, current_user))
