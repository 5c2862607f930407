from typing import List, Optional
from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import get_current_admin_user, get_location_manager
from app.models.user import User
from app.models.enums import EntityStatus
from app.models.location import Location
from app.schemas.location import LocationListItem, LocationCreate, LocationUpdate, LocationDetail
from app.schemas.common import PaginatedResponse
from app.services import locations as location_service
from app.services.authorization import ensure_location_access
from app.utils.filters import search_params
from app.utils.pagination import paginate

router = APIRouter(prefix="/admin/locations", tags=["Admin - Locations"])


def _serialize_location(location: Location) -> LocationListItem:
    return LocationListItem(
        id=location.id,
        name=location.name,
        address=location.address,
        phone=location.phone,
        status=location.status,
        suggest=bool(location.suggest),
        sale=bool(location.sale),
        brand_name=location.brand.name if location.brand else None,
        full_name=location.user.full_name if location.user else None,
    )


def _serialize_location_detail(location: Location) -> LocationDetail:
    return LocationDetail(
        **_serialize_location(location).model_dump(),
        description=location.description,
        opening_hours=location.opening_hours,
        closing_hours=location.closing_hours,
        user_id=location.user_id,
        brand_id=location.brand_id,
        categories=[lc.category.name for lc in location.location_categories],
        tags=[lt.tag.name for lt in location.location_tags],
    )


@router.get("/", response_model=PaginatedResponse[LocationListItem])
def list_locations(
    status: Optional[List[EntityStatus]] = Query(None),
    suggest: Optional[bool] = Query(None),
    sale: Optional[bool] = Query(None),
    opening_hours: Optional[datetime] = Query(None),
    closing_hours: Optional[datetime] = Query(None),
    name: Optional[str] = Query(None),
    address: Optional[str] = Query(None),
    phone: Optional[str] = Query(None),
    full_name: Optional[str] = Query(None, description="Owner's name (contains)"),
    brand_name: Optional[str] = Query(None),
    category_name: Optional[List[str]] = Query(None),
    tag_name: Optional[List[str]] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    sort_by: str = Query("id"),
    sort_dir: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    params = search_params(
        status=status,
        suggest=suggest,
        sale=sale,
        opening_hours=opening_hours,
        closing_hours=closing_hours,
        name=name,
        address=address,
        phone=phone,
        full_name=full_name,
        brand_name=brand_name,
        category_name=category_name,
        tag_name=tag_name,
    )
    query = location_service.search_locations(db, params)
    return paginate(query, Location, page, limit, sort_by, sort_dir, serialize=_serialize_location)


@router.delete("/{location_id}", response_model=LocationListItem)
def delete_location(
    location_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    """Soft delete: the location is DISABLED and stops accepting bookings."""
    return _serialize_location(location_service.disable_location(db, location_id))


@router.get("/{location_id}", response_model=LocationDetail)
def get_location(
    location_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_location_manager),
):
    ensure_location_access(db, current_user, location_id)
    return _serialize_location_detail(location_service.get_location(db, location_id))


@router.post("/", response_model=LocationDetail, status_code=status.HTTP_201_CREATED)
def create_location(
    data: LocationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    """Register a restaurant for a LOCATION_ADMIN owner. It starts ACTIVE."""
    return _serialize_location_detail(location_service.create_location(db, data))


@router.put("/", response_model=LocationDetail)
def update_location(
    data: LocationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    """Replace the location's details; non-empty `category_ids` / `tag_ids` replace its links."""
    return _serialize_location_detail(location_service.update_location(db, data))
