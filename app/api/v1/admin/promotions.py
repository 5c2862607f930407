from typing import List, Optional
from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import get_location_manager
from app.models.user import User
from app.models.enums import OfferStatus
from app.models.offer import Promotion
from app.schemas.promotion import (
    PromotionCreate,
    PromotionUpdate,
    Promotion as PromotionSchema,
)
from app.schemas.common import PaginatedResponse
from app.services import promotions as promotion_service
from app.services.authorization import ensure_location_access
from app.services.discounts import get_promotion_or_404
from app.utils.filters import search_params
from app.utils.pagination import paginate

router = APIRouter(prefix="/admin/promotions", tags=["Admin - Promotions"])


@router.get("/", response_model=PaginatedResponse[PromotionSchema])
def search_promotions(
    status: Optional[List[OfferStatus]] = Query(None),
    start_date: Optional[datetime] = Query(None, description="Starts after this time; with end_date, ends between both times"),
    end_date: Optional[datetime] = Query(None, description="Ends before this time; with start_date, ends between both times"),
    title: Optional[str] = Query(None),
    description: Optional[str] = Query(None),
    condition: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    sort_by: str = Query("id"),
    sort_dir: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_location_manager),
):
    params = search_params(
        status=status,
        start_date=start_date,
        end_date=end_date,
        title=title,
        description=description,
        condition=condition,
    )
    query = promotion_service.search_promotions(db, params)
    return paginate(query, Promotion, page, limit, sort_by, sort_dir, serialize=PromotionSchema.model_validate)


@router.get("/{promotion_id}", response_model=PromotionSchema)
def get_promotion(
    promotion_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_location_manager),
):
    return get_promotion_or_404(db, promotion_id)


@router.post("/", response_model=PromotionSchema, status_code=status.HTTP_201_CREATED)
def create_promotion(
    data: PromotionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_location_manager),
):
    """Create an INACTIVE promotion; it turns ACTIVE automatically when its window opens."""
    ensure_location_access(db, current_user, data.location_id)
    return promotion_service.create_promotion(db, data)


@router.put("/", response_model=PromotionSchema)
def update_promotion(
    data: PromotionUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_location_manager),
):
    """Only INACTIVE promotions can be edited."""
    ensure_location_access(db, current_user, get_promotion_or_404(db, data.id).location_id)
    ensure_location_access(db, current_user, data.location_id)
    return promotion_service.update_promotion(db, data)


@router.delete("/{promotion_id}", response_model=PromotionSchema)
def disable_promotion(
    promotion_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_location_manager),
):
    """Soft delete: the promotion is DISABLED, bookings keep their reference."""
    ensure_location_access(db, current_user, get_promotion_or_404(db, promotion_id).location_id)
    return promotion_service.disable_promotion(db, promotion_id)
