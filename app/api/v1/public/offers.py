from datetime import date, time
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import get_current_user
from app.models.user import User
from app.schemas.common import DiscountCheck
from app.services.discounts import check_promotion, check_voucher

promotion_router = APIRouter(prefix="/promotions", tags=["Offers"])
voucher_router = APIRouter(prefix="/vouchers", tags=["Offers"])


@promotion_router.get("/{promotion_id}/check", response_model=DiscountCheck)
def check_promotion_discount(
    promotion_id: int,
    subtotal: Decimal = Query(..., ge=0),
    number_of_guest: int = Query(1, ge=1),
    booking_date: date = Query(...),
    booking_time: time = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Preview the discount a promotion would give; fails with the same reasons booking would."""
    discount = check_promotion(db, promotion_id, subtotal, number_of_guest, booking_date, booking_time)
    return DiscountCheck(id=promotion_id, subtotal=float(subtotal), discounted_value=float(discount))


@voucher_router.get("/{voucher_id}/check", response_model=DiscountCheck)
def check_voucher_discount(
    voucher_id: int,
    subtotal: Decimal = Query(..., ge=0),
    item_count: int = Query(0, ge=0, description="Number of pre-ordered dishes"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Preview one of your vouchers without redeeming it."""
    discount = check_voucher(db, current_user, voucher_id, subtotal, item_count)
    return DiscountCheck(id=voucher_id, subtotal=float(subtotal), discounted_value=float(discount))
