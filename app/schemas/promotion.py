from typing import Annotated, Optional
from pydantic import BaseModel, Field
from decimal import Decimal
from datetime import datetime

from app.models.enums import DiscountType, OfferStatus


# Promotion: Create / Update (POST, PUT /admin/promotions)
class PromotionCreate(BaseModel):
    title: str
    description: Optional[str] = None
    condition: Optional[str] = None
    location_id: int
    start_date: datetime
    end_date: datetime
    discount_type: DiscountType
    discount_value: Annotated[Decimal, Field(ge=0)]
    max_discount: Optional[Annotated[Decimal, Field(ge=0)]] = None
    min_order_amount: Optional[Annotated[Decimal, Field(ge=0)]] = None
    min_guest: Optional[Annotated[int, Field(ge=0)]] = None
    free_item: Optional[str] = None


class PromotionUpdate(PromotionCreate):
    id: int


class Promotion(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    condition: Optional[str] = None
    location_id: int
    start_date: datetime
    end_date: datetime
    discount_type: DiscountType
    discount_value: Decimal
    max_discount: Optional[Decimal] = None
    min_order_amount: Optional[Decimal] = None
    min_guest: Optional[int] = None
    free_item: Optional[str] = None
    status: OfferStatus

    class Config:
        from_attributes = True
