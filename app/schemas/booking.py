from typing import Annotated, Optional, List
from pydantic import BaseModel, Field, field_validator
from decimal import Decimal
from datetime import date, datetime, time

from app.models.enums import BookingStatus


# One pre-ordered dish inside a booking request
class FoodBookingRequest(BaseModel):
    food_id: int
    quantity: Annotated[int, Field(ge=1)] = 1


# Booking: Create (POST /bookings)
class BookingCreate(BaseModel):
    location_id: int
    name: str
    address: Optional[str] = None
    phone: str
    booking_date: date
    booking_time: time
    number_of_adult: Annotated[int, Field(ge=1)] = 1
    number_of_children: Annotated[int, Field(ge=0)] = 0
    food_bookings: List[FoodBookingRequest] = []
    promotion_id: Optional[int] = None
    voucher_id: Optional[int] = None

    @field_validator("promotion_id", "voucher_id", mode="before")
    @classmethod
    def parse_zero_to_none(cls, v):
        # Clients send 0 / "" for "no offer"
        if v in (0, "", "0"):
            return None
        return v


class FoodBookingResponse(BaseModel):
    food_id: int
    food_name: str
    quantity: int
    amount: Decimal


# Booking: Full response
class Booking(BaseModel):
    id: int
    name: str
    address: Optional[str] = None
    phone: str
    booking_date: date
    booking_time: time
    number_of_adult: int
    number_of_children: int
    number_of_guest: int
    subtotal: Decimal
    promotion_discount: Decimal
    voucher_discount: Decimal
    amount: Decimal
    commission: Decimal
    status: BookingStatus
    promotion_id: Optional[int] = None
    voucher_id: Optional[int] = None
    free_item: Optional[str] = None
    user_id: int
    location_id: int
    location_name: Optional[str] = None
    created_at: Optional[datetime] = None
    food_bookings: List[FoodBookingResponse] = []

    class Config:
        from_attributes = True
