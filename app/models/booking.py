from sqlalchemy import Column, String, DateTime, func, DECIMAL, Integer, ForeignKey, Text, Date, Time, Enum as SAEnum
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.models.enums import BookingStatus


class LocationBooking(Base):
    __tablename__ = "location_bookings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    address = Column(Text, nullable=True)
    phone = Column(String(20), nullable=False)
    booking_date = Column(Date, nullable=False, index=True)
    booking_time = Column(Time, nullable=False)
    number_of_adult = Column(Integer, nullable=False, default=1)
    number_of_children = Column(Integer, nullable=False, default=0)
    number_of_guest = Column(Integer, nullable=False, default=1)  # adults + children
    subtotal = Column(DECIMAL(10, 2), nullable=False, default=0)
    promotion_discount = Column(DECIMAL(10, 2), nullable=False, default=0)
    voucher_discount = Column(DECIMAL(10, 2), nullable=False, default=0)
    amount = Column(DECIMAL(10, 2), nullable=False, default=0)
    commission = Column(DECIMAL(10, 2), nullable=False, default=0)
    status = Column(SAEnum(BookingStatus, native_enum=False), nullable=False, default=BookingStatus.PENDING, index=True)
    promotion_id = Column(Integer, ForeignKey("promotions.id"), nullable=True, index=True)
    voucher_id = Column(Integer, ForeignKey("vouchers.id"), nullable=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="bookings")
    location = relationship("Location", back_populates="bookings")
    promotion = relationship("Promotion", back_populates="bookings")
    voucher = relationship("Voucher", back_populates="bookings")
    food_bookings = relationship("FoodBooking", back_populates="booking", cascade="all, delete-orphan")


class FoodBooking(Base):
    __tablename__ = "food_bookings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(Integer, ForeignKey("location_bookings.id"), nullable=False, index=True)
    food_id = Column(Integer, ForeignKey("foods.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    amount = Column(DECIMAL(10, 2), nullable=False)  # unit price x quantity

    booking = relationship("LocationBooking", back_populates="food_bookings")
    food = relationship("Food")
