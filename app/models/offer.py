from sqlalchemy import Column, String, Integer, DECIMAL, DateTime, ForeignKey, Text, Enum as SAEnum, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.models.enums import OfferStatus, DiscountType


class Promotion(Base):
    __tablename__ = "promotions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    condition = Column(Text, nullable=True)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False, index=True)
    start_date = Column(DateTime, nullable=False, index=True)
    end_date = Column(DateTime, nullable=False, index=True)
    discount_type = Column(SAEnum(DiscountType, native_enum=False), nullable=False)
    discount_value = Column(DECIMAL(10, 2), nullable=False)  # percent for PERCENTAGE, money for FIXED
    max_discount = Column(DECIMAL(10, 2), nullable=True)
    min_order_amount = Column(DECIMAL(10, 2), nullable=True)
    min_guest = Column(Integer, nullable=True)
    free_item = Column(String(255), nullable=True)
    status = Column(SAEnum(OfferStatus, native_enum=False), nullable=False, default=OfferStatus.INACTIVE, index=True)

    # Relationships
    location = relationship("Location", back_populates="promotions")
    bookings = relationship("LocationBooking", back_populates="promotion")


class Voucher(Base):
    __tablename__ = "vouchers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(50), unique=True, nullable=False, index=True)
    title = Column(String(255), nullable=False)
    discount_type = Column(SAEnum(DiscountType, native_enum=False), nullable=False)
    discount_value = Column(DECIMAL(10, 2), nullable=False)
    max_discount = Column(DECIMAL(10, 2), nullable=True)
    quantity = Column(Integer, nullable=False, default=0)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    status = Column(SAEnum(OfferStatus, native_enum=False), nullable=False, default=OfferStatus.ACTIVE, index=True)

    # Relationships
    user_vouchers = relationship("UserVoucher", back_populates="voucher")
    bookings = relationship("LocationBooking", back_populates="voucher")


class UserVoucher(Base):
    __tablename__ = "user_vouchers"
    __table_args__ = (
        UniqueConstraint("user_id", "voucher_id", name="uq_user_voucher"),
        CheckConstraint("quantity_available >= 0", name="ck_user_voucher_quantity"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    voucher_id = Column(Integer, ForeignKey("vouchers.id"), nullable=False, index=True)
    quantity_available = Column(Integer, nullable=False, default=1)

    user = relationship("User", back_populates="user_vouchers")
    voucher = relationship("Voucher", back_populates="user_vouchers")
