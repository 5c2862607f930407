from sqlalchemy import Column, String, Integer, DateTime, func, Enum as SAEnum
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.models.enums import EntityStatus, RoleType


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_name = Column(String(100), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    phone = Column(String(20), nullable=True)
    role = Column(SAEnum(RoleType, native_enum=False), nullable=False, default=RoleType.USER, index=True)
    status = Column(SAEnum(EntityStatus, native_enum=False), nullable=False, default=EntityStatus.ACTIVE)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    locations = relationship("Location", back_populates="user")
    bookings = relationship("LocationBooking", back_populates="user")
    user_vouchers = relationship("UserVoucher", back_populates="user")
    notifications = relationship("Notification", back_populates="user")
