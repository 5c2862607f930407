from sqlalchemy import Column, String, Boolean, DateTime, Integer, ForeignKey, Text, Time, Enum as SAEnum, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.models.enums import EntityStatus, DayInWeek


class Brand(Base):
    __tablename__ = "brands"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)

    locations = relationship("Location", back_populates="brand")


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)


class Location(Base):
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    address = Column(Text, nullable=True)
    phone = Column(String(20), nullable=True)
    description = Column(Text, nullable=True)
    status = Column(SAEnum(EntityStatus, native_enum=False), nullable=False, default=EntityStatus.ACTIVE, index=True)
    suggest = Column(Boolean, default=False)
    sale = Column(Boolean, default=False)
    opening_hours = Column(DateTime, nullable=True)
    closing_hours = Column(DateTime, nullable=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # location admin
    brand_id = Column(Integer, ForeignKey("brands.id"), nullable=True)

    # Relationships
    user = relationship("User", back_populates="locations")
    brand = relationship("Brand", back_populates="locations")
    location_categories = relationship("LocationCategory", back_populates="location", cascade="all, delete-orphan")
    location_tags = relationship("LocationTag", back_populates="location", cascade="all, delete-orphan")
    working_hours = relationship("WorkingHour", back_populates="location", cascade="all, delete-orphan")
    foods = relationship("Food", back_populates="location")
    promotions = relationship("Promotion", back_populates="location")
    bookings = relationship("LocationBooking", back_populates="location")


class LocationCategory(Base):
    __tablename__ = "location_categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)

    location = relationship("Location", back_populates="location_categories")
    category = relationship("Category")


class LocationTag(Base):
    __tablename__ = "location_tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False, index=True)
    tag_id = Column(Integer, ForeignKey("tags.id"), nullable=False)

    location = relationship("Location", back_populates="location_tags")
    tag = relationship("Tag")


class WorkingHour(Base):
    __tablename__ = "working_hours"
    __table_args__ = (UniqueConstraint("location_id", "day", name="uq_working_hour_location_day"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False, index=True)
    day = Column(SAEnum(DayInWeek, native_enum=False), nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    location = relationship("Location", back_populates="working_hours")
