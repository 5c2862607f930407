from sqlalchemy import Column, String, Integer, DECIMAL, ForeignKey, Text, Enum as SAEnum
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.models.enums import EntityStatus


class Food(Base):
    __tablename__ = "foods"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(DECIMAL(10, 2), nullable=False)
    status = Column(SAEnum(EntityStatus, native_enum=False), nullable=False, default=EntityStatus.ACTIVE)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False, index=True)

    location = relationship("Location", back_populates="foods")
