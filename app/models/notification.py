from datetime import datetime

from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Text, Enum as SAEnum
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.models.enums import EntityStatus


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    recipient_type = Column(String(50), nullable=False)  # USER, LOCATION_ADMIN, ...
    notification_type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    summary = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    image = Column(Text, nullable=True)
    status = Column(SAEnum(EntityStatus, native_enum=False), nullable=False, default=EntityStatus.ACTIVE, index=True)
    send_date = Column(DateTime, nullable=False, default=datetime.now, index=True)

    user = relationship("User", back_populates="notifications")
