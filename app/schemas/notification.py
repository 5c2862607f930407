from typing import Optional
from pydantic import BaseModel
from datetime import datetime

from app.models.enums import EntityStatus


# Notification: Create (POST /admin/notifications)
# user_id == 0 broadcasts to every user whose role matches recipient_type
class NotificationCreate(BaseModel):
    user_id: int = 0
    recipient_type: str
    notification_type: str
    title: str
    summary: str
    content: str
    image: Optional[str] = None


class Notification(BaseModel):
    id: int
    user_id: int
    full_name: Optional[str] = None
    recipient_type: str
    notification_type: str
    title: str
    summary: str
    content: str
    image: Optional[str] = None
    status: EntityStatus
    send_date: datetime

    class Config:
        from_attributes = True


# Notification: Update (PUT /admin/notifications); the recipient is fixed once sent
class NotificationUpdate(BaseModel):
    id: int
    recipient_type: str
    notification_type: str
    title: str
    summary: str
    content: str
    image: Optional[str] = None
