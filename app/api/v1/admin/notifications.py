from typing import List, Optional
from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import get_current_admin_user
from app.models.user import User
from app.models.enums import EntityStatus
from app.models.notification import Notification
from app.schemas.notification import NotificationCreate, NotificationUpdate, Notification as NotificationSchema
from app.schemas.common import PaginatedResponse
from app.services import notifications as notification_service
from app.utils.filters import search_params
from app.utils.pagination import paginate

router = APIRouter(prefix="/admin/notifications", tags=["Admin - Notifications"])


def _serialize_notification(notification: Notification) -> NotificationSchema:
    out = NotificationSchema.model_validate(notification)
    out.full_name = notification.user.full_name if notification.user else None
    return out


@router.post("/", response_model=List[NotificationSchema], status_code=status.HTTP_201_CREATED)
def add_notification(
    data: NotificationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    """Send to one user, or set `user_id` to 0 to broadcast to a whole role."""
    created = notification_service.add_notification(db, data)
    return [_serialize_notification(n) for n in created]


@router.get("/", response_model=PaginatedResponse[NotificationSchema])
def search_notifications(
    status: Optional[List[EntityStatus]] = Query(None),
    send_date_from: Optional[datetime] = Query(None),
    send_date_to: Optional[datetime] = Query(None),
    title: Optional[str] = Query(None),
    summary: Optional[str] = Query(None),
    content: Optional[str] = Query(None),
    recipient_type: Optional[str] = Query(None),
    notification_type: Optional[str] = Query(None),
    full_name: Optional[str] = Query(None, description="Recipient's name (contains)"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    sort_by: str = Query("send_date"),
    sort_dir: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    params = search_params(
        status=status,
        send_date_from=send_date_from,
        send_date_to=send_date_to,
        title=title,
        summary=summary,
        content=content,
        recipient_type=recipient_type,
        notification_type=notification_type,
        full_name=full_name,
    )
    query = notification_service.search_notifications(db, params)
    return paginate(query, Notification, page, limit, sort_by, sort_dir, serialize=_serialize_notification)


@router.get("/{notification_id}", response_model=NotificationSchema)
def get_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    return _serialize_notification(notification_service.get_notification(db, notification_id))


@router.put("/", response_model=NotificationSchema)
def update_notification(
    data: NotificationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    """Edit the text of a notification. Its recipient and send date stay as they were."""
    return _serialize_notification(notification_service.update_notification(db, data))


@router.delete("/{notification_id}", response_model=NotificationSchema)
def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    """Soft delete: the notification is DISABLED."""
    return _serialize_notification(notification_service.disable_notification(db, notification_id))
