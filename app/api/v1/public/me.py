from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import get_current_user
from app.models.user import User
from app.models.notification import Notification
from app.schemas.user import UserSummary
from app.schemas.notification import Notification as NotificationSchema
from app.schemas.common import PaginatedResponse
from app.services.notifications import list_user_notifications
from app.utils.pagination import paginate

router = APIRouter(prefix="/me", tags=["Me"])


@router.get("/", response_model=UserSummary)
def get_me(current_user: User = Depends(get_current_user)):
    """Return the authenticated user's profile."""
    return current_user


@router.get("/notifications", response_model=PaginatedResponse[NotificationSchema])
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Return the current user's active notifications, newest first."""
    query = list_user_notifications(db, current_user)
    return paginate(query, Notification, page, limit, "send_date", "desc", serialize=NotificationSchema.model_validate)
