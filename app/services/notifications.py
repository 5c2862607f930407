import logging
import smtplib
from email.message import EmailMessage
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.models.booking import LocationBooking
from app.models.enums import EntityStatus, RoleType
from app.models.notification import Notification
from app.models.user import User
from app.schemas.notification import NotificationCreate, NotificationUpdate
from app.utils.filters import InRule, ContainsRule, RangeRule, JoinContainsRule, build_filter

logger = logging.getLogger(__name__)

NOTIFICATION_FILTERS = (
    InRule("status"),
    RangeRule("send_date_from", "send_date_to", "send_date"),
    ContainsRule("title"),
    ContainsRule("summary"),
    ContainsRule("content"),
    ContainsRule("recipient_type"),
    ContainsRule("notification_type"),
    JoinContainsRule("full_name", "user", "full_name"),
)


# ---------------------------------------------------------------------------
# Delivery
# ---------------------------------------------------------------------------


class EmailNotifier:
    """Sends plain-text mail over SMTP. Without SMTP_HOST it only logs."""

    def __init__(self, host: Optional[str] = None, port: Optional[int] = None,
                 user: Optional[str] = None, password: Optional[str] = None,
                 sender: Optional[str] = None):
        self.host = settings.SMTP_HOST if host is None else host
        self.port = port or settings.SMTP_PORT
        self.user = settings.SMTP_USER if user is None else user
        self.password = settings.SMTP_PASSWORD if password is None else password
        self.sender = sender or settings.MAIL_FROM

    def send(self, recipient: str, subject: str, body: str) -> None:
        if not self.host:
            logger.info("Mail delivery disabled; '%s' for %s not sent.", subject, recipient)
            return

        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = recipient
        message["Subject"] = subject
        message.set_content(body)

        with smtplib.SMTP(self.host, self.port, timeout=10) as smtp:
            smtp.starttls()
            if self.user:
                smtp.login(self.user, self.password)
            smtp.send_message(message)


def notify_safely(notifier, recipient: str, subject: str, body: str) -> bool:
    """Deliver a message; failures are logged and never reach the caller."""
    if notifier is None or not recipient:
        return False
    try:
        notifier.send(recipient, subject, body)
        return True
    except Exception:
        logger.exception("Failed to deliver '%s' to %s", subject, recipient)
        return False


def _booking_details(booking: LocationBooking, state: str) -> str:
    location = booking.location.name if booking.location else f"#{booking.location_id}"
    return (
        "Booking details:\n"
        f"- Restaurant: {location}\n"
        f"- Date: {booking.booking_date}\n"
        f"- Time: {booking.booking_time}\n"
        f"- Guests: {booking.number_of_guest}\n"
        f"- Amount: {booking.amount}\n"
        f"- Status: {state}\n"
    )


def booking_pending_message(booking: LocationBooking) -> Tuple[str, str]:
    subject = "[SkedEat] Your booking is waiting for confirmation"
    body = (
        f"Dear {booking.user.full_name},\n\n"
        "Your booking has been received and is waiting for the restaurant to confirm it.\n\n"
        + _booking_details(booking, "Pending confirmation")
        + "\nWe will let you know as soon as it is confirmed.\n"
    )
    return subject, body


def booking_confirmed_message(booking: LocationBooking) -> Tuple[str, str]:
    subject = "[SkedEat] Your booking has been confirmed!"
    body = (
        f"Dear {booking.user.full_name},\n\n"
        "Good news: the restaurant has confirmed your booking.\n\n"
        + _booking_details(booking, "Confirmed")
        + "\nThank you for booking with us.\n"
    )
    return subject, body


# ---------------------------------------------------------------------------
# In-app notifications
# ---------------------------------------------------------------------------


def add_notification(db: Session, data: NotificationCreate) -> List[Notification]:
    """
    Create a notification for one user, or for every user of a role when
    ``user_id`` is 0 (``recipient_type`` names the role).
    """
    fields = data.model_dump(exclude={"user_id"})

    if data.user_id == 0:
        # Role names are matched by substring, so "admin" reaches ADMIN and LOCATION_ADMIN
        roles = [role for role in RoleType if data.recipient_type.upper() in role.value]
        recipients = db.query(User).filter(User.role.in_(roles)).all() if roles else []
    else:
        user = db.query(User).filter(User.id == data.user_id).first()
        if not user:
            raise NotFoundError("User", "id", data.user_id)
        recipients = [user]

    created = [Notification(user=user, **fields) for user in recipients]
    db.add_all(created)
    db.commit()
    for notification in created:
        db.refresh(notification)

    logger.info("Created %d notification(s) of type %s.", len(created), data.notification_type)
    return created


def search_notifications(db: Session, params: dict):
    return (
        db.query(Notification)
        .options(joinedload(Notification.user))
        .filter(build_filter(Notification, params, NOTIFICATION_FILTERS))
    )


def list_user_notifications(db: Session, user: User):
    return db.query(Notification).filter(
        Notification.user_id == user.id,
        Notification.status == EntityStatus.ACTIVE,
    )


def get_notification(db: Session, notification_id: int) -> Notification:
    notification = (
        db.query(Notification)
        .options(joinedload(Notification.user))
        .filter(Notification.id == notification_id)
        .first()
    )
    if not notification:
        raise NotFoundError("Notification", "id", notification_id)
    return notification


def update_notification(db: Session, data: NotificationUpdate) -> Notification:
    notification = get_notification(db, data.id)
    for field, value in data.model_dump(exclude={"id"}).items():
        setattr(notification, field, value)
    db.commit()
    db.refresh(notification)
    return notification


def disable_notification(db: Session, notification_id: int) -> Notification:
    notification = get_notification(db, notification_id)
    notification.status = EntityStatus.DISABLED
    db.commit()
    db.refresh(notification)
    return notification
