from sqlalchemy.orm import Session

from app.core.exceptions import AuthorizationDeniedError
from app.models.enums import RoleType
from app.models.location import Location
from app.models.user import User


def is_authorized_for_location(db: Session, user: User, location_id: int) -> bool:
    """Platform admins manage every location; location admins only the ones they own."""
    if user.role == RoleType.ADMIN:
        return True
    if user.role != RoleType.LOCATION_ADMIN:
        return False
    owned = (
        db.query(Location.id)
        .filter(Location.id == location_id, Location.user_id == user.id)
        .first()
    )
    return owned is not None


def ensure_location_access(db: Session, user: User, location_id: int) -> None:
    if not is_authorized_for_location(db, user, location_id):
        raise AuthorizationDeniedError(f"You are not allowed to manage location {location_id}")
