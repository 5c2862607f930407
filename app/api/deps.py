from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import AuthorizationDeniedError, NotFoundError
from app.core.security import decode_token
from app.db.session import get_db
from app.models.enums import EntityStatus, RoleType
from app.models.user import User
from app.services.notifications import EmailNotifier

# Tokens are issued by the identity service; this API only reads them
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")

_notifier = EmailNotifier()


def get_current_username(token: str = Depends(oauth2_scheme)) -> str:
    username = decode_token(token)
    if not username:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return username


def get_current_user(
    db: Session = Depends(get_db),
    username: str = Depends(get_current_username),
) -> User:
    user = db.query(User).filter(User.user_name == username).first()
    if not user:
        raise NotFoundError("User", "username", username)
    if user.status != EntityStatus.ACTIVE:
        raise AuthorizationDeniedError("This account is disabled")
    return user


def get_current_admin_user(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != RoleType.ADMIN:
        raise AuthorizationDeniedError("Admin privileges required")
    return current_user


def get_location_manager(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role not in (RoleType.ADMIN, RoleType.LOCATION_ADMIN):
        raise AuthorizationDeniedError("Location admin privileges required")
    return current_user


def get_notifier() -> EmailNotifier:
    return _notifier
