from typing import Optional
from pydantic import BaseModel

from app.models.enums import RoleType


# Compact user for nested responses
class UserSummary(BaseModel):
    id: int
    user_name: str
    full_name: str
    email: str
    phone: Optional[str] = None
    role: RoleType

    class Config:
        from_attributes = True
