from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel

from app.models.enums import EntityStatus


# Location row in admin search results
class LocationListItem(BaseModel):
    id: int
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    status: EntityStatus
    suggest: bool = False
    sale: bool = False
    brand_name: Optional[str] = None
    full_name: Optional[str] = None  # owning location admin


# Location: Create / Update (POST, PUT /admin/locations)
class LocationCreate(BaseModel):
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    description: Optional[str] = None
    suggest: bool = False
    sale: bool = False
    opening_hours: Optional[datetime] = None
    closing_hours: Optional[datetime] = None
    user_id: int
    brand_id: Optional[int] = None
    # An empty list leaves the current links untouched
    category_ids: List[int] = []
    tag_ids: List[int] = []


class LocationUpdate(LocationCreate):
    id: int


class LocationDetail(LocationListItem):
    description: Optional[str] = None
    opening_hours: Optional[datetime] = None
    closing_hours: Optional[datetime] = None
    user_id: int
    brand_id: Optional[int] = None
    categories: List[str] = []
    tags: List[str] = []
