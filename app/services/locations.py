import logging
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from app.core.exceptions import NotFoundError, ValidationConflictError
from app.models.enums import EntityStatus, RoleType
from app.models.location import Brand, Category, Location, LocationCategory, LocationTag, Tag
from app.models.user import User
from app.schemas.location import LocationCreate, LocationUpdate
from app.utils.filters import (
    InRule, ContainsRule, BoolRule, RangeRule, JoinContainsRule, JoinInRule, build_filter,
)

logger = logging.getLogger(__name__)

LOCATION_FILTERS = (
    InRule("status"),
    BoolRule("suggest"),
    BoolRule("sale"),
    RangeRule("opening_hours", "closing_hours", "opening_hours", "closing_hours"),
    ContainsRule("name"),
    ContainsRule("address"),
    ContainsRule("phone"),
    JoinContainsRule("full_name", "user", "full_name"),
    JoinContainsRule("brand_name", "brand", "name"),
    JoinInRule("category_name", "location_categories", "category", "name"),
    JoinInRule("tag_name", "location_tags", "tag", "name"),
)


def _location_query(db: Session):
    return db.query(Location).options(joinedload(Location.user), joinedload(Location.brand))


def get_location(db: Session, location_id: int) -> Location:
    location = _location_query(db).filter(Location.id == location_id).first()
    if not location:
        raise NotFoundError("Location", "id", location_id)
    return location


def search_locations(db: Session, params: Optional[dict] = None):
    """With no params this is the plain listing of every location."""
    return _location_query(db).filter(build_filter(Location, params, LOCATION_FILTERS))


def _sync_links(db: Session, links: list, wanted_ids: List[int], target_cls, attr: str, link_factory) -> None:
    """Make ``links`` point at exactly ``wanted_ids``; an empty list keeps them as they are."""
    if not wanted_ids:
        return
    current = {getattr(link, f"{attr}_id"): link for link in links}
    for target_id, link in current.items():
        if target_id not in wanted_ids:
            links.remove(link)
    for target_id in dict.fromkeys(wanted_ids):
        if target_id in current:
            continue
        target = db.query(target_cls).filter(target_cls.id == target_id).first()
        if not target:
            raise NotFoundError(target_cls.__name__, "id", target_id)
        links.append(link_factory(target))


def _save(db: Session, location: Location, data: LocationCreate) -> Location:
    owner = db.query(User).filter(User.id == data.user_id).first()
    if not owner:
        raise NotFoundError("User", "id", data.user_id)
    if owner.role != RoleType.LOCATION_ADMIN:
        raise ValidationConflictError("User does not belong to role LOCATION_ADMIN")

    brand = None
    if data.brand_id is not None:
        brand = db.query(Brand).filter(Brand.id == data.brand_id).first()
        if not brand:
            raise NotFoundError("Brand", "id", data.brand_id)

    try:
        for field, value in data.model_dump(exclude={"id", "user_id", "brand_id", "category_ids", "tag_ids"}).items():
            setattr(location, field, value)
        location.user = owner
        location.brand = brand
        db.add(location)

        _sync_links(db, location.location_categories, data.category_ids, Category, "category",
                    lambda category: LocationCategory(category=category))
        _sync_links(db, location.location_tags, data.tag_ids, Tag, "tag",
                    lambda tag: LocationTag(tag=tag))
        db.commit()
    except Exception:
        db.rollback()
        raise
    return get_location(db, location.id)


def create_location(db: Session, data: LocationCreate) -> Location:
    location = _save(db, Location(status=EntityStatus.ACTIVE), data)
    logger.info("Location %s created for admin %s.", location.id, location.user_id)
    return location


def update_location(db: Session, data: LocationUpdate) -> Location:
    return _save(db, get_location(db, data.id), data)


def disable_location(db: Session, location_id: int) -> Location:
    location = get_location(db, location_id)
    location.status = EntityStatus.DISABLED
    db.commit()
    db.refresh(location)
    return location
