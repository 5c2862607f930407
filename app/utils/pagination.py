from sqlalchemy.orm import Query

from app.schemas.common import PaginatedResponse


def paginate(query: Query, model, page: int, limit: int, sort_by: str = "id", sort_dir: str = "desc", serialize=None) -> PaginatedResponse:
    """Order, slice and wrap a query. Unknown sort columns fall back to the primary key."""
    # Relationship attributes also expose asc/desc, so only table columns qualify
    column = model.__table__.c.get(sort_by)
    if column is None:
        column = model.__table__.c.id
    order = column.asc() if sort_dir.lower() == "asc" else column.desc()

    total = query.order_by(None).count()
    rows = query.order_by(order).offset((page - 1) * limit).limit(limit).all()

    return PaginatedResponse(
        data=[serialize(r) for r in rows] if serialize else rows,
        total=total,
        page=page,
        limit=limit,
        total_pages=-(-total // limit) if total else 0,
    )
