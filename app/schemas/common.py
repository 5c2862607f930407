from typing import List, Generic, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


# Paginated response wrapper: used by all list/search endpoints
class PaginatedResponse(BaseModel, Generic[T]):
    data: List[T]
    total: int
    page: int
    limit: int
    total_pages: int


# Error body rendered by FastAPI for every HTTPException subclass
class ErrorResponse(BaseModel):
    detail: str


# Discount preview (GET /promotions/{id}/check, GET /vouchers/{id}/check)
class DiscountCheck(BaseModel):
    id: int
    subtotal: float
    discounted_value: float
