from app.schemas.common import PaginatedResponse, ErrorResponse, DiscountCheck
from app.schemas.user import UserSummary
from app.schemas.booking import Booking, BookingCreate, FoodBookingRequest, FoodBookingResponse
from app.schemas.promotion import Promotion, PromotionCreate, PromotionUpdate
from app.schemas.location import LocationListItem, LocationCreate, LocationUpdate, LocationDetail
from app.schemas.notification import Notification, NotificationCreate, NotificationUpdate
