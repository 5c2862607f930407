# Import all models here so Base.metadata sees every table
from app.db.session import Base
from app.models.user import User
from app.models.location import Brand, Category, Tag, Location, LocationCategory, LocationTag, WorkingHour
from app.models.food import Food
from app.models.offer import Promotion, Voucher, UserVoucher
from app.models.booking import LocationBooking, FoodBooking
from app.models.notification import Notification
