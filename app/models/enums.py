import enum


class EntityStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    DISABLED = "DISABLED"


class OfferStatus(str, enum.Enum):
    INACTIVE = "INACTIVE"
    ACTIVE = "ACTIVE"
    EXPIRE = "EXPIRE"
    DISABLED = "DISABLED"


class BookingStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    SUCCESSFUL = "SUCCESSFUL"
    CANCELLED = "CANCELLED"


class DiscountType(str, enum.Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


class RoleType(str, enum.Enum):
    ADMIN = "ADMIN"
    LOCATION_ADMIN = "LOCATION_ADMIN"
    USER = "USER"


class DayInWeek(str, enum.Enum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @classmethod
    def of(cls, day) -> "DayInWeek":
        # date.weekday(): Monday == 0
        return list(cls)[day.weekday()]
