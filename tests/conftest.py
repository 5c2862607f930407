import os

# Configure before the app (and its engine) is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["SMTP_HOST"] = ""

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_notifier
from app.core.security import create_access_token
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models import (
    BookingStatus, DayInWeek, DiscountType, EntityStatus, OfferStatus, RoleType,
    Brand, Food, Location, LocationBooking, Promotion,
    User, UserVoucher, Voucher, WorkingHour,
)
from app.schemas.booking import BookingCreate

TODAY = date.today()
BOOKING_DATE = TODAY + timedelta(days=3)


class RecordingNotifier:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    def send(self, recipient, subject, body):
        if self.fail:
            raise ConnectionError("SMTP server unavailable")
        self.sent.append((recipient, subject, body))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def world(db):
    """One open restaurant with a menu, an owner, a guest, a promotion and a voucher."""
    window_start = datetime.combine(TODAY - timedelta(days=10), time(0, 0))
    window_end = datetime.combine(TODAY + timedelta(days=30), time(23, 59))

    admin = User(user_name="admin", full_name="Platform Admin", email="admin@skedeat.test", role=RoleType.ADMIN)
    owner = User(user_name="owner", full_name="Tran Van Owner", email="owner@skedeat.test", role=RoleType.LOCATION_ADMIN)
    other_owner = User(user_name="other", full_name="Le Thi Other", email="other@skedeat.test", role=RoleType.LOCATION_ADMIN)
    guest = User(user_name="guest", full_name="Nguyen Guest", email="guest@skedeat.test", phone="0900000000", role=RoleType.USER)
    db.add_all([admin, owner, other_owner, guest])

    brand = Brand(name="Pho House")
    location = Location(name="Pho House District 1", address="1 Le Loi", phone="0281111111",
                        status=EntityStatus.ACTIVE, user=owner, brand=brand, suggest=True)
    other_location = Location(name="Bun Cha Corner", address="9 Hang Manh", phone="0242222222",
                              status=EntityStatus.ACTIVE, user=other_owner)
    db.add_all([brand, location, other_location])

    for day in DayInWeek:
        db.add(WorkingHour(location=location, day=day, start_time=time(10, 0), end_time=time(22, 0)))
        db.add(WorkingHour(location=other_location, day=day, start_time=time(10, 0), end_time=time(22, 0)))

    pho = Food(name="Pho Bo", price=Decimal("40.00"), location=location, status=EntityStatus.ACTIVE)
    tea = Food(name="Iced Tea", price=Decimal("10.00"), location=location, status=EntityStatus.ACTIVE)
    sold_out = Food(name="Banh Xeo", price=Decimal("30.00"), location=location, status=EntityStatus.DISABLED)
    foreign = Food(name="Bun Cha", price=Decimal("35.00"), location=other_location, status=EntityStatus.ACTIVE)
    db.add_all([pho, tea, sold_out, foreign])

    promotion = Promotion(
        title="Lunch 10%", location=location, start_date=window_start, end_date=window_end,
        discount_type=DiscountType.PERCENTAGE, discount_value=Decimal("10"), max_discount=Decimal("50"),
        min_order_amount=Decimal("50"), min_guest=2, free_item="Spring rolls", status=OfferStatus.ACTIVE,
    )
    voucher = Voucher(
        code="WELCOME20", title="Welcome 20", discount_type=DiscountType.FIXED, discount_value=Decimal("20"),
        quantity=100, start_date=window_start, end_date=window_end, status=OfferStatus.ACTIVE,
    )
    user_voucher = UserVoucher(user=guest, voucher=voucher, quantity_available=1)
    db.add_all([promotion, voucher, user_voucher])
    db.commit()

    return SimpleNamespace(
        admin=admin, owner=owner, other_owner=other_owner, guest=guest,
        location=location, other_location=other_location, brand=brand,
        pho=pho, tea=tea, sold_out=sold_out, foreign=foreign,
        promotion=promotion, voucher=voucher, user_voucher=user_voucher,
    )


def booking_request(world, **overrides) -> BookingCreate:
    data = dict(
        location_id=world.location.id,
        name="Nguyen Guest",
        address="12 Nguyen Hue",
        phone="0900000000",
        booking_date=BOOKING_DATE,
        booking_time=time(19, 0),
        number_of_adult=2,
        number_of_children=1,
        food_bookings=[{"food_id": world.pho.id, "quantity": 2}, {"food_id": world.tea.id, "quantity": 1}],
    )
    data.update(overrides)
    return BookingCreate(**data)


def add_booking(db, world, **overrides) -> LocationBooking:
    """Insert a booking row directly, bypassing the creation workflow."""
    fields = dict(
        name="Walk-in", phone="0911111111", booking_date=BOOKING_DATE, booking_time=time(12, 0),
        number_of_adult=2, number_of_children=0, number_of_guest=2,
        subtotal=Decimal("0"), amount=Decimal("0"), status=BookingStatus.PENDING,
        user=world.guest, location=world.location,
    )
    fields.update(overrides)
    booking = LocationBooking(**fields)
    db.add(booking)
    db.commit()
    return booking


def auth_header(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.user_name)}"}


@pytest.fixture
def client(session_factory, notifier):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()
