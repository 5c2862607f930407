from datetime import datetime, time, timedelta

import pytest

from app.core.exceptions import ValidationConflictError
from app.models import (
    BookingStatus, Category, LocationBooking, LocationCategory, OfferStatus, Promotion,
)
from app.services.bookings import BOOKING_FILTERS
from app.services.locations import search_locations
from app.services.promotions import search_promotions
from app.utils.filters import ContainsRule, InRule, RangeRule, build_filter, search_params

from tests.conftest import BOOKING_DATE, add_booking


def _bookings(db, params):
    return db.query(LocationBooking).filter(build_filter(LocationBooking, params, BOOKING_FILTERS)).all()


def test_empty_params_match_everything(db, world):
    add_booking(db, world)
    add_booking(db, world, status=BookingStatus.CANCELLED)

    assert len(_bookings(db, {})) == 2
    assert len(_bookings(db, None)) == 2


def test_unknown_and_empty_keys_are_ignored(db, world):
    add_booking(db, world)

    assert len(_bookings(db, {"colour": "blue", "status": [], "name": None})) == 1


def test_status_membership(db, world):
    add_booking(db, world, status=BookingStatus.PENDING)
    add_booking(db, world, status=BookingStatus.CONFIRMED)
    add_booking(db, world, status=BookingStatus.CANCELLED)

    found = _bookings(db, {"status": [BookingStatus.PENDING, BookingStatus.CONFIRMED]})
    assert {b.status for b in found} == {BookingStatus.PENDING, BookingStatus.CONFIRMED}


def test_date_range_is_inclusive_when_both_bounds_given(db, world):
    for offset in range(5):
        add_booking(db, world, booking_date=BOOKING_DATE + timedelta(days=offset))

    found = _bookings(db, {"start_date": BOOKING_DATE + timedelta(days=1), "end_date": BOOKING_DATE + timedelta(days=3)})
    assert len(found) == 3


def test_single_bound_is_strict(db, world):
    for offset in range(3):
        add_booking(db, world, booking_date=BOOKING_DATE + timedelta(days=offset))

    after = sorted(_bookings(db, {"start_date": BOOKING_DATE}), key=lambda b: b.booking_date)
    before = sorted(_bookings(db, {"end_date": BOOKING_DATE + timedelta(days=2)}), key=lambda b: b.booking_date)

    assert [b.booking_date for b in after] == [BOOKING_DATE + timedelta(days=1), BOOKING_DATE + timedelta(days=2)]
    assert [b.booking_date for b in before] == [BOOKING_DATE, BOOKING_DATE + timedelta(days=1)]


def test_contains_is_case_insensitive(db, world):
    add_booking(db, world, name="Nguyen Van A")
    add_booking(db, world, name="Tran Thi B")

    found = _bookings(db, {"name": "nguyen"})
    assert [b.name for b in found] == ["Nguyen Van A"]


def test_conditions_are_combined(db, world):
    add_booking(db, world, name="Nguyen", booking_time=time(12, 0), status=BookingStatus.PENDING)
    add_booking(db, world, name="Nguyen", booking_time=time(20, 0), status=BookingStatus.PENDING)
    add_booking(db, world, name="Nguyen", booking_time=time(20, 0), status=BookingStatus.CANCELLED)

    found = _bookings(db, {
        "name": "ngu",
        "status": [BookingStatus.PENDING],
        "start_time": time(18, 0),
        "end_time": time(21, 0),
    })
    assert len(found) == 1
    assert found[0].booking_time == time(20, 0)


def test_rules_on_custom_fields(db, world):
    rules = (InRule("state", "status"), ContainsRule("who", "name"))
    add_booking(db, world, name="Le Van C", status=BookingStatus.CONFIRMED)
    add_booking(db, world, name="Le Van D", status=BookingStatus.PENDING)

    found = (
        db.query(LocationBooking)
        .filter(build_filter(LocationBooking, {"state": BookingStatus.CONFIRMED, "who": "le van"}, rules))
        .all()
    )
    assert [b.name for b in found] == ["Le Van C"]


def _promotion(db, world, title, start, end):
    promotion = Promotion(title=title, location=world.location, start_date=start, end_date=end,
                          discount_type=world.promotion.discount_type, discount_value=5,
                          status=OfferStatus.INACTIVE)
    db.add(promotion)
    return promotion


def test_promotion_range_matches_end_date(db, world):
    base = datetime(2031, 1, 1)
    _promotion(db, world, "Started earlier", base - timedelta(days=5), base + timedelta(days=3))
    _promotion(db, world, "Ends on the bound", base + timedelta(days=2), base + timedelta(days=10))
    _promotion(db, world, "Ends later", base + timedelta(days=8), base + timedelta(days=20))
    db.commit()

    found = search_promotions(db, {"start_date": base, "end_date": base + timedelta(days=10)}).all()
    assert sorted(p.title for p in found) == ["Ends on the bound", "Started earlier"]


def test_promotion_single_bounds(db, world):
    base = datetime(2031, 1, 1)
    _promotion(db, world, "Early", base - timedelta(days=5), base + timedelta(days=3))
    _promotion(db, world, "Late", base + timedelta(days=8), base + timedelta(days=20))
    db.commit()

    assert [p.title for p in search_promotions(db, {"start_date": base}).all()] == ["Late"]
    assert "Late" not in [p.title for p in search_promotions(db, {"end_date": base + timedelta(days=10)}).all()]


def test_location_search_by_owner_and_category(db, world):
    thai = Category(name="Thai")
    noodles = Category(name="Noodles")
    db.add_all([thai, noodles])
    db.add_all([
        LocationCategory(location=world.location, category=thai),
        LocationCategory(location=world.location, category=noodles),
        LocationCategory(location=world.other_location, category=thai),
    ])
    db.commit()

    # A location matching two of the requested categories is returned once
    by_category = search_locations(db, {"category_name": ["Thai", "Noodles"]}).all()
    assert sorted(loc.name for loc in by_category) == ["Bun Cha Corner", "Pho House District 1"]

    by_owner = search_locations(db, {"full_name": "tran van"}).all()
    assert [loc.id for loc in by_owner] == [world.location.id]

    suggested = search_locations(db, {"suggest": True, "category_name": ["Thai"]}).all()
    assert [loc.id for loc in suggested] == [world.location.id]

    by_brand = search_locations(db, {"brand_name": "pho"}).count()
    assert by_brand == 1


def test_search_params_drops_unset_values():
    params = search_params(status=None, name="pho", tags=[], suggest=False)

    assert params == {"name": "pho", "suggest": False}


def test_range_rule_between_same_column():
    rule = RangeRule("min_guests", "max_guests", "number_of_guest")
    clause = rule.clause(LocationBooking, {"min_guests": 2, "max_guests": 4})

    assert "BETWEEN" in str(clause)


def test_wildcards_in_search_text_are_literal(db, world):
    add_booking(db, world, name="Walk-in")
    add_booking(db, world, name="Table_4 regulars")
    add_booking(db, world, name="100% vegan")

    assert [b.name for b in _bookings(db, {"name": "_"})] == ["Table_4 regulars"]
    assert [b.name for b in _bookings(db, {"name": "%"})] == ["100% vegan"]

    by_owner = search_locations(db, {"full_name": "_"}).all()
    assert by_owner == []


def test_bool_filter_needs_a_real_boolean(db, world):
    not_suggested = search_locations(db, {"suggest": False}).all()
    assert [loc.id for loc in not_suggested] == [world.other_location.id]

    with pytest.raises(ValidationConflictError, match="'suggest' must be true or false"):
        search_locations(db, {"suggest": "false"})
