from datetime import datetime, timedelta
from decimal import Decimal

from app.models import BookingStatus, OfferStatus
from app.core.security import create_access_token

from tests.conftest import BOOKING_DATE, add_booking, auth_header

API = "/api/v1"


def _booking_body(world, **overrides):
    body = {
        "location_id": world.location.id,
        "name": "Nguyen Guest",
        "phone": "0900000000",
        "booking_date": BOOKING_DATE.isoformat(),
        "booking_time": "19:00:00",
        "number_of_adult": 2,
        "number_of_children": 0,
        "food_bookings": [{"food_id": world.pho.id, "quantity": 2}],
        "promotion_id": world.promotion.id,
        "voucher_id": 0,
    }
    body.update(overrides)
    return body


class TestAuth:
    def test_missing_token(self, client):
        assert client.get(f"{API}/bookings/").status_code == 401

    def test_garbage_token(self, client):
        response = client.get(f"{API}/bookings/", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401

    def test_expired_token(self, client, world):
        token = create_access_token(world.guest.user_name, expires_delta=timedelta(minutes=-1))

        response = client.get(f"{API}/me/", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_profile(self, client, world):
        response = client.get(f"{API}/me/", headers=auth_header(world.guest))

        assert response.status_code == 200
        assert response.json()["user_name"] == "guest"
        assert response.json()["role"] == "USER"

    def test_guest_cannot_use_admin_endpoints(self, client, world):
        response = client.get(f"{API}/admin/bookings/", headers=auth_header(world.guest))
        assert response.status_code == 403


class TestBookings:
    def test_create_booking(self, client, world, notifier):
        response = client.post(f"{API}/bookings/", json=_booking_body(world), headers=auth_header(world.guest))

        assert response.status_code == 201, response.text
        body = response.json()
        assert body["status"] == "PENDING"
        assert Decimal(body["subtotal"]) == Decimal("80")
        assert Decimal(body["promotion_discount"]) == Decimal("8")
        assert Decimal(body["amount"]) == Decimal("72")
        assert body["free_item"] == "Spring rolls"
        assert body["voucher_id"] is None
        assert body["food_bookings"][0]["food_name"] == "Pho Bo"
        assert len(notifier.sent) == 1

    def test_rejected_booking_reports_reason(self, client, world, notifier):
        response = client.post(
            f"{API}/bookings/",
            json=_booking_body(world, booking_time="06:30:00"),
            headers=auth_header(world.guest),
        )

        assert response.status_code == 400
        assert response.json() == {"detail": "Please book another time!"}
        assert notifier.sent == []

    def test_list_and_filter_my_bookings(self, client, db, world):
        add_booking(db, world, status=BookingStatus.PENDING)
        add_booking(db, world, status=BookingStatus.CANCELLED)
        add_booking(db, world, user=world.admin)

        response = client.get(f"{API}/bookings/", params={"status": "PENDING"}, headers=auth_header(world.guest))

        assert response.status_code == 200
        assert response.json()["total"] == 1
        assert response.json()["data"][0]["status"] == "PENDING"

    def test_sorting_by_a_relationship_falls_back_to_id(self, client, db, world):
        first = add_booking(db, world)
        second = add_booking(db, world)

        for sort_by in ("user", "location", "food_bookings", "promotion", "no_such_column"):
            response = client.get(f"{API}/bookings/", params={"sort_by": sort_by}, headers=auth_header(world.guest))

            assert response.status_code == 200, sort_by
            assert [b["id"] for b in response.json()["data"]] == [second.id, first.id]

    def test_other_users_booking_is_hidden(self, client, db, world):
        booking = add_booking(db, world, user=world.admin)

        response = client.get(f"{API}/bookings/{booking.id}", headers=auth_header(world.guest))
        assert response.status_code == 404

    def test_guest_cancels(self, client, db, world):
        booking = add_booking(db, world)

        response = client.patch(f"{API}/bookings/{booking.id}/cancel", headers=auth_header(world.guest))

        assert response.status_code == 200
        assert response.json()["status"] == "CANCELLED"


class TestAdminBookings:
    def test_approve_then_approve_again(self, client, db, world, notifier):
        booking = add_booking(db, world)
        url = f"{API}/admin/bookings/{booking.id}/approve"

        first = client.patch(url, headers=auth_header(world.owner))
        second = client.patch(url, headers=auth_header(world.owner))

        assert first.status_code == 200
        assert first.json()["status"] == "CONFIRMED"
        assert second.status_code == 409
        assert second.json()["detail"] == "Only pending bookings are able to be approved"
        assert len(notifier.sent) == 1

    def test_approve_at_foreign_location(self, client, db, world):
        booking = add_booking(db, world)

        response = client.patch(f"{API}/admin/bookings/{booking.id}/approve", headers=auth_header(world.other_owner))
        assert response.status_code == 403

    def test_location_bookings(self, client, db, world):
        add_booking(db, world)
        url = f"{API}/admin/locations/{world.location.id}/bookings"

        mine = client.get(url, headers=auth_header(world.owner))
        foreign = client.get(url, headers=auth_header(world.other_owner))

        assert mine.status_code == 200
        assert mine.json()["total"] == 1
        assert foreign.status_code == 404

    def test_complete(self, client, db, world):
        booking = add_booking(db, world, status=BookingStatus.CONFIRMED, amount=Decimal("80.00"))

        response = client.patch(f"{API}/admin/bookings/{booking.id}/complete", headers=auth_header(world.owner))

        assert response.status_code == 200
        assert Decimal(response.json()["commission"]) == Decimal("8")


class TestOffers:
    def test_promotion_preview(self, client, world):
        response = client.get(
            f"{API}/promotions/{world.promotion.id}/check",
            params={"subtotal": "200", "number_of_guest": 2,
                    "booking_date": BOOKING_DATE.isoformat(), "booking_time": "19:00:00"},
            headers=auth_header(world.guest),
        )

        assert response.status_code == 200
        assert response.json() == {"id": world.promotion.id, "subtotal": 200.0, "discounted_value": 20.0}

    def test_voucher_preview_does_not_redeem(self, client, db, world):
        url = f"{API}/vouchers/{world.voucher.id}/check"
        params = {"subtotal": "90", "item_count": 1}

        first = client.get(url, params=params, headers=auth_header(world.guest))
        second = client.get(url, params=params, headers=auth_header(world.guest))

        assert first.json()["discounted_value"] == 20.0
        assert second.status_code == 200
        db.refresh(world.user_voucher)
        assert world.user_voucher.quantity_available == 1

    def test_owner_creates_inactive_promotion(self, client, world):
        start = datetime.now() + timedelta(days=1)
        body = {
            "title": "Weekend 15%",
            "location_id": world.location.id,
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=2)).isoformat(),
            "discount_type": "PERCENTAGE",
            "discount_value": "15",
        }

        created = client.post(f"{API}/admin/promotions/", json=body, headers=auth_header(world.owner))
        denied = client.post(f"{API}/admin/promotions/", json=body, headers=auth_header(world.other_owner))

        assert created.status_code == 201, created.text
        assert created.json()["status"] == OfferStatus.INACTIVE.value
        assert denied.status_code == 403

    def test_active_promotion_cannot_be_edited(self, client, world):
        body = {
            "id": world.promotion.id,
            "title": "Changed",
            "location_id": world.location.id,
            "start_date": datetime.now().isoformat(),
            "end_date": (datetime.now() + timedelta(days=1)).isoformat(),
            "discount_type": "FIXED",
            "discount_value": "5",
        }

        response = client.put(f"{API}/admin/promotions/", json=body, headers=auth_header(world.owner))

        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot update this Promotion!"


class TestNotifications:
    def test_broadcast_to_role(self, client, world):
        body = {
            "user_id": 0,
            "recipient_type": "LOCATION_ADMIN",
            "notification_type": "SYSTEM",
            "title": "Maintenance",
            "summary": "Short downtime",
            "content": "The dashboard is offline tonight.",
        }

        response = client.post(f"{API}/admin/notifications/", json=body, headers=auth_header(world.admin))

        assert response.status_code == 201, response.text
        assert sorted(n["full_name"] for n in response.json()) == ["Le Thi Other", "Tran Van Owner"]

        inbox = client.get(f"{API}/me/notifications", headers=auth_header(world.owner))
        assert inbox.json()["total"] == 1

    def test_search_and_disable(self, client, db, world):
        body = {
            "user_id": world.guest.id,
            "recipient_type": "USER",
            "notification_type": "PROMOTION",
            "title": "Lunch deal",
            "summary": "10% off",
            "content": "Book lunch this week and save.",
        }
        created = client.post(f"{API}/admin/notifications/", json=body, headers=auth_header(world.admin)).json()[0]

        found = client.get(f"{API}/admin/notifications/", params={"full_name": "nguyen"}, headers=auth_header(world.admin))
        assert found.json()["total"] == 1

        disabled = client.delete(f"{API}/admin/notifications/{created['id']}", headers=auth_header(world.admin))
        assert disabled.json()["status"] == "DISABLED"

        inbox = client.get(f"{API}/me/notifications", headers=auth_header(world.guest))
        assert inbox.json()["total"] == 0

    def test_get_and_update(self, client, world):
        headers = auth_header(world.admin)
        body = {
            "user_id": world.guest.id,
            "recipient_type": "USER",
            "notification_type": "PROMOTION",
            "title": "Lunch deal",
            "summary": "10% off",
            "content": "Book lunch this week and save.",
        }
        created = client.post(f"{API}/admin/notifications/", json=body, headers=headers).json()[0]

        update = {key: body[key] for key in ("recipient_type", "notification_type", "summary", "content")}
        update.update(id=created["id"], title="Lunch deal extended")
        updated = client.put(f"{API}/admin/notifications/", json=update, headers=headers)

        assert updated.status_code == 200, updated.text
        assert updated.json()["title"] == "Lunch deal extended"
        assert updated.json()["user_id"] == world.guest.id

        fetched = client.get(f"{API}/admin/notifications/{created['id']}", headers=headers)
        assert fetched.json()["title"] == "Lunch deal extended"
        assert fetched.json()["full_name"] == "Nguyen Guest"

        assert client.get(f"{API}/admin/notifications/9999", headers=headers).status_code == 404


class TestLocations:
    def test_admin_searches_and_disables(self, client, world):
        headers = auth_header(world.admin)

        found = client.get(f"{API}/admin/locations/", params={"name": "pho", "status": "ACTIVE"}, headers=headers)
        assert found.status_code == 200
        assert [loc["full_name"] for loc in found.json()["data"]] == ["Tran Van Owner"]

        disabled = client.delete(f"{API}/admin/locations/{world.location.id}", headers=headers)
        assert disabled.json()["status"] == "DISABLED"

        # A disabled location no longer accepts bookings
        response = client.post(f"{API}/bookings/", json=_booking_body(world), headers=auth_header(world.guest))
        assert response.status_code == 400

