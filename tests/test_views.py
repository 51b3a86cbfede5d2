"""Tests for the JSON API views."""

import json
from datetime import date, time

import pytest
from django.urls import reverse
from freezegun import freeze_time

from django_bookings.models import Booking, BookingStatus

from .conftest import FROZEN_NOW, TOMORROW


def post_json(client, url, data=None):
    return client.post(url, data=json.dumps(data or {}), content_type="application/json")


def put_json(client, url, data):
    return client.put(url, data=json.dumps(data), content_type="application/json")


@pytest.mark.django_db
class TestAvailabilityViews:
    """Tests for the slot and month availability endpoints."""

    def test_day_slots(self, client, activity, slot):
        url = reverse("django_bookings:day-slots", args=[activity.pk])

        response = client.get(url, {"date": TOMORROW.isoformat(), "participants": 3})

        assert response.status_code == 200
        assert response.json()["slots"] == [
            {"start_time": "09:00", "end_time": "17:00", "available": True}
        ]

    def test_day_slots_requires_date(self, client, activity):
        url = reverse("django_bookings:day-slots", args=[activity.pk])

        response = client.get(url)

        assert response.status_code == 400
        assert "date" in response.json()["error"]

    def test_day_slots_bad_participants(self, client, activity):
        url = reverse("django_bookings:day-slots", args=[activity.pk])

        response = client.get(url, {"date": TOMORROW.isoformat(), "participants": "many"})

        assert response.status_code == 400

    def test_unknown_activity(self, client, db):
        url = reverse("django_bookings:day-slots", args=[999999])

        response = client.get(url, {"date": TOMORROW.isoformat()})

        assert response.status_code == 404

    @freeze_time(FROZEN_NOW)
    def test_available_dates(self, client, activity, slot):
        url = reverse("django_bookings:available-dates", args=[activity.pk])

        response = client.get(url, {"date": "2025-06-15", "participants": 2})

        assert response.status_code == 200
        dates = response.json()["available_dates"]
        assert dates[0] == "2025-06-02"
        assert dates[-1] == "2025-06-30"


@pytest.mark.django_db
@freeze_time(FROZEN_NOW)
class TestBookingViews:
    """Tests for booking creation and lifecycle endpoints."""

    def booking_payload(self, activity, **overrides):
        payload = {
            "activity_id": activity.pk,
            "booking_date": TOMORROW.isoformat(),
            "start_time": "09:00",
            "number_of_participants": 3,
            "guest_name": "Dan Guest",
            "guest_phone": "0722000111",
        }
        payload.update(overrides)
        return payload

    def test_guest_booking_created(self, client, activity, slot):
        response = post_json(client, reverse("django_bookings:bookings"), self.booking_payload(activity))

        assert response.status_code == 201
        data = response.json()
        assert data["is_guest_booking"] is True
        assert data["end_time"] == "11:00"
        assert data["total_price"] == "75.00"
        assert data["status"] == BookingStatus.PENDING

    def test_authenticated_user_booking(self, client, activity, slot, user):
        client.force_login(user)

        response = post_json(
            client,
            reverse("django_bookings:bookings"),
            self.booking_payload(activity, guest_name="", guest_phone=""),
        )

        assert response.status_code == 201
        assert Booking.objects.get(pk=response.json()["id"]).user == user

    def test_guest_without_phone_rejected(self, client, activity, slot):
        response = post_json(
            client,
            reverse("django_bookings:bookings"),
            self.booking_payload(activity, guest_phone=""),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Guest phone required"

    def test_taken_slot_conflicts(self, client, activity, slot):
        url = reverse("django_bookings:bookings")
        post_json(client, url, self.booking_payload(activity))

        response = post_json(client, url, self.booking_payload(activity, guest_name="Other"))

        assert response.status_code == 409

    def test_invalid_json_rejected(self, client, activity):
        response = client.post(
            reverse("django_bookings:bookings"),
            data="{not json",
            content_type="application/json",
        )

        assert response.status_code == 400

    def test_bad_time_rejected(self, client, activity, slot):
        response = post_json(
            client,
            reverse("django_bookings:bookings"),
            self.booking_payload(activity, start_time="nine"),
        )

        assert response.status_code == 400

    def test_delete_not_allowed(self, client):
        response = client.delete(reverse("django_bookings:bookings"))

        assert response.status_code == 405

    def test_confirm_then_complete(self, client, activity, slot, make_booking):
        booking = make_booking(activity, time(9, 0))

        response = post_json(client, reverse("django_bookings:booking-confirm", args=[booking.pk]))
        assert response.status_code == 200
        assert response.json()["status"] == BookingStatus.CONFIRMED
        assert response.json()["payment_deadline"] is not None

        response = post_json(client, reverse("django_bookings:booking-complete", args=[booking.pk]))
        assert response.json()["status"] == BookingStatus.COMPLETED

    def test_cancel_twice_conflicts(self, client, activity, slot, make_booking):
        booking = make_booking(activity, time(9, 0))
        url = reverse("django_bookings:booking-cancel", args=[booking.pk])

        assert post_json(client, url).status_code == 200
        assert post_json(client, url).status_code == 409

    def test_unknown_booking(self, client, db):
        response = post_json(client, reverse("django_bookings:booking-confirm", args=[999999]))

        assert response.status_code == 404


@pytest.mark.django_db
class TestBookingListView:
    """Tests for listing bookings."""

    def test_anonymous_lists_all(self, client, activity, open_activity, make_booking, user):
        make_booking(activity, time(9, 0))
        make_booking(open_activity, time(13, 0), user=user)

        response = client.get(reverse("django_bookings:bookings"))

        assert response.status_code == 200
        assert len(response.json()["bookings"]) == 2

    def test_signed_in_customer_sees_own_bookings(self, client, activity, open_activity, make_booking, user):
        make_booking(activity, time(9, 0))
        own = make_booking(open_activity, time(13, 0), user=user)
        client.force_login(user)

        response = client.get(reverse("django_bookings:bookings"))

        assert [b["id"] for b in response.json()["bookings"]] == [own.pk]
        assert response.json()["bookings"][0]["customer_name"] == "Maria Popescu"

    def test_staff_sees_all(self, client, activity, open_activity, make_booking, user):
        make_booking(activity, time(9, 0))
        make_booking(open_activity, time(13, 0), user=user)
        user.is_staff = True
        user.save()
        client.force_login(user)

        response = client.get(reverse("django_bookings:bookings"))

        assert len(response.json()["bookings"]) == 2

    def test_filters_by_date_and_status(self, client, activity, make_booking):
        make_booking(activity, time(9, 0))
        make_booking(activity, time(13, 0), status=BookingStatus.CANCELLED)
        make_booking(activity, time(9, 0), booking_date=date(2025, 6, 3))

        response = client.get(
            reverse("django_bookings:bookings"),
            {"date": TOMORROW.isoformat(), "status": BookingStatus.PENDING},
        )

        bookings = response.json()["bookings"]
        assert [(b["booking_date"], b["start_time"]) for b in bookings] == [(TOMORROW.isoformat(), "09:00")]

    def test_unknown_status_rejected(self, client, db):
        response = client.get(reverse("django_bookings:bookings"), {"status": "lost"})

        assert response.status_code == 400


@pytest.mark.django_db
class TestAssignmentViews:
    """Tests for employee assignment endpoints."""

    def test_assign_employee(self, client, activity, employee, make_booking):
        booking = make_booking(activity, time(10, 0))
        url = reverse("django_bookings:booking-assign-employee", args=[booking.pk])

        response = put_json(client, url, {"employee_id": employee.pk})

        assert response.status_code == 200
        assert response.json()["employee_name"] == "Ana Pop"

    def test_assign_busy_employee_conflicts(self, client, activity, open_activity, employee, make_booking):
        make_booking(open_activity, time(10, 0), employee=employee)
        booking = make_booking(activity, time(10, 0))
        url = reverse("django_bookings:booking-assign-employee", args=[booking.pk])

        response = put_json(client, url, {"employee_id": employee.pk})

        assert response.status_code == 409

    def test_assign_unknown_employee(self, client, activity, make_booking):
        booking = make_booking(activity, time(10, 0))
        url = reverse("django_bookings:booking-assign-employee", args=[booking.pk])

        response = put_json(client, url, {"employee_id": 999999})

        assert response.status_code == 404

    def test_swap_options(self, client, activity, employee, make_booking):
        booking = make_booking(activity, time(10, 0))
        url = reverse("django_bookings:booking-swap-options", args=[booking.pk])

        response = client.get(url, {"employee_id": employee.pk})

        assert response.status_code == 200
        assert response.json()["has_compatible_bookings"] is False
        assert response.json()["reason"] == "No conflicting bookings - direct assignment possible"

    def test_swap(self, client, activity, open_activity, employee, other_employee, make_booking):
        first = make_booking(activity, time(10, 0), employee=employee)
        second = make_booking(open_activity, time(14, 0), employee=other_employee)

        response = put_json(
            client,
            reverse("django_bookings:booking-swap"),
            {"booking1_id": first.pk, "booking2_id": second.pk},
        )

        assert response.status_code == 200
        first.refresh_from_db()
        assert first.employee == other_employee

    def test_swap_same_booking_rejected(self, client, activity, make_booking):
        booking = make_booking(activity, time(10, 0))

        response = put_json(
            client,
            reverse("django_bookings:booking-swap"),
            {"booking1_id": booking.pk, "booking2_id": booking.pk},
        )

        assert response.status_code == 400
