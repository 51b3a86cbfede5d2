"""Concurrency tests for booking admission.

These tests verify that the one-booking-per-slot and one-employee-per-window
guarantees hold when requests race each other.

The threaded tests need a database with row locks and concurrent writers
and are skipped on the default in-memory SQLite database. To run them,
point the test settings at PostgreSQL:

    pip install -e ".[test,postgres]"
    POSTGRES_DB=bookings_test POSTGRES_USER=postgres POSTGRES_PASSWORD=postgres pytest tests/test_concurrency.py
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import time, timedelta
from unittest import mock

import pytest
from django.db import IntegrityError, connection
from django.utils import timezone
from freezegun import freeze_time

from django_bookings import services
from django_bookings.exceptions import SlotUnavailable
from django_bookings.models import Booking, BookingStatus
from django_bookings.value_objects import BookingRequest, GuestParty

from .conftest import FROZEN_NOW, TOMORROW


def make_request(activity, name, booking_date=TOMORROW):
    return BookingRequest(
        activity=activity,
        party=GuestParty(name=name, phone="0722000111"),
        booking_date=booking_date,
        start_time=time(9, 0),
        number_of_participants=2,
    )


@pytest.mark.django_db
@freeze_time(FROZEN_NOW)
class TestConstraintBackstop:
    """The unique constraint catches admissions that slip past the pre-check."""

    def test_integrity_error_mapped_to_slot_unavailable(self, activity, slot, make_booking):
        """Simulate a racer that committed between the check and the insert."""
        make_booking(activity, time(9, 0))

        with mock.patch.object(services, "is_window_available", return_value=True):
            with pytest.raises(SlotUnavailable):
                services.admit(make_request(activity, "Late"))

        assert Booking.objects.filter(activity=activity).count() == 1

    def test_unknown_integrity_error_reraised(self, activity, slot):
        error = IntegrityError("CHECK constraint failed: something_else")

        with mock.patch.object(Booking.objects, "create", side_effect=error):
            with pytest.raises(IntegrityError):
                services.admit(make_request(activity, "Dan"))


@pytest.mark.django_db(transaction=True)
@pytest.mark.skipif(
    connection.vendor != "postgresql",
    reason="Row locks need a database with concurrent writers",
)
class TestAdmissionConcurrency:
    """Verify only one of many concurrent admissions wins a slot."""

    def test_concurrent_admissions_single_winner(self, activity, slot):
        booking_date = timezone.localdate() + timedelta(days=30)
        results = []
        errors = []

        def attempt(index):
            try:
                return services.admit(make_request(activity, f"Guest {index}", booking_date))
            except SlotUnavailable as e:
                return e
            finally:
                connection.close()

        with ThreadPoolExecutor(max_workers=5) as executor:
            futures = [executor.submit(attempt, i) for i in range(10)]
            for future in as_completed(futures):
                result = future.result()
                if isinstance(result, Exception):
                    errors.append(result)
                else:
                    results.append(result)

        assert len(results) == 1
        assert len(errors) == 9
        assert Booking.objects.filter(
            activity=activity, booking_date=booking_date,
        ).exclude(status=BookingStatus.CANCELLED).count() == 1


@pytest.mark.django_db(transaction=True)
@pytest.mark.skipif(
    connection.vendor != "postgresql",
    reason="Row locks need a database with concurrent writers",
)
class TestEmployeeAssignmentConcurrency:
    """Verify concurrent admissions for different activities never share an employee."""

    def test_overlapping_admissions_claim_employee_once(self, activity, slot, open_activity, employee):
        """Both bookings start at 09:00 on different activities; only one gets Ana."""
        booking_date = timezone.localdate() + timedelta(days=30)

        def attempt(target, name):
            try:
                return services.admit(make_request(target, name, booking_date))
            finally:
                connection.close()

        with ThreadPoolExecutor(max_workers=2) as executor:
            futures = [
                executor.submit(attempt, activity, "Guest Kayak"),
                executor.submit(attempt, open_activity, "Guest Paddle"),
            ]
            bookings = [future.result() for future in as_completed(futures)]

        assert len(bookings) == 2
        assert sorted(b.employee_id is None for b in bookings) == [False, True]
        assert Booking.objects.filter(employee=employee, booking_date=booking_date).count() == 1
