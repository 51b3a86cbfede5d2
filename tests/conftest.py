"""Pytest configuration for django-bookings tests."""

from datetime import date, time
from decimal import Decimal

import pytest

from django_bookings.conf import clear_provider_cache
from django_bookings.models import (
    Activity,
    ActivityCategory,
    ActivityTimeSlot,
    Booking,
    BookingStatus,
    Employee,
    EmployeeWorkHour,
)

# Time is frozen here in tests that depend on "today"; with a one day lead
# time the earliest bookable date is TOMORROW.
FROZEN_NOW = "2025-06-01 12:00:00"
TODAY = date(2025, 6, 1)
TOMORROW = date(2025, 6, 2)


@pytest.fixture(autouse=True)
def _reset_provider_cache():
    clear_provider_cache()
    yield
    clear_provider_cache()


@pytest.fixture
def user(db, django_user_model):
    """Create a test user."""
    return django_user_model.objects.create_user(
        username="testuser",
        password="testpass123",
        first_name="Maria",
        last_name="Popescu",
        email="maria@example.com",
    )


@pytest.fixture
def category(db):
    return ActivityCategory.objects.create(name="Water Sports")


@pytest.fixture
def other_category(db):
    return ActivityCategory.objects.create(name="Hiking")


@pytest.fixture
def activity(db, category):
    """Time-restricted activity: 2-8 participants, two hour duration."""
    return Activity.objects.create(
        name="Kayak Tour",
        category=category,
        location="Harbour Pier",
        city="Constanta",
        min_participants=2,
        max_participants=8,
        duration_minutes=120,
        price_per_person=Decimal("25.00"),
        deposit_percent=Decimal("20.00"),
    )


@pytest.fixture
def slot(db, activity):
    """Full-day slot so any 09:00 start fits."""
    return ActivityTimeSlot.objects.create(
        activity=activity,
        start_time=time(9, 0),
        end_time=time(17, 0),
    )


@pytest.fixture
def open_activity(db, category):
    """Activity without time slots, bookable at any start time."""
    return Activity.objects.create(
        name="Paddle Board Rental",
        category=category,
        location="Harbour Pier",
        city="Constanta",
        min_participants=1,
        max_participants=4,
        duration_minutes=60,
        price_per_person=Decimal("15.00"),
    )


@pytest.fixture
def employee(db):
    return Employee.objects.create(first_name="Ana", last_name="Pop")


@pytest.fixture
def other_employee(db):
    return Employee.objects.create(first_name="Ion", last_name="Ionescu")


@pytest.fixture
def work_hours(db, employee):
    """Employee works 09:00-12:00 tomorrow."""
    return EmployeeWorkHour.objects.create(
        employee=employee,
        work_date=TOMORROW,
        start_time=time(9, 0),
        end_time=time(12, 0),
    )


@pytest.fixture
def make_booking(db):
    """Factory creating bookings directly, bypassing admission checks."""

    def _make_booking(activity, start_time, end_time=None, booking_date=TOMORROW, **kwargs):
        if end_time is None:
            end_time = activity.end_time_for(start_time)
        defaults = {
            "guest_name": "Guest",
            "guest_phone": "0700000000",
            "number_of_participants": activity.min_participants,
            "total_price": activity.price_per_person * activity.min_participants,
            "status": BookingStatus.PENDING,
        }
        if kwargs.get("user") is not None:
            defaults["guest_name"] = ""
            defaults["guest_phone"] = ""
        defaults.update(kwargs)
        return Booking.objects.create(
            activity=activity,
            booking_date=booking_date,
            start_time=start_time,
            end_time=end_time,
            **defaults,
        )

    return _make_booking
