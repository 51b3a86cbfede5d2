"""Immutable value objects passed into and out of the booking services."""

from dataclasses import dataclass
from datetime import date, time
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from .models import Activity, Employee


@dataclass(frozen=True)
class RegisteredParty:
    """A booking made by a registered user."""

    user: object

    @property
    def is_guest(self) -> bool:
        return False


@dataclass(frozen=True)
class GuestParty:
    """A booking made without an account, identified by contact details."""

    name: str
    phone: str
    email: str = ""

    @property
    def is_guest(self) -> bool:
        return True


BookingParty = Union[RegisteredParty, GuestParty]


@dataclass(frozen=True)
class BookingRequest:
    """A request to admit a new booking.

    Attributes:
        activity: The activity being booked
        party: Who the booking is for (registered user or guest)
        booking_date: Calendar date of the booking
        start_time: Requested start; the end is derived from the activity duration
        number_of_participants: Head count, checked against activity bounds
        employee: Optional explicitly requested employee
        notes: Free-form customer notes
    """

    activity: "Activity"
    party: BookingParty
    booking_date: date
    start_time: time
    number_of_participants: int
    employee: "Employee | None" = None
    notes: str = ""
