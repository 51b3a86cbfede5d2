"""Availability calculation for activities.

Provides:
- compute_day_slots: Bookable windows of an activity on a date
- compute_month_availability: Dates of a month with at least one open window
- is_window_available: Whether a specific start time can be booked
- earliest_bookable_date: Today plus the configured lead time
- times_overlap: Half-open interval overlap test

All functions are read-only. Bookings are treated under the exclusive-slot
policy: any non-cancelled booking fully occupies its window.
"""

import calendar
import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, time, timedelta

from django.utils import timezone

from .catalog import list_active_slots
from .conf import get_lead_time_days, get_open_slot_provider
from .exceptions import InvalidActivityConfig
from .models import Activity
from .selectors import active_bookings_for_activity, active_bookings_for_activity_between

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DaySlot:
    """A window on a specific date and whether it can still be booked."""

    start_time: time
    end_time: time
    available: bool

    def to_dict(self) -> dict:
        return {
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "available": self.available,
        }


def times_overlap(start_a, end_a, start_b, end_b) -> bool:
    """Check if two [start, end) windows overlap."""
    return start_a < end_b and start_b < end_a


def earliest_bookable_date(today: date | None = None) -> date:
    """First date that satisfies the booking lead time."""
    if today is None:
        today = timezone.localdate()
    return today + timedelta(days=get_lead_time_days())


def _check_activity(activity: Activity) -> None:
    if activity.duration_minutes is None or activity.duration_minutes <= 0:
        raise InvalidActivityConfig(activity, "duration_minutes must be positive")


def _resolve_participant_count(activity: Activity, participant_count: int | None) -> int:
    # Unspecified head count falls back to the smallest group the activity accepts
    if participant_count is None or participant_count <= 0:
        return activity.min_participants
    return participant_count


def _day_slots(activity, booking_date, participant_count, bookings, active_slots) -> list[DaySlot]:
    # Inactive activities take no bookings, so none of their windows are open
    participants_ok = activity.active and activity.accepts_participants(participant_count)
    bookings = [
        b for b in bookings
        if b.activity_id == activity.pk and b.booking_date == booking_date and b.is_active
    ]

    if active_slots:
        taken = {b.start_time for b in bookings}
        result = []
        for slot in active_slots:
            booking_end = activity.end_time_for(slot.start_time)
            fits = booking_end is not None and booking_end <= slot.end_time
            result.append(
                DaySlot(
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                    available=participants_ok and fits and slot.start_time not in taken,
                )
            )
        return result

    windows = sorted(set(get_open_slot_provider().candidate_windows(activity, booking_date)))
    return [
        DaySlot(
            start_time=start,
            end_time=end,
            available=participants_ok and not any(
                times_overlap(start, end, b.start_time, b.end_time) for b in bookings
            ),
        )
        for start, end in windows
    ]


def compute_day_slots(
    activity: Activity,
    booking_date: date,
    participant_count: int | None = None,
    existing_bookings=None,
) -> list[DaySlot]:
    """
    Compute the bookable windows of an activity on a date.

    Every window of an inactive activity is unavailable.

    Time-restricted activities yield one entry per active slot. A slot is
    unavailable when the participant count is outside the activity bounds,
    when the activity duration does not fit inside it, or when a
    non-cancelled booking already starts there.

    Open-ended activities yield the windows of the configured slot provider;
    a window is unavailable when the participant count is out of range or it
    overlaps a non-cancelled booking.

    Args:
        activity: The activity to schedule
        booking_date: Date to compute
        participant_count: Requested head count (defaults to min_participants)
        existing_bookings: Bookings to check against (loaded when None)

    Returns:
        List of DaySlot ordered by start_time

    Raises:
        InvalidActivityConfig: If the activity duration is not positive
    """
    _check_activity(activity)
    count = _resolve_participant_count(activity, participant_count)
    if existing_bookings is None:
        existing_bookings = list(active_bookings_for_activity(activity, booking_date))

    slots = _day_slots(activity, booking_date, count, existing_bookings, list_active_slots(activity))
    logger.debug(
        f"Activity {activity.pk} on {booking_date}: "
        f"{sum(s.available for s in slots)}/{len(slots)} slots available for {count} participants"
    )
    return slots


def is_window_available(
    activity: Activity,
    booking_date: date,
    start_time: time,
    participant_count: int,
    existing_bookings=None,
) -> bool:
    """
    Check whether a booking can start at start_time on booking_date.

    For time-restricted activities the matching day slot decides. Open-ended
    activities accept any start time whose window overlaps no booking.
    """
    _check_activity(activity)
    if existing_bookings is None:
        existing_bookings = list(active_bookings_for_activity(activity, booking_date))

    active_slots = list_active_slots(activity)
    if active_slots:
        slots = _day_slots(activity, booking_date, participant_count, existing_bookings, active_slots)
        return any(s.start_time == start_time and s.available for s in slots)

    end_time = activity.end_time_for(start_time)
    if end_time is None or not activity.active or not activity.accepts_participants(participant_count):
        return False
    return not any(
        times_overlap(start_time, end_time, b.start_time, b.end_time)
        for b in existing_bookings
        if b.activity_id == activity.pk and b.booking_date == booking_date and b.is_active
    )


def compute_month_availability(
    activity: Activity,
    anchor_date: date,
    participant_count: int | None = None,
    existing_bookings=None,
    today: date | None = None,
) -> set[str]:
    """
    Compute the dates of a month that have at least one available slot.

    Dates before today + lead time are never included, and an inactive
    activity has no available dates.

    Args:
        activity: The activity to schedule
        anchor_date: Any date inside the month to compute
        participant_count: Requested head count (defaults to min_participants)
        existing_bookings: Bookings of the month (loaded when None)
        today: Override for the current date

    Returns:
        Set of ISO formatted dates (YYYY-MM-DD)
    """
    _check_activity(activity)
    if not activity.active:
        return set()
    count = _resolve_participant_count(activity, participant_count)

    first_day = anchor_date.replace(day=1)
    last_day = anchor_date.replace(day=calendar.monthrange(anchor_date.year, anchor_date.month)[1])

    if existing_bookings is None:
        existing_bookings = active_bookings_for_activity_between(activity, first_day, last_day)

    bookings_by_date = defaultdict(list)
    for booking in existing_bookings:
        bookings_by_date[booking.booking_date].append(booking)

    active_slots = list_active_slots(activity)
    available_dates = set()
    current = max(first_day, earliest_bookable_date(today))
    while current <= last_day:
        slots = _day_slots(activity, current, count, bookings_by_date[current], active_slots)
        if any(slot.available for slot in slots):
            available_dates.add(current.isoformat())
        current += timedelta(days=1)

    return available_dates
