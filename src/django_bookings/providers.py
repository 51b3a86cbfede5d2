"""Candidate window providers for activities without time slots.

Providers are registered via settings:

    BOOKINGS_OPEN_SLOT_PROVIDER = 'myapp.slots.FixedGridProvider'

Example provider in a consuming project:

    class FixedGridProvider(BaseSlotProvider):
        def candidate_windows(self, activity, booking_date):
            return [(time(9, 0), time(11, 0)), (time(14, 0), time(16, 0))]
"""

from datetime import datetime, time, timedelta
from typing import TYPE_CHECKING

from .conf import get_slot_step_minutes
from .models import EmployeeWorkHour
from .selectors import assignable_employees

if TYPE_CHECKING:
    from .models import Activity


class BaseSlotProvider:
    """Base class for open-ended activity window providers."""

    def candidate_windows(self, activity: "Activity", booking_date) -> list[tuple[time, time]]:
        """
        Candidate (start_time, end_time) windows for an activity on a date.

        Each window must span exactly activity.duration_minutes. Availability
        is decided by the caller.
        """
        return []


class WorkHourSlotProvider(BaseSlotProvider):
    """
    Synthesise windows from the work hours of assignable employees.

    Windows start at the beginning of each work block and advance by
    BOOKINGS_SLOT_STEP_MINUTES while the whole duration still fits.
    """

    def candidate_windows(self, activity, booking_date):
        step = timedelta(minutes=get_slot_step_minutes())
        if step <= timedelta(0):
            raise ValueError("BOOKINGS_SLOT_STEP_MINUTES must be positive")
        duration = timedelta(minutes=activity.duration_minutes)

        work_hours = EmployeeWorkHour.objects.filter(
            work_date=booking_date,
            employee__in=assignable_employees(activity),
        )

        windows = set()
        for work_hour in work_hours:
            current = datetime.combine(booking_date, work_hour.start_time)
            shift_end = datetime.combine(booking_date, work_hour.end_time)
            while current + duration <= shift_end:
                windows.add((current.time(), (current + duration).time()))
                current += step

        return sorted(windows)
