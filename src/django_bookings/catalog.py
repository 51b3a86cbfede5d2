"""Time slot catalog for activities.

Provides:
- list_active_slots: Active slots of an activity, ascending by start time
- has_time_restriction: Whether the activity only accepts slot start times
- validate_slot_definition: Check that a window starts before it ends
- find_matching_slot: Slot a booking window fits into
- add_time_slot / update_time_slot / remove_time_slot: Admin maintenance
"""

import logging

from django.db import transaction

from .exceptions import InvalidRange
from .models import Activity, ActivityTimeSlot

logger = logging.getLogger(__name__)


def list_active_slots(activity: Activity) -> list[ActivityTimeSlot]:
    """
    Get the active time slots of an activity.

    Args:
        activity: The activity to inspect

    Returns:
        Active ActivityTimeSlot instances ordered by start_time
    """
    return list(activity.time_slots.filter(active=True).order_by("start_time"))


def has_time_restriction(activity: Activity) -> bool:
    """True if bookings must start at one of the activity's active slots."""
    return activity.time_slots.filter(active=True).exists()


def validate_slot_definition(start_time, end_time) -> None:
    """
    Validate a slot window.

    Raises:
        InvalidRange: If start_time is not strictly before end_time
    """
    if start_time >= end_time:
        raise InvalidRange(start_time, end_time)


def find_matching_slot(activity: Activity, start_time, end_time) -> ActivityTimeSlot | None:
    """Return the active slot starting at start_time that can hold end_time, if any."""
    for slot in list_active_slots(activity):
        if slot.is_valid_booking_time(start_time, end_time):
            return slot
    return None


@transaction.atomic
def add_time_slot(activity: Activity, start_time, end_time, active: bool = True) -> ActivityTimeSlot:
    """
    Add a time slot to an activity.

    Raises:
        InvalidRange: If start_time is not strictly before end_time
    """
    validate_slot_definition(start_time, end_time)
    slot = ActivityTimeSlot.objects.create(
        activity=activity,
        start_time=start_time,
        end_time=end_time,
        active=active,
    )
    logger.info(f"Added time slot {slot.pk} to activity {activity.pk}: {start_time}-{end_time}")
    return slot


@transaction.atomic
def update_time_slot(
    slot: ActivityTimeSlot,
    *,
    start_time=None,
    end_time=None,
    active: bool | None = None,
) -> ActivityTimeSlot:
    """
    Update a time slot. Fields left as None are unchanged.

    Existing bookings are never touched; they keep the window they were made for.

    Raises:
        InvalidRange: If the resulting window is not valid
    """
    new_start = start_time if start_time is not None else slot.start_time
    new_end = end_time if end_time is not None else slot.end_time
    validate_slot_definition(new_start, new_end)

    slot.start_time = new_start
    slot.end_time = new_end
    if active is not None:
        slot.active = active
    slot.save(update_fields=["start_time", "end_time", "active", "updated_at"])
    logger.info(f"Updated time slot {slot.pk}: {new_start}-{new_end} active={slot.active}")
    return slot


@transaction.atomic
def remove_time_slot(slot: ActivityTimeSlot) -> None:
    """Delete a time slot. Bookings made while it was active remain valid."""
    slot_pk = slot.pk
    slot.delete()
    logger.info(f"Removed time slot {slot_pk}")
