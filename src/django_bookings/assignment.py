"""Employee assignment and swap negotiation.

Provides:
- check_direct_assignment: Whether an employee is free for a booking
- compute_swap_options: Bookings the candidate could hand over in exchange
- assign_employee: Directly assign an employee to a booking
- swap_employees: Exchange the employees of two bookings
- find_available_employee: First free assignable employee for a window

An employee conflicts with a booking when they already hold another
non-cancelled booking on the same date whose window overlaps it.
"""

import logging
from dataclasses import asdict, dataclass, field

from django.db import transaction

from .availability import times_overlap
from .conf import revalidate_swaps
from .exceptions import (
    BookingNotFound,
    EmployeeNotAssignable,
    EmployeeUnavailable,
    InvalidStateTransition,
    SwapCycleInvalid,
    SwapPreconditionChanged,
)
from .models import Activity, Booking, BookingStatus, Employee
from .selectors import assignable_employees

logger = logging.getLogger(__name__)

NO_CONFLICT_REASON = "No conflicting bookings - direct assignment possible"
NO_COMPATIBLE_REASON = (
    "No compatible bookings found - no other booking shares location, category "
    "and time, or the exchange would conflict in one or both directions"
)


@dataclass
class AssignmentCheck:
    """Result of checking a direct assignment."""

    conflict_free: bool
    conflicting_booking: Booking | None = None


@dataclass
class CompatibleBooking:
    """A booking whose employee can be exchanged with the target booking's."""

    booking_id: int
    activity_name: str
    customer_name: str
    is_guest_booking: bool
    number_of_participants: int
    start_time: str
    end_time: str
    date: str

    @classmethod
    def from_booking(cls, booking: Booking) -> "CompatibleBooking":
        return cls(
            booking_id=booking.pk,
            activity_name=booking.activity.name,
            customer_name=booking.customer_name,
            is_guest_booking=booking.is_guest_booking,
            number_of_participants=booking.number_of_participants,
            start_time=booking.start_time.strftime("%H:%M"),
            end_time=booking.end_time.strftime("%H:%M"),
            date=booking.booking_date.isoformat(),
        )


@dataclass
class SwapOptions:
    """
    Outcome of a swap negotiation for reassigning a booking.

    Attributes:
        has_compatible_bookings: True when at least one swap is possible
        reason: Why no swap is offered (empty when swaps exist)
        compatible_bookings: Swap partners in discovery order
        conflicting_booking_id: The candidate's booking that blocks direct assignment
    """

    has_compatible_bookings: bool
    reason: str = ""
    compatible_bookings: list[CompatibleBooking] = field(default_factory=list)
    conflicting_booking_id: int | None = None
    current_employee_name: str = ""
    new_employee_name: str = ""
    location: str = ""
    category: str = ""
    start_time: str = ""
    end_time: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


def _employee_bookings(employee: Employee, booking_date, all_bookings=None) -> list[Booking]:
    """Non-cancelled bookings held by an employee on a date."""
    if all_bookings is None:
        return list(
            Booking.objects.filter(employee=employee, booking_date=booking_date)
            .exclude(status=BookingStatus.CANCELLED)
            .select_related("activity", "activity__category", "user")
            .order_by("start_time", "id")
        )
    return [
        b for b in all_bookings
        if b.employee_id == employee.pk and b.booking_date == booking_date and b.is_active
    ]


def find_conflict(
    employee: Employee,
    booking_date,
    start_time,
    end_time,
    all_bookings=None,
    exclude_ids=(),
) -> Booking | None:
    """
    Find a booking of the employee that overlaps the given window.

    Args:
        employee: Employee to check
        booking_date: Date of the window
        start_time: Window start
        end_time: Window end
        all_bookings: Bookings to search (loaded when None)
        exclude_ids: Booking ids to ignore, e.g. the booking being reassigned

    Returns:
        The first overlapping booking, or None when the employee is free
    """
    excluded = {str(pk) for pk in exclude_ids}
    for booking in _employee_bookings(employee, booking_date, all_bookings):
        if str(booking.pk) in excluded:
            continue
        if times_overlap(start_time, end_time, booking.start_time, booking.end_time):
            return booking
    return None


def check_direct_assignment(booking: Booking, employee: Employee, all_bookings=None) -> AssignmentCheck:
    """
    Check whether an employee can take a booking without a swap.

    Args:
        booking: The booking to assign
        employee: The candidate employee
        all_bookings: Bookings to check against (loaded when None)

    Returns:
        AssignmentCheck with the first conflicting booking, if any
    """
    conflict = find_conflict(
        employee,
        booking.booking_date,
        booking.start_time,
        booking.end_time,
        all_bookings,
        exclude_ids=[booking.pk],
    )
    return AssignmentCheck(conflict_free=conflict is None, conflicting_booking=conflict)


def _interchangeable(a: Booking, b: Booking) -> bool:
    """Same location, category and time window."""
    return (
        a.activity.category_id is not None
        and a.activity.category_id == b.activity.category_id
        and a.activity.has_same_location_as(b.activity)
        and a.start_time == b.start_time
        and a.end_time == b.end_time
    )


def compute_swap_options(booking: Booking, candidate: Employee, all_bookings=None) -> SwapOptions:
    """
    Work out how a candidate employee could take over a booking.

    When the candidate is free no swap is needed. Otherwise each of the
    candidate's bookings on that date that is interchangeable with the target
    (same location, category, start and end) is offered, provided the target's
    current employee is free for it once released from the target, and the
    candidate is free for the target once released from it.

    Args:
        booking: The booking to reassign
        candidate: The employee who should take it
        all_bookings: Bookings to check against (loaded when None)

    Returns:
        SwapOptions describing the possible exchanges
    """
    check = check_direct_assignment(booking, candidate, all_bookings)
    if check.conflict_free:
        return SwapOptions(has_compatible_bookings=False, reason=NO_CONFLICT_REASON)

    activity = booking.activity
    current = booking.employee
    options = SwapOptions(
        has_compatible_bookings=False,
        conflicting_booking_id=check.conflicting_booking.pk,
        current_employee_name=current.full_name if current else "",
        new_employee_name=candidate.full_name,
        location=activity.location,
        category=activity.category.name if activity.category_id else "N/A",
        start_time=booking.start_time.strftime("%H:%M"),
        end_time=booking.end_time.strftime("%H:%M"),
    )

    if current is None:
        options.reason = "Booking has no assigned employee to exchange"
        return options
    if current.pk == candidate.pk:
        options.reason = "Employee is already assigned to this booking"
        return options

    for other in _employee_bookings(candidate, booking.booking_date, all_bookings):
        if other.pk == booking.pk or not _interchangeable(booking, other):
            logger.debug(f"Booking {other.pk} not interchangeable with booking {booking.pk}")
            continue

        current_can_take_other = find_conflict(
            current,
            other.booking_date,
            other.start_time,
            other.end_time,
            all_bookings,
            exclude_ids=[booking.pk],
        ) is None
        candidate_can_take_booking = find_conflict(
            candidate,
            booking.booking_date,
            booking.start_time,
            booking.end_time,
            all_bookings,
            exclude_ids=[booking.pk, other.pk],
        ) is None

        if current_can_take_other and candidate_can_take_booking:
            options.compatible_bookings.append(CompatibleBooking.from_booking(other))
        else:
            logger.debug(
                f"Booking {other.pk} rejected for swap: current free={current_can_take_other}, "
                f"candidate free={candidate_can_take_booking}"
            )

    if not options.compatible_bookings:
        options.reason = NO_COMPATIBLE_REASON
        return options

    options.has_compatible_bookings = True
    logger.info(
        f"Found {len(options.compatible_bookings)} compatible bookings for swap on booking "
        f"{booking.pk}: {current.full_name} -> {candidate.full_name}"
    )
    return options


def ensure_assignable(employee: Employee, activity: Activity) -> None:
    """
    Check that an employee may work an activity.

    Raises:
        EmployeeNotAssignable: If the employee is disabled or not listed on
            an activity that restricts employee selection
    """
    if not employee.is_enabled:
        raise EmployeeNotAssignable(employee, activity, f"Employee '{employee}' is disabled")
    if activity.employee_selection_enabled and not activity.employees.filter(pk=employee.pk).exists():
        raise EmployeeNotAssignable(employee, activity)


@transaction.atomic
def find_available_employee(activity: Activity, booking_date, start_time, end_time) -> Employee | None:
    """
    First enabled, assignable employee with no overlapping booking.

    The returned employee stays row-locked until the surrounding transaction
    ends, so a concurrent admission for another activity cannot claim the
    same person for an overlapping window. Conflicts are re-checked once the
    lock is held; a candidate taken in the meantime is skipped.
    """
    for candidate in assignable_employees(activity):
        if find_conflict(candidate, booking_date, start_time, end_time) is not None:
            continue

        # Lock the employee so concurrent assignments of the same person serialise
        employee = Employee.objects.select_for_update().get(pk=candidate.pk)
        conflict = find_conflict(employee, booking_date, start_time, end_time)
        if conflict is None:
            return employee
        logger.info(f"Employee {employee.pk} was claimed by booking {conflict.pk} while assigning, trying next")
    return None


@transaction.atomic
def assign_employee(booking: Booking, employee: Employee) -> Booking:
    """
    Directly assign an employee to a booking.

    Args:
        booking: The booking to update
        employee: The employee to assign

    Returns:
        The updated Booking

    Raises:
        InvalidStateTransition: If the booking is cancelled
        EmployeeNotAssignable: If the employee may not work this activity
        EmployeeUnavailable: If the employee holds an overlapping booking
    """
    # Lock the employee so concurrent assignments of the same person serialise
    employee = Employee.objects.select_for_update().get(pk=employee.pk)
    booking = Booking.objects.select_for_update().select_related("activity").get(pk=booking.pk)

    if booking.status == BookingStatus.CANCELLED:
        raise InvalidStateTransition(
            booking.status, booking.status,
            "Cannot assign an employee to a cancelled booking",
        )

    ensure_assignable(employee, booking.activity)

    check = check_direct_assignment(booking, employee)
    if not check.conflict_free:
        raise EmployeeUnavailable(employee, check.conflicting_booking)

    booking.employee = employee
    booking.save(update_fields=["employee", "updated_at"])
    logger.info(f"Assigned employee {employee.pk} to booking {booking.pk}")
    return booking


def _swap_blocks(booking1: Booking, booking2: Booking) -> list[str]:
    """Reasons the exchange would create a conflict, checked against current state."""
    blocks = []
    if not _interchangeable(booking1, booking2):
        blocks.append("Bookings differ in location, category or time")

    exclude = [booking1.pk, booking2.pk]
    for target, incoming in ((booking1, booking2.employee), (booking2, booking1.employee)):
        if incoming is None:
            continue
        conflict = find_conflict(
            incoming, target.booking_date, target.start_time, target.end_time, exclude_ids=exclude,
        )
        if conflict is not None:
            blocks.append(
                f"Employee '{incoming}' conflicts with booking {conflict.pk} when taking booking {target.pk}"
            )
    return blocks


def _booking_pk(booking_id) -> int:
    """Coerce a booking id, treating anything non-numeric as a missing booking."""
    try:
        return int(booking_id)
    except (TypeError, ValueError):
        raise BookingNotFound(booking_id)


@transaction.atomic
def swap_employees(booking1_id, booking2_id) -> tuple[Booking, Booking]:
    """
    Exchange the employees of two bookings.

    The exchange is unconditional: compute_swap_options is where the swap is
    vetted. Set BOOKINGS_REVALIDATE_SWAPS = True to re-check both assignments
    against current state before committing.

    Rows are locked in ascending primary key order so concurrent swaps
    sharing a booking cannot deadlock.

    Args:
        booking1_id: First booking id
        booking2_id: Second booking id

    Returns:
        Tuple of the two updated bookings

    Raises:
        SwapCycleInvalid: If both ids are the same
        BookingNotFound: If either booking does not exist
        SwapPreconditionChanged: If revalidation is enabled and fails
    """
    if str(booking1_id) == str(booking2_id):
        raise SwapCycleInvalid(booking1_id)

    pk1 = _booking_pk(booking1_id)
    pk2 = _booking_pk(booking2_id)

    locked = (
        Booking.objects.select_for_update()
        .filter(pk__in=[pk1, pk2])
        .order_by("pk")
    )
    by_pk = {b.pk: b for b in locked}

    booking1 = by_pk.get(pk1)
    if booking1 is None:
        raise BookingNotFound(booking1_id)
    booking2 = by_pk.get(pk2)
    if booking2 is None:
        raise BookingNotFound(booking2_id)

    if revalidate_swaps():
        blocks = _swap_blocks(booking1, booking2)
        if blocks:
            raise SwapPreconditionChanged(blocks)

    booking1.employee, booking2.employee = booking2.employee, booking1.employee
    booking1.save(update_fields=["employee", "updated_at"])
    booking2.save(update_fields=["employee", "updated_at"])

    logger.info(f"Swapped employees between bookings {booking1.pk} and {booking2.pk}")
    return booking1, booking2
