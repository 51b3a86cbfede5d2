"""Booking admission and lifecycle services.

All write operations are atomic transactions. Admission locks the activity
row so concurrent requests for the same activity are serialised, and locks
the assigned employee so admissions for different activities cannot claim
the same person for overlapping windows. The conditional unique constraint
on (activity, booking_date, start_time) is the backstop when the lock is not
honoured by the database.
"""

import logging
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal

from django.db import IntegrityError, transaction
from django.utils import timezone

from .assignment import ensure_assignable, find_available_employee, find_conflict
from .availability import earliest_bookable_date, is_window_available
from .catalog import find_matching_slot, has_time_restriction
from .conf import get_payment_grace_hours
from .exceptions import (
    EmployeeUnavailable,
    GuestInfoIncomplete,
    InvalidActivityConfig,
    InvalidPayment,
    InvalidStateTransition,
    LeadTimeViolation,
    ParticipantCountOutOfRange,
    SlotNotFound,
    SlotUnavailable,
    ValidationError,
)
from .models import Activity, Booking, BookingStatus, Employee, PaymentStatus, PaymentType
from .selectors import get_activity, get_booking, get_employee  # noqa: F401
from .value_objects import BookingRequest, GuestParty

logger = logging.getLogger(__name__)

SLOT_CONSTRAINT = "bookings_booking_one_active_per_slot"
CENTS = Decimal("0.01")


def _get_constraint_name(exc: IntegrityError) -> str | None:
    """Extract PostgreSQL constraint name from IntegrityError.

    Returns constraint name if available, None otherwise.
    """
    if exc.__cause__ and hasattr(exc.__cause__, "diag"):
        return exc.__cause__.diag.constraint_name
    return None


def _is_slot_conflict(exc: IntegrityError) -> bool:
    constraint = _get_constraint_name(exc)
    if constraint is not None:
        return constraint == SLOT_CONSTRAINT
    # SQLite reports the columns of the violated unique index instead
    message = str(exc)
    return "UNIQUE" in message and "booking_date" in message and "start_time" in message


def calculate_total_price(activity: Activity, participants: int) -> Decimal:
    """Price per person times head count."""
    return (activity.price_per_person * participants).quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_deposit(total_price: Decimal, deposit_percent: Decimal) -> Decimal:
    """Deposit share of the total, rounded half-up to cents."""
    return (total_price * deposit_percent / Decimal("100")).quantize(CENTS, rounding=ROUND_HALF_UP)


def _validate_party(party) -> dict:
    """Return the booking fields identifying the party."""
    if isinstance(party, GuestParty):
        name = (party.name or "").strip()
        phone = (party.phone or "").strip()
        missing = [label for label, value in (("name", name), ("phone", phone)) if not value]
        if missing:
            raise GuestInfoIncomplete(missing)
        return {
            "user": None,
            "guest_name": name,
            "guest_phone": phone,
            "guest_email": (party.email or "").strip(),
        }

    if getattr(party, "user", None) is None:
        raise ValidationError("Registered booking requires a user")
    return {"user": party.user, "guest_name": "", "guest_phone": "", "guest_email": ""}


def _resolve_employee(request: BookingRequest, activity: Activity, end_time) -> Employee | None:
    if request.employee is None:
        return find_available_employee(activity, request.booking_date, request.start_time, end_time)

    employee = Employee.objects.select_for_update().get(pk=request.employee.pk)
    ensure_assignable(employee, activity)
    conflict = find_conflict(employee, request.booking_date, request.start_time, end_time)
    if conflict is not None:
        raise EmployeeUnavailable(employee, conflict)
    return employee


@transaction.atomic
def admit(request: BookingRequest) -> Booking:
    """
    Admit a new booking.

    Checks run in this order, and the first failure wins:
    participant bounds, slot match, slot availability, lead time, party
    details, employee.

    Args:
        request: BookingRequest describing the booking

    Returns:
        Created Booking in PENDING / UNPAID state

    Raises:
        InvalidActivityConfig: If the activity is inactive or misconfigured
        ParticipantCountOutOfRange: If the head count is outside activity bounds
        SlotNotFound: If no bookable window starts at the requested time
        SlotUnavailable: If the window is already taken
        LeadTimeViolation: If the date is earlier than today + lead time
        GuestInfoIncomplete: If a guest booking lacks name or phone
        EmployeeNotAssignable: If the requested employee may not work the activity
        EmployeeUnavailable: If the requested employee is busy
    """
    # Lock the activity to prevent race conditions
    activity = Activity.objects.select_for_update().get(pk=request.activity.pk)

    if not activity.active:
        raise InvalidActivityConfig(activity, "activity is not active")
    if activity.duration_minutes <= 0:
        raise InvalidActivityConfig(activity, "duration_minutes must be positive")

    participants = request.number_of_participants
    if not activity.accepts_participants(participants):
        raise ParticipantCountOutOfRange(
            participants, activity.min_participants, activity.max_participants,
        )

    end_time = activity.end_time_for(request.start_time)
    if end_time is None:
        raise SlotNotFound(activity, request.start_time)
    if has_time_restriction(activity) and find_matching_slot(activity, request.start_time, end_time) is None:
        raise SlotNotFound(activity, request.start_time)

    if not is_window_available(activity, request.booking_date, request.start_time, participants):
        raise SlotUnavailable(activity, request.booking_date, request.start_time)

    earliest = earliest_bookable_date()
    if request.booking_date < earliest:
        raise LeadTimeViolation(request.booking_date, earliest)

    party_fields = _validate_party(request.party)
    employee = _resolve_employee(request, activity, end_time)

    total_price = calculate_total_price(activity, participants)

    try:
        booking = Booking.objects.create(
            activity=activity,
            employee=employee,
            booking_date=request.booking_date,
            start_time=request.start_time,
            end_time=end_time,
            number_of_participants=participants,
            total_price=total_price,
            deposit_amount=calculate_deposit(total_price, activity.deposit_percent),
            paid_amount=Decimal("0"),
            status=BookingStatus.PENDING,
            payment_status=PaymentStatus.UNPAID,
            notes=request.notes,
            **party_fields,
        )
    except IntegrityError as e:
        if _is_slot_conflict(e):
            logger.warning(
                f"Concurrent admission lost slot {request.start_time} on {request.booking_date} "
                f"for activity {activity.pk}"
            )
            raise SlotUnavailable(activity, request.booking_date, request.start_time) from e
        # Re-raise unknown IntegrityErrors
        raise

    logger.info(
        f"Booking {booking.pk} admitted: activity={activity.pk} date={booking.booking_date} "
        f"start={booking.start_time:%H:%M} participants={participants} "
        f"employee={employee.pk if employee else None} guest={booking.is_guest_booking}"
    )
    return booking


def _lock(booking: Booking) -> Booking:
    return Booking.objects.select_for_update().get(pk=booking.pk)


@transaction.atomic
def confirm_booking(booking: Booking) -> Booking:
    """
    Confirm a pending booking and start its payment window.

    Raises:
        InvalidStateTransition: If the booking is not pending
    """
    booking = _lock(booking)
    if booking.status != BookingStatus.PENDING:
        raise InvalidStateTransition(booking.status, BookingStatus.CONFIRMED)

    now = timezone.now()
    booking.status = BookingStatus.CONFIRMED
    booking.confirmed_at = now
    booking.payment_deadline = now + timedelta(hours=get_payment_grace_hours())
    booking.save(update_fields=["status", "confirmed_at", "payment_deadline", "updated_at"])

    logger.info(f"Booking {booking.pk} confirmed, payment due by {booking.payment_deadline.isoformat()}")
    return booking


@transaction.atomic
def cancel_booking(booking: Booking) -> Booking:
    """
    Cancel a pending or confirmed booking, releasing its slot.

    Raises:
        InvalidStateTransition: If the booking is already cancelled or completed
    """
    booking = _lock(booking)
    if booking.status not in (BookingStatus.PENDING, BookingStatus.CONFIRMED):
        raise InvalidStateTransition(booking.status, BookingStatus.CANCELLED)

    booking.status = BookingStatus.CANCELLED
    booking.cancelled_at = timezone.now()
    booking.save(update_fields=["status", "cancelled_at", "updated_at"])

    logger.info(f"Booking {booking.pk} cancelled")
    return booking


@transaction.atomic
def complete_booking(booking: Booking) -> Booking:
    """
    Mark a confirmed booking as completed.

    Raises:
        InvalidStateTransition: If the booking is not confirmed
    """
    booking = _lock(booking)
    if booking.status != BookingStatus.CONFIRMED:
        raise InvalidStateTransition(booking.status, BookingStatus.COMPLETED)

    booking.status = BookingStatus.COMPLETED
    booking.completed_at = timezone.now()
    booking.save(update_fields=["status", "completed_at", "updated_at"])

    logger.info(f"Booking {booking.pk} completed")
    return booking


def can_accept_payment(booking: Booking, now=None) -> bool:
    """Confirmed, not past its deadline, and not fully paid."""
    if booking.status != BookingStatus.CONFIRMED:
        return False
    now = now or timezone.now()
    if booking.payment_deadline is not None and now > booking.payment_deadline:
        return False
    return booking.payment_status != PaymentStatus.FULLY_PAID


def _payment_type(value) -> PaymentType:
    """Accept a PaymentType member or its name or value in any case."""
    try:
        return PaymentType(str(value).lower())
    except ValueError:
        raise InvalidPayment(f"Invalid payment type: {value}")


def payment_amount_for(booking: Booking, payment_type: str) -> Decimal:
    """Amount due for a payment of the given type ("DEPOSIT", "deposit", PaymentType.DEPOSIT...)."""
    payment_type = _payment_type(payment_type)
    if payment_type == PaymentType.DEPOSIT:
        return booking.deposit_amount
    if payment_type == PaymentType.REMAINING:
        return booking.remaining_amount
    return booking.total_price


@transaction.atomic
def record_payment(booking: Booking, amount: Decimal | None, payment_type: str) -> Booking:
    """
    Record a successful payment reported by the payment subsystem.

    Args:
        booking: The booking being paid
        amount: Amount received (None derives it from payment_type)
        payment_type: One of PaymentType

    Returns:
        Updated Booking

    Raises:
        InvalidPayment: If the booking cannot take payments or the amount is invalid
    """
    booking = _lock(booking)
    if not can_accept_payment(booking):
        raise InvalidPayment(f"Booking {booking.pk} cannot accept payments")

    payment_type = _payment_type(payment_type)
    due = payment_amount_for(booking, payment_type)
    amount = due if amount is None else Decimal(amount)
    if amount <= 0:
        raise InvalidPayment("Payment amount must be positive")
    if amount > booking.remaining_amount:
        raise InvalidPayment(
            f"Payment of {amount} exceeds remaining amount {booking.remaining_amount}"
        )

    booking.paid_amount += amount
    if booking.remaining_amount == 0:
        booking.payment_status = PaymentStatus.FULLY_PAID
    else:
        booking.payment_status = PaymentStatus.DEPOSIT_PAID
    booking.save(update_fields=["paid_amount", "payment_status", "updated_at"])

    logger.info(
        f"Booking {booking.pk} received {payment_type} payment of {amount}, "
        f"payment status {booking.payment_status}"
    )
    return booking


@transaction.atomic
def record_refund(booking: Booking, amount: Decimal) -> Booking:
    """
    Record a refund of part or all of the paid amount.

    Raises:
        InvalidPayment: If the amount is not positive or exceeds what was paid
    """
    booking = _lock(booking)
    amount = Decimal(amount)
    if amount <= 0:
        raise InvalidPayment("Refund amount must be positive")
    if amount > booking.paid_amount:
        raise InvalidPayment(f"Refund of {amount} exceeds paid amount {booking.paid_amount}")

    booking.paid_amount -= amount
    if booking.paid_amount == 0:
        booking.payment_status = PaymentStatus.FULLY_REFUNDED
    else:
        booking.payment_status = PaymentStatus.PARTIALLY_REFUNDED
    booking.save(update_fields=["paid_amount", "payment_status", "updated_at"])

    logger.info(f"Booking {booking.pk} refunded {amount}, payment status {booking.payment_status}")
    return booking


def find_expired_bookings(now=None):
    """Confirmed, unpaid bookings whose payment deadline has passed."""
    now = now or timezone.now()
    return Booking.objects.filter(
        status=BookingStatus.CONFIRMED,
        payment_status=PaymentStatus.UNPAID,
        payment_deadline__isnull=False,
        payment_deadline__lt=now,
    ).order_by("payment_deadline", "id")


@transaction.atomic
def cancel_expired_bookings(now=None) -> int:
    """
    Cancel confirmed bookings left unpaid past their deadline.

    Until this runs, expired bookings keep occupying their slot.

    Returns:
        Number of bookings cancelled
    """
    now = now or timezone.now()
    expired = list(find_expired_bookings(now).select_for_update())

    for booking in expired:
        booking.status = BookingStatus.CANCELLED
        booking.cancelled_at = now
        booking.save(update_fields=["status", "cancelled_at", "updated_at"])

    if expired:
        logger.info(f"Auto-cancelled {len(expired)} expired bookings")
    return len(expired)
