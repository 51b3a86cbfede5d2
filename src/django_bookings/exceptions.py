"""Custom exceptions for django-bookings.

Every rejection raised by the services belongs to one of four families:

- ValidationError: malformed input, the caller's fault
- ConflictError: state-dependent rejection (slot taken, employee busy)
- NotFoundError: unknown activity, booking or employee
- InvalidStateTransition: illegal lifecycle move
"""


class BookingsError(Exception):
    """Base exception for booking errors."""
    pass


# =============================================================================
# Validation
# =============================================================================


class ValidationError(BookingsError):
    """Raised when a request is malformed."""
    pass


class InvalidRange(ValidationError):
    """Raised when a time window does not start before it ends."""

    def __init__(self, start_time, end_time):
        self.start_time = start_time
        self.end_time = end_time
        super().__init__(f"Start time {start_time} must be before end time {end_time}")


class InvalidActivityConfig(ValidationError):
    """Raised when an activity cannot be scheduled as configured."""

    def __init__(self, activity, reason: str):
        self.activity = activity
        self.reason = reason
        super().__init__(f"Activity '{activity}' is misconfigured: {reason}")


class ParticipantCountOutOfRange(ValidationError):
    """Raised when the participant count is outside the activity bounds."""

    def __init__(self, count: int, minimum: int, maximum: int):
        self.count = count
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            f"Invalid number of participants ({count}). "
            f"Must be between {minimum} and {maximum}"
        )


class SlotNotFound(ValidationError):
    """Raised when no bookable window of the activity starts at the requested time."""

    def __init__(self, activity, start_time):
        self.activity = activity
        self.start_time = start_time
        super().__init__(f"No bookable window of '{activity}' starts at {start_time}")


class LeadTimeViolation(ValidationError):
    """Raised when a booking date is earlier than the required lead time."""

    def __init__(self, booking_date, earliest_date):
        self.booking_date = booking_date
        self.earliest_date = earliest_date
        super().__init__(
            f"Bookings for {booking_date} are closed; earliest bookable date is {earliest_date}"
        )


class GuestInfoIncomplete(ValidationError):
    """Raised when a guest booking lacks a name or phone."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__("Guest " + " and ".join(missing) + " required")


class SwapCycleInvalid(ValidationError):
    """Raised when a booking is swapped with itself."""

    def __init__(self, booking_id):
        self.booking_id = booking_id
        super().__init__(f"Cannot swap booking '{booking_id}' with itself")


class EmployeeNotAssignable(ValidationError):
    """Raised when an employee may not work a booking's activity."""

    def __init__(self, employee, activity, reason: str = None):
        self.employee = employee
        self.activity = activity
        self.reason = reason or f"Employee '{employee}' cannot be assigned to '{activity}'"
        super().__init__(self.reason)


class InvalidPayment(ValidationError):
    """Raised when a payment or refund cannot be recorded."""
    pass


# =============================================================================
# Conflicts
# =============================================================================


class ConflictError(BookingsError):
    """Raised when current state rejects an otherwise valid request."""
    pass


class SlotUnavailable(ConflictError):
    """Raised when a slot is already taken on the requested date."""

    def __init__(self, activity, booking_date, start_time):
        self.activity = activity
        self.booking_date = booking_date
        self.start_time = start_time
        super().__init__(
            f"Slot {start_time} on {booking_date} for '{activity}' is not available"
        )


class EmployeeUnavailable(ConflictError):
    """Raised when an employee already works an overlapping booking."""

    def __init__(self, employee, conflicting_booking=None):
        self.employee = employee
        self.conflicting_booking = conflicting_booking
        message = f"Employee '{employee}' is not available for this time slot"
        if conflicting_booking is not None:
            message += f" (conflicts with booking {conflicting_booking.pk})"
        super().__init__(message)


class SwapPreconditionChanged(ConflictError):
    """Raised when a swap no longer holds at commit time."""

    def __init__(self, reasons: list[str]):
        self.reasons = reasons
        super().__init__("Swap blocked: " + "; ".join(reasons))


# =============================================================================
# Lookups
# =============================================================================


class NotFoundError(BookingsError):
    """Raised when a referenced record does not exist."""

    entity = "Record"

    def __init__(self, pk):
        self.pk = pk
        super().__init__(f"{self.entity} '{pk}' not found")


class ActivityNotFound(NotFoundError):
    entity = "Activity"


class BookingNotFound(NotFoundError):
    entity = "Booking"


class EmployeeNotFound(NotFoundError):
    entity = "Employee"


# =============================================================================
# Lifecycle
# =============================================================================


class InvalidStateTransition(BookingsError):
    """Raised when attempting an invalid booking status transition."""

    def __init__(self, from_state: str, to_state: str, reason: str = None):
        self.from_state = from_state
        self.to_state = to_state
        self.reason = reason or f"Cannot transition booking from '{from_state}' to '{to_state}'"
        super().__init__(self.reason)


# =============================================================================
# Configuration
# =============================================================================


class ProviderLoadError(BookingsError):
    """Raised when the configured slot provider cannot be loaded."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load slot provider '{path}': {reason}")
