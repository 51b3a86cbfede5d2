"""Models for django-bookings."""

from datetime import datetime, timedelta
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import F, Q

from .value_objects import GuestParty, RegisteredParty


class BookingsBaseModel(models.Model):
    """Base model with timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class BookingStatus(models.TextChoices):
    """Lifecycle of a booking.

    pending -> confirmed -> completed
    pending -> cancelled
    confirmed -> cancelled
    """

    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    CANCELLED = "cancelled", "Cancelled"
    COMPLETED = "completed", "Completed"


class PaymentStatus(models.TextChoices):
    """Payment state, independent of the booking status."""

    UNPAID = "unpaid", "Unpaid"
    DEPOSIT_PAID = "deposit_paid", "Deposit Paid"
    FULLY_PAID = "fully_paid", "Fully Paid"
    PARTIALLY_REFUNDED = "partially_refunded", "Partially Refunded"
    FULLY_REFUNDED = "fully_refunded", "Fully Refunded"


class PaymentType(models.TextChoices):
    """Kind of payment reported by the payment subsystem."""

    DEPOSIT = "deposit", "Deposit"
    REMAINING = "remaining", "Remaining"
    FULL = "full", "Full"


class ActivityCategory(BookingsBaseModel):
    """Grouping of activities; bookings can only swap staff within a category."""

    name = models.CharField(max_length=100, unique=True)

    class Meta:
        verbose_name_plural = "activity categories"
        ordering = ["name"]

    def __str__(self):
        return self.name


class Employee(BookingsBaseModel):
    """A staff member who can be assigned to bookings."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="booking_employee",
    )
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100, blank=True)
    is_enabled = models.BooleanField(default=True)

    class Meta:
        ordering = ["last_name", "first_name", "id"]

    def __str__(self):
        return self.full_name

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Activity(BookingsBaseModel):
    """
    A bookable activity.

    Key invariants:
    - 1 <= min_participants <= max_participants
    - duration_minutes > 0
    - 0 <= deposit_percent <= 100
    - With no active time slots the activity is bookable at any start time
    """

    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    category = models.ForeignKey(
        ActivityCategory,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="activities",
    )

    # Location
    location = models.CharField(max_length=255)
    city = models.CharField(max_length=100, blank=True)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)

    # Capacity and timing
    min_participants = models.PositiveIntegerField(default=1)
    max_participants = models.PositiveIntegerField()
    duration_minutes = models.IntegerField()

    # Pricing
    price_per_person = models.DecimalField(max_digits=10, decimal_places=2)
    deposit_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0"),
        help_text="Share of the total price due as deposit, e.g. 20.00 for 20%",
    )

    active = models.BooleanField(default=True)

    # Staffing
    employee_selection_enabled = models.BooleanField(
        default=False,
        help_text="Restrict assignment to the employees listed on this activity",
    )
    employees = models.ManyToManyField(
        Employee,
        blank=True,
        related_name="activities",
    )

    class Meta:
        verbose_name_plural = "activities"
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=Q(min_participants__gte=1),
                name="bookings_activity_min_participants_positive",
            ),
            models.CheckConstraint(
                condition=Q(min_participants__lte=F("max_participants")),
                name="bookings_activity_min_lte_max",
            ),
            models.CheckConstraint(
                condition=Q(duration_minutes__gt=0),
                name="bookings_activity_duration_positive",
            ),
            models.CheckConstraint(
                condition=Q(deposit_percent__gte=0) & Q(deposit_percent__lte=100),
                name="bookings_activity_deposit_percent_range",
            ),
        ]

    def __str__(self):
        return self.name

    @property
    def location_identifier(self) -> str:
        """Identity of the place, by rounded coordinates when known."""
        if self.latitude is not None and self.longitude is not None:
            return f"{round(float(self.latitude), 4):.4f},{round(float(self.longitude), 4):.4f}"
        return f"{self.location}|{self.city}".lower().strip()

    def has_same_location_as(self, other: "Activity") -> bool:
        """Coordinates within ~11 meters, else identifier equality."""
        if (
            self.latitude is not None
            and self.longitude is not None
            and other.latitude is not None
            and other.longitude is not None
        ):
            return (
                abs(self.latitude - other.latitude) < Decimal("0.0001")
                and abs(self.longitude - other.longitude) < Decimal("0.0001")
            )
        return self.location_identifier == other.location_identifier

    def end_time_for(self, start_time):
        """
        Compute the end time of a booking starting at start_time.

        Returns None when the booking would run past midnight.
        """
        start = datetime.combine(datetime.min.date(), start_time)
        end = start + timedelta(minutes=self.duration_minutes)
        if end.date() != start.date():
            return None
        return end.time()

    def accepts_participants(self, count: int) -> bool:
        return self.min_participants <= count <= self.max_participants


class ActivityTimeSlot(BookingsBaseModel):
    """
    A bookable window on an activity's daily template.

    A booking must start exactly at start_time and end no later than end_time.
    Slots are owned by the activity; bookings never reference them.
    """

    activity = models.ForeignKey(
        Activity,
        on_delete=models.CASCADE,
        related_name="time_slots",
    )
    start_time = models.TimeField()
    end_time = models.TimeField()
    active = models.BooleanField(default=True)

    class Meta:
        ordering = ["start_time"]
        constraints = [
            models.CheckConstraint(
                condition=Q(start_time__lt=F("end_time")),
                name="bookings_timeslot_start_before_end",
            ),
            models.UniqueConstraint(
                fields=["activity", "start_time"],
                name="bookings_timeslot_unique_start",
            ),
        ]

    def __str__(self):
        return f"{self.activity} {self.start_time:%H:%M}-{self.end_time:%H:%M}"

    def is_valid_booking_time(self, start_time, end_time) -> bool:
        return self.start_time == start_time and end_time <= self.end_time


class EmployeeWorkHour(BookingsBaseModel):
    """A block of time an employee works on a given date."""

    employee = models.ForeignKey(
        Employee,
        on_delete=models.CASCADE,
        related_name="work_hours",
    )
    work_date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()

    class Meta:
        ordering = ["work_date", "start_time"]
        constraints = [
            models.CheckConstraint(
                condition=Q(start_time__lt=F("end_time")),
                name="bookings_workhour_start_before_end",
            ),
        ]
        indexes = [
            models.Index(fields=["work_date"], name="bookings_workhour_date_idx"),
        ]

    def __str__(self):
        return f"{self.employee} {self.work_date} {self.start_time:%H:%M}-{self.end_time:%H:%M}"


class Booking(BookingsBaseModel):
    """
    A reservation of an activity on a date and time window.

    Key invariants:
    - Exactly one party: a registered user or guest contact details
    - At most one non-cancelled booking per (activity, date, start_time)
    - end_time = start_time + activity.duration_minutes
    - payment_deadline is set on confirmation
    """

    activity = models.ForeignKey(
        Activity,
        on_delete=models.PROTECT,
        related_name="bookings",
    )

    # Party: registered user OR guest contact
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="activity_bookings",
    )
    guest_name = models.CharField(max_length=100, blank=True)
    guest_phone = models.CharField(max_length=20, blank=True)
    guest_email = models.EmailField(blank=True)

    employee = models.ForeignKey(
        Employee,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bookings",
    )

    booking_date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    number_of_participants = models.PositiveIntegerField()

    # Money
    total_price = models.DecimalField(max_digits=10, decimal_places=2)
    deposit_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"))
    paid_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"))

    status = models.CharField(
        max_length=20,
        choices=BookingStatus.choices,
        default=BookingStatus.PENDING,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.UNPAID,
    )
    notes = models.TextField(blank=True)

    # Lifecycle timestamps
    confirmed_at = models.DateTimeField(null=True, blank=True)
    payment_deadline = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["booking_date", "start_time", "id"]
        constraints = [
            # Exclusive slot: cancelled bookings free the slot for rebooking
            models.UniqueConstraint(
                fields=["activity", "booking_date", "start_time"],
                name="bookings_booking_one_active_per_slot",
                condition=~Q(status="cancelled"),
            ),
            models.CheckConstraint(
                condition=(
                    (Q(user__isnull=False) & Q(guest_name=""))
                    | (Q(user__isnull=True) & ~Q(guest_name=""))
                ),
                name="bookings_booking_exactly_one_party",
            ),
            models.CheckConstraint(
                condition=Q(start_time__lt=F("end_time")),
                name="bookings_booking_start_before_end",
            ),
        ]
        indexes = [
            models.Index(fields=["activity", "booking_date"], name="bookings_activity_date_idx"),
            models.Index(fields=["employee", "booking_date"], name="bookings_employee_date_idx"),
            models.Index(fields=["status", "payment_status"], name="bookings_status_payment_idx"),
        ]

    def __str__(self):
        return f"{self.customer_name} - {self.activity} {self.booking_date} {self.start_time:%H:%M}"

    @property
    def is_guest_booking(self) -> bool:
        return self.user_id is None

    @property
    def party(self) -> RegisteredParty | GuestParty:
        if self.user_id is not None:
            return RegisteredParty(user=self.user)
        return GuestParty(name=self.guest_name, phone=self.guest_phone, email=self.guest_email)

    @property
    def customer_name(self) -> str:
        if self.user_id is not None:
            full_name = self.user.get_full_name()
            return full_name or self.user.get_username()
        return self.guest_name

    @property
    def customer_contact(self) -> str:
        if self.user_id is not None:
            return self.user.email
        return self.guest_email or self.guest_phone

    @property
    def remaining_amount(self) -> Decimal:
        return self.total_price - self.paid_amount

    @property
    def is_active(self) -> bool:
        """Non-cancelled bookings occupy their slot, even past the payment deadline."""
        return self.status != BookingStatus.CANCELLED
