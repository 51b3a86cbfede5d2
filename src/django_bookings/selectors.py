"""Read-only queries for bookings, activities and employees."""

from django.db.models import QuerySet

from .exceptions import ActivityNotFound, BookingNotFound, EmployeeNotFound
from .models import Activity, Booking, BookingStatus, Employee


def get_activity(activity_id) -> Activity:
    """Get an activity by id or raise ActivityNotFound."""
    try:
        return Activity.objects.get(pk=activity_id)
    except (Activity.DoesNotExist, ValueError):
        raise ActivityNotFound(activity_id)


def get_booking(booking_id) -> Booking:
    """Get a booking by id or raise BookingNotFound."""
    try:
        return Booking.objects.select_related("activity", "employee", "user").get(pk=booking_id)
    except (Booking.DoesNotExist, ValueError):
        raise BookingNotFound(booking_id)


def get_employee(employee_id) -> Employee:
    """Get an employee by id or raise EmployeeNotFound."""
    try:
        return Employee.objects.get(pk=employee_id)
    except (Employee.DoesNotExist, ValueError):
        raise EmployeeNotFound(employee_id)


def active_bookings_for_activity(activity: Activity, booking_date) -> QuerySet:
    """Non-cancelled bookings of an activity on a date."""
    return (
        Booking.objects.filter(activity=activity, booking_date=booking_date)
        .exclude(status=BookingStatus.CANCELLED)
        .order_by("start_time")
    )


def active_bookings_for_activity_between(activity: Activity, date_from, date_to) -> QuerySet:
    """Non-cancelled bookings of an activity within an inclusive date range."""
    return (
        Booking.objects.filter(
            activity=activity,
            booking_date__gte=date_from,
            booking_date__lte=date_to,
        )
        .exclude(status=BookingStatus.CANCELLED)
        .order_by("booking_date", "start_time")
    )


def active_bookings_on(booking_date) -> QuerySet:
    """All non-cancelled bookings on a date, with activity and employee loaded."""
    return (
        Booking.objects.filter(booking_date=booking_date)
        .exclude(status=BookingStatus.CANCELLED)
        .select_related("activity", "activity__category", "employee", "user")
        .order_by("start_time", "id")
    )


def assignable_employees(activity: Activity) -> QuerySet:
    """
    Enabled employees who may work an activity.

    When the activity restricts employee selection, only its listed
    employees qualify.
    """
    employees = Employee.objects.filter(is_enabled=True)
    if activity.employee_selection_enabled:
        employees = employees.filter(activities=activity)
    return employees.order_by("id")


def list_bookings(user=None, booking_date=None, status=None) -> QuerySet:
    """
    Bookings with activity, employee and user loaded, newest date first.

    Args:
        user: Only bookings made by this user
        booking_date: Only bookings on this date
        status: Only bookings in this BookingStatus
    """
    bookings = Booking.objects.select_related("activity", "employee", "user")
    if user is not None:
        bookings = bookings.filter(user=user)
    if booking_date is not None:
        bookings = bookings.filter(booking_date=booking_date)
    if status:
        bookings = bookings.filter(status=status)
    return bookings.order_by("-booking_date", "start_time", "id")
