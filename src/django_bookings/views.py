"""JSON API views for bookings.

Errors raised by the services are mapped to HTTP status codes:
ValidationError -> 400, NotFoundError -> 404,
ConflictError / InvalidStateTransition -> 409.
"""

import json
from functools import wraps

from django.http import JsonResponse
from django.utils.dateparse import parse_date, parse_time
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from . import assignment, availability, services
from .exceptions import (
    ConflictError,
    InvalidStateTransition,
    NotFoundError,
    ValidationError,
)
from .models import BookingStatus
from .selectors import get_activity, get_booking, get_employee, list_bookings
from .value_objects import BookingRequest, GuestParty, RegisteredParty


def _booking_data(booking) -> dict:
    return {
        "id": booking.pk,
        "activity_id": booking.activity_id,
        "activity_name": booking.activity.name,
        "customer_name": booking.customer_name,
        "is_guest_booking": booking.is_guest_booking,
        "employee_id": booking.employee_id,
        "employee_name": booking.employee.full_name if booking.employee_id else None,
        "booking_date": booking.booking_date.isoformat(),
        "start_time": booking.start_time.strftime("%H:%M"),
        "end_time": booking.end_time.strftime("%H:%M"),
        "number_of_participants": booking.number_of_participants,
        "total_price": str(booking.total_price),
        "deposit_amount": str(booking.deposit_amount),
        "paid_amount": str(booking.paid_amount),
        "status": booking.status,
        "payment_status": booking.payment_status,
        "payment_deadline": booking.payment_deadline.isoformat() if booking.payment_deadline else None,
    }


def api_errors(view):
    """Translate booking exceptions into JSON error responses."""

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except NotFoundError as e:
            return JsonResponse({"error": str(e)}, status=404)
        except (ConflictError, InvalidStateTransition) as e:
            return JsonResponse({"error": str(e)}, status=409)
        except ValidationError as e:
            return JsonResponse({"error": str(e)}, status=400)

    return wrapper


def _json_body(request) -> dict:
    try:
        body = json.loads(request.body or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Request body must be valid JSON")
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def _required(data, key: str):
    value = data.get(key)
    if value in (None, ""):
        raise ValidationError(f"{key} required")
    return value


def _date_param(data, key: str):
    raw = str(_required(data, key))
    try:
        value = parse_date(raw)
    except ValueError:
        value = None
    if value is None:
        raise ValidationError(f"{key} must be a date (YYYY-MM-DD)")
    return value


def _time_param(data, key: str):
    raw = str(_required(data, key))
    try:
        value = parse_time(raw)
    except ValueError:
        value = None
    if value is None:
        raise ValidationError(f"{key} must be a time (HH:MM)")
    return value


def _int_param(data, key: str, required: bool = True):
    value = data.get(key)
    if value in (None, ""):
        if required:
            raise ValidationError(f"{key} required")
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be an integer")


# =============================================================================
# Availability
# =============================================================================


@require_GET
@api_errors
def api_day_slots(request, activity_id):
    """API: Slots of an activity on a date."""
    activity = get_activity(activity_id)
    booking_date = _date_param(request.GET, "date")
    participants = _int_param(request.GET, "participants", required=False)

    slots = availability.compute_day_slots(activity, booking_date, participants)
    return JsonResponse({
        "activity_id": activity.pk,
        "date": booking_date.isoformat(),
        "slots": [slot.to_dict() for slot in slots],
    })


@require_GET
@api_errors
def api_available_dates(request, activity_id):
    """API: Dates of a month with at least one available slot."""
    activity = get_activity(activity_id)
    anchor_date = _date_param(request.GET, "date")
    participants = _int_param(request.GET, "participants", required=False)

    dates = availability.compute_month_availability(activity, anchor_date, participants)
    return JsonResponse({"activity_id": activity.pk, "available_dates": sorted(dates)})


# =============================================================================
# Bookings
# =============================================================================


@csrf_exempt
@require_http_methods(["GET", "POST"])
@api_errors
def api_bookings(request):
    """API: List bookings or admit a new one."""
    if request.method == "GET":
        return _list_bookings(request)
    return _create_booking(request)


def _list_bookings(request):
    # Signed-in customers only see their own bookings; staff see everything
    user = getattr(request, "user", None)
    own_only = user is not None and user.is_authenticated and not user.is_staff

    status = request.GET.get("status") or None
    if status is not None and status not in BookingStatus.values:
        raise ValidationError(f"status must be one of {', '.join(BookingStatus.values)}")

    bookings = list_bookings(
        user=user if own_only else None,
        booking_date=_date_param(request.GET, "date") if request.GET.get("date") else None,
        status=status,
    )
    return JsonResponse({"bookings": [_booking_data(b) for b in bookings]})


def _create_booking(request):
    """Admit a new booking for the current user or a guest."""
    body = _json_body(request)

    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated:
        party = RegisteredParty(user=user)
    else:
        party = GuestParty(
            name=body.get("guest_name") or "",
            phone=body.get("guest_phone") or "",
            email=body.get("guest_email") or "",
        )

    employee_id = _int_param(body, "employee_id", required=False)
    booking = services.admit(
        BookingRequest(
            activity=get_activity(_int_param(body, "activity_id")),
            party=party,
            booking_date=_date_param(body, "booking_date"),
            start_time=_time_param(body, "start_time"),
            number_of_participants=_int_param(body, "number_of_participants"),
            employee=get_employee(employee_id) if employee_id is not None else None,
            notes=body.get("notes") or "",
        )
    )
    return JsonResponse(_booking_data(booking), status=201)


@csrf_exempt
@require_POST
@api_errors
def api_booking_confirm(request, booking_id):
    """API: Confirm a pending booking."""
    booking = services.confirm_booking(get_booking(booking_id))
    return JsonResponse(_booking_data(booking))


@csrf_exempt
@require_POST
@api_errors
def api_booking_cancel(request, booking_id):
    """API: Cancel a booking."""
    booking = services.cancel_booking(get_booking(booking_id))
    return JsonResponse(_booking_data(booking))


@csrf_exempt
@require_POST
@api_errors
def api_booking_complete(request, booking_id):
    """API: Complete a confirmed booking."""
    booking = services.complete_booking(get_booking(booking_id))
    return JsonResponse(_booking_data(booking))


# =============================================================================
# Employee assignment
# =============================================================================


@csrf_exempt
@require_http_methods(["PUT"])
@api_errors
def api_booking_assign_employee(request, booking_id):
    """API: Directly assign an employee to a booking."""
    body = _json_body(request)
    booking = get_booking(booking_id)
    employee = get_employee(_int_param(body, "employee_id"))

    booking = assignment.assign_employee(booking, employee)
    return JsonResponse(_booking_data(get_booking(booking.pk)))


@require_GET
@api_errors
def api_swap_options(request, booking_id):
    """API: Swap options for moving a booking to another employee."""
    booking = get_booking(booking_id)
    employee = get_employee(_int_param(request.GET, "employee_id"))

    options = assignment.compute_swap_options(booking, employee)
    return JsonResponse(options.to_dict())


@csrf_exempt
@require_http_methods(["PUT"])
@api_errors
def api_swap_employees(request):
    """API: Exchange the employees of two bookings."""
    body = _json_body(request)
    booking1, booking2 = assignment.swap_employees(
        _int_param(body, "booking1_id"),
        _int_param(body, "booking2_id"),
    )
    return JsonResponse({
        "bookings": [
            _booking_data(get_booking(booking1.pk)),
            _booking_data(get_booking(booking2.pk)),
        ]
    })
