"""
django-bookings: Activity booking scheduler.

Provides:
- Activity, ActivityTimeSlot: Bookable activities and their slot templates
- Booking: Reservations with lifecycle and payment state
- Employee, EmployeeWorkHour: Staff and their working hours
- Availability, admission and employee assignment services
"""

__version__ = "0.1.0"

default_app_config = "django_bookings.apps.DjangoBookingsConfig"
