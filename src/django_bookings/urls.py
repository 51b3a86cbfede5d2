"""URL configuration for django-bookings.

Example usage in project urls.py:

    from django.urls import path, include

    urlpatterns = [
        path("api/bookings/", include("django_bookings.urls")),
    ]
"""

from django.urls import path

from . import views

app_name = "django_bookings"

api_urlpatterns = [
    # Availability
    path("activities/<int:activity_id>/slots/", views.api_day_slots, name="day-slots"),
    path(
        "activities/<int:activity_id>/available-dates/",
        views.api_available_dates,
        name="available-dates",
    ),
    # Bookings
    path("bookings/", views.api_bookings, name="bookings"),
    path("bookings/swap/", views.api_swap_employees, name="booking-swap"),
    path("bookings/<int:booking_id>/confirm/", views.api_booking_confirm, name="booking-confirm"),
    path("bookings/<int:booking_id>/cancel/", views.api_booking_cancel, name="booking-cancel"),
    path("bookings/<int:booking_id>/complete/", views.api_booking_complete, name="booking-complete"),
    # Employee assignment
    path(
        "bookings/<int:booking_id>/employee/",
        views.api_booking_assign_employee,
        name="booking-assign-employee",
    ),
    path(
        "bookings/<int:booking_id>/swap-options/",
        views.api_swap_options,
        name="booking-swap-options",
    ),
]

urlpatterns = api_urlpatterns
