from django.apps import AppConfig


class DjangoBookingsConfig(AppConfig):
    name = "django_bookings"
    verbose_name = "Bookings"
    default_auto_field = "django.db.models.BigAutoField"
