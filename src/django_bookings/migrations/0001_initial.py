# Generated manually for standalone django-bookings package

from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models
from django.db.models import F, Q


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ActivityCategory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=100, unique=True)),
            ],
            options={
                "verbose_name_plural": "activity categories",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Employee",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("first_name", models.CharField(max_length=100)),
                ("last_name", models.CharField(blank=True, max_length=100)),
                ("is_enabled", models.BooleanField(default=True)),
                (
                    "user",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="booking_employee",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["last_name", "first_name", "id"],
            },
        ),
        migrations.CreateModel(
            name="Activity",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True)),
                ("location", models.CharField(max_length=255)),
                ("city", models.CharField(blank=True, max_length=100)),
                ("latitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("longitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("min_participants", models.PositiveIntegerField(default=1)),
                ("max_participants", models.PositiveIntegerField()),
                ("duration_minutes", models.IntegerField()),
                ("price_per_person", models.DecimalField(decimal_places=2, max_digits=10)),
                (
                    "deposit_percent",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        help_text="Share of the total price due as deposit, e.g. 20.00 for 20%",
                        max_digits=5,
                    ),
                ),
                ("active", models.BooleanField(default=True)),
                (
                    "employee_selection_enabled",
                    models.BooleanField(
                        default=False,
                        help_text="Restrict assignment to the employees listed on this activity",
                    ),
                ),
                (
                    "category",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="activities",
                        to="django_bookings.activitycategory",
                    ),
                ),
                (
                    "employees",
                    models.ManyToManyField(
                        blank=True,
                        related_name="activities",
                        to="django_bookings.employee",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "activities",
                "ordering": ["name"],
                "constraints": [
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
                ],
            },
        ),
        migrations.CreateModel(
            name="ActivityTimeSlot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("start_time", models.TimeField()),
                ("end_time", models.TimeField()),
                ("active", models.BooleanField(default=True)),
                (
                    "activity",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="time_slots",
                        to="django_bookings.activity",
                    ),
                ),
            ],
            options={
                "ordering": ["start_time"],
                "constraints": [
                    models.CheckConstraint(
                        condition=Q(start_time__lt=F("end_time")),
                        name="bookings_timeslot_start_before_end",
                    ),
                    models.UniqueConstraint(
                        fields=("activity", "start_time"),
                        name="bookings_timeslot_unique_start",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="EmployeeWorkHour",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("work_date", models.DateField()),
                ("start_time", models.TimeField()),
                ("end_time", models.TimeField()),
                (
                    "employee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="work_hours",
                        to="django_bookings.employee",
                    ),
                ),
            ],
            options={
                "ordering": ["work_date", "start_time"],
                "indexes": [
                    models.Index(fields=["work_date"], name="bookings_workhour_date_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=Q(start_time__lt=F("end_time")),
                        name="bookings_workhour_start_before_end",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("guest_name", models.CharField(blank=True, max_length=100)),
                ("guest_phone", models.CharField(blank=True, max_length=20)),
                ("guest_email", models.EmailField(blank=True, max_length=254)),
                ("booking_date", models.DateField()),
                ("start_time", models.TimeField()),
                ("end_time", models.TimeField()),
                ("number_of_participants", models.PositiveIntegerField()),
                ("total_price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("deposit_amount", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=10)),
                ("paid_amount", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=10)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("confirmed", "Confirmed"),
                            ("cancelled", "Cancelled"),
                            ("completed", "Completed"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("unpaid", "Unpaid"),
                            ("deposit_paid", "Deposit Paid"),
                            ("fully_paid", "Fully Paid"),
                            ("partially_refunded", "Partially Refunded"),
                            ("fully_refunded", "Fully Refunded"),
                        ],
                        default="unpaid",
                        max_length=20,
                    ),
                ),
                ("notes", models.TextField(blank=True)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("payment_deadline", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "activity",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="django_bookings.activity",
                    ),
                ),
                (
                    "employee",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="bookings",
                        to="django_bookings.employee",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="activity_bookings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["booking_date", "start_time", "id"],
                "indexes": [
                    models.Index(fields=["activity", "booking_date"], name="bookings_activity_date_idx"),
                    models.Index(fields=["employee", "booking_date"], name="bookings_employee_date_idx"),
                    models.Index(fields=["status", "payment_status"], name="bookings_status_payment_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=~Q(status="cancelled"),
                        fields=("activity", "booking_date", "start_time"),
                        name="bookings_booking_one_active_per_slot",
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
                ],
            },
        ),
    ]
