"""Django admin configuration for bookings."""

from django.contrib import admin

from .models import (
    Activity,
    ActivityCategory,
    ActivityTimeSlot,
    Booking,
    Employee,
    EmployeeWorkHour,
)


class ActivityTimeSlotInline(admin.TabularInline):
    """Inline for editing an activity's time slots."""

    model = ActivityTimeSlot
    extra = 0
    fields = ['start_time', 'end_time', 'active']


class EmployeeWorkHourInline(admin.TabularInline):
    model = EmployeeWorkHour
    extra = 0
    fields = ['work_date', 'start_time', 'end_time']


@admin.register(ActivityCategory)
class ActivityCategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'created_at']
    search_fields = ['name']


@admin.register(Activity)
class ActivityAdmin(admin.ModelAdmin):
    """Admin for Activity model."""

    list_display = [
        'name',
        'category',
        'location',
        'city',
        'min_participants',
        'max_participants',
        'duration_minutes',
        'price_per_person',
        'active',
    ]
    list_filter = ['active', 'category', 'employee_selection_enabled']
    search_fields = ['name', 'location', 'city']
    filter_horizontal = ['employees']
    fieldsets = [
        ('Activity Info', {
            'fields': ['name', 'description', 'category', 'active']
        }),
        ('Location', {
            'fields': ['location', 'city', 'latitude', 'longitude']
        }),
        ('Capacity', {
            'fields': ['min_participants', 'max_participants', 'duration_minutes']
        }),
        ('Pricing', {
            'fields': ['price_per_person', 'deposit_percent']
        }),
        ('Staffing', {
            'fields': ['employee_selection_enabled', 'employees']
        }),
    ]
    inlines = [ActivityTimeSlotInline]


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ['full_name', 'user', 'is_enabled']
    list_filter = ['is_enabled']
    search_fields = ['first_name', 'last_name']
    inlines = [EmployeeWorkHourInline]


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    """Admin for Booking model."""

    list_display = [
        'id',
        'activity',
        'get_customer',
        'booking_date',
        'start_time',
        'end_time',
        'number_of_participants',
        'employee',
        'status',
        'payment_status',
    ]
    list_filter = ['status', 'payment_status', 'booking_date', 'activity']
    search_fields = ['guest_name', 'guest_phone', 'guest_email', 'user__username']
    date_hierarchy = 'booking_date'
    readonly_fields = [
        'end_time',
        'total_price',
        'deposit_amount',
        'paid_amount',
        'confirmed_at',
        'payment_deadline',
        'cancelled_at',
        'completed_at',
        'created_at',
        'updated_at',
    ]
    fieldsets = [
        ('Booking Info', {
            'fields': ['activity', 'booking_date', 'start_time', 'end_time', 'number_of_participants', 'employee', 'notes']
        }),
        ('Customer', {
            'fields': ['user', 'guest_name', 'guest_phone', 'guest_email']
        }),
        ('Payment', {
            'fields': ['total_price', 'deposit_amount', 'paid_amount', 'payment_status', 'payment_deadline']
        }),
        ('Lifecycle', {
            'fields': ['status', 'confirmed_at', 'cancelled_at', 'completed_at']
        }),
        ('Timestamps', {
            'fields': ['created_at', 'updated_at'],
            'classes': ['collapse']
        }),
    ]

    def get_customer(self, obj):
        """Display the registered user or guest name."""
        return obj.customer_name or '-'
    get_customer.short_description = 'Customer'
