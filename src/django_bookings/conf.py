"""Configuration helpers for django-bookings.

All settings can be overridden in your Django settings.py.

Example:
    # settings.py
    BOOKINGS_LEAD_TIME_DAYS = 2
    BOOKINGS_PAYMENT_GRACE_HOURS = 48
    BOOKINGS_OPEN_SLOT_PROVIDER = 'myapp.slots.FixedGridProvider'
"""

from functools import lru_cache
from importlib import import_module

from django.conf import settings

from .exceptions import ProviderLoadError


DEFAULT_OPEN_SLOT_PROVIDER = "django_bookings.providers.WorkHourSlotProvider"


def get_setting(name: str, default=None):
    """Get a setting with BOOKINGS_ prefix."""
    return getattr(settings, f"BOOKINGS_{name}", default)


def get_lead_time_days() -> int:
    """Minimum number of days between today and the earliest bookable date."""
    return get_setting("LEAD_TIME_DAYS", 1)


def get_payment_grace_hours() -> int:
    """Hours a confirmed booking has to be paid."""
    return get_setting("PAYMENT_GRACE_HOURS", 24)


def get_slot_step_minutes() -> int:
    """Granularity of synthesised windows for open-ended activities."""
    return get_setting("SLOT_STEP_MINUTES", 30)


def revalidate_swaps() -> bool:
    """Whether swap_employees re-checks both assignments at commit time."""
    return bool(get_setting("REVALIDATE_SWAPS", False))


@lru_cache(maxsize=16)
def load_slot_provider(dotted_path: str):
    """
    Import and instantiate a slot provider from dotted path.

    Raises ProviderLoadError for bad imports or non-subclass providers.
    """
    from .providers import BaseSlotProvider

    try:
        module_path, class_name = dotted_path.rsplit(".", 1)
    except ValueError:
        raise ProviderLoadError(dotted_path, "Invalid dotted path format")

    try:
        module = import_module(module_path)
    except ImportError as e:
        raise ProviderLoadError(dotted_path, f"Cannot import module: {e}")

    provider_class = getattr(module, class_name, None)
    if not isinstance(provider_class, type) or not issubclass(provider_class, BaseSlotProvider):
        raise ProviderLoadError(
            dotted_path,
            f"'{class_name}' must be a subclass of BaseSlotProvider",
        )

    return provider_class()


def get_open_slot_provider():
    """Provider used to synthesise windows for activities without time slots."""
    return load_slot_provider(get_setting("OPEN_SLOT_PROVIDER", DEFAULT_OPEN_SLOT_PROVIDER))


def clear_provider_cache():
    """Clear the provider loading cache. Useful for testing."""
    load_slot_provider.cache_clear()


# =============================================================================
# DEFAULT SETTINGS REFERENCE
# =============================================================================

# BOOKINGS_LEAD_TIME_DAYS = 1  # Earliest bookable date is today + N days
# BOOKINGS_PAYMENT_GRACE_HOURS = 24  # Payment deadline after confirmation
# BOOKINGS_SLOT_STEP_MINUTES = 30  # Step between synthesised open-ended windows
# BOOKINGS_OPEN_SLOT_PROVIDER = 'django_bookings.providers.WorkHourSlotProvider'
# BOOKINGS_REVALIDATE_SWAPS = False  # Re-check assignments when committing a swap
