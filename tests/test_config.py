"""Tests for django-bookings configuration."""

from datetime import time

import pytest

from django_bookings.availability import compute_day_slots
from django_bookings.conf import (
    get_lead_time_days,
    get_open_slot_provider,
    get_payment_grace_hours,
    get_slot_step_minutes,
    load_slot_provider,
    revalidate_swaps,
)
from django_bookings.exceptions import ProviderLoadError
from django_bookings.providers import BaseSlotProvider, WorkHourSlotProvider

from .conftest import TOMORROW


class FixedGridProvider(BaseSlotProvider):
    """Two fixed windows per day, used by the settings tests."""

    def candidate_windows(self, activity, booking_date):
        return [(time(14, 0), time(15, 0)), (time(9, 0), time(10, 0)), (time(9, 0), time(10, 0))]


class NotAProvider:
    pass


class TestDefaults:
    """Tests for default settings values."""

    def test_defaults(self, settings):
        del settings.BOOKINGS_LEAD_TIME_DAYS
        del settings.BOOKINGS_PAYMENT_GRACE_HOURS

        assert get_lead_time_days() == 1
        assert get_payment_grace_hours() == 24
        assert get_slot_step_minutes() == 30
        assert revalidate_swaps() is False

    def test_default_provider(self):
        assert isinstance(get_open_slot_provider(), WorkHourSlotProvider)


class TestLoadSlotProvider:
    """Tests for load_slot_provider."""

    def test_loads_subclass(self):
        provider = load_slot_provider("tests.test_config.FixedGridProvider")

        assert isinstance(provider, FixedGridProvider)

    def test_cached(self):
        first = load_slot_provider("tests.test_config.FixedGridProvider")

        assert load_slot_provider("tests.test_config.FixedGridProvider") is first

    def test_invalid_path(self):
        with pytest.raises(ProviderLoadError) as exc_info:
            load_slot_provider("nodots")

        assert exc_info.value.reason == "Invalid dotted path format"

    def test_missing_module(self):
        with pytest.raises(ProviderLoadError) as exc_info:
            load_slot_provider("tests.does_not_exist.Provider")

        assert "Cannot import module" in exc_info.value.reason

    def test_not_a_subclass(self):
        with pytest.raises(ProviderLoadError) as exc_info:
            load_slot_provider("tests.test_config.NotAProvider")

        assert "must be a subclass of BaseSlotProvider" in exc_info.value.reason

    def test_missing_class(self):
        with pytest.raises(ProviderLoadError):
            load_slot_provider("tests.test_config.Missing")


@pytest.mark.django_db
class TestCustomProvider:
    """Tests for plugging a provider in through settings."""

    def test_open_ended_uses_configured_provider(self, settings, open_activity):
        """Windows are deduplicated and sorted."""
        settings.BOOKINGS_OPEN_SLOT_PROVIDER = "tests.test_config.FixedGridProvider"

        slots = compute_day_slots(open_activity, TOMORROW, 1)

        assert [s.start_time for s in slots] == [time(9, 0), time(14, 0)]

    def test_non_positive_step_rejected(self, settings, open_activity, work_hours):
        settings.BOOKINGS_SLOT_STEP_MINUTES = 0

        with pytest.raises(ValueError):
            compute_day_slots(open_activity, TOMORROW, 1)
