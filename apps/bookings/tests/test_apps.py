"""Tests for the bookings app configuration checks."""

from __future__ import annotations

from django.apps import apps
from django.core.exceptions import ImproperlyConfigured
from django.test import SimpleTestCase, override_settings

from apps.bookings.apps import check_default_currency


class DefaultCurrencyCheckTests(SimpleTestCase):
    @override_settings(BOOKING_DEFAULT_CURRENCY="USD")
    def test_supported_currency_passes(self) -> None:
        check_default_currency()

    @override_settings(BOOKING_DEFAULT_CURRENCY="KZT")
    def test_unsupported_currency_stops_startup(self) -> None:
        with self.assertRaisesMessage(ImproperlyConfigured, "'KZT'"):
            apps.get_app_config("bookings").ready()
