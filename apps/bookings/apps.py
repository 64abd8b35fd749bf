from django.apps import AppConfig  # type: ignore
from django.conf import settings  # type: ignore
from django.core.exceptions import ImproperlyConfigured  # type: ignore


def check_default_currency():
    from shared.domain.value_objects import SUPPORTED_CURRENCIES

    currency = settings.BOOKING_DEFAULT_CURRENCY
    if currency not in SUPPORTED_CURRENCIES:
        raise ImproperlyConfigured(
            f"BOOKING_DEFAULT_CURRENCY must be one of {', '.join(SUPPORTED_CURRENCIES)}, got {currency!r}"
        )


class BookingsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.bookings"
    label = "bookings"

    def ready(self):
        from shared.application.message_bus import message_bus

        from .application.event_handlers import register_handlers

        check_default_currency()
        register_handlers(message_bus)
