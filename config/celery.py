import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("story_bookings")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Release bookings whose payment never arrived - every 5 minutes
    "release-unpaid-bookings": {
        "task": "bookings.release_unpaid_bookings",
        "schedule": crontab(minute="*/5"),
        "options": {"expires": 240},
    },
}
