import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("chalet_booking")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Expired proposed bookings (holds) are swept on the calendar refresh cadence
    "expire-proposed-bookings": {
        "task": "bookings.expire_proposed_bookings",
        "schedule": float(os.environ.get("BOOKING_HOLD_SWEEP_SECONDS", "60")),
        "options": {"expires": 50},
    },
}

app.conf.timezone = "Europe/Prague"
