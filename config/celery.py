import os

from celery import Celery
from celery.schedules import crontab

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("turf_booking")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# =========================
# CELERY BEAT SCHEDULE
# =========================

app.conf.beat_schedule = {
    # Stale unpaid holds -> expired, at the top of every hour
    "expire-stale-holds": {
        "task": "bookings.expire_stale_holds",
        "schedule": crontab(minute=0),
        "options": {"expires": 30 * 60},
    },
}
