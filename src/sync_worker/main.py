"""Celery application for the scheduled catalog sync worker."""

from celery import Celery
from celery.schedules import crontab

from catalog_sync.config import get_settings
from catalog_sync.logging_config import configure_logging

settings = get_settings()
configure_logging(settings)

# Create Celery app
app = Celery(
    "sync_worker",
    broker=settings.celery_broker,
    backend=settings.celery_backend,
    include=[
        "sync_worker.tasks.sync_catalog",
    ],
)

# Celery configuration
app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=3600,  # 1 hour
    task_soft_time_limit=3300,  # 55 minutes
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_default_queue="sync",
    task_routes={
        "sync_worker.tasks.*": {"queue": "sync"},
    },
)

# Beat schedule for periodic tasks
app.conf.beat_schedule = {
    "full-catalog-sync": {
        "task": "sync_worker.tasks.sync_catalog.sync_full_catalog",
        "schedule": crontab(
            minute=settings.full_sync_schedule_minute,
            hour=settings.full_sync_schedule_hour,
        ),
    },
}


def run() -> None:
    """Run the Celery worker."""
    app.worker_main(["worker", "--loglevel=info", "-Q", "sync"])


if __name__ == "__main__":
    run()
