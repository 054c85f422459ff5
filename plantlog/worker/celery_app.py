"""Celery app bootstrap for reminder delivery."""

from __future__ import annotations

from celery import Celery

from plantlog.core.config import get_settings


settings = get_settings()

DEFAULT_QUEUE = "default"

celery_app = Celery(
    "plantlog",
    broker=(settings.CELERY_BROKER_URL or "redis://localhost:6379/0").strip(),
    include=["plantlog.worker.tasks"],
)

celery_app.conf.update(
    task_default_queue=DEFAULT_QUEUE,
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_reject_on_worker_lost=True,
)


# =============================================================================
# Celery Beat Schedule - Periodic Tasks
# =============================================================================

celery_app.conf.beat_schedule = {
    # Reminders are one-shot at a minute granularity; poll for due ones
    "deliver-due-reminders": {
        "task": "plantlog.worker.tasks.deliver_due_reminders",
        "schedule": float(settings.REMINDER_DELIVERY_INTERVAL_SECONDS),
        "options": {"queue": DEFAULT_QUEUE},
    },
}
