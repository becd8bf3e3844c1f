"""Celery application factory"""
from celery import Celery

from app.config.settings import get_settings

settings = get_settings()


def create_celery_app() -> Celery:
    """Create and configure the Celery application"""
    app = Celery(
        "dialoom",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
        include=[
            "app.tasks.email_tasks",
            "app.tasks.booking_tasks",
        ],
    )

    app.conf.update(
        task_serializer=settings.CELERY_TASK_SERIALIZER,
        result_serializer="json",
        accept_content=["json"],
        timezone="UTC",
        enable_utc=True,
        task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,
        task_acks_late=True,
        worker_prefetch_multiplier=1,
        beat_schedule={
            "expire-stale-booking-sessions": {
                "task": "app.tasks.booking_tasks.expire_stale_booking_sessions",
                "schedule": 300.0,  # every 5 minutes
            },
        },
    )

    return app


celery_app = create_celery_app()
