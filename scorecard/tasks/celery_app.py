from celery import Celery

from scorecard.core.config import settings


broker_url = settings.CELERY_BROKER_URL or f"redis://{settings.REDIS_HOST}:{settings.REDIS_PORT}/{settings.REDIS_DB}"
result_backend = settings.CELERY_RESULT_BACKEND or None

celery_app = Celery(
    "scorecard",
    broker=broker_url,
    backend=result_backend,
)

celery_app.conf.update(
    task_acks_late=True,
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    worker_prefetch_multiplier=1,
    timezone="UTC",
    enable_utc=True,
    include=["scorecard.tasks.scheduled_imports", "scorecard.tasks.rollups"],
)

# Beat is the external trigger for the recurrence engine
celery_app.conf.beat_schedule = {
    "run-scheduled-imports": {
        "task": "scorecard.run_scheduled_imports",
        "schedule": settings.SCHEDULED_IMPORT_SCAN_INTERVAL_SECONDS,
    },
}
