# regdesk/worker.py
from celery import Celery
from regdesk.core.config import settings

# Initialize Celery
celery_app = Celery("regdesk", broker=settings.REDIS_URL, backend=settings.REDIS_URL)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Acknowledge after the task completes; requeue if the worker dies
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    result_expires=3600,
    # Run tasks in-process (local development without a broker)
    task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,
)

# Tell Celery where to find our tasks
celery_app.conf.imports = ("regdesk.tasks",)
