"""
Celery Application Configuration

Configures Celery as the job search queue consumer with:
- RabbitMQ as message broker, one durable queue with persistent messages
- Late acknowledgement: a message is acked only after its request is processed
- One message in flight per worker process; scale by running more workers

Usage:
    # Start a worker:
    celery -A jobsearch.celery worker --loglevel=info -Q job_queue

    # Enqueue a search request:
    from jobsearch.tasks.jobs import enqueue_job_search
    enqueue_job_search(request)
"""

from celery import Celery
from kombu import Queue
from jobsearch.config import get_settings

settings = get_settings()

# Create Celery app
celery_app = Celery(
    "job_search",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

# Configure Celery
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Worker settings
    worker_prefetch_multiplier=1,  # One unacked message per process
    worker_concurrency=1,  # Requests are processed sequentially

    # Result settings
    result_expires=3600,
    task_track_started=True,

    # Acknowledgement
    task_acks_late=True,  # Acknowledge after completion
    task_reject_on_worker_lost=True,

    # Durable queue, persistent messages
    task_queues=(Queue(settings.job_queue_name, durable=True),),
    task_default_queue=settings.job_queue_name,
    task_default_delivery_mode="persistent",
    task_routes={
        "jobsearch.tasks.jobs.process_job_search": {"queue": settings.job_queue_name},
    },
)

# Autodiscover tasks
celery_app.autodiscover_tasks(["jobsearch.tasks"])
