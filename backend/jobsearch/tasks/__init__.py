"""
Celery Task Modules

Background tasks for job search processing:
- jobs.py: Queue consumer running the search pipeline, and its producer
"""

from jobsearch.tasks.jobs import (
    process_job_search,
    enqueue_job_search,
)

__all__ = [
    "process_job_search",
    "enqueue_job_search",
]
