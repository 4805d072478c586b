from jobsearch.models.job import Job
from jobsearch.models.resume import Resume

__all__ = ["Job", "Resume"]
