"""
Job Store - persistence for processed postings and resume lookup

The worker runs as a trusted background service: it uses its own engine
and is not subject to the per-user filtering the request-facing API
applies. Every query here is still scoped by user_id explicitly.

Writes are append-only. The same posting saved twice (e.g. a redelivered
queue message) produces two rows.
"""

import logging
import uuid
from typing import Any, Dict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from jobsearch.models import Job, Resume
from jobsearch.schemas import JobRecord

logger = logging.getLogger(__name__)


class ResumeNotFound(Exception):
    """No resume on file for the user."""

    def __init__(self, user_id: uuid.UUID):
        self.user_id = user_id
        super().__init__(f"No resume found for user {user_id}")


class JobStore:
    """
    Attributes:
        session_factory: async_sessionmaker bound to the worker's engine
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def fetch_resume(self, user_id: uuid.UUID) -> Dict[str, Any]:
        """
        Most recently updated resume document for a user.

        Raises:
            ResumeNotFound: the user has no resume
        """
        query = (
            select(Resume.data)
            .where(Resume.user_id == str(user_id))
            .order_by(Resume.updated_at.desc())
            .limit(1)
        )
        async with self.session_factory() as session:
            result = await session.execute(query)
            data = result.scalar_one_or_none()

        if data is None:
            raise ResumeNotFound(user_id)
        return data

    async def save_job(self, record: JobRecord) -> str:
        """
        Insert one job row.

        Returns:
            ID of the new row

        Raises:
            SQLAlchemyError: the write failed (the session is rolled back)
        """
        job_id = str(uuid.uuid4())
        job = Job(
            id=job_id,
            user_id=str(record.user_id),
            job_title=record.title,
            job_description=record.description,
            job_url=record.url,
            job_location=record.location or "Unknown",
            job_type=record.job_type or "Unknown",
            company_name=record.company or "Unknown",
            scraped_at=record.scraped_at,
            ai_suggestions=record.suggestions.to_storage() if record.suggestions else None,
            search_query=record.search_query,
        )

        async with self.session_factory() as session:
            try:
                session.add(job)
                await session.commit()
            except Exception:
                await session.rollback()
                raise

        logger.info(f"Saved job {job_id} for user {record.user_id}: {record.title}")
        return job_id
