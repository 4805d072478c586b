"""
Job Model - SQLAlchemy ORM model for processed job postings

One row per successfully extracted candidate link of a job search request,
written by the background worker. Rows are append-only: a redelivered
queue message produces a second row for the same URL.
"""

from sqlalchemy import Column, String, Text, DateTime, JSON
from sqlalchemy.sql import func
from jobsearch.database import Base
import uuid


class Job(Base):
    """
    Job posting scraped for a user's search, with AI resume suggestions.

    Attributes:
        id: UUID primary key
        user_id: Owner of the search request (indexed)
        job_title: Extracted title (may be a placeholder)
        job_description: Extracted description (may be a placeholder)
        job_url: Candidate link the posting was scraped from
        job_location/job_type: Copied from the search request
        company_name: Derived from the search result title, or "Unknown"
        scraped_at: When the record was built
        ai_suggestions: Serialized suggestion set, NULL when no resume on file
        search_query: Query string sent to the search provider
    """

    __tablename__ = "jobs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), nullable=False, index=True)
    job_title = Column(String(500), nullable=False)
    job_description = Column(Text, nullable=False)
    job_url = Column(String(2000), nullable=False)
    job_location = Column(String(500), nullable=False, default="Unknown")
    job_type = Column(String(100), nullable=False, default="Unknown")
    company_name = Column(String(500), nullable=False, default="Unknown")
    scraped_at = Column(DateTime(timezone=True), nullable=False)
    ai_suggestions = Column(JSON(none_as_null=True), nullable=True)
    search_query = Column(String(1000), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
