"""
Resume Model - read-only view of stored resumes

Resumes are created and edited elsewhere; the worker only reads the most
recently updated document for a user.
"""

from sqlalchemy import Column, String, JSON, DateTime
from sqlalchemy.sql import func
from jobsearch.database import Base
import uuid


class Resume(Base):
    """
    Attributes:
        user_id: Owner (indexed)
        title: Display name of the resume
        data: Structured resume document (personal info, skills, experience...)
    """

    __tablename__ = "resumes"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), nullable=False, index=True)
    title = Column(String(500), nullable=True)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
