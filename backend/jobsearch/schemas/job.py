from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from jobsearch.schemas.suggestion import SuggestionSet


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_search_query(job_name: str, job_location: str, job_type: str) -> str:
    return f"{job_name} {job_type} jobs {job_location}"


class JobSearchRequest(BaseModel):
    """Queue message body: {jobName, jobLocation, jobType, userId, timestamp}"""

    job_name: str = Field(alias="jobName", min_length=1)
    job_location: str = Field(alias="jobLocation", min_length=1)
    job_type: str = Field(alias="jobType", min_length=1)
    user_id: UUID = Field(alias="userId")
    submitted_at: datetime = Field(alias="timestamp", default_factory=utcnow)

    class Config:
        populate_by_name = True
        str_strip_whitespace = True
        frozen = True

    @property
    def search_query(self) -> str:
        return build_search_query(self.job_name, self.job_location, self.job_type)

    def to_message(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class CandidateLink(BaseModel):
    url: str
    title: str = ""
    snippet: str = Field("", alias="description")

    class Config:
        populate_by_name = True

    @property
    def company(self) -> str:
        """Company from a "<role> at <company>" result title."""
        parts = self.title.split(" at ")
        if len(parts) > 1 and parts[1].strip():
            return parts[1].strip()
        return "Unknown"


class ExtractedPosting(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    source_url: str


class JobRecord(BaseModel):
    user_id: UUID
    title: str
    description: str
    url: str
    location: str = "Unknown"
    job_type: str = "Unknown"
    company: str = "Unknown"
    suggestions: Optional[SuggestionSet] = None
    search_query: str
    scraped_at: datetime = Field(default_factory=utcnow)

    class Config:
        frozen = True

    @classmethod
    def from_posting(
        cls,
        request: JobSearchRequest,
        link: CandidateLink,
        posting: ExtractedPosting,
        suggestions: Optional[SuggestionSet],
    ) -> "JobRecord":
        return cls(
            user_id=request.user_id,
            title=posting.title,
            description=posting.description,
            url=link.url,
            location=request.job_location or "Unknown",
            job_type=request.job_type or "Unknown",
            company=link.company,
            suggestions=suggestions,
            search_query=request.search_query,
        )
