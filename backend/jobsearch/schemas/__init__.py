from jobsearch.schemas.job import (
    JobSearchRequest,
    CandidateLink,
    ExtractedPosting,
    JobRecord,
)
from jobsearch.schemas.suggestion import Suggestion, SuggestionSet
from jobsearch.schemas.outcome import Outcome, OutcomeStatus

__all__ = [
    "JobSearchRequest",
    "CandidateLink",
    "ExtractedPosting",
    "JobRecord",
    "Suggestion",
    "SuggestionSet",
    "Outcome",
    "OutcomeStatus",
]
