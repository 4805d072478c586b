from pydantic import BaseModel, Field
from typing import Any, Dict, List


class Suggestion(BaseModel):
    category: str = "general"
    text: str = Field(alias="suggestion")
    priority: str = "medium"

    class Config:
        populate_by_name = True


class SuggestionSet(BaseModel):
    """
    Resume-tailoring advice for one job posting.

    Field aliases follow the JSON schema the model is asked to answer in,
    so a parsed reply validates directly and serializes back unchanged.
    Every field has a default: a reply missing keys still yields a
    well-formed set.
    """

    suggestions: List[Suggestion] = Field(default_factory=list)
    resume_updates: Dict[str, Any] = Field(default_factory=dict)
    keywords: List[str] = Field(default_factory=list, alias="keywords_to_include")
    assessment: str = Field("", alias="overall_assessment")

    class Config:
        populate_by_name = True

    def to_storage(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
