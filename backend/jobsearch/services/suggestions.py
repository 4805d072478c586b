"""
Resume Suggestion Service - LLM-powered resume tailoring advice

Builds a prompt from a job posting and the user's resume, asks an OpenAI
chat model for suggestions in a fixed JSON schema, and parses the reply
into a SuggestionSet.

Failure policy (never raises to the caller):
- Reply parses and validates: success
- Reply is not valid JSON / not the schema: fallback, the raw reply is
  wrapped as a single "general" suggestion
- No API key, or the call itself fails: fallback, FALLBACK_SUGGESTIONS

A missing suggestion must never stop a posting from being recorded.

Usage:
    from openai import AsyncOpenAI

    generator = SuggestionGenerator(openai_client=AsyncOpenAI())
    outcome = await generator.suggest(description, resume, "Data Engineer", "Berlin", "Full-time")
    outcome.value.suggestions
"""

import json
import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from jobsearch.config import Settings, get_settings
from jobsearch.schemas import Outcome, Suggestion, SuggestionSet

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert resume consultant. "
    "Respond only with valid JSON in the requested format."
)

SUGGESTION_PROMPT = """You are an expert resume consultant. Based on the following job description and the user's current resume, provide specific, actionable suggestions to tailor the resume for this position.

**Job Details:**
- Position: {job_name}
- Location: {job_location}
- Type: {job_type}

**Job Description:**
{description}

**User's Current Resume:**
{resume}

Please provide your response in the following JSON format:
{{
  "suggestions": [
    {{
      "category": "skills",
      "suggestion": "Add specific technical skills mentioned in the job description",
      "priority": "high"
    }},
    {{
      "category": "experience",
      "suggestion": "Reformat experience section to highlight relevant achievements",
      "priority": "medium"
    }}
  ],
  "resume_updates": {{
    "summary": "Updated professional summary focusing on relevant experience",
    "skills": ["skill1", "skill2", "skill3"],
    "experience_highlights": ["highlight1", "highlight2"]
  }},
  "keywords_to_include": ["keyword1", "keyword2", "keyword3"],
  "overall_assessment": "Brief assessment of resume-job fit"
}}

Focus on:
1. Identifying missing skills or experiences that are mentioned in the job description
2. Suggesting specific keywords to include
3. Recommending how to rephrase existing content to better match the job requirements
4. Providing actionable, specific suggestions rather than general advice
"""

UNPARSED_ASSESSMENT = "AI analysis completed"

FALLBACK_SUGGESTIONS = {
    "suggestions": [
        {
            "category": "skills",
            "suggestion": "Add React.js and Node.js to your skills section",
            "priority": "high",
        },
        {
            "category": "experience",
            "suggestion": "Quantify your achievements with specific metrics",
            "priority": "medium",
        },
    ],
    "resume_updates": {
        "summary": "Experienced software developer with strong technical skills",
        "skills": ["React.js", "Node.js", "JavaScript"],
        "experience_highlights": ["Led development of web applications"],
    },
    "keywords_to_include": ["React", "Node.js", "JavaScript", "API"],
    "overall_assessment": (
        "Your resume shows good experience but needs more specific technical skills."
    ),
}


def build_prompt(
    description: str,
    resume: Mapping[str, Any],
    job_name: str,
    job_location: str,
    job_type: str,
) -> str:
    return SUGGESTION_PROMPT.format(
        job_name=job_name,
        job_location=job_location,
        job_type=job_type,
        description=description,
        resume=json.dumps(resume, indent=2, default=str),
    )


def fallback_suggestions() -> SuggestionSet:
    return SuggestionSet.model_validate(FALLBACK_SUGGESTIONS)


def wrap_raw_response(text: str) -> SuggestionSet:
    return SuggestionSet(
        suggestions=[Suggestion(category="general", text=text, priority="medium")],
        resume_updates={},
        keywords=[],
        assessment=UNPARSED_ASSESSMENT,
    )


def strip_code_fence(content: str) -> str:
    content = content.strip()
    if content.startswith("```"):
        lines = content.split("\n")
        if lines[-1].strip().startswith("```"):
            lines = lines[:-1]
        content = "\n".join(lines[1:])
    return content


def parse_suggestions(content: str) -> Optional[SuggestionSet]:
    """
    Parse a model reply into a SuggestionSet.

    Returns:
        SuggestionSet, or None if the reply is not JSON in the expected shape
    """
    try:
        data = json.loads(strip_code_fence(content))
        return SuggestionSet.model_validate(data)
    except (json.JSONDecodeError, ValidationError):
        return None


class SuggestionGenerator:
    """
    Attributes:
        client: AsyncOpenAI client (None when no API key is configured)
        model: Chat model name
    """

    def __init__(
        self,
        openai_client: Any = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.client = openai_client
        self.model = settings.openai_model
        self.timeout = settings.http_timeout_seconds

    async def suggest(
        self,
        description: str,
        resume: Mapping[str, Any],
        job_name: str,
        job_location: str,
        job_type: str,
    ) -> Outcome[SuggestionSet]:
        if self.client is None:
            logger.warning("OPENAI_API_KEY not configured, returning fallback suggestions")
            return Outcome.fallback(fallback_suggestions(), reason="missing_credentials")

        prompt = build_prompt(description, resume, job_name, job_location, job_type)

        try:
            content = await self._call_llm(prompt)
        except Exception as e:
            logger.error(f"Suggestion model call failed: {e!r}")
            return Outcome.fallback(fallback_suggestions(), reason="provider_error")

        parsed = parse_suggestions(content)
        if parsed is None:
            logger.warning(f"Could not parse model reply as suggestions: {content[:100]!r}")
            return Outcome.fallback(wrap_raw_response(content), reason="unparseable_response")

        return Outcome.success(parsed)

    async def _call_llm(self, prompt: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=0.4,
            timeout=self.timeout,
        )
        return response.choices[0].message.content or ""
