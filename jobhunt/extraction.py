"""Structured extraction through an LLM.

Each operation is a single chat-completions request to OpenRouter with a
JSON schema describing the reply. Replies are validated with pydantic.
Nothing is retried or cached; failures surface to the caller.
"""

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Optional

import requests
from pydantic import ValidationError

from .config import Config
from .errors import ConfigurationError, ExtractionError
from .models import EmailAnalysis, JobParseResult

logger = logging.getLogger(__name__)

OPENROUTER_API_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_MODEL = "google/gemini-2.5-flash"
DESCRIPTION_PREFIX_CHARS = 2000

_CONTACT_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "role": {"type": "string", "description": "Job title of the contact."},
        "email": {"type": "string"},
        "phone": {"type": "string"},
        "linkedin": {"type": "string"},
        "organization": {"type": "string", "description": "Agency or company of the contact."},
    },
}

JOB_POSTING_SCHEMA = {
    "type": "object",
    "properties": {
        "company": {"type": "string", "description": "The name of the company hiring."},
        "role": {"type": "string", "description": "The job title or role."},
        "location": {"type": "string", "description": "The location of the job (e.g. Remote, City)."},
        "description": {
            "type": "string",
            "description": "A brief summary of the job description (max 2 sentences).",
        },
        "keySkills": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Top 5 technical or soft skills required.",
        },
        "contacts": {
            "type": "array",
            "items": _CONTACT_SCHEMA,
            "description": "Recruiters or hiring contacts named in the text.",
        },
    },
    "required": ["company", "role", "keySkills"],
}

EMAIL_ANALYSIS_SCHEMA = {
    "type": "object",
    "properties": {
        "summary": {"type": "string", "description": "A one sentence summary of the email content."},
        "suggestedEvent": {
            "type": ["object", "null"],
            "properties": {
                "title": {"type": "string"},
                "date": {
                    "type": ["string", "null"],
                    "description": "ISO 8601 date string if a date is mentioned, otherwise null.",
                },
            },
        },
    },
    "required": ["summary"],
}

QUESTIONS_SCHEMA = {
    "type": "object",
    "properties": {
        "questions": {
            "type": "array",
            "items": {"type": "string"},
            "description": "A list of 5 interview questions.",
        },
    },
    "required": ["questions"],
}


def strip_code_fences(content: str) -> str:
    content = re.sub(r"^```(?:json)?\s*", "", content.strip())
    content = re.sub(r"\s*```$", "", content)
    return content.strip()


class ExtractionClient:
    """Stateless client for the three extraction operations."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        timeout: Optional[float] = None,
        description_prefix_chars: int = DESCRIPTION_PREFIX_CHARS,
    ):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.description_prefix_chars = description_prefix_chars

    @classmethod
    def from_config(cls, config: Config) -> "ExtractionClient":
        return cls(
            api_key=config.openrouter_api_key(),
            model=config.openrouter_model,
            timeout=config.request_timeout,
            description_prefix_chars=config.description_prefix_chars,
        )

    def _complete(self, prompt: str, schema_name: str, schema: dict) -> Any:
        """Send one prompt and return the decoded JSON reply."""
        if not self.api_key:
            raise ConfigurationError("OPENROUTER_API_KEY is not set; AI features are unavailable")

        try:
            response = requests.post(
                OPENROUTER_API_URL,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "model": self.model,
                    "messages": [{"role": "user", "content": prompt}],
                    "response_format": {
                        "type": "json_schema",
                        "json_schema": {"name": schema_name, "schema": schema},
                    },
                    "temperature": 0,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise ExtractionError(f"Extraction request failed: {e}") from e

        try:
            content = response.json()["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ExtractionError(f"Unexpected extraction response shape: {e}") from e

        try:
            data = json.loads(strip_code_fences(content))
        except json.JSONDecodeError as e:
            raise ExtractionError(f"Failed to parse extraction response as JSON: {e}") from e

        logger.debug(f"{schema_name} extraction returned: {data}")
        return data

    def parse_free_text(self, text: str) -> JobParseResult:
        """Pull company, role, location, skills and contacts out of a pasted posting."""
        prompt = f"Extract the following details from this job description text: \n\n{text}"
        data = self._complete(prompt, "job_posting", JOB_POSTING_SCHEMA)
        try:
            result = JobParseResult.model_validate(data)
        except ValidationError as e:
            raise ExtractionError(f"Job posting reply did not match the schema: {e}") from e

        logger.info(f"Parsed job posting: {result.company} - {result.role}")
        return result

    def analyze_correspondence(self, body: str) -> EmailAnalysis:
        """Summarize an email and spot any interview or meeting date in it."""
        now = datetime.now(timezone.utc).isoformat()
        prompt = (
            "Analyze this email correspondence regarding a job application.\n"
            "Summarize it and identify if there are any specific dates mentioned for interviews or meetings.\n"
            f"Current Date for reference: {now}\n\n"
            f"Email Body:\n{body}"
        )
        data = self._complete(prompt, "email_analysis", EMAIL_ANALYSIS_SCHEMA)
        try:
            return EmailAnalysis.model_validate(data)
        except ValidationError as e:
            raise ExtractionError(f"Email analysis reply did not match the schema: {e}") from e

    def suggest_interview_questions(self, role: str, company: str, description: str) -> list[str]:
        """Five likely interview questions for a role."""
        excerpt = description[: self.description_prefix_chars]
        prompt = (
            f"I am applying for the position of {role} at {company}.\n"
            "Based on the job description below, generate 5 likely interview questions I should prepare for.\n\n"
            f"Job Description:\n{excerpt}"
        )
        data = self._complete(prompt, "interview_questions", QUESTIONS_SCHEMA)

        # Some models ignore the wrapper object and answer with a bare list.
        if isinstance(data, dict):
            data = data.get("questions")
        if not isinstance(data, list):
            raise ExtractionError("Interview questions reply did not contain a list")

        return [str(question).strip() for question in data if str(question).strip()]
