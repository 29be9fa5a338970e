"""Data models for job application tracking."""

import json
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def new_id() -> str:
    """Return an opaque identifier, unique enough within one collection."""
    return uuid.uuid4().hex[:12]


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JobStatus(str, Enum):
    APPLIED = "APPLIED"
    INTERVIEWING = "INTERVIEWING"
    OFFER = "OFFER"
    REJECTED = "REJECTED"
    WISHLIST = "WISHLIST"

    @classmethod
    def coerce(cls, value: Any) -> "JobStatus":
        """Map any input onto a status, falling back to APPLIED."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        return cls.APPLIED


class EventType(str, Enum):
    INTERVIEW = "INTERVIEW"
    DEADLINE = "DEADLINE"
    FOLLOW_UP = "FOLLOW_UP"
    OTHER = "OTHER"

    @classmethod
    def coerce(cls, value: Any) -> "EventType":
        """Map any input onto an event type, falling back to OTHER."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().upper().replace("-", "_").replace(" ", "_")
            try:
                return cls(normalized)
            except ValueError:
                pass
        return cls.OTHER


class Document(BaseModel):
    """Base for models persisted with camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict[str, Any]:
        """Dump to the JSON-compatible persisted form, omitting unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Contact(Document):
    """A recruiter or hiring contact attached to one application."""

    id: str = Field(default_factory=new_id)
    name: str = ""
    role: str = ""  # job title
    email: str = ""
    phone: str = ""
    linkedin: str = ""
    organization: str = ""  # agency or company


class EmailLog(Document):
    """One piece of logged correspondence."""

    id: str = Field(default_factory=new_id)
    sender: str = ""
    subject: str = ""
    body: str = ""
    date: str = Field(default_factory=now_iso)
    summary: Optional[str] = None


class JobEvent(Document):
    """A dated event such as an interview or a deadline."""

    id: str = Field(default_factory=new_id)
    type: EventType = EventType.OTHER
    date: str
    title: str
    notes: Optional[str] = None
    completed: bool = False


class AIInsights(Document):
    interview_questions: Optional[list[str]] = None
    key_skills: Optional[list[str]] = None
    match_score: Optional[float] = None


class Job(Document):
    """Represents one tracked job application and everything nested under it."""

    id: str = Field(default_factory=new_id)
    company: str
    role: str
    location: Optional[str] = None
    salary_range: Optional[str] = None
    status: JobStatus = JobStatus.APPLIED
    date_applied: str = Field(default_factory=now_iso)
    description: str = ""
    notes: str = ""
    emails: list[EmailLog] = Field(default_factory=list)
    events: list[JobEvent] = Field(default_factory=list)
    contacts: list[Contact] = Field(default_factory=list)
    # Superseded by contacts; only ever read during migration.
    recruiting_contact: Optional[str] = None
    ai_insights: Optional[AIInsights] = None

    @field_validator("location", "salary_range")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        """An empty location or salary is the same as none; the sheet stores both as a blank cell."""
        return value or None

    @classmethod
    def create(cls, company: str, role: str, **fields: Any) -> "Job":
        """Build a fresh APPLIED record with a generated id and empty history."""
        return cls(company=company, role=role, **fields)

    def to_row(self) -> list[str]:
        """Convert to spreadsheet row format, in the fixed sheet column order."""
        return [
            self.id,
            self.company,
            self.role,
            self.location or "",
            self.status.value,
            self.date_applied,
            self.description,
            self.notes,
            json.dumps([event.to_document() for event in self.events]),
            json.dumps([email.to_document() for email in self.emails]),
            json.dumps(self.ai_insights.to_document()) if self.ai_insights is not None else "",
        ]


class SuggestedEvent(Document):
    title: str = ""
    date: Optional[str] = None


class EmailAnalysis(Document):
    """Summary of a piece of correspondence, plus any event it mentions."""

    summary: str
    suggested_event: Optional[SuggestedEvent] = None


class JobParseResult(Document):
    """Fields extracted from a pasted job posting."""

    company: str
    role: str
    location: str = ""
    description: str = ""
    key_skills: list[str] = Field(default_factory=list)
    contacts: list[Contact] = Field(default_factory=list)
