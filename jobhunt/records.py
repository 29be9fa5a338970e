"""Lenient conversion of loosely-shaped documents into record models.

Everything here tolerates missing or wrong-typed fields: a field that is
absent or of the wrong type is treated as absent and replaced by a safe
default, so one odd value never fails a whole collection.
"""

from collections.abc import Mapping
from typing import Any, Optional

from .models import (
    AIInsights,
    Contact,
    EmailLog,
    EventType,
    Job,
    JobEvent,
    JobStatus,
    new_id,
    now_iso,
)


def text(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) else default


def optional_text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def identifier(value: Any) -> str:
    """Keep a usable id, otherwise generate one."""
    if isinstance(value, str) and value:
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return new_id()


def string_list(value: Any) -> Optional[list[str]]:
    if not isinstance(value, list):
        return None
    return [item for item in value if isinstance(item, str)]


def coerce_contact(raw: Any) -> Optional[Contact]:
    if not isinstance(raw, Mapping):
        return None
    return Contact(
        id=identifier(raw.get("id")),
        name=text(raw.get("name")),
        role=text(raw.get("role")),
        email=text(raw.get("email")),
        phone=text(raw.get("phone")),
        linkedin=text(raw.get("linkedin")),
        organization=text(raw.get("organization")),
    )


def coerce_email(raw: Any) -> Optional[EmailLog]:
    if not isinstance(raw, Mapping):
        return None
    return EmailLog(
        id=identifier(raw.get("id")),
        sender=text(raw.get("sender")),
        subject=text(raw.get("subject")),
        body=text(raw.get("body")),
        date=text(raw.get("date")) or now_iso(),
        summary=optional_text(raw.get("summary")),
    )


def coerce_event(raw: Any) -> Optional[JobEvent]:
    if not isinstance(raw, Mapping):
        return None
    completed = raw.get("completed")
    return JobEvent(
        id=identifier(raw.get("id")),
        type=EventType.coerce(raw.get("type")),
        date=text(raw.get("date")) or now_iso(),
        title=text(raw.get("title")),
        notes=optional_text(raw.get("notes")),
        completed=completed if isinstance(completed, bool) else False,
    )


def coerce_insights(raw: Any) -> Optional[AIInsights]:
    if not isinstance(raw, Mapping):
        return None
    score = raw.get("matchScore")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        score = None
    return AIInsights(
        interview_questions=string_list(raw.get("interviewQuestions")),
        key_skills=string_list(raw.get("keySkills")),
        match_score=score,
    )


def coerce_many(raw: Any, coerce) -> list:
    """Apply a coercer to every element of a list, dropping the rejects."""
    if not isinstance(raw, list):
        return []
    items = (coerce(item) for item in raw)
    return [item for item in items if item is not None]


def coerce_job(
    raw: Mapping,
    contacts: list[Contact],
    company_default: str = "",
    role_default: str = "",
) -> Job:
    """Build a Job from a raw mapping using already-resolved contacts.

    The deprecated recruitingContact field is never carried over.
    """
    return Job(
        id=identifier(raw.get("id")),
        company=text(raw.get("company"), company_default),
        role=text(raw.get("role"), role_default),
        location=optional_text(raw.get("location")),
        salary_range=optional_text(raw.get("salaryRange")),
        status=JobStatus.coerce(raw.get("status")),
        date_applied=text(raw.get("dateApplied")) or now_iso(),
        description=text(raw.get("description")),
        notes=text(raw.get("notes")),
        emails=coerce_many(raw.get("emails"), coerce_email),
        events=coerce_many(raw.get("events"), coerce_event),
        contacts=contacts,
        ai_insights=coerce_insights(raw.get("aiInsights")),
    )
