"""The in-memory record collection and the edits made to it."""

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from .models import (
    AIInsights,
    Contact,
    EmailAnalysis,
    EmailLog,
    EventType,
    Job,
    JobEvent,
    JobStatus,
)
from .store import LocalStore

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = (JobStatus.APPLIED, JobStatus.INTERVIEWING)


class Tracker:
    """Owns the canonical collection; every change rewrites it whole.

    Callers get copies of the list, never the list itself, so two saves can
    never race from independently derived collections within one process.
    """

    def __init__(self, store: LocalStore):
        self.store = store
        self._jobs: list[Job] = []

    def load(self) -> list[Job]:
        self._jobs = self.store.load()
        return self.jobs

    @property
    def jobs(self) -> list[Job]:
        return list(self._jobs)

    def get(self, job_id: str) -> Optional[Job]:
        for job in self._jobs:
            if job.id == job_id:
                return job
        return None

    def _commit(self, jobs: list[Job]) -> None:
        self.store.save(jobs)
        self._jobs = jobs

    def add(self, job: Job) -> Job:
        """Add a record at the front of the collection (newest first)."""
        self._commit([job, *self._jobs])
        logger.info(f"Added application: {job.company} - {job.role} ({job.id})")
        return job

    def update(self, job: Job) -> bool:
        """Replace the record with the same id. Unknown ids change nothing."""
        if self.get(job.id) is None:
            logger.debug(f"No record {job.id} to update")
            return False
        self._commit([job if existing.id == job.id else existing for existing in self._jobs])
        logger.info(f"Updated application {job.id}")
        return True

    def delete(self, job_id: str) -> bool:
        remaining = [job for job in self._jobs if job.id != job_id]
        if len(remaining) == len(self._jobs):
            logger.debug(f"No record {job_id} to delete")
            return False
        self._commit(remaining)
        logger.info(f"Deleted application {job_id}")
        return True

    def replace_all(self, jobs: Sequence[Job]) -> None:
        """Swap in a whole new collection (import or pull). No merging by id."""
        previous = len(self._jobs)
        self._commit(list(jobs))
        logger.info(f"Replaced {previous} records with {len(self._jobs)} records")

    def filter(self, status: Optional[JobStatus] = None, query: str = "") -> list[Job]:
        """Records matching a status and a case-insensitive company/role search."""
        needle = query.lower()
        return [
            job
            for job in self._jobs
            if (status is None or job.status == status)
            and (needle in job.company.lower() or needle in job.role.lower())
        ]

    def stats(self) -> dict:
        return {
            "total": len(self._jobs),
            "active": sum(1 for job in self._jobs if job.status in ACTIVE_STATUSES),
            "interviewing": sum(1 for job in self._jobs if job.status == JobStatus.INTERVIEWING),
        }


def set_status(job: Job, status: JobStatus) -> Job:
    return job.model_copy(update={"status": status})


def add_event(
    job: Job,
    title: str,
    date: str,
    event_type: EventType = EventType.OTHER,
    notes: Optional[str] = None,
) -> Job:
    event = JobEvent(type=event_type, title=title, date=date, notes=notes)
    return job.model_copy(update={"events": [*job.events, event]})


def toggle_event(job: Job, event_id: str) -> Job:
    events = [
        event.model_copy(update={"completed": not event.completed}) if event.id == event_id else event
        for event in job.events
    ]
    return job.model_copy(update={"events": events})


def add_contact(job: Job, contact: Contact) -> Job:
    return job.model_copy(update={"contacts": [*job.contacts, contact]})


def log_correspondence(
    job: Job,
    body: str,
    analysis: Optional[EmailAnalysis] = None,
    sender: str = "Unknown / Pasted",
    subject: str = "Correspondence Log",
    accept_event: bool = False,
) -> Job:
    """Record a pasted email, newest first, with its summary if one was made.

    When the analysis found a dated event and the caller accepted it, an
    interview event is added too.
    """
    email = EmailLog(
        sender=sender,
        subject=subject,
        body=body,
        summary=analysis.summary if analysis else None,
    )
    events = list(job.events)
    suggested = analysis.suggested_event if analysis else None
    if suggested is not None and suggested.date and accept_event:
        events.append(
            JobEvent(type=EventType.INTERVIEW, title=suggested.title, date=suggested.date)
        )
    return job.model_copy(update={"emails": [email, *job.emails], "events": events})


def with_interview_questions(job: Job, questions: list[str]) -> Job:
    insights = job.ai_insights or AIInsights()
    insights = insights.model_copy(update={"interview_questions": questions})
    return job.model_copy(update={"ai_insights": insights})


def _sort_key(date: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(date.replace("Z", "+00:00"))
    except ValueError:
        return datetime.max
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def sorted_events(job: Job) -> list[JobEvent]:
    """Events in date order for display; stored order is left untouched."""
    return sorted(job.events, key=lambda event: _sort_key(event.date))
