"""
Pytest configuration and shared fixtures.
"""

from unittest.mock import MagicMock

import pytest

from jobhunt.models import (
    AIInsights,
    Contact,
    EmailLog,
    EventType,
    Job,
    JobEvent,
    JobStatus,
)
from jobhunt.store import LocalStore


def make_job(**overrides) -> Job:
    fields = dict(
        id="job-1",
        company="Acme",
        role="Backend Engineer",
        location="Remote",
        salary_range="$120k-$150k",
        status=JobStatus.INTERVIEWING,
        date_applied="2024-03-01T09:30:00.000Z",
        description="Build APIs.\nWork with Python.",
        notes="Referred by Sam",
        emails=[
            EmailLog(
                id="mail-1",
                sender="recruiter@acme.example",
                subject="Next steps",
                body="Can you do Tuesday at 10?",
                date="2024-03-02T12:00:00.000Z",
                summary="Recruiter proposes an interview on Tuesday.",
            )
        ],
        events=[
            JobEvent(
                id="event-1",
                type=EventType.INTERVIEW,
                date="2024-03-05T10:00:00.000Z",
                title="Phone screen",
                notes="Bring questions",
                completed=False,
            )
        ],
        contacts=[
            Contact(
                id="contact-1",
                name="Dana Lee",
                role="Technical Recruiter",
                email="dana@acme.example",
                phone="555-0100",
                linkedin="linkedin.com/in/danalee",
                organization="Acme",
            )
        ],
        ai_insights=AIInsights(
            interview_questions=["Tell me about a system you scaled."],
            key_skills=["Python", "PostgreSQL"],
            match_score=82.0,
        ),
    )
    fields.update(overrides)
    return Job(**fields)


@pytest.fixture
def job() -> Job:
    return make_job()


@pytest.fixture
def jobs() -> list[Job]:
    return [
        make_job(),
        make_job(
            id="job-2",
            company="Globex",
            role="Data Analyst",
            location=None,
            salary_range=None,
            status=JobStatus.APPLIED,
            emails=[],
            events=[],
            contacts=[],
            ai_insights=None,
        ),
    ]


@pytest.fixture
def store(tmp_path) -> LocalStore:
    return LocalStore(tmp_path / "jobs.json")


@pytest.fixture
def sheets_service():
    """A stand-in for the googleapiclient Sheets resource."""
    service = MagicMock()
    service.spreadsheets.return_value.values.return_value.get.return_value.execute.return_value = {
        "values": []
    }
    return service


@pytest.fixture
def drive_service():
    """A stand-in for the googleapiclient Drive resource that finds the spreadsheet."""
    service = MagicMock()
    service.files.return_value.list.return_value.execute.return_value = {
        "files": [{"id": "sheet-123", "name": "JobHunt AI Tracker"}]
    }
    return service
