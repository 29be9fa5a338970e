from jobhunt.models import Contact, EmailAnalysis, EventType, Job, JobStatus, SuggestedEvent
from jobhunt.tracker import (
    Tracker,
    add_contact,
    add_event,
    log_correspondence,
    set_status,
    sorted_events,
    toggle_event,
    with_interview_questions,
)


def make_tracker(store, jobs=()):
    store.save(list(jobs))
    tracker = Tracker(store)
    tracker.load()
    return tracker


def test_create_defaults():
    job = Job.create("Acme", "SRE")

    assert job.id
    assert job.status == JobStatus.APPLIED
    assert job.emails == [] and job.events == [] and job.contacts == []
    assert job.date_applied.endswith("Z")


def test_add_prepends_and_persists(store, jobs):
    tracker = make_tracker(store, jobs)
    new = Job.create("Initech", "QA")

    tracker.add(new)

    assert [job.id for job in tracker.jobs] == [new.id, "job-1", "job-2"]
    assert [job.id for job in store.load()] == [new.id, "job-1", "job-2"]


def test_update_replaces_in_place(store, jobs):
    tracker = make_tracker(store, jobs)

    assert tracker.update(set_status(jobs[1], JobStatus.OFFER))

    assert [job.id for job in tracker.jobs] == ["job-1", "job-2"]
    assert store.load()[1].status == JobStatus.OFFER


def test_update_unknown_id_changes_nothing(store, jobs):
    tracker = make_tracker(store, jobs)
    before = store.path.read_text(encoding="utf-8")

    assert not tracker.update(Job.create("Ghost", "Nobody"))
    assert store.path.read_text(encoding="utf-8") == before


def test_delete(store, jobs):
    tracker = make_tracker(store, jobs)

    assert tracker.delete("job-1")
    assert not tracker.delete("job-1")
    assert [job.id for job in store.load()] == ["job-2"]


def test_replace_all(store, jobs):
    tracker = make_tracker(store, jobs)
    replacement = [Job.create("Initech", "QA")]

    tracker.replace_all(replacement)

    assert store.load() == replacement


def test_jobs_returns_a_copy(store, jobs):
    tracker = make_tracker(store, jobs)
    tracker.jobs.clear()

    assert len(tracker.jobs) == 2


def test_filter_and_stats(store, jobs):
    tracker = make_tracker(store, jobs)

    assert [job.id for job in tracker.filter(status=JobStatus.APPLIED)] == ["job-2"]
    assert [job.id for job in tracker.filter(query="backend")] == ["job-1"]
    assert [job.id for job in tracker.filter(query="GLOBEX")] == ["job-2"]
    assert tracker.filter(status=JobStatus.OFFER) == []
    assert tracker.stats() == {"total": 2, "active": 2, "interviewing": 1}


def test_log_correspondence_adds_accepted_event(job):
    analysis = EmailAnalysis(
        summary="Onsite invite.", suggested_event=SuggestedEvent(title="Onsite", date="2024-03-09")
    )

    updated = log_correspondence(job, "Come in on the 9th", analysis, accept_event=True)

    assert updated.emails[0].body == "Come in on the 9th"
    assert updated.emails[0].summary == "Onsite invite."
    assert len(updated.emails) == 2
    assert updated.events[-1].type == EventType.INTERVIEW
    assert updated.events[-1].title == "Onsite"
    assert len(job.emails) == 1


def test_log_correspondence_without_accepting_event(job):
    analysis = EmailAnalysis(
        summary="Onsite invite.", suggested_event=SuggestedEvent(title="Onsite", date="2024-03-09")
    )

    updated = log_correspondence(job, "Come in on the 9th", analysis)

    assert updated.events == job.events


def test_event_helpers_and_display_order(job):
    updated = add_event(job, "Apply deadline", "2024-03-03", EventType.DEADLINE)
    event_id = updated.events[-1].id
    toggled = toggle_event(updated, event_id)

    assert [event.title for event in toggled.events] == ["Phone screen", "Apply deadline"]
    assert [event.title for event in sorted_events(toggled)] == ["Apply deadline", "Phone screen"]
    assert toggled.events[-1].completed
    assert not updated.events[-1].completed


def test_add_contact_and_questions(job):
    updated = add_contact(job, Contact(name="Sam"))
    updated = with_interview_questions(updated, ["Why us?"])

    assert [contact.name for contact in updated.contacts] == ["Dana Lee", "Sam"]
    assert updated.ai_insights.interview_questions == ["Why us?"]
    assert updated.ai_insights.key_skills == ["Python", "PostgreSQL"]
