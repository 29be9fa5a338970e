"""Command-line entry point for the job application tracker."""

import argparse
import logging
import sys
import tempfile
from pathlib import Path
from typing import Optional

from filelock import FileLock, Timeout

from .config import PROJECT_DIR, Config, get_config, load_config
from .errors import ConfigurationError, ExtractionError, ServiceError
from .extraction import ExtractionClient
from .models import AIInsights, Contact, EventType, Job, JobStatus
from .portable import export_document, export_filename, import_document
from .sheets import SheetsSync
from .store import LocalStore
from .tracker import (
    Tracker,
    add_contact,
    add_event,
    log_correspondence,
    set_status,
    sorted_events,
    toggle_event,
    with_interview_questions,
)

LOCK_FILE = Path(tempfile.gettempdir()) / "jobhunt.lock"
LOG_DIR = PROJECT_DIR / "logs"

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """Configure logging for the application."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = LOG_DIR / "app.log"

    config = get_config()
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler(sys.stderr),
        ],
    )


def confirm(prompt: str, assume_yes: bool = False) -> bool:
    if assume_yes:
        return True
    answer = input(f"{prompt} [y/N] ").strip().lower()
    return answer in ("y", "yes")


def format_job(job: Job) -> str:
    location = f" ({job.location})" if job.location else ""
    return f"{job.id}  {job.status.value:<12} {job.company} - {job.role}{location}  [{job.date_applied[:10]}]"


def _find(tracker: Tracker, job_id: str) -> Optional[Job]:
    job = tracker.get(job_id)
    if job is None:
        print(f"No application with id {job_id}", file=sys.stderr)
    return job


def cmd_list(args, tracker: Tracker, config: Config) -> int:
    status = JobStatus.coerce(args.status) if args.status else None
    jobs = tracker.filter(status=status, query=args.search or "")
    stats = tracker.stats()
    print(f"{stats['total']} applications, {stats['active']} active, {stats['interviewing']} interviewing")
    if not jobs:
        print("No applications found.")
    for job in jobs:
        print(format_job(job))
    return 0


def cmd_show(args, tracker: Tracker, config: Config) -> int:
    job = _find(tracker, args.id)
    if job is None:
        return 1

    print(format_job(job))
    if job.salary_range:
        print(f"Salary: {job.salary_range}")
    if job.description:
        print(f"\n{job.description}")
    if job.notes:
        print(f"\nNotes: {job.notes}")

    if job.contacts:
        print("\nContacts:")
        for contact in job.contacts:
            details = ", ".join(
                value
                for value in (contact.role, contact.organization, contact.email, contact.phone, contact.linkedin)
                if value
            )
            print(f"  {contact.name or '(unnamed)'}: {details}")

    if job.events:
        print("\nEvents:")
        for event in sorted_events(job):
            mark = "x" if event.completed else " "
            print(f"  [{mark}] {event.date}  {event.type.value:<10} {event.title}  ({event.id})")

    if job.emails:
        print("\nCorrespondence:")
        for email in job.emails:
            print(f"  {email.date[:10]}  {email.sender}: {email.summary or email.subject}")

    insights = job.ai_insights
    if insights and insights.key_skills:
        print(f"\nKey skills: {', '.join(insights.key_skills)}")
    if insights and insights.interview_questions:
        print("\nInterview questions:")
        for question in insights.interview_questions:
            print(f"  - {question}")
    return 0


def cmd_add(args, tracker: Tracker, config: Config) -> int:
    fields = {
        "company": args.company,
        "role": args.role,
        "location": args.location,
        "description": "",
    }
    contacts: list[Contact] = []
    insights = None

    if args.parse:
        text = Path(args.parse).read_text(encoding="utf-8")
        fields["description"] = text
        try:
            result = ExtractionClient.from_config(config).parse_free_text(text)
        except ExtractionError as e:
            logger.warning(f"AI parse failed: {e}")
            print("Could not parse job description. Please fill manually.", file=sys.stderr)
        else:
            fields["company"] = args.company or result.company
            fields["role"] = args.role or result.role
            fields["location"] = args.location or result.location or None
            contacts = result.contacts
            insights = AIInsights(key_skills=result.key_skills)

    if not fields["company"] or not fields["role"]:
        print("Company and role are required.", file=sys.stderr)
        return 1

    job = Job.create(
        status=JobStatus.coerce(args.status),
        salary_range=args.salary,
        contacts=contacts,
        ai_insights=insights,
        **fields,
    )
    tracker.add(job)
    print(f"Added {format_job(job)}")
    return 0


def cmd_status(args, tracker: Tracker, config: Config) -> int:
    job = _find(tracker, args.id)
    if job is None:
        return 1
    tracker.update(set_status(job, JobStatus.coerce(args.status)))
    return 0


def cmd_delete(args, tracker: Tracker, config: Config) -> int:
    job = _find(tracker, args.id)
    if job is None:
        return 1
    if not confirm(f"Delete {job.company} - {job.role}?", args.yes):
        print("Cancelled.")
        return 0
    tracker.delete(job.id)
    return 0


def cmd_email(args, tracker: Tracker, config: Config) -> int:
    job = _find(tracker, args.id)
    if job is None:
        return 1

    body = Path(args.file).read_text(encoding="utf-8")
    if not body.strip():
        print("Email file is empty.", file=sys.stderr)
        return 1

    analysis = ExtractionClient.from_config(config).analyze_correspondence(body)
    accept_event = False
    suggested = analysis.suggested_event
    if suggested is not None and suggested.date:
        accept_event = confirm(
            f'AI found a potential event: "{suggested.title}" on {suggested.date}. Add it?', args.yes
        )

    tracker.update(
        log_correspondence(
            job,
            body,
            analysis,
            sender=args.sender,
            subject=args.subject,
            accept_event=accept_event,
        )
    )
    print(f"Summary: {analysis.summary}")
    return 0


def cmd_event(args, tracker: Tracker, config: Config) -> int:
    job = _find(tracker, args.id)
    if job is None:
        return 1
    tracker.update(add_event(job, args.title, args.date, EventType.coerce(args.type), args.notes))
    return 0


def cmd_done(args, tracker: Tracker, config: Config) -> int:
    job = _find(tracker, args.id)
    if job is None:
        return 1
    if not any(event.id == args.event_id for event in job.events):
        print(f"No event with id {args.event_id}", file=sys.stderr)
        return 1
    tracker.update(toggle_event(job, args.event_id))
    return 0


def cmd_contact(args, tracker: Tracker, config: Config) -> int:
    job = _find(tracker, args.id)
    if job is None:
        return 1
    contact = Contact(
        name=args.name,
        role=args.title or "",
        email=args.email or "",
        phone=args.phone or "",
        linkedin=args.linkedin or "",
        organization=args.organization or "",
    )
    tracker.update(add_contact(job, contact))
    return 0


def cmd_questions(args, tracker: Tracker, config: Config) -> int:
    job = _find(tracker, args.id)
    if job is None:
        return 1
    questions = ExtractionClient.from_config(config).suggest_interview_questions(
        job.role, job.company, job.description
    )
    tracker.update(with_interview_questions(job, questions))
    for question in questions:
        print(f"- {question}")
    return 0


def cmd_export(args, tracker: Tracker, config: Config) -> int:
    output = Path(args.output) if args.output else Path.cwd() / export_filename()
    output.write_text(export_document(tracker.jobs), encoding="utf-8")
    logger.info(f"Exported {len(tracker.jobs)} applications to {output}")
    print(f"Exported {len(tracker.jobs)} applications to {output}")
    return 0


def cmd_import(args, tracker: Tracker, config: Config) -> int:
    text = Path(args.file).read_text(encoding="utf-8")
    result = import_document(text)
    if not result.ok:
        print(f"Import rejected, please review the file: {result.message}", file=sys.stderr)
        return 1

    if not confirm(
        f"Replace {len(tracker.jobs)} existing applications with "
        f"{len(result.accepted)} imported ones? This cannot be undone.",
        args.yes,
    ):
        print("Import cancelled.")
        return 0

    tracker.replace_all(result.accepted)
    print(f"Imported {len(result.accepted)} applications.")
    return 0


def cmd_sync_push(args, tracker: Tracker, config: Config) -> int:
    counts = SheetsSync.from_config(config).push_all(tracker.jobs)
    print(f"Spreadsheet updated: {counts['appended']} appended, {counts['updated']} updated.")
    return 0


def cmd_sync_pull(args, tracker: Tracker, config: Config) -> int:
    jobs = SheetsSync.from_config(config).pull_all(tracker.jobs)
    if not confirm(
        f"Replace {len(tracker.jobs)} local applications with {len(jobs)} from the spreadsheet?",
        args.yes,
    ):
        print("Pull cancelled.")
        return 0
    tracker.replace_all(jobs)
    print(f"Pulled {len(jobs)} applications.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobhunt", description="Personal job application tracker")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    commands = parser.add_subparsers(dest="command", required=True)

    p = commands.add_parser("list", help="List applications")
    p.add_argument("--status", help="Only show this status")
    p.add_argument("--search", help="Search company and role")
    p.set_defaults(handler=cmd_list)

    p = commands.add_parser("show", help="Show one application")
    p.add_argument("id")
    p.set_defaults(handler=cmd_show)

    p = commands.add_parser("add", help="Track a new application")
    p.add_argument("--company")
    p.add_argument("--role")
    p.add_argument("--location")
    p.add_argument("--salary")
    p.add_argument("--status", default=JobStatus.APPLIED.value)
    p.add_argument("--parse", metavar="FILE", help="Auto-fill from a job posting text file")
    p.set_defaults(handler=cmd_add)

    p = commands.add_parser("status", help="Change an application's status")
    p.add_argument("id")
    p.add_argument("status", choices=[s.value for s in JobStatus], type=str.upper)
    p.set_defaults(handler=cmd_status)

    p = commands.add_parser("delete", help="Delete an application")
    p.add_argument("id")
    p.add_argument("--yes", action="store_true")
    p.set_defaults(handler=cmd_delete)

    p = commands.add_parser("email", help="Log correspondence and summarize it")
    p.add_argument("id")
    p.add_argument("file")
    p.add_argument("--sender", default="Unknown / Pasted")
    p.add_argument("--subject", default="Correspondence Log")
    p.add_argument("--yes", action="store_true", help="Accept a suggested event without asking")
    p.set_defaults(handler=cmd_email)

    p = commands.add_parser("event", help="Add an event")
    p.add_argument("id")
    p.add_argument("--title", required=True)
    p.add_argument("--date", required=True, help="ISO 8601 date or datetime")
    p.add_argument("--type", default=EventType.INTERVIEW.value)
    p.add_argument("--notes")
    p.set_defaults(handler=cmd_event)

    p = commands.add_parser("done", help="Toggle an event's completed flag")
    p.add_argument("id")
    p.add_argument("event_id")
    p.set_defaults(handler=cmd_done)

    p = commands.add_parser("contact", help="Add a contact")
    p.add_argument("id")
    p.add_argument("--name", required=True)
    p.add_argument("--title", help="The contact's job title")
    p.add_argument("--email")
    p.add_argument("--phone")
    p.add_argument("--linkedin")
    p.add_argument("--organization")
    p.set_defaults(handler=cmd_contact)

    p = commands.add_parser("questions", help="Generate interview questions")
    p.add_argument("id")
    p.set_defaults(handler=cmd_questions)

    p = commands.add_parser("export", help="Export all applications to JSON")
    p.add_argument("--output", help="Output file (default: dated file in the current directory)")
    p.set_defaults(handler=cmd_export)

    p = commands.add_parser("import", help="Replace all applications from an exported JSON file")
    p.add_argument("file")
    p.add_argument("--yes", action="store_true")
    p.set_defaults(handler=cmd_import)

    sync = commands.add_parser("sync", help="Google Sheets sync")
    sync_commands = sync.add_subparsers(dest="sync_command", required=True)
    p = sync_commands.add_parser("push", help="Write local applications to the spreadsheet")
    p.set_defaults(handler=cmd_sync_push)
    p = sync_commands.add_parser("pull", help="Replace local applications with the spreadsheet's")
    p.add_argument("--yes", action="store_true")
    p.set_defaults(handler=cmd_sync_pull)

    return parser


def run_command(args: argparse.Namespace, config: Config) -> int:
    tracker = Tracker(LocalStore(config.store_path))
    tracker.load()
    return args.handler(args, tracker, config)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point with concurrency protection."""
    args = build_parser().parse_args(argv)

    try:
        load_config(args.config)
        setup_logging()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    try:
        with FileLock(LOCK_FILE, timeout=10):
            return run_command(args, get_config())

    except Timeout:
        logger.warning("Could not acquire lock - another instance is running")
        return 1

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        print(f"Configuration error, nothing was changed: {e}", file=sys.stderr)
        return 1

    except ServiceError as e:
        logger.error(f"Service error: {e}")
        print(f"Nothing was changed, please retry: {e}", file=sys.stderr)
        return 1

    except Exception as e:
        logger.exception(f"Command failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
