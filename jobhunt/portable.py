"""Export the collection to a portable JSON file and validate imports."""

import json
import logging
from collections.abc import Mapping
from datetime import date
from enum import Enum
from typing import Any, Optional, Sequence

from pydantic import BaseModel

from .migration import resolve_contacts
from .models import Job
from .records import coerce_job

logger = logging.getLogger(__name__)

COMPANY_PLACEHOLDER = "Unknown Company"
ROLE_PLACEHOLDER = "Unknown Role"


class RejectReason(str, Enum):
    PARSE_ERROR = "parse_error"
    NOT_A_LIST = "not_a_list"
    NO_VALID_RECORDS = "no_valid_records"


class ImportResult(BaseModel):
    """Either the sanitized records or the reason the document was refused."""

    accepted: list[Job] = []
    rejected: Optional[RejectReason] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.rejected is None


def export_document(jobs: Sequence[Job]) -> str:
    """Serialize the full collection, pretty-printed, without changing content."""
    return json.dumps([job.to_document() for job in jobs], indent=2, ensure_ascii=False)


def export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"jobhunt-backup-{today.isoformat()}.json"


def sanitize_record(raw: Any) -> Optional[Job]:
    """Fill in what an imported record is missing. Non-objects are dropped."""
    if not isinstance(raw, Mapping):
        return None
    return coerce_job(
        raw,
        contacts=resolve_contacts(raw),
        company_default=COMPANY_PLACEHOLDER,
        role_default=ROLE_PLACEHOLDER,
    )


def import_document(text: str) -> ImportResult:
    """Parse and sanitize an exported document.

    Nothing is applied here: on success the caller confirms with the operator
    and then replaces the whole collection with ``accepted``.
    """
    try:
        data = json.loads(text)
    except ValueError as e:
        logger.warning(f"Import rejected, not valid JSON: {e}")
        return ImportResult(rejected=RejectReason.PARSE_ERROR, message=f"File is not valid JSON: {e}")

    if not isinstance(data, list):
        logger.warning(f"Import rejected, top level is a {type(data).__name__}")
        return ImportResult(
            rejected=RejectReason.NOT_A_LIST,
            message="Invalid format: expected a list of job applications.",
        )

    jobs = []
    for index, raw in enumerate(data):
        job = sanitize_record(raw)
        if job is None:
            logger.warning(f"Dropping import entry {index}: not an object")
            continue
        jobs.append(job)

    if not jobs:
        return ImportResult(
            rejected=RejectReason.NO_VALID_RECORDS,
            message="No valid job records found in file.",
        )

    logger.info(f"Import accepted {len(jobs)} of {len(data)} entries")
    return ImportResult(accepted=jobs)
