"""Google Sheets sync for job applications.

Each record is one row of a fixed eleven-column sheet. The sheet has no
lookup by key, so updates and deletes re-read every row to find the target
row number first. Nothing guards the gap between that read and the write:
if another tab or person edits the sheet in between, the write can land on
the wrong row. That is an accepted limitation of this sync.
"""

import json
import logging
from typing import Any, Optional, Sequence

from googleapiclient.errors import HttpError

from .auth import build_services, get_credentials
from .config import Config
from .errors import SheetsError
from .models import Job, JobStatus, now_iso
from .records import coerce_email, coerce_event, coerce_insights, coerce_many

logger = logging.getLogger(__name__)

SPREADSHEET_TITLE = "JobHunt AI Tracker"
SHEET_NAME = "Jobs"
SPREADSHEET_MIME = "application/vnd.google-apps.spreadsheet"

HEADERS = [
    "ID",
    "Company",
    "Role",
    "Location",
    "Status",
    "Date Applied",
    "Description",
    "Notes",
    "Events (JSON)",
    "Emails (JSON)",
    "AI Insights (JSON)",
]
LAST_COLUMN = "K"


def pad_row(row: Sequence[Any]) -> list[str]:
    """Sheets drops trailing empty cells; put them back."""
    cells = ["" if cell is None else str(cell) for cell in row[: len(HEADERS)]]
    return cells + [""] * (len(HEADERS) - len(cells))


def _decode_json(cell: str, default: Any) -> Any:
    if not cell:
        return default
    return json.loads(cell)


def row_to_job(row: Sequence[Any]) -> Job:
    """Decode one data row. Raises ValueError if the row cannot be used."""
    cells = pad_row(row)
    if not cells[0]:
        raise ValueError("row has no ID")

    events = _decode_json(cells[8], [])
    emails = _decode_json(cells[9], [])
    insights = _decode_json(cells[10], None)

    return Job(
        id=cells[0],
        company=cells[1],
        role=cells[2],
        location=cells[3],
        status=JobStatus.coerce(cells[4]),
        date_applied=cells[5] or now_iso(),
        description=cells[6],
        notes=cells[7],
        events=coerce_many(events, coerce_event),
        emails=coerce_many(emails, coerce_email),
        ai_insights=coerce_insights(insights),
    )


def job_to_row(job: Job) -> list[str]:
    return job.to_row()


def _execute(request, action: str):
    try:
        return request.execute()
    except HttpError as e:
        raise SheetsError(f"Failed to {action}: {e}") from e


class SheetsSync:
    """One sync session against the tracking spreadsheet.

    The spreadsheet id is resolved on first use and kept for the life of
    this object only; a new session resolves it again.
    """

    def __init__(
        self,
        sheets_service,
        drive_service,
        title: str = SPREADSHEET_TITLE,
        sheet_name: str = SHEET_NAME,
    ):
        self.sheets = sheets_service
        self.drive = drive_service
        self.title = title
        self.sheet_name = sheet_name
        self._spreadsheet_id: Optional[str] = None
        self._sheet_id: Optional[int] = None

    @classmethod
    def from_config(cls, config: Config) -> "SheetsSync":
        creds = get_credentials(config.credentials_dir)
        sheets, drive = build_services(creds)
        return cls(sheets, drive, config.spreadsheet_title, config.sheet_name)

    def resolve_resource(self) -> str:
        """Find the tracking spreadsheet, creating it if it cannot be found."""
        if self._spreadsheet_id:
            return self._spreadsheet_id

        title = self.title.replace("'", "\\'")
        query = f"name = '{title}' and mimeType = '{SPREADSHEET_MIME}' and trashed = false"
        try:
            response = self.drive.files().list(q=query, fields="files(id, name)").execute()
            files = response.get("files", [])
            if files:
                self._spreadsheet_id = files[0]["id"]
                logger.info(f"Using spreadsheet {self._spreadsheet_id} ({self.title})")
                return self._spreadsheet_id
        except HttpError as e:
            logger.warning(f"Could not search Drive for {self.title!r}, creating it instead: {e}")

        return self._create_resource()

    def _create_resource(self) -> str:
        result = _execute(
            self.sheets.spreadsheets().create(
                body={
                    "properties": {"title": self.title},
                    "sheets": [{"properties": {"title": self.sheet_name}}],
                },
                fields="spreadsheetId,sheets.properties",
            ),
            "create spreadsheet",
        )
        spreadsheet_id = result["spreadsheetId"]
        for sheet in result.get("sheets", []):
            properties = sheet.get("properties", {})
            if properties.get("title") == self.sheet_name:
                self._sheet_id = properties.get("sheetId")

        _execute(
            self.sheets.spreadsheets().values().update(
                spreadsheetId=spreadsheet_id,
                range=f"{self.sheet_name}!A1:{LAST_COLUMN}1",
                valueInputOption="RAW",
                body={"values": [HEADERS]},
            ),
            "write header row",
        )

        self._spreadsheet_id = spreadsheet_id
        logger.info(f"Created spreadsheet {spreadsheet_id} ({self.title})")
        return spreadsheet_id

    def _resolve_sheet_id(self) -> int:
        if self._sheet_id is not None:
            return self._sheet_id

        result = _execute(
            self.sheets.spreadsheets().get(
                spreadsheetId=self.resolve_resource(),
                fields="sheets.properties(sheetId,title)",
            ),
            "read sheet properties",
        )
        for sheet in result.get("sheets", []):
            properties = sheet.get("properties", {})
            if properties.get("title") == self.sheet_name:
                self._sheet_id = properties.get("sheetId", 0)
                return self._sheet_id

        raise SheetsError(f"Sheet {self.sheet_name!r} not found in spreadsheet")

    def _fetch_rows(self) -> list[list[Any]]:
        result = _execute(
            self.sheets.spreadsheets().values().get(
                spreadsheetId=self.resolve_resource(),
                range=f"{self.sheet_name}!A2:{LAST_COLUMN}",
            ),
            "read rows",
        )
        return result.get("values", [])

    @staticmethod
    def _find_row(rows: list[list[Any]], job_id: str) -> Optional[int]:
        """Offset of the first data row whose ID cell matches."""
        for offset, row in enumerate(rows):
            if row and str(row[0]) == job_id:
                return offset
        return None

    def fetch_all(self) -> list[Job]:
        """Read every data row; undecodable rows are logged and skipped."""
        jobs = []
        for offset, row in enumerate(self._fetch_rows()):
            if not row:
                continue
            try:
                jobs.append(row_to_job(row))
            except ValueError as e:
                logger.error(f"Skipping unreadable sheet row {offset + 2}: {e}")

        logger.info(f"Fetched {len(jobs)} applications from spreadsheet")
        return jobs

    def pull_all(self, local_jobs: Sequence[Job]) -> list[Job]:
        """Fetch every row, keeping what the sheet has no column for.

        Contacts and salary range are never written to the sheet, so a pulled
        record takes them from the local record with the same id.
        """
        local = {job.id: job for job in local_jobs}
        jobs = []
        kept = 0
        for job in self.fetch_all():
            existing = local.get(job.id)
            if existing is not None:
                job = job.model_copy(
                    update={"contacts": existing.contacts, "salary_range": existing.salary_range}
                )
                kept += 1
            jobs.append(job)

        logger.info(f"Kept local contacts and salary for {kept} of {len(jobs)} pulled applications")
        return jobs

    def save_one(self, job: Job, is_new: bool = False) -> bool:
        """Append a new record or overwrite its existing row.

        Returns False, without writing, when an existing record has no row.
        """
        spreadsheet_id = self.resolve_resource()
        row = job_to_row(job)

        if is_new:
            _execute(
                self.sheets.spreadsheets().values().append(
                    spreadsheetId=spreadsheet_id,
                    range=f"{self.sheet_name}!A1",
                    valueInputOption="RAW",
                    insertDataOption="INSERT_ROWS",
                    body={"values": [row]},
                ),
                "append row",
            )
            logger.info(f"Appended row to spreadsheet: {job.company} - {job.role}")
            return True

        offset = self._find_row(self._fetch_rows(), job.id)
        if offset is None:
            logger.info(f"No spreadsheet row for {job.id}, nothing updated")
            return False

        row_number = offset + 2
        _execute(
            self.sheets.spreadsheets().values().update(
                spreadsheetId=spreadsheet_id,
                range=f"{self.sheet_name}!A{row_number}:{LAST_COLUMN}{row_number}",
                valueInputOption="RAW",
                body={"values": [row]},
            ),
            "update row",
        )
        logger.info(f"Updated spreadsheet row {row_number}: {job.company} - {job.role}")
        return True

    def delete_one(self, job_id: str) -> bool:
        """Delete the row holding a record. Returns False if there is none."""
        spreadsheet_id = self.resolve_resource()
        offset = self._find_row(self._fetch_rows(), job_id)
        if offset is None:
            logger.info(f"No spreadsheet row for {job_id}, nothing deleted")
            return False

        # Grid indexes are zero-based and include the header row.
        start = offset + 1
        _execute(
            self.sheets.spreadsheets().batchUpdate(
                spreadsheetId=spreadsheet_id,
                body={
                    "requests": [
                        {
                            "deleteDimension": {
                                "range": {
                                    "sheetId": self._resolve_sheet_id(),
                                    "dimension": "ROWS",
                                    "startIndex": start,
                                    "endIndex": start + 1,
                                }
                            }
                        }
                    ]
                },
            ),
            "delete row",
        )
        logger.info(f"Deleted spreadsheet row {start + 1} ({job_id})")
        return True

    def push_all(self, jobs: Sequence[Job]) -> dict:
        """Write every local record: changed rows in place, missing ones appended."""
        spreadsheet_id = self.resolve_resource()
        rows = self._fetch_rows()

        positions: dict[str, int] = {}
        for offset, row in enumerate(rows):
            if row and row[0]:
                positions.setdefault(str(row[0]), offset)

        updates = []
        new_rows = []
        for job in jobs:
            row = job_to_row(job)
            offset = positions.get(job.id)
            if offset is None:
                new_rows.append(row)
            elif pad_row(rows[offset]) != row:
                row_number = offset + 2
                updates.append(
                    {
                        "range": f"{self.sheet_name}!A{row_number}:{LAST_COLUMN}{row_number}",
                        "values": [row],
                    }
                )

        if updates:
            _execute(
                self.sheets.spreadsheets().values().batchUpdate(
                    spreadsheetId=spreadsheet_id,
                    body={"valueInputOption": "RAW", "data": updates},
                ),
                "update rows",
            )

        if new_rows:
            _execute(
                self.sheets.spreadsheets().values().append(
                    spreadsheetId=spreadsheet_id,
                    range=f"{self.sheet_name}!A1",
                    valueInputOption="RAW",
                    insertDataOption="INSERT_ROWS",
                    body={"values": new_rows},
                ),
                "append rows",
            )

        logger.info(f"Pushed to spreadsheet: {len(new_rows)} appended, {len(updates)} updated")
        return {"appended": len(new_rows), "updated": len(updates)}
