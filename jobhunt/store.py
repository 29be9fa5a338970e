"""Local persistence of the whole record collection in one JSON file."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Sequence

from filelock import FileLock

from .migration import migrate
from .models import Job

logger = logging.getLogger(__name__)


class LocalStore:
    """One JSON document holding every record, rewritten on each save.

    Holds no cache: every load re-reads the file.
    """

    def __init__(self, path: Path, lock_timeout: float = 10):
        self.path = Path(path)
        self._lock = FileLock(str(self.path) + ".lock", timeout=lock_timeout)

    def load(self) -> list[Job]:
        """Read and migrate all records, degrading to an empty list on damage."""
        if not self.path.exists():
            logger.debug(f"No local data at {self.path}, starting empty")
            return []

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read local data from {self.path}, starting empty: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(
                f"Local data in {self.path} is a {type(data).__name__}, not a list; starting empty"
            )
            return []

        jobs = []
        for index, raw in enumerate(data):
            if not isinstance(raw, dict):
                logger.warning(f"Skipping non-object entry {index} in {self.path}")
                continue
            jobs.append(migrate(raw))

        logger.debug(f"Loaded {len(jobs)} records from {self.path}")
        return jobs

    def save(self, jobs: Sequence[Job]) -> None:
        """Overwrite the file with the full collection.

        The document is written to a temporary sibling and moved into place,
        so readers never see a partial write.
        """
        document = json.dumps([job.to_document() for job in jobs], ensure_ascii=False)
        self.path.parent.mkdir(parents=True, exist_ok=True)

        with self._lock:
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(document)
                os.replace(tmp_path, self.path)
            finally:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)

        logger.debug(f"Saved {len(jobs)} records to {self.path}")

    def clear(self) -> None:
        """Remove the stored collection entirely."""
        with self._lock:
            if self.path.exists():
                self.path.unlink()
                logger.info(f"Removed local data at {self.path}")
