"""
Per-entity error file writer.

Each sink owns one CSV file under the error directory. Rows are appended
behind a lock so readers and processors can share a sink safely.
"""

import threading
from datetime import datetime
from pathlib import Path
from typing import ClassVar, Dict, List, Optional, Sequence, Set
import logging

from core.config import Settings
from schemas.records import BaseRecord

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
FILE_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
MISSING_VALUE = "N/A"
CSV_SPECIAL_CHARS = (",", '"', "\n", "\r")


def escape_csv(value: Optional[str]) -> str:
    """Quote a value containing a comma, quote or line break"""
    if value is None:
        return ""
    if any(char in value for char in CSV_SPECIAL_CHARS):
        return '"' + value.replace('"', '""') + '"'
    return value


class ErrorSink:
    """
    Append-only CSV of rejected lines and records for one entity.

    The header `{fields},motivo_error,timestamp_error` is written lazily
    before the first row, exactly once. Write failures are logged and
    swallowed so a broken error file never stops the pipeline.
    """

    # File names handed out in this process, so two sinks created in the
    # same second do not share a file
    _claimed_paths: ClassVar[Set[Path]] = set()
    _claim_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(
        self,
        entity: str,
        header_fields: Sequence[str],
        settings: Settings,
        now: Optional[datetime] = None,
    ):
        self.entity = entity
        self.header_fields = list(header_fields)
        self.settings = settings

        self._lock = threading.Lock()
        self._header_written = False
        self._error_count = 0

        error_dir = Path(settings.ERROR_DIRECTORY)
        error_dir.mkdir(parents=True, exist_ok=True)
        self._path = self._claim_path(error_dir, now or datetime.now())

        logger.info(f"Error file for '{entity}': {self._path}")

    def _claim_path(self, error_dir: Path, now: datetime) -> Path:
        if self.settings.INCLUDE_TIMESTAMP_IN_ERROR_FILES:
            stem = f"{now.strftime(FILE_TIMESTAMP_FORMAT)}_{self.entity}_errores"
        else:
            stem = f"{self.entity}_errores"

        with self._claim_lock:
            # Written files are caught by exists(); only unwritten claims need tracking
            self._claimed_paths.difference_update(
                [path for path in self._claimed_paths if path.exists()]
            )
            candidate = (error_dir / f"{stem}.csv").resolve()
            suffix = 1
            while candidate in self._claimed_paths or candidate.exists():
                candidate = (error_dir / f"{stem}_{suffix}.csv").resolve()
                suffix += 1
            self._claimed_paths.add(candidate)
            return candidate

    @property
    def header(self) -> str:
        return ",".join(self.header_fields + ["motivo_error", "timestamp_error"])

    @property
    def error_file_path(self) -> str:
        return str(self._path)

    @property
    def error_count(self) -> int:
        with self._lock:
            return self._error_count

    def has_errors(self) -> bool:
        return self.error_count > 0

    def reset(self):
        """Forget the count and header state; the file itself is left alone"""
        with self._lock:
            self._error_count = 0
            self._header_written = False

    def write_error(self, record: BaseRecord, reason: str, original_value: str):
        """Log a record rejected by a processor"""
        values = record.field_values(fallback=original_value)
        self._append(values, reason)

    def write_error_line(self, raw_fields: Dict[str, Optional[str]], reason: str):
        """Log a line rejected before it became a record"""
        width = len(self.header_fields)
        values = list(raw_fields.values())[:width]
        # Pad short lines so every row has the header's width
        values += [None] * (width - len(values))
        values = [MISSING_VALUE if value is None else value for value in values]
        self._append(values, reason)

    def _append(self, values: List[str], reason: str):
        timestamp = datetime.now().strftime(TIMESTAMP_FORMAT)
        row = ",".join(escape_csv(value) for value in values + [reason, timestamp])

        with self._lock:
            try:
                with open(self._path, "a", encoding="utf-8", newline="") as handle:
                    if not self._header_written:
                        handle.write(self.header + "\n")
                        self._header_written = True
                    handle.write(row + "\n")
                self._error_count += 1
            except OSError as e:
                logger.error(f"Failed to write to error file {self._path}: {e}")
                return

        logger.debug(f"Logged {self.entity} error: {reason}")
