"""
Base class for record processors (semantic validation and normalization)
"""

import threading
from abc import ABC, abstractmethod
from typing import Any, Optional, Tuple
import logging

from core.config import Settings
from core.exceptions import ValidationError
from ingestion.date_parser import DateParser
from ingestion.error_sink import ErrorSink, MISSING_VALUE
from ingestion.validation import ValidationUtils
from schemas.execution import ProcessingStats
from schemas.records import BaseRecord, RejectedLine

logger = logging.getLogger(__name__)

MISSING_FIELDS_REASON = "Campos obligatorios faltantes"


class RecordProcessor(ABC):
    """
    Validate a mapped record and return its normalized copy.

    Flow for one item:
    1. RejectedLine from the reader: counted as skipped, filtered silently
    2. Required fields re-checked
    3. Entity rules applied by `validate`, which raises ValidationError
    4. Accepted: a new record with canonical category and cleaned fields

    Every rejection writes one row to the error sink and returns None.
    Nothing is ever raised to the caller.
    """

    entity: str = ""

    def __init__(
        self,
        error_sink: ErrorSink,
        settings: Settings,
        validation: Optional[ValidationUtils] = None,
        date_parser: Optional[DateParser] = None,
    ):
        self.error_sink = error_sink
        self.settings = settings
        self.validation = validation or ValidationUtils(settings)
        self.date_parser = date_parser or DateParser()

        self._lock = threading.Lock()
        self._processed = 0
        self._valid = 0
        self._error = 0
        self._skipped = 0

    @abstractmethod
    def required_fields(self, record: BaseRecord) -> Tuple[Any, ...]:
        pass

    @abstractmethod
    def validate(self, record: BaseRecord) -> BaseRecord:
        """Return the normalized record or raise ValidationError"""
        pass

    def process(self, item) -> Optional[BaseRecord]:
        self._increment("_processed")

        if isinstance(item, RejectedLine):
            logger.debug(f"Filtering rejected {self.entity} line: key={item.key}")
            self._increment("_skipped")
            return None

        try:
            if not self.validation.are_required_fields_valid(*self.required_fields(item)):
                raise ValidationError(MISSING_FIELDS_REASON)

            result = self.validate(item)

        except ValidationError as e:
            original_value = e.context.get("original_value", MISSING_VALUE)
            logger.warning(
                f"Rejected {self.entity} record key={item.key}: {e.message} "
                f"(value: {original_value})"
            )
            self._reject(item, e.message, original_value)
            return None

        except Exception as e:
            logger.error(f"Unexpected error processing {self.entity} record key={item.key}: {e}")
            self._reject(item, f"Error de procesamiento: {e}", MISSING_VALUE)
            return None

        self._increment("_valid")
        logger.debug(f"Accepted {self.entity} record key={result.key} ({result.category})")
        return result

    @staticmethod
    def invalid(reason: str, original_value: Any = None):
        value = MISSING_VALUE if original_value is None else str(original_value)
        raise ValidationError(reason, context={"original_value": value})

    def _reject(self, record: BaseRecord, reason: str, original_value: str):
        self.error_sink.write_error(record, reason, original_value)
        self._increment("_error")

    def _increment(self, counter: str):
        with self._lock:
            setattr(self, counter, getattr(self, counter) + 1)

    def check_date(self, record: BaseRecord, reason: str):
        """DateParser sanity range, then configured minimum year and future-date rule"""
        fecha = record.fecha
        if not self.date_parser.is_valid(fecha):
            self.invalid(reason, fecha)
        if not self.validation.is_valid_date(fecha, today=self.date_parser.today()):
            self.invalid(reason, fecha)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def stats(self) -> ProcessingStats:
        with self._lock:
            return ProcessingStats(
                processed=self._processed,
                valid=self._valid,
                error=self._error,
                skipped=self._skipped,
            )

    def reset_counters(self):
        with self._lock:
            self._processed = 0
            self._valid = 0
            self._error = 0
            self._skipped = 0

    def log_processing_stats(self):
        stats = self.stats()
        logger.info(
            f"{self.entity} processing stats - processed: {stats.processed}, "
            f"valid: {stats.valid}, errors: {stats.error}, skipped: {stats.skipped}"
        )
        if self.settings.DETAILED_STATS and stats.processed:
            rate = stats.valid / stats.processed * 100
            logger.info(f"{self.entity} acceptance rate: {rate:.2f}%")
