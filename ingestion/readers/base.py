"""
Base class for line-to-record readers
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Dict, Optional
import logging

from core.config import Settings
from core.exceptions import RecordMappingError
from ingestion.date_parser import DateParser
from ingestion.error_sink import ErrorSink
from ingestion.validation import ValidationUtils
from schemas.records import BaseRecord, ParseOutcome, RejectedLine

logger = logging.getLogger(__name__)

INVALID_DATE_REASON = "Fecha inválida o fuera de rango"


class RecordReader(ABC):
    """
    Turn one tokenized line into a record or a RejectedLine.

    Subclasses implement `map_fields`, raising RecordMappingError with the
    reason and the key parsed so far. `read` never raises: every rejection
    is written to the error sink once and returned as a RejectedLine.
    """

    entity: str = ""
    key_label: str = "ID"

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

    @abstractmethod
    def map_fields(self, fields: Dict[str, str]) -> BaseRecord:
        """Build a record from raw fields or raise RecordMappingError"""
        pass

    def read(self, fields: Dict[str, str]) -> ParseOutcome:
        try:
            record = self.map_fields(fields)
            logger.debug(f"Mapped {self.entity} line: key={record.key}")
            return record

        except RecordMappingError as e:
            key = e.context.get("key", -1)
            logger.warning(f"Rejected {self.entity} line (key={key}): {e.message}")
            return self._reject(fields, e.message, key)

        except Exception as e:
            reason = f"Error general en mapeo: {e}"
            logger.error(f"Unexpected error mapping {self.entity} line {fields}: {e}")
            return self._reject(fields, reason, -1)

    def _reject(self, fields: Dict[str, str], reason: str, key: int) -> RejectedLine:
        self.error_sink.write_error_line(fields, reason)
        return RejectedLine(entity=self.entity, key=key, reason=reason, raw_fields=fields)

    # ------------------------------------------------------------------
    # Field parsers; each raises RecordMappingError with the entity reason
    # ------------------------------------------------------------------

    @staticmethod
    def fail(reason: str, key: int = -1):
        raise RecordMappingError(reason, context={"key": key})

    def parse_key(self, value: Optional[str]) -> int:
        label = self.key_label
        if not self.validation.is_not_empty(value):
            self.fail(f"{label} vacío o nulo")

        if not self.validation.is_valid_integer(value):
            self.fail(f"Formato de {label} inválido")

        key = int(value.strip())
        if key <= 0:
            self.fail(f"{label} debe ser positivo")
        return key

    def parse_date(self, value: Optional[str], key: int) -> date:
        parsed = self.date_parser.parse(value)
        if parsed is None or not self.date_parser.is_valid(parsed):
            self.fail(INVALID_DATE_REASON, key)
        return parsed

    def parse_decimal(self, value: Optional[str], key: int, label: str, empty_reason: str) -> Decimal:
        if not self.validation.is_not_empty(value):
            self.fail(empty_reason, key)

        if not self.validation.is_valid_decimal(value):
            self.fail(f"Formato de {label} inválido", key)
        return Decimal(value.strip())

    def require_text(self, value: Optional[str], key: int, empty_reason: str) -> str:
        if not self.validation.is_not_empty(value):
            self.fail(empty_reason, key)
        return value.strip()
