"""
Registry of the entity pipelines.

Each EntityDefinition ties an entity name to its input file, column
layout, error-file header, record schema, ORM model, reader, processor
and skip markers. The driver and the job selector only talk to entities
through this table.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Type

from core.config import Settings
from ingestion.date_parser import DateParser
from ingestion.error_sink import ErrorSink
from ingestion.policies import COMMON_SKIP_MARKERS
from ingestion.readers.annual_ledger_reader import AnnualLedgerReader
from ingestion.readers.base import RecordReader
from ingestion.readers.interest_reader import InterestAccountReader
from ingestion.readers.transaction_reader import TransactionReader
from ingestion.transformers.annual_ledger_processor import AnnualLedgerProcessor
from ingestion.transformers.base import RecordProcessor
from ingestion.transformers.interest_processor import InterestAccountProcessor
from ingestion.transformers.transaction_processor import TransactionProcessor
from ingestion.validation import ValidationUtils
from models.annual_ledger import AnnualLedgerEntry
from models.base import Base, EntityType
from models.interest_account import InterestAccount
from models.transaction import Transaction
from schemas.records import (
    AnnualLedgerRecord,
    BaseRecord,
    InterestAccountRecord,
    TransactionRecord,
)


@dataclass(frozen=True)
class EntityDefinition:
    entity: EntityType
    file_name: str
    columns: Tuple[str, ...]
    error_header: Tuple[str, ...]
    record_class: Type[BaseRecord]
    model: Type[Base]
    reader_class: Type[RecordReader]
    processor_class: Type[RecordProcessor]
    skip_markers: Tuple[str, ...]
    # Merge on the natural key; False inserts (surrogate key tables)
    merge: bool = True

    @property
    def name(self) -> str:
        return self.entity.value

    @property
    def step_name(self) -> str:
        return f"{self.entity.value}Step"

    def build_error_sink(self, settings: Settings) -> ErrorSink:
        return ErrorSink(self.name, self.error_header, settings)

    def build_reader(
        self,
        error_sink: ErrorSink,
        settings: Settings,
        validation: Optional[ValidationUtils] = None,
        date_parser: Optional[DateParser] = None,
    ) -> RecordReader:
        return self.reader_class(error_sink, settings, validation, date_parser)

    def build_processor(
        self,
        error_sink: ErrorSink,
        settings: Settings,
        validation: Optional[ValidationUtils] = None,
        date_parser: Optional[DateParser] = None,
    ) -> RecordProcessor:
        return self.processor_class(error_sink, settings, validation, date_parser)


TRANSACTIONS = EntityDefinition(
    entity=EntityType.TRANSACCIONES,
    file_name="transacciones.csv",
    columns=("id", "fecha", "monto", "tipo"),
    error_header=("id", "fecha_original", "monto_original", "tipo_original"),
    record_class=TransactionRecord,
    model=Transaction,
    reader_class=TransactionReader,
    processor_class=TransactionProcessor,
    skip_markers=COMMON_SKIP_MARKERS + (
        "Fecha inválida",
        "Monto inválido",
        "ID inválido",
        "Tipo inválido",
    ),
)

INTEREST_ACCOUNTS = EntityDefinition(
    entity=EntityType.INTERESES,
    file_name="intereses.csv",
    columns=("cuenta_id", "nombre", "saldo", "edad", "tipo"),
    error_header=("cuenta_id", "nombre_original", "saldo_original", "edad_original", "tipo_original"),
    record_class=InterestAccountRecord,
    model=InterestAccount,
    reader_class=InterestAccountReader,
    processor_class=InterestAccountProcessor,
    skip_markers=COMMON_SKIP_MARKERS + (
        "Saldo inválido",
        "Edad inválida",
        "cuenta_id inválido",
        "Nombre inválido",
        "Tipo inválido",
    ),
)

ANNUAL_LEDGER = EntityDefinition(
    entity=EntityType.CUENTAS_ANUALES,
    file_name="cuentas_anuales.csv",
    columns=("cuenta_id", "fecha", "transaccion", "monto", "descripcion"),
    error_header=(
        "cuenta_id",
        "fecha_original",
        "transaccion_original",
        "monto_original",
        "descripcion_original",
    ),
    record_class=AnnualLedgerRecord,
    model=AnnualLedgerEntry,
    reader_class=AnnualLedgerReader,
    processor_class=AnnualLedgerProcessor,
    skip_markers=COMMON_SKIP_MARKERS + (
        "Fecha inválida",
        "Monto inválido",
        "cuenta_id inválido",
        "Transacción inválida",
        "Descripción inválida",
    ),
    merge=False,
)

ENTITIES: Dict[str, EntityDefinition] = {
    definition.name: definition
    for definition in (TRANSACTIONS, INTEREST_ACCOUNTS, ANNUAL_LEDGER)
}


def get_entity(name: str) -> EntityDefinition:
    try:
        return ENTITIES[name]
    except KeyError:
        raise ValueError(f"Unknown entity: {name}. Expected one of {sorted(ENTITIES)}") from None
