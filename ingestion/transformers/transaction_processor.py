"""
Semantic validation and normalization of transaction records
"""

from typing import Any, Tuple
import logging

from ingestion.transformers.base import RecordProcessor
from ingestion.validation import VALID_TRANSACTION_TYPES
from models.base import EntityType
from schemas.records import TransactionRecord

logger = logging.getLogger(__name__)


class TransactionProcessor(RecordProcessor):
    """
    Rules, in order:
    - id within 1..999_999_999
    - fecha inside the parser range, not before MIN_YEAR, not in the future
    - monto non-zero (when SKIP_ZERO_AMOUNTS) and within MAX_AMOUNT
    - tipo resolves to DEBITO or CREDITO
    """

    entity = EntityType.TRANSACCIONES.value

    def required_fields(self, record: TransactionRecord) -> Tuple[Any, ...]:
        return (record.id, record.fecha, record.monto, record.tipo)

    def validate(self, record: TransactionRecord) -> TransactionRecord:
        if not self.validation.is_valid_id(record.id):
            self.invalid("ID inválido", record.id)

        self.check_date(record, "Fecha inválida en processor")

        monto = record.monto
        if self.settings.SKIP_ZERO_AMOUNTS and monto == 0:
            self.invalid("Monto inválido", monto)
        if not self.validation.is_valid_amount(monto):
            self.invalid("Monto inválido", monto)

        tipo = self.validation.normalize_transaction_type(record.tipo)
        if tipo not in VALID_TRANSACTION_TYPES:
            logger.warning(
                f"Transaction {record.id} rejected for type '{record.tipo}' "
                f"(normalized '{tipo}')"
            )
            self.invalid("Tipo de transacción no válido", record.tipo)

        return TransactionRecord(
            id=record.id,
            fecha=record.fecha,
            monto=self.validation.process_amount(monto),
            tipo=tipo,
        )
