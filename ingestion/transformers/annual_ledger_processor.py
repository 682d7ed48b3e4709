"""
Semantic validation and normalization of annual ledger records
"""

from typing import Any, Tuple

from ingestion.transformers.base import RecordProcessor
from ingestion.validation import VALID_LEDGER_KINDS
from models.base import EntityType
from schemas.records import AnnualLedgerRecord


class AnnualLedgerProcessor(RecordProcessor):
    """Checks cuenta_id, fecha, monto, descripcion and transaccion; sentence-cases descriptions"""

    entity = EntityType.CUENTAS_ANUALES.value

    def required_fields(self, record: AnnualLedgerRecord) -> Tuple[Any, ...]:
        return (record.cuenta_id, record.fecha, record.transaccion, record.monto, record.descripcion)

    def validate(self, record: AnnualLedgerRecord) -> AnnualLedgerRecord:
        if not self.validation.is_valid_id(record.cuenta_id):
            self.invalid("cuenta_id inválido", record.cuenta_id)

        self.check_date(record, "Fecha inválida")

        monto = record.monto
        if not self.validation.is_valid_amount(monto):
            self.invalid("Monto inválido", monto)
        if self.settings.SKIP_ZERO_LEDGER_AMOUNTS and monto == 0:
            self.invalid("Monto inválido", monto)

        descripcion = self.validation.clean_string(record.descripcion)
        if not self.validation.is_valid_description(descripcion):
            self.invalid("Descripción inválida", record.descripcion)

        transaccion = self.validation.normalize_ledger_transaction_kind(record.transaccion)
        if transaccion not in VALID_LEDGER_KINDS:
            self.invalid("Tipo de transacción no válido", record.transaccion)

        return AnnualLedgerRecord(
            cuenta_id=record.cuenta_id,
            fecha=record.fecha,
            transaccion=transaccion,
            monto=self.validation.process_amount(monto),
            descripcion=self.validation.capitalize_first(descripcion),
        )
