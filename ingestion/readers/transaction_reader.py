"""
Reader for transaction lines: `id,fecha,monto,tipo`
"""

from typing import Dict

from ingestion.readers.base import RecordReader
from models.base import EntityType
from schemas.records import TransactionRecord


class TransactionReader(RecordReader):
    """Syntactic checks in column order: id, fecha, monto, tipo"""

    entity = EntityType.TRANSACCIONES.value
    key_label = "ID"

    def map_fields(self, fields: Dict[str, str]) -> TransactionRecord:
        record_id = self.parse_key(fields.get("id"))
        fecha = self.parse_date(fields.get("fecha"), record_id)
        monto = self.parse_decimal(fields.get("monto"), record_id, "monto", "Monto vacío")
        tipo = self.require_text(fields.get("tipo"), record_id, "Tipo de transacción vacío")

        return TransactionRecord(id=record_id, fecha=fecha, monto=monto, tipo=tipo)
