"""
Reader for annual ledger lines: `cuenta_id,fecha,transaccion,monto,descripcion`
"""

from typing import Dict, Optional

from ingestion.readers.base import RecordReader
from models.base import EntityType
from schemas.records import AnnualLedgerRecord


class AnnualLedgerReader(RecordReader):
    """Syntactic checks in column order: cuenta_id, fecha, transaccion, monto, descripcion"""

    entity = EntityType.CUENTAS_ANUALES.value
    key_label = "cuenta_id"

    def map_fields(self, fields: Dict[str, str]) -> AnnualLedgerRecord:
        cuenta_id = self.parse_key(fields.get("cuenta_id"))
        fecha = self.parse_date(fields.get("fecha"), cuenta_id)
        transaccion = self.require_text(fields.get("transaccion"), cuenta_id, "Tipo de transacción vacío")
        monto = self.parse_decimal(fields.get("monto"), cuenta_id, "monto", "Monto vacío")
        descripcion = self._parse_description(fields.get("descripcion"), cuenta_id)

        return AnnualLedgerRecord(
            cuenta_id=cuenta_id,
            fecha=fecha,
            transaccion=transaccion,
            monto=monto,
            descripcion=descripcion,
        )

    def _parse_description(self, value: Optional[str], cuenta_id: int) -> str:
        descripcion = self.require_text(value, cuenta_id, "Descripción vacía")

        min_length = self.settings.DESCRIPTION_MIN_LENGTH
        max_length = self.settings.DESCRIPTION_MAX_LENGTH
        if len(descripcion) < min_length:
            self.fail(f"Descripción muy corta (mínimo {min_length} caracteres)", cuenta_id)
        if len(descripcion) > max_length:
            self.fail(f"Descripción muy larga (máximo {max_length} caracteres)", cuenta_id)
        return descripcion
