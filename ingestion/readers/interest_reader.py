"""
Reader for interest account lines: `cuenta_id,nombre,saldo,edad,tipo`
"""

from typing import Dict, Optional

from ingestion.readers.base import RecordReader
from models.base import EntityType
from schemas.records import InterestAccountRecord

MIN_READ_AGE = 0


class InterestAccountReader(RecordReader):
    """Syntactic checks in column order: cuenta_id, nombre, saldo, edad, tipo"""

    entity = EntityType.INTERESES.value
    key_label = "cuenta_id"

    def map_fields(self, fields: Dict[str, str]) -> InterestAccountRecord:
        cuenta_id = self.parse_key(fields.get("cuenta_id"))
        nombre = self._parse_name(fields.get("nombre"), cuenta_id)
        saldo = self.parse_decimal(fields.get("saldo"), cuenta_id, "saldo", "Saldo vacío")
        edad = self._parse_age(fields.get("edad"), cuenta_id)
        tipo = self.require_text(fields.get("tipo"), cuenta_id, "Tipo de cuenta vacío")

        return InterestAccountRecord(
            cuenta_id=cuenta_id,
            nombre=nombre,
            saldo=saldo,
            edad=edad,
            tipo=tipo,
        )

    def _parse_name(self, value: Optional[str], cuenta_id: int) -> str:
        nombre = self.require_text(value, cuenta_id, "Nombre vacío")

        if len(nombre) < self.settings.NAME_MIN_LENGTH:
            self.fail(f"Nombre muy corto (mínimo {self.settings.NAME_MIN_LENGTH} caracteres)", cuenta_id)
        if len(nombre) > self.settings.NAME_MAX_LENGTH:
            self.fail(f"Nombre muy largo (máximo {self.settings.NAME_MAX_LENGTH} caracteres)", cuenta_id)
        return nombre

    def _parse_age(self, value: Optional[str], cuenta_id: int) -> int:
        if not self.validation.is_not_empty(value):
            self.fail("Edad vacía", cuenta_id)

        if not self.validation.is_valid_integer(value):
            self.fail("Formato de edad inválido", cuenta_id)

        edad = int(value.strip())
        if edad < MIN_READ_AGE:
            self.fail("Edad no puede ser negativa", cuenta_id)
        if edad > self.settings.MAX_AGE:
            self.fail(f"Edad muy alta (máximo {self.settings.MAX_AGE} años)", cuenta_id)
        return edad
