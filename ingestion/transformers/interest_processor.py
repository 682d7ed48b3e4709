"""
Semantic validation and normalization of interest account records
"""

from typing import Any, Tuple

from ingestion.transformers.base import RecordProcessor
from ingestion.validation import VALID_ACCOUNT_TYPES
from models.base import EntityType
from schemas.records import InterestAccountRecord


class InterestAccountProcessor(RecordProcessor):
    """Checks cuenta_id, nombre, saldo, edad and tipo; capitalizes names on acceptance"""

    entity = EntityType.INTERESES.value

    def required_fields(self, record: InterestAccountRecord) -> Tuple[Any, ...]:
        return (record.cuenta_id, record.nombre, record.saldo, record.edad, record.tipo)

    def validate(self, record: InterestAccountRecord) -> InterestAccountRecord:
        if not self.validation.is_valid_id(record.cuenta_id):
            self.invalid("cuenta_id inválido", record.cuenta_id)

        nombre = self.validation.clean_string(record.nombre)
        if not self.validation.is_valid_name(nombre):
            self.invalid("Nombre inválido", record.nombre)

        saldo = record.saldo
        if not self.validation.is_valid_amount(saldo):
            self.invalid("Saldo inválido", saldo)
        if self.settings.SKIP_ZERO_BALANCES and saldo == 0:
            self.invalid("Saldo inválido", saldo)

        if not self.validation.is_valid_age(record.edad):
            self.invalid("Edad inválida", record.edad)

        tipo = self.validation.normalize_account_type(record.tipo)
        if tipo not in VALID_ACCOUNT_TYPES:
            self.invalid("Tipo de cuenta no válido", record.tipo)

        return InterestAccountRecord(
            cuenta_id=record.cuenta_id,
            nombre=self.validation.capitalize_name(nombre),
            saldo=self.validation.process_amount(saldo),
            edad=record.edad,
            tipo=tipo,
        )
