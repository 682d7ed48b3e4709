"""
Pydantic schemas for pipeline records and parse outcomes.

Field names follow the input file columns so a record maps one-to-one
onto its CSV line, its error-file row and its database row.
"""

from pydantic import BaseModel
from typing import Optional, Dict, List, Union, ClassVar
from datetime import date
from decimal import Decimal


class BaseRecord(BaseModel):
    """
    Common behaviour of the three entity records.

    Every field is optional so the processor can re-check required
    fields on records that did not come through a reader.
    """

    KEY_FIELD: ClassVar[str] = "id"
    CATEGORY_FIELD: ClassVar[str] = "tipo"

    @property
    def key(self) -> Optional[int]:
        return getattr(self, self.KEY_FIELD)

    @property
    def category(self) -> Optional[str]:
        return getattr(self, self.CATEGORY_FIELD)

    def field_values(self, fallback: str) -> List[str]:
        """Field values as strings in column order, `fallback` for unset ones"""
        values = []
        for name in type(self).model_fields:
            value = getattr(self, name)
            values.append(fallback if value is None else str(value))
        return values


class TransactionRecord(BaseRecord):
    """Transaction line: `id,fecha,monto,tipo`"""

    KEY_FIELD: ClassVar[str] = "id"
    CATEGORY_FIELD: ClassVar[str] = "tipo"

    id: Optional[int] = None
    fecha: Optional[date] = None
    monto: Optional[Decimal] = None
    tipo: Optional[str] = None


class InterestAccountRecord(BaseRecord):
    """Interest account line: `cuenta_id,nombre,saldo,edad,tipo`"""

    KEY_FIELD: ClassVar[str] = "cuenta_id"
    CATEGORY_FIELD: ClassVar[str] = "tipo"

    cuenta_id: Optional[int] = None
    nombre: Optional[str] = None
    saldo: Optional[Decimal] = None
    edad: Optional[int] = None
    tipo: Optional[str] = None


class AnnualLedgerRecord(BaseRecord):
    """Annual ledger line: `cuenta_id,fecha,transaccion,monto,descripcion`"""

    KEY_FIELD: ClassVar[str] = "cuenta_id"
    CATEGORY_FIELD: ClassVar[str] = "transaccion"

    cuenta_id: Optional[int] = None
    fecha: Optional[date] = None
    transaccion: Optional[str] = None
    monto: Optional[Decimal] = None
    descripcion: Optional[str] = None


class RejectedLine(BaseModel):
    """
    A line the reader could not turn into a record.

    Already written to the error sink; the processor filters it out
    without logging it again. Never persisted.
    """

    entity: str
    key: int = -1
    reason: str
    raw_fields: Dict[str, Optional[str]] = {}


ParseOutcome = Union[TransactionRecord, InterestAccountRecord, AnnualLedgerRecord, RejectedLine]
