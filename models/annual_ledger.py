from sqlalchemy import Column, BigInteger, String, Date, Numeric, Text, DateTime, Index
from datetime import datetime
from models.base import Base


class AnnualLedgerEntry(Base):
    """
    Annual account ledger movement.

    Design Decisions:
    - `cuenta_id` is not unique: an account has many movements in a year,
      so rows get a surrogate key
    - Movements are always inserted, never merged
    """
    __tablename__ = "cuentas_anuales"

    id = Column(BigInteger, primary_key=True, autoincrement=True)
    cuenta_id = Column(BigInteger, nullable=False, index=True)
    fecha = Column(Date, nullable=False)
    transaccion = Column(String(20), nullable=False)
    monto = Column(Numeric(18, 2), nullable=False)
    descripcion = Column(Text, nullable=False)

    loaded_at = Column(DateTime, nullable=False, default=datetime.now)

    __table_args__ = (
        Index("idx_cuentas_anuales_cuenta_fecha", "cuenta_id", "fecha"),
    )
