from sqlalchemy import Column, BigInteger, String, Date, Numeric, DateTime
from datetime import datetime
from models.base import Base


class Transaction(Base):
    """
    Validated transaction, one row per input line.

    Primary key is the source `id`, so re-running the same file
    merges rows instead of duplicating them.
    """
    __tablename__ = "transacciones"

    id = Column(BigInteger, primary_key=True, autoincrement=False)
    fecha = Column(Date, nullable=False, index=True)
    monto = Column(Numeric(18, 2), nullable=False)
    tipo = Column(String(20), nullable=False, index=True)

    loaded_at = Column(DateTime, nullable=False, default=datetime.now)
