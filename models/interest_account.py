from sqlalchemy import Column, BigInteger, String, Numeric, Integer, DateTime
from datetime import datetime
from models.base import Base


class InterestAccount(Base):
    """Interest-bearing account keyed by `cuenta_id`."""
    __tablename__ = "intereses"

    cuenta_id = Column(BigInteger, primary_key=True, autoincrement=False)
    nombre = Column(String(100), nullable=False)
    saldo = Column(Numeric(18, 2), nullable=False)
    edad = Column(Integer, nullable=False)
    tipo = Column(String(20), nullable=False, index=True)

    loaded_at = Column(DateTime, nullable=False, default=datetime.now)
