from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()


# ============================================================================
# ENUMS
# ============================================================================

class EntityType(str, enum.Enum):
    """Entity families handled by the pipeline"""
    TRANSACCIONES = "transacciones"
    INTERESES = "intereses"
    CUENTAS_ANUALES = "cuentas_anuales"


class ExecutionStatus(str, enum.Enum):
    """Step execution status"""
    STARTING = "STARTING"
    STARTED = "STARTED"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class TransactionType(str, enum.Enum):
    """Canonical transaction types"""
    DEBITO = "DEBITO"
    CREDITO = "CREDITO"


class AccountType(str, enum.Enum):
    """Canonical interest account types"""
    AHORRO = "AHORRO"
    PRESTAMO = "PRESTAMO"
    HIPOTECA = "HIPOTECA"
    CREDITO = "CREDITO"


class LedgerTransactionKind(str, enum.Enum):
    """Canonical annual ledger transaction kinds"""
    DEBITO = "DEBITO"
    CREDITO = "CREDITO"
    DEPOSITO = "DEPOSITO"
    RETIRO = "RETIRO"
    TRANSFERENCIA = "TRANSFERENCIA"
    INTERES = "INTERES"
    COMISION = "COMISION"
    AJUSTE = "AJUSTE"
    CARGO = "CARGO"
    ABONO = "ABONO"
