"""
SQLAlchemy ORM models for database tables.

This package defines the database schema using SQLAlchemy ORM models:

Models:
    base: Base declarative class and shared enums (EntityType, ExecutionStatus,
          canonical category enums)
    transaction: Validated transactions (table `transacciones`)
    interest_account: Interest accounts (table `intereses`)
    annual_ledger: Annual ledger movements (table `cuentas_anuales`)

Usage:
    from models import Transaction, InterestAccount, AnnualLedgerEntry
    from models.base import EntityType, ExecutionStatus

Example:
    row = Transaction(id=1, fecha=date(2024, 1, 5), monto=Decimal("250"), tipo="DEBITO")
    session.add(row)
    await session.commit()
"""

from models.base import (
    Base,
    EntityType,
    ExecutionStatus,
    TransactionType,
    AccountType,
    LedgerTransactionKind,
)
from models.transaction import Transaction
from models.interest_account import InterestAccount
from models.annual_ledger import AnnualLedgerEntry

__all__ = [
    "Base",
    "EntityType",
    "ExecutionStatus",
    "TransactionType",
    "AccountType",
    "LedgerTransactionKind",
    "Transaction",
    "InterestAccount",
    "AnnualLedgerEntry",
]
