"""
Pydantic schemas for records and pipeline results.

Schemas:
    records: Entity records (TransactionRecord, InterestAccountRecord,
             AnnualLedgerRecord) and the RejectedLine parse outcome
    execution: StepExecution, ProcessingStats and RunSummary

Usage:
    from schemas.records import TransactionRecord, RejectedLine
    from schemas.execution import StepExecution

Example:
    record = TransactionRecord(id=7, fecha=date(2024, 1, 5), monto=Decimal("-250"), tipo="withdrawal")
    assert record.key == 7
    assert record.category == "withdrawal"
"""

__all__ = [
    "BaseRecord",
    "TransactionRecord",
    "InterestAccountRecord",
    "AnnualLedgerRecord",
    "RejectedLine",
    "ParseOutcome",
    "ProcessingStats",
    "StepExecution",
    "RunSummary",
]
