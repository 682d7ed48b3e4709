"""
Pytest configuration and fixtures
"""

import pytest
from datetime import date
from typing import List
from unittest.mock import AsyncMock, Mock

from core.config import Settings
from ingestion.date_parser import DateParser
from ingestion.entities import ANNUAL_LEDGER, INTEREST_ACCOUNTS, TRANSACTIONS
from ingestion.validation import ValidationUtils

# Fixed clock so date range checks do not drift
TODAY = date(2024, 6, 1)


class FakeSaver:
    """In-memory stand-in for RecordLoader"""

    def __init__(self, fail_times: int = 0, error: Exception = None):
        self.saved: List = []
        self.calls = 0
        self.fail_times = fail_times
        self.error = error

    async def save_all(self, records):
        self.calls += 1
        if self.error is not None and self.calls <= self.fail_times:
            raise self.error
        self.saved.extend(records)
        return list(records)


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings isolated from the environment, error files under tmp_path"""
    return Settings(
        _env_file=None,
        ERROR_DIRECTORY=str(tmp_path / "error-files"),
        INPUT_DIRECTORY=str(tmp_path / "data"),
        CHUNK_SIZE=3,
    )


@pytest.fixture
def date_parser() -> DateParser:
    return DateParser(today=lambda: TODAY)


@pytest.fixture
def validation(test_settings) -> ValidationUtils:
    return ValidationUtils(test_settings)


@pytest.fixture
def transaction_sink(test_settings):
    return TRANSACTIONS.build_error_sink(test_settings)


@pytest.fixture
def interest_sink(test_settings):
    return INTEREST_ACCOUNTS.build_error_sink(test_settings)


@pytest.fixture
def ledger_sink(test_settings):
    return ANNUAL_LEDGER.build_error_sink(test_settings)


@pytest.fixture
def fake_saver() -> FakeSaver:
    return FakeSaver()


@pytest.fixture
def mock_session():
    """AsyncSession double: merge returns its argument, add is synchronous"""
    session = AsyncMock()
    session.merge = AsyncMock(side_effect=lambda row: row)
    session.add = Mock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def transaction_lines():
    """Raw transaction lines as the tokenizer yields them"""
    return [
        {"id": "1", "fecha": "2024-01-05", "monto": "100.50", "tipo": "DEBITO"},
        {"id": "2", "fecha": "05/02/2024", "monto": "-250", "tipo": "withdrawal"},
        {"id": "3", "fecha": "2024-01-05", "monto": "0", "tipo": "CREDITO"},
        {"id": "abc", "fecha": "2024-01-05", "monto": "10", "tipo": "CREDITO"},
        {"id": "5", "fecha": "2024-13-45", "monto": "100", "tipo": "DEBITO"},
        {"id": "6", "fecha": "2024-03-10", "monto": "75", "tipo": "INVALID"},
        {"id": "7", "fecha": "2024-01-05", "monto": "-250", "tipo": "withdrawal"},
    ]


@pytest.fixture
def saver_factory():
    """Build FakeSavers with custom failure behaviour"""
    return FakeSaver
