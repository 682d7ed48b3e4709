"""
Integration tests for input file selection and the run summary
"""

import pytest
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.exc import OperationalError

from ingestion.job_selector import JobSelector
from models.base import ExecutionStatus

TRANSACTIONS_CSV = "id,fecha,monto,tipo\n1,2024-01-05,100,DEBITO\n2,2024-01-06,-50,credit\n3,2024-01-07,0,CREDITO\n"
INTERESES_CSV = "cuenta_id,nombre,saldo,edad,tipo\n10,ana maría,1500,34,savings\n"


@pytest.fixture
def input_dir(test_settings, tmp_path):
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def session_factory(mock_session):
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=mock_session)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return factory


@pytest.fixture
def selector(session_factory, test_settings):
    return JobSelector(session_factory, test_settings)


class TestFileAvailability:
    """Test input file discovery"""

    def test_no_files(self, selector, input_dir):
        """Test an empty input directory"""
        assert selector.file_availability() == {
            "transacciones": False,
            "intereses": False,
            "cuentas_anuales": False,
        }
        assert not selector.has_available_files()
        assert selector.available_file_count() == 0

    def test_some_files(self, selector, input_dir):
        """Test availability per entity"""
        (input_dir / "transacciones.csv").write_text(TRANSACTIONS_CSV, encoding="utf-8")
        (input_dir / "intereses.csv").write_text(INTERESES_CSV, encoding="utf-8")

        availability = selector.file_availability()

        assert availability["transacciones"] and availability["intereses"]
        assert not availability["cuentas_anuales"]
        assert selector.available_file_count() == 2


class TestRunAvailable:
    """Test running every available pipeline"""

    @pytest.mark.asyncio
    async def test_nothing_processed(self, selector, input_dir):
        """Test no input files is reported as nothing processed"""
        summary = await selector.run_available()

        assert summary.nothing_processed
        assert not summary.all_completed

    @pytest.mark.asyncio
    async def test_runs_available_entities(self, selector, input_dir, mock_session):
        """Test each present file is processed and persisted"""
        (input_dir / "transacciones.csv").write_text(TRANSACTIONS_CSV, encoding="utf-8")
        (input_dir / "intereses.csv").write_text(INTERESES_CSV, encoding="utf-8")

        summary = await selector.run_available()

        assert set(summary.executions) == {"transacciones", "intereses"}
        assert summary.all_completed
        assert summary.executions["transacciones"].write_count == 2
        assert summary.executions["transacciones"].error_count == 1
        assert summary.executions["intereses"].write_count == 1

        merged = [call.args[0] for call in mock_session.merge.call_args_list]
        assert sorted(type(row).__tablename__ for row in merged) == ["intereses", "transacciones", "transacciones"]

    @pytest.mark.asyncio
    async def test_entity_filter(self, selector, input_dir):
        """Test restricting the run to one entity"""
        (input_dir / "transacciones.csv").write_text(TRANSACTIONS_CSV, encoding="utf-8")
        (input_dir / "intereses.csv").write_text(INTERESES_CSV, encoding="utf-8")

        summary = await selector.run_available(["intereses"])

        assert list(summary.executions) == ["intereses"]

    @pytest.mark.asyncio
    async def test_unknown_entity_rejected(self, selector, input_dir):
        """Test an unknown entity name is refused"""
        with pytest.raises(ValueError):
            await selector.run_available(["clientes"])

    @pytest.mark.asyncio
    async def test_failing_entity_does_not_stop_others(self, selector, input_dir, mock_session):
        """Test a storage failure fails one pipeline while the next still runs"""
        (input_dir / "transacciones.csv").write_text(TRANSACTIONS_CSV, encoding="utf-8")
        (input_dir / "intereses.csv").write_text(INTERESES_CSV, encoding="utf-8")

        outage = OperationalError("COMMIT", {}, Exception("connection lost"))
        mock_session.commit.side_effect = [outage, outage, outage, None]

        summary = await selector.run_available()

        assert summary.executions["transacciones"].status == ExecutionStatus.FAILED
        assert summary.executions["intereses"].status == ExecutionStatus.COMPLETED
        assert not summary.all_completed

    @pytest.mark.asyncio
    async def test_start_failure_recorded(self, selector, input_dir, test_settings):
        """Test a pipeline that cannot start is recorded as FAILED"""
        (input_dir / "intereses.csv").write_text(INTERESES_CSV, encoding="utf-8")
        selector.settings = test_settings.model_copy(update={"START_LIMIT": 0})

        summary = await selector.run_available()

        assert summary.executions["intereses"].status == ExecutionStatus.FAILED
        assert "start limit" in summary.executions["intereses"].failure_message
