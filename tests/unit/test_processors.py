"""
Unit tests for record processors
"""

import csv
import threading
import pytest
from datetime import date
from decimal import Decimal

from ingestion.readers.transaction_reader import TransactionReader
from ingestion.validation import ValidationUtils
from ingestion.transformers.annual_ledger_processor import AnnualLedgerProcessor
from ingestion.transformers.interest_processor import InterestAccountProcessor
from ingestion.transformers.transaction_processor import TransactionProcessor
from schemas.records import (
    AnnualLedgerRecord,
    InterestAccountRecord,
    RejectedLine,
    TransactionRecord,
)


@pytest.fixture
def transaction_processor(transaction_sink, test_settings, validation, date_parser):
    return TransactionProcessor(transaction_sink, test_settings, validation, date_parser)


@pytest.fixture
def interest_processor(interest_sink, test_settings, validation, date_parser):
    return InterestAccountProcessor(interest_sink, test_settings, validation, date_parser)


@pytest.fixture
def ledger_processor(ledger_sink, test_settings, validation, date_parser):
    return AnnualLedgerProcessor(ledger_sink, test_settings, validation, date_parser)


def last_reason(sink):
    with open(sink.error_file_path, encoding="utf-8", newline="") as handle:
        rows = list(csv.reader(handle))
    return rows[-1][-2]


def transaction(**overrides):
    values = dict(id=1, fecha=date(2024, 1, 5), monto=Decimal("100"), tipo="DEBITO")
    values.update(overrides)
    return TransactionRecord(**values)


def interest(**overrides):
    values = dict(cuenta_id=10, nombre="ana  MARÍA", saldo=Decimal("-1500.75"), edad=34, tipo="savings")
    values.update(overrides)
    return InterestAccountRecord(**values)


def ledger(**overrides):
    values = dict(
        cuenta_id=10,
        fecha=date(2024, 2, 1),
        transaccion="dep",
        monto=Decimal("-300"),
        descripcion="PAGO   DE NÓMINA",
    )
    values.update(overrides)
    return AnnualLedgerRecord(**values)


class TestTransactionProcessor:
    """Test transaction rules and normalization"""

    def test_withdrawal_normalized_to_debito(self, test_settings, transaction_sink, validation,
                                             date_parser, transaction_processor):
        """Test '7,2024-01-05,-250,withdrawal' becomes DEBITO 250"""
        reader = TransactionReader(transaction_sink, test_settings, validation, date_parser)
        line = {"id": "7", "fecha": "2024-01-05", "monto": "-250", "tipo": "withdrawal"}

        result = transaction_processor.process(reader.read(line))

        assert result == TransactionRecord(id=7, fecha=date(2024, 1, 5), monto=Decimal("250"), tipo="DEBITO")
        assert transaction_processor.stats().valid == 1
        assert not transaction_sink.has_errors()

    def test_zero_amount_rejected(self, transaction_processor, transaction_sink):
        """Test '3,2024-01-05,0,CREDITO' is rejected when zero amounts are skipped"""
        result = transaction_processor.process(transaction(id=3, monto=Decimal("0"), tipo="CREDITO"))

        assert result is None
        assert transaction_sink.error_count == 1
        assert last_reason(transaction_sink) == "Monto inválido"

    def test_zero_amount_allowed_when_disabled(self, test_settings, transaction_sink, validation, date_parser):
        """Test SKIP_ZERO_AMOUNTS=False accepts zero"""
        settings = test_settings.model_copy(update={"SKIP_ZERO_AMOUNTS": False})
        processor = TransactionProcessor(transaction_sink, settings, validation, date_parser)
        assert processor.process(transaction(monto=Decimal("0"))).monto == Decimal("0")

    def test_rejected_line_is_filtered_silently(self, transaction_processor, transaction_sink):
        """Test reader rejections count as skipped without a second error row"""
        rejected = RejectedLine(entity="transacciones", key=5, reason="Fecha inválida o fuera de rango")

        assert transaction_processor.process(rejected) is None
        stats = transaction_processor.stats()
        assert stats.skipped == 1
        assert stats.error == 0
        assert transaction_sink.error_count == 0

    @pytest.mark.parametrize("tipo", ["TRANSFER", "INVALID", "unknown", "ERROR"])
    def test_unknown_type_rejected(self, transaction_processor, transaction_sink, tipo):
        """Test categories outside DEBITO/CREDITO produce one 'Tipo' error"""
        assert transaction_processor.process(transaction(tipo=tipo)) is None
        assert transaction_sink.error_count == 1
        assert "Tipo" in last_reason(transaction_sink)

    @pytest.mark.parametrize("overrides,reason", [
        (dict(tipo=None), "Campos obligatorios faltantes"),
        (dict(fecha=None), "Campos obligatorios faltantes"),
        (dict(id=1_000_000_000), "ID inválido"),
        (dict(fecha=date(2024, 6, 15)), "Fecha inválida en processor"),
        (dict(monto=Decimal("1000000.01")), "Monto inválido"),
        (dict(monto=Decimal("1e1000000000")), "Monto inválido"),
        (dict(monto=Decimal("-1e1000000000")), "Monto inválido"),
    ])
    def test_rejections(self, transaction_processor, transaction_sink, overrides, reason):
        """Test each transaction rule"""
        assert transaction_processor.process(transaction(**overrides)) is None
        assert last_reason(transaction_sink) == reason
        assert transaction_processor.stats().error == 1

    def test_min_year(self, test_settings, transaction_sink, validation, date_parser):
        """Test the configured minimum year"""
        settings = test_settings.model_copy(update={"MIN_YEAR": 2020})
        processor = TransactionProcessor(transaction_sink, settings, ValidationUtils(settings), date_parser)
        assert processor.process(transaction(fecha=date(2019, 5, 1))) is None

    def test_idempotent(self, transaction_processor):
        """Test re-processing an accepted record changes nothing"""
        once = transaction_processor.process(transaction(monto=Decimal("-42.10"), tipo="cr"))
        twice = transaction_processor.process(once)
        assert once == twice

    def test_unexpected_error_is_rejection(self, transaction_processor, transaction_sink, monkeypatch):
        """Test unexpected exceptions are logged as processing errors, never raised"""
        def explode(value):
            raise RuntimeError("boom")

        monkeypatch.setattr(transaction_processor.validation, "normalize_transaction_type", explode)

        assert transaction_processor.process(transaction()) is None
        assert last_reason(transaction_sink) == "Error de procesamiento: boom"


class TestInterestAccountProcessor:
    """Test interest account rules and normalization"""

    def test_accepted_record_is_normalized(self, interest_processor):
        """Test name capitalization, canonical type and positive balance"""
        result = interest_processor.process(interest())

        assert result.nombre == "Ana María"
        assert result.tipo == "AHORRO"
        assert result.saldo == Decimal("1500.75")
        assert result.edad == 34

    def test_credito_stays_credito(self, interest_processor):
        """Test the canonical CREDITO account type is a fixed point"""
        assert interest_processor.process(interest(tipo="CREDITO")).tipo == "CREDITO"

    @pytest.mark.parametrize("overrides,reason", [
        (dict(nombre=None), "Campos obligatorios faltantes"),
        (dict(cuenta_id=1_000_000_000), "cuenta_id inválido"),
        (dict(nombre="R2-D2"), "Nombre inválido"),
        (dict(saldo=Decimal("2000000")), "Saldo inválido"),
        (dict(saldo=Decimal("1e1000000000")), "Saldo inválido"),
        (dict(edad=200), "Edad inválida"),
        (dict(tipo="-1"), "Tipo de cuenta no válido"),
        (dict(tipo="BROKERAGE"), "Tipo de cuenta no válido"),
    ])
    def test_rejections(self, interest_processor, interest_sink, overrides, reason):
        """Test each interest account rule"""
        assert interest_processor.process(interest(**overrides)) is None
        assert last_reason(interest_sink) == reason

    def test_zero_balance_flag(self, test_settings, interest_sink, validation, date_parser):
        """Test SKIP_ZERO_BALANCES rejects zero balances only when enabled"""
        default = InterestAccountProcessor(interest_sink, test_settings, validation, date_parser)
        assert default.process(interest(saldo=Decimal("0"))) is not None

        settings = test_settings.model_copy(update={"SKIP_ZERO_BALANCES": True})
        strict = InterestAccountProcessor(interest_sink, settings, validation, date_parser)
        assert strict.process(interest(saldo=Decimal("0"))) is None

    def test_idempotent(self, interest_processor):
        """Test re-processing an accepted record changes nothing"""
        once = interest_processor.process(interest())
        assert interest_processor.process(once) == once


class TestAnnualLedgerProcessor:
    """Test annual ledger rules and normalization"""

    def test_accepted_record_is_normalized(self, ledger_processor):
        """Test canonical kind, sentence-cased description and positive amount"""
        result = ledger_processor.process(ledger())

        assert result.transaccion == "DEPOSITO"
        assert result.descripcion == "Pago de nómina"
        assert result.monto == Decimal("300")

    @pytest.mark.parametrize("overrides,reason", [
        (dict(descripcion=None), "Campos obligatorios faltantes"),
        (dict(cuenta_id=1_000_000_000), "cuenta_id inválido"),
        (dict(fecha=date(1999, 1, 1)), "Fecha inválida"),
        (dict(monto=Decimal("-1000001")), "Monto inválido"),
        (dict(monto=Decimal("-1e1000000000")), "Monto inválido"),
        (dict(descripcion="x" * 501), "Descripción inválida"),
        (dict(transaccion="NULL"), "Tipo de transacción no válido"),
    ])
    def test_rejections(self, ledger_processor, ledger_sink, overrides, reason):
        """Test each ledger rule"""
        assert ledger_processor.process(ledger(**overrides)) is None
        assert last_reason(ledger_sink) == reason

    def test_idempotent(self, ledger_processor):
        """Test re-processing an accepted record changes nothing"""
        once = ledger_processor.process(ledger(transaccion="withdrawal"))
        assert once.transaccion == "DEBITO"
        assert ledger_processor.process(once) == once


class TestProcessorCounters:
    """Test lock-protected statistics"""

    def test_concurrent_counts(self, transaction_processor):
        """Test counters stay exact under concurrent processing"""
        def work():
            for i in range(50):
                transaction_processor.process(transaction(id=i + 1))

        threads = [threading.Thread(target=work) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        stats = transaction_processor.stats()
        assert stats.processed == 400
        assert stats.valid == 400

    def test_reset_counters(self, transaction_processor):
        """Test reset_counters zeroes every counter"""
        transaction_processor.process(transaction())
        transaction_processor.reset_counters()
        assert transaction_processor.stats().processed == 0
