"""
Unit tests for the delimited file tokenizer
"""

import csv
import pytest

from core.exceptions import CSVExtractionError
from ingestion.entities import TRANSACTIONS
from ingestion.extractors.csv_extractor import DelimitedFileReader


def write_file(tmp_path, content, name="transacciones.csv"):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


class TestDelimitedFileReader:
    """Test tokenizing input files"""

    def test_yields_raw_strings(self, tmp_path, transaction_sink, test_settings):
        """Test values are kept as raw strings without type inference"""
        path = write_file(tmp_path, "id,fecha,monto,tipo\n007,2024-01-05,100.50,DEBITO\n8,05/01/24,NA,\n")

        lines = list(DelimitedFileReader(str(path), TRANSACTIONS.columns, transaction_sink, test_settings))

        assert lines == [
            {"id": "007", "fecha": "2024-01-05", "monto": "100.50", "tipo": "DEBITO"},
            {"id": "8", "fecha": "05/01/24", "monto": "NA", "tipo": ""},
        ]

    def test_reads_across_chunks(self, tmp_path, transaction_sink, test_settings):
        """Test files longer than CHUNK_SIZE are read completely"""
        body = "".join(f"{i},2024-01-05,10,DEBITO\n" for i in range(1, 11))
        path = write_file(tmp_path, "id,fecha,monto,tipo\n" + body)

        lines = list(DelimitedFileReader(str(path), TRANSACTIONS.columns, transaction_sink, test_settings))

        assert [line["id"] for line in lines] == [str(i) for i in range(1, 11)]

    def test_missing_trailing_tokens_are_empty(self, tmp_path, transaction_sink, test_settings):
        """Test short lines are padded with empty strings"""
        path = write_file(tmp_path, "id,fecha,monto,tipo\n5,2024-01-05\n")

        lines = list(DelimitedFileReader(str(path), TRANSACTIONS.columns, transaction_sink, test_settings))

        assert lines == [{"id": "5", "fecha": "2024-01-05", "monto": "", "tipo": ""}]

    def test_extra_tokens_go_to_error_sink(self, tmp_path, transaction_sink, test_settings):
        """Test lines with too many columns are logged and dropped"""
        path = write_file(tmp_path, "id,fecha,monto,tipo\n1,2024-01-05,10,DEBITO,extra\n2,2024-01-05,10,CREDITO\n")

        reader = DelimitedFileReader(str(path), TRANSACTIONS.columns, transaction_sink, test_settings)
        lines = list(reader)

        assert [line["id"] for line in lines] == ["2"]
        assert reader.bad_line_count == 1
        with open(transaction_sink.error_file_path, encoding="utf-8", newline="") as handle:
            rows = list(csv.reader(handle))
        assert rows[1][:5] == ["1", "2024-01-05", "10", "DEBITO,extra", "Número de columnas incorrecto"]

    def test_quoted_values(self, tmp_path, transaction_sink, test_settings):
        """Test quoted fields keep embedded commas"""
        path = write_file(tmp_path, 'id,fecha,monto,tipo\n1,2024-01-05,"1,5",DEBITO\n')

        lines = list(DelimitedFileReader(str(path), TRANSACTIONS.columns, transaction_sink, test_settings))

        assert lines[0]["monto"] == "1,5"

    def test_empty_file(self, tmp_path, transaction_sink, test_settings):
        """Test an empty file yields nothing"""
        path = write_file(tmp_path, "")
        assert list(DelimitedFileReader(str(path), TRANSACTIONS.columns, transaction_sink, test_settings)) == []

    def test_missing_file_raises(self, tmp_path, transaction_sink, test_settings):
        """Test a missing file raises CSVExtractionError"""
        reader = DelimitedFileReader(str(tmp_path / "nope.csv"), TRANSACTIONS.columns, transaction_sink, test_settings)

        with pytest.raises(CSVExtractionError):
            list(reader)
