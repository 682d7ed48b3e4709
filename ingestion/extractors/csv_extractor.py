"""
Delimited file tokenizer built on pandas chunked reading
"""

import pandas as pd
from typing import Dict, Iterator, List, Sequence
from pathlib import Path
import logging

from core.config import Settings
from core.exceptions import CSVExtractionError
from ingestion.error_sink import ErrorSink

logger = logging.getLogger(__name__)

TOKEN_COUNT_REASON = "Número de columnas incorrecto"


class DelimitedFileReader:
    """
    Read a UTF-8, comma-separated file with one header line.

    Yields one {column: raw string} dict per data line. Values are never
    type-inferred or NA-converted; missing trailing tokens become empty
    strings. Lines with more tokens than columns go to the error sink and
    are not yielded.
    """

    def __init__(
        self,
        file_path: str,
        columns: Sequence[str],
        error_sink: ErrorSink,
        settings: Settings,
    ):
        self.file_path = Path(file_path)
        self.columns = list(columns)
        self.error_sink = error_sink
        self.chunk_size = settings.CHUNK_SIZE
        self.bad_line_count = 0

    def _handle_bad_line(self, tokens: List[str]) -> None:
        self.bad_line_count += 1
        # Surplus tokens are kept, joined into the last column
        width = len(self.columns)
        values = tokens[:width - 1] + [",".join(tokens[width - 1:])]
        raw_fields = dict(zip(self.columns, values))
        self.error_sink.write_error_line(raw_fields, TOKEN_COUNT_REASON)
        logger.warning(
            f"Skipping line with {len(tokens)} columns in {self.file_path.name} "
            f"(expected {len(self.columns)})"
        )
        # Returning None drops the line
        return None

    def __iter__(self) -> Iterator[Dict[str, str]]:
        if not self.file_path.exists():
            raise CSVExtractionError(
                "Input file not found",
                context={"file_path": str(self.file_path)}
            )

        logger.info(f"Reading CSV from {self.file_path}")

        # The header line is read as data so it fixes the column count; passing
        # names= would let a long first data line become an implicit index.
        try:
            reader = pd.read_csv(
                self.file_path,
                header=None,
                dtype=str,
                keep_default_na=False,
                encoding="utf-8",
                engine="python",
                on_bad_lines=self._handle_bad_line,
                chunksize=self.chunk_size,
            )
        except pd.errors.EmptyDataError:
            logger.warning(f"CSV file is empty: {self.file_path}")
            return

        line_count = 0
        header_seen = False
        try:
            with reader:
                for chunk in reader:
                    chunk = chunk.fillna("")
                    if not header_seen:
                        header_seen = True
                        self._check_header(list(chunk.iloc[0]))
                        chunk = chunk.iloc[1:]

                    for row in chunk.itertuples(index=False, name=None):
                        line_count += 1
                        yield self._to_fields(row)
        except pd.errors.ParserError as e:
            raise CSVExtractionError(
                "Malformed CSV file",
                context={"file_path": str(self.file_path), "lines_read": line_count},
                original_exception=e
            )

        logger.info(
            f"Read {line_count} lines from {self.file_path.name} "
            f"({self.bad_line_count} malformed)"
        )

    def _check_header(self, header: List[str]):
        names = [str(name).strip().lower() for name in header]
        if names != self.columns:
            logger.warning(
                f"Unexpected header in {self.file_path.name}: {names} "
                f"(expected {self.columns}); mapping columns by position"
            )

    def _to_fields(self, row: tuple) -> Dict[str, str]:
        values = [str(value) for value in row][:len(self.columns)]
        values += [""] * (len(self.columns) - len(values))
        return dict(zip(self.columns, values))
