"""
Chunked pipeline driver.

Runs one entity pipeline over a finite input:

    line -> reader -> processor -> chunk buffer -> loader

with fault tolerance:
- Every read/process and every chunk write is retried up to RETRY_LIMIT times
- Failures still raised after retrying are classified by the skip policy
- Skippable failures drop the item and count against SKIP_LIMIT
- A failed chunk write is rescanned item by item when the failure is skippable
- Anything else aborts the run, reported as FAILED in the StepExecution
"""

import functools
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Union
import logging

from core.config import Settings
from core.exceptions import (
    ETLException,
    PipelineError,
    SkipLimitExceededError,
    StartLimitExceededError,
)
from ingestion.date_parser import DateParser
from ingestion.entities import EntityDefinition
from ingestion.error_sink import ErrorSink
from ingestion.extractors.csv_extractor import DelimitedFileReader
from ingestion.policies import call_with_retry, classify_failure
from ingestion.readers.base import RecordReader
from ingestion.transformers.base import RecordProcessor
from ingestion.validation import ValidationUtils
from models.base import ExecutionStatus
from schemas.execution import StepExecution
from schemas.records import BaseRecord

logger = logging.getLogger(__name__)

WRITE_SKIP_REASON = "Error al guardar el registro"


class RecordSaver(Protocol):
    async def save_all(self, records: Sequence[BaseRecord]) -> List[Any]:
        ...


class StepRegistry:
    """
    Start bookkeeping per step name, shared by every run in a process.

    A step may be started at most `start_limit` times. Completed steps may
    be started again only when the runner allows it.
    """

    def __init__(self):
        self._starts: Dict[str, int] = {}
        self._last_status: Dict[str, ExecutionStatus] = {}

    def start_count(self, step_name: str) -> int:
        return self._starts.get(step_name, 0)

    def last_status(self, step_name: str) -> Optional[ExecutionStatus]:
        return self._last_status.get(step_name)

    def register_start(self, step_name: str, start_limit: int, allow_start_if_complete: bool = True):
        if (
            not allow_start_if_complete
            and self._last_status.get(step_name) == ExecutionStatus.COMPLETED
        ):
            raise PipelineError(
                "Step already completed and restart is not allowed",
                context={"step_name": step_name}
            )

        starts = self.start_count(step_name) + 1
        if starts > start_limit:
            raise StartLimitExceededError(
                "Step start limit exceeded",
                context={"step_name": step_name, "start_limit": start_limit, "starts": starts}
            )

        self._starts[step_name] = starts
        self._last_status[step_name] = ExecutionStatus.STARTED
        logger.info(f"Starting step {step_name} (start {starts}/{start_limit})")

    def record_result(self, step_name: str, status: ExecutionStatus):
        self._last_status[step_name] = status


class ChunkedPipelineRunner:
    """
    Drive one entity pipeline in fixed-size chunks.

    Each call to `run` builds a fresh error sink, reader and processor, so
    a restarted step reprocesses its whole input into a new error file.
    The loader only has to provide `async save_all(records)`.
    """

    def __init__(
        self,
        entity: EntityDefinition,
        loader: RecordSaver,
        settings: Settings,
        registry: Optional[StepRegistry] = None,
        allow_start_if_complete: bool = True,
        validation: Optional[ValidationUtils] = None,
        date_parser: Optional[DateParser] = None,
    ):
        self.entity = entity
        self.loader = loader
        self.settings = settings
        self.registry = registry or StepRegistry()
        self.allow_start_if_complete = allow_start_if_complete
        self.validation = validation or ValidationUtils(settings)
        self.date_parser = date_parser or DateParser()

        self.error_sink: Optional[ErrorSink] = None
        self.reader: Optional[RecordReader] = None
        self.processor: Optional[RecordProcessor] = None
        self._bad_lines_seen = 0

    def _prepare(self):
        self.error_sink = self.entity.build_error_sink(self.settings)
        self.reader = self.entity.build_reader(
            self.error_sink, self.settings, self.validation, self.date_parser
        )
        self.processor = self.entity.build_processor(
            self.error_sink, self.settings, self.validation, self.date_parser
        )
        self._bad_lines_seen = 0

    def _open(self, source: Union[str, Path, Iterable[Dict[str, str]]]) -> Iterable[Dict[str, str]]:
        if isinstance(source, (str, Path)):
            return DelimitedFileReader(str(source), self.entity.columns, self.error_sink, self.settings)
        return source

    async def run(self, source: Union[str, Path, Iterable[Dict[str, str]]]) -> StepExecution:
        """
        Process every line of `source` (a CSV path or an iterable of raw field dicts).

        Raises:
            StartLimitExceededError: the step was started too many times
            PipelineError: the step already completed and restart is disabled

        Any failure after the step started is reported in the returned
        StepExecution with status FAILED.
        """
        step_name = self.entity.step_name
        self.registry.register_start(step_name, self.settings.START_LIMIT, self.allow_start_if_complete)

        self._prepare()
        execution = StepExecution(
            step_name=step_name,
            entity=self.entity.name,
            status=ExecutionStatus.STARTED,
            error_file_path=self.error_sink.error_file_path,
        )

        try:
            lines = self._open(source)
            chunk: List[BaseRecord] = []
            items_in_chunk = 0

            for fields in lines:
                execution.read_count += 1
                items_in_chunk += 1
                self._account_bad_lines(lines, execution)

                record = await self._read_and_process(fields, execution)
                if record is not None:
                    chunk.append(record)

                # Commit interval counts items read, filtered ones included
                if items_in_chunk >= self.settings.CHUNK_SIZE:
                    await self._write_chunk(chunk, execution)
                    chunk = []
                    items_in_chunk = 0

            self._account_bad_lines(lines, execution)
            await self._write_chunk(chunk, execution)

            execution.status = ExecutionStatus.COMPLETED
            execution.exit_code = ExecutionStatus.COMPLETED.value

        except ETLException as e:
            logger.error(
                f"Step {step_name} failed: {e.message}",
                extra={"error_context": e.to_dict()}
            )
            execution.status = ExecutionStatus.FAILED
            execution.exit_code = ExecutionStatus.FAILED.value
            execution.failure_message = str(e)

        except Exception as e:
            logger.exception(f"Unexpected error in step {step_name}")
            execution.status = ExecutionStatus.FAILED
            execution.exit_code = ExecutionStatus.FAILED.value
            execution.failure_message = f"{type(e).__name__}: {e}"

        finally:
            execution.end_time = datetime.now()
            execution.processor_stats = self.processor.stats()
            execution.error_count = self.error_sink.error_count
            self.registry.record_result(step_name, execution.status)
            self.processor.log_processing_stats()

        logger.info(
            f"Step {step_name} finished with status {execution.status.value}: "
            f"read={execution.read_count}, written={execution.write_count}, "
            f"filtered={execution.filter_count}, skipped={execution.skip_count}, "
            f"commits={execution.commit_count}"
        )
        return execution

    async def _read_and_process(self, fields: Dict[str, str], execution: StepExecution) -> Optional[BaseRecord]:
        async def attempt():
            return self.processor.process(self.reader.read(fields))

        try:
            record = await call_with_retry(
                attempt,
                self.settings.RETRY_LIMIT,
                self.settings.RETRY_BACKOFF_SECONDS,
                description=f"{self.entity.name} item {execution.read_count}",
            )
        except Exception as e:
            if not classify_failure(e, self.entity.skip_markers).skippable:
                raise
            self._skip(execution, e)
            return None

        if record is None:
            execution.filter_count += 1
        return record

    async def _write_chunk(self, chunk: List[BaseRecord], execution: StepExecution):
        if not chunk:
            return

        try:
            await self._save(chunk)
            execution.write_count += len(chunk)
            execution.commit_count += 1
            logger.info(f"Committed chunk of {len(chunk)} {self.entity.name} records")
            return

        except Exception as e:
            execution.rollback_count += 1
            if not classify_failure(e, self.entity.skip_markers).skippable:
                raise
            logger.warning(f"Chunk write failed ({e}); rescanning {len(chunk)} items one by one")

        for record in chunk:
            try:
                await self._save([record])
                execution.write_count += 1
                execution.commit_count += 1
            except Exception as e:
                execution.rollback_count += 1
                if not classify_failure(e, self.entity.skip_markers).skippable:
                    raise
                self.error_sink.write_error(record, f"{WRITE_SKIP_REASON}: {e}", "N/A")
                self._skip(execution, e)

    async def _save(self, records: List[BaseRecord]):
        return await call_with_retry(
            functools.partial(self.loader.save_all, records),
            self.settings.RETRY_LIMIT,
            self.settings.RETRY_BACKOFF_SECONDS,
            description=f"{self.entity.name} chunk write",
        )

    def _skip(self, execution: StepExecution, error: Any, count: int = 1):
        execution.skip_count += count
        logger.warning(f"Skipped {count} {self.entity.name} item(s) ({execution.skip_count} total): {error}")

        if execution.skip_count > self.settings.SKIP_LIMIT:
            raise SkipLimitExceededError(
                "Skip limit exceeded",
                context={
                    "step_name": self.entity.step_name,
                    "skip_limit": self.settings.SKIP_LIMIT,
                    "skip_count": execution.skip_count,
                }
            )

    def _account_bad_lines(self, lines: Iterable[Dict[str, str]], execution: StepExecution):
        """Malformed lines dropped by the tokenizer count as read and skipped"""
        bad_lines = getattr(lines, "bad_line_count", 0)
        new_bad_lines = bad_lines - self._bad_lines_seen
        if new_bad_lines <= 0:
            return

        self._bad_lines_seen = bad_lines
        execution.read_count += new_bad_lines
        self._skip(execution, "Número de columnas incorrecto", new_bad_lines)
