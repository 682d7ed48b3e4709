"""
Select and run entity pipelines for the input files that exist
"""

from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, Optional
import logging

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.config import Settings
from ingestion.entities import ENTITIES, get_entity
from ingestion.loaders.record_loader import RecordLoader
from ingestion.runner import ChunkedPipelineRunner, StepRegistry
from models.base import ExecutionStatus
from schemas.execution import RunSummary, StepExecution

logger = logging.getLogger(__name__)


class JobSelector:
    """
    Run one pipeline per available input file.

    Entities are independent: a failing entity is recorded as FAILED and
    the remaining ones still run. Each entity gets its own session.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        settings: Settings,
        registry: Optional[StepRegistry] = None,
    ):
        self.session_factory = session_factory
        self.settings = settings
        self.registry = registry or StepRegistry()

    def file_path(self, entity: str) -> Path:
        return Path(self.settings.INPUT_DIRECTORY) / get_entity(entity).file_name

    def file_availability(self) -> Dict[str, bool]:
        return {name: self.file_path(name).is_file() for name in ENTITIES}

    def has_available_files(self) -> bool:
        return any(self.file_availability().values())

    def available_file_count(self) -> int:
        return sum(1 for available in self.file_availability().values() if available)

    async def run_entity(self, entity: str) -> StepExecution:
        definition = get_entity(entity)
        file_path = self.file_path(entity)

        logger.info(f"Running {definition.step_name} on {file_path}")

        async with self.session_factory() as session:
            loader = RecordLoader(session, definition.model, merge=definition.merge)
            runner = ChunkedPipelineRunner(definition, loader, self.settings, registry=self.registry)
            return await runner.run(file_path)

    async def run_available(self, entities: Optional[Iterable[str]] = None) -> RunSummary:
        """
        Run every entity whose input file exists.

        Args:
            entities: Restrict the run to these entity names (default: all)
        """
        selected = set(entities) if entities else set(ENTITIES)
        for name in selected:
            get_entity(name)

        availability = self.file_availability()
        summary = RunSummary(file_availability=availability)

        logger.info(
            f"Found {self.available_file_count()} of {len(ENTITIES)} input files "
            f"in {self.settings.INPUT_DIRECTORY}"
        )

        for name, available in availability.items():
            if name not in selected:
                continue

            if not available:
                logger.warning(f"Input file not found for {name}: {self.file_path(name)}")
                continue

            try:
                summary.executions[name] = await self.run_entity(name)
            except Exception as e:
                logger.error(f"Pipeline for {name} could not run: {e}")
                summary.executions[name] = StepExecution(
                    step_name=get_entity(name).step_name,
                    entity=name,
                    status=ExecutionStatus.FAILED,
                    exit_code=ExecutionStatus.FAILED.value,
                    failure_message=str(e),
                    end_time=datetime.now(),
                )

        self.log_final_summary(summary)
        return summary

    def log_final_summary(self, summary: RunSummary):
        logger.info("=" * 60)
        logger.info("ETL RUN SUMMARY")
        logger.info("=" * 60)

        if summary.nothing_processed:
            logger.warning(
                f"Nothing processed: no input files found in {self.settings.INPUT_DIRECTORY}"
            )
            return

        for name, execution in summary.executions.items():
            stats = execution.processor_stats
            logger.info(f"{name}: {execution.status.value}")
            logger.info(
                f"  processed={stats.processed}, valid={stats.valid}, "
                f"errors={stats.error}, skipped={stats.skipped}"
            )
            logger.info(
                f"  read={execution.read_count}, written={execution.write_count}, "
                f"skipped by policy={execution.skip_count}"
            )
            if execution.error_count:
                logger.info(f"  {execution.error_count} errors written to {execution.error_file_path}")
            if execution.failure_message:
                logger.error(f"  failure: {execution.failure_message}")

        if summary.all_completed:
            logger.info("All pipelines completed")
        else:
            logger.warning("Some pipelines did not complete")
