"""
Pydantic schemas for step execution results and run summaries
"""

from pydantic import BaseModel, Field
from typing import Optional, Dict
from datetime import datetime
from models.base import ExecutionStatus


class ProcessingStats(BaseModel):
    """Snapshot of a record processor's counters"""
    processed: int = 0
    valid: int = 0
    error: int = 0
    skipped: int = 0


class StepExecution(BaseModel):
    """
    Outcome of one entity pipeline run.

    Counts follow chunk-oriented batch semantics:
    - read_count: lines handed to the reader
    - filter_count: items the processor returned None for
    - skip_count: items dropped by the skip policy after a failure
    - write_count: items committed to the database
    """

    step_name: str
    entity: str
    status: ExecutionStatus = ExecutionStatus.STARTING
    exit_code: str = "UNKNOWN"

    read_count: int = 0
    write_count: int = 0
    skip_count: int = 0
    filter_count: int = 0
    commit_count: int = 0
    rollback_count: int = 0

    processor_stats: ProcessingStats = Field(default_factory=ProcessingStats)
    error_file_path: Optional[str] = None
    error_count: int = 0
    failure_message: Optional[str] = None

    start_time: datetime = Field(default_factory=datetime.now)
    end_time: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status == ExecutionStatus.COMPLETED


class RunSummary(BaseModel):
    """Result of running every available entity pipeline"""
    executions: Dict[str, StepExecution] = Field(default_factory=dict)
    file_availability: Dict[str, bool] = Field(default_factory=dict)

    @property
    def nothing_processed(self) -> bool:
        """True when no input file was found for any entity"""
        return not self.executions

    @property
    def all_completed(self) -> bool:
        return bool(self.executions) and all(
            execution.is_completed for execution in self.executions.values()
        )
