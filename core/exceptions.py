"""
Exceptions raised by the record pipeline.

Every exception carries a context dict (entity, key, file, table...) that
ends up in the logs and in the failure message of the step execution.

Exception Hierarchy:
    ETLException (base)
    ├── CSVExtractionError
    ├── TransformationError
    │   ├── ValidationError
    │   └── RecordMappingError
    ├── LoadError
    │   └── DatabaseError
    │       └── DatabaseConnectionError
    └── PipelineError
        ├── SkipLimitExceededError
        └── StartLimitExceededError

Transformation errors are skippable by the chunk driver; load errors are not.
"""

from typing import Optional, Dict, Any
from datetime import datetime


class ETLException(Exception):
    """
    Base exception for all pipeline errors.

    Attributes:
        message: Human-readable error message
        context: Extra details about where the error happened
        original_exception: The exception being wrapped, if any
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = dict(context or {})
        self.original_exception = original_exception
        self.timestamp = datetime.now()
        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        text = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            details = ", ".join(f"{key}={value}" for key, value in self.context.items())
            text += f" | Context: {details}"

        if self.original_exception:
            cause = self.original_exception
            text += f" | Caused by: {type(cause).__name__}: {cause}"

        return text

    def to_dict(self) -> Dict[str, Any]:
        """Structured form for log records."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


class CSVExtractionError(ETLException):
    """
    An input file is missing or cannot be tokenized.

    Context should include:
        - file_path: Path to the CSV file
        - lines_read: Lines yielded before the failure (parse errors only)
    """
    pass


# ============================================================================
# Record errors (skippable)
# ============================================================================

class TransformationError(ETLException):
    """Base exception for a single record that cannot be turned into a valid row."""
    pass


class ValidationError(TransformationError):
    """
    A record breaks a business rule in a processor.

    Context should include:
        - original_value: Offending raw value, written to the error file
    """
    pass


class RecordMappingError(TransformationError):
    """
    A tokenized line cannot be mapped to a record.

    Context should include:
        - key: Parsed key, or -1 when the key itself is unusable
    """
    pass


# ============================================================================
# Storage errors (fatal)
# ============================================================================

class LoadError(ETLException):
    """Base exception for persistence failures."""
    pass


class DatabaseError(LoadError):
    """
    A chunk could not be saved and was rolled back.

    Context should include:
        - operation: MERGE or INSERT
        - table_name: Target table
        - records: Number of records in the failed chunk
    """
    pass


class DatabaseConnectionError(DatabaseError):
    """The database could not be reached while saving a chunk."""
    pass


# ============================================================================
# Driver errors (fatal)
# ============================================================================

class PipelineError(ETLException):
    """Base exception for conditions that stop a step."""
    pass


class SkipLimitExceededError(PipelineError):
    """
    More items were skipped than the configured limit allows.

    Context should include:
        - step_name: Step that exceeded the limit
        - skip_limit: Configured limit
    """
    pass


class StartLimitExceededError(PipelineError):
    """A step was started more times than allowed."""
    pass
