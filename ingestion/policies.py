"""
Skip classification and retry helper for the chunk driver.

Failures raised while reading, processing or writing an item are sorted
into three buckets:

- FAIL: storage or connectivity problems; the run must stop
- SKIP: bad input data; the item is dropped and counted against the skip limit
- UNKNOWN: anything else; treated as not skippable
"""

import asyncio
import enum
from decimal import InvalidOperation
from typing import Awaitable, Callable, Iterable, Tuple, Type, TypeVar
import logging

from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import LoadError, TransformationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

FATAL_ERROR_TYPES: Tuple[Type[BaseException], ...] = (
    LoadError,
    SQLAlchemyError,
    ConnectionError,
    OSError,
)

SKIPPABLE_ERROR_TYPES: Tuple[Type[BaseException], ...] = (
    ValueError,
    TypeError,
    InvalidOperation,
    TransformationError,
)

COMMON_SKIP_MARKERS: Tuple[str, ...] = (
    "Error al mapear la línea",
    "Error de procesamiento",
    "Error de mapeo general",
    "Formato de",
    "vacío",
    "nulo",
)


class SkipDecision(str, enum.Enum):
    SKIP = "SKIP"
    FAIL = "FAIL"
    UNKNOWN = "UNKNOWN"

    @property
    def skippable(self) -> bool:
        return self is SkipDecision.SKIP


def classify_failure(exc: BaseException, skip_markers: Iterable[str] = ()) -> SkipDecision:
    """
    Decide whether a failed item may be skipped.

    Storage errors are checked first so a DatabaseError carrying a
    data-looking message is still fatal.
    """
    if isinstance(exc, FATAL_ERROR_TYPES):
        logger.error(f"Non-skippable failure ({type(exc).__name__}): {exc}")
        return SkipDecision.FAIL

    if isinstance(exc, SKIPPABLE_ERROR_TYPES):
        logger.debug(f"Skippable failure ({type(exc).__name__}): {exc}")
        return SkipDecision.SKIP

    message = str(exc)
    if any(marker in message for marker in skip_markers):
        logger.debug(f"Skippable failure by message: {message}")
        return SkipDecision.SKIP

    logger.warning(f"Unclassified failure ({type(exc).__name__}), not skipping: {exc}")
    return SkipDecision.UNKNOWN


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    max_retries: int,
    backoff_seconds: float = 0.0,
    description: str = "operation",
) -> T:
    """
    Await `operation` up to `max_retries` times.

    Sleeps `backoff_seconds * attempt` between attempts and re-raises the
    last failure once attempts are exhausted.
    """
    attempts = max(1, max_retries)

    for attempt in range(attempts):
        try:
            return await operation()
        except Exception as e:
            if attempt == attempts - 1:
                raise

            wait_time = backoff_seconds * (attempt + 1)
            logger.warning(
                f"{description} failed (attempt {attempt + 1}/{attempts}): {e}. "
                f"Retrying in {wait_time}s"
            )
            if wait_time > 0:
                await asyncio.sleep(wait_time)
