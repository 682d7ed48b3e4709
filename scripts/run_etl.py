"""
Script to run the ETL pipelines for every input file found

Exit codes:
    0 - every executed pipeline completed
    1 - at least one pipeline failed
    2 - nothing processed (no input files)
"""

import argparse
import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import Settings, settings
from core.database import create_engine_from_settings, create_session_factory
from core.logging import setup_logging
from ingestion.entities import ENTITIES
from ingestion.job_selector import JobSelector

logger = logging.getLogger(__name__)

EXIT_COMPLETED = 0
EXIT_FAILED = 1
EXIT_NOTHING_PROCESSED = 2


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the batch CSV ETL pipelines")
    parser.add_argument(
        "--input-dir",
        help=f"Directory holding the input files (default: {settings.INPUT_DIRECTORY})",
    )
    parser.add_argument(
        "--entity",
        action="append",
        choices=sorted(ENTITIES),
        help="Only run this entity (repeatable)",
    )
    return parser.parse_args(argv)


async def run_etl(run_settings: Settings, entities=None) -> int:
    """Run the selected pipelines and map the summary to an exit code"""
    engine = create_engine_from_settings(run_settings, echo=False)
    session_factory = create_session_factory(engine)

    try:
        selector = JobSelector(session_factory, run_settings)

        if not selector.has_available_files():
            logger.warning(f"No input files found in {run_settings.INPUT_DIRECTORY}")
            return EXIT_NOTHING_PROCESSED

        summary = await selector.run_available(entities)

        if summary.nothing_processed:
            return EXIT_NOTHING_PROCESSED
        if not summary.all_completed:
            return EXIT_FAILED

        logger.info("All ETL jobs completed")
        return EXIT_COMPLETED

    except Exception as e:
        logger.error(f"ETL pipeline error: {str(e)}")
        return EXIT_FAILED

    finally:
        await engine.dispose()


def main(argv=None) -> int:
    args = parse_args(argv)

    run_settings = settings
    if args.input_dir:
        run_settings = settings.model_copy(update={"INPUT_DIRECTORY": args.input_dir})

    setup_logging(run_settings)
    return asyncio.run(run_etl(run_settings, args.entity))


if __name__ == "__main__":
    sys.exit(main())
