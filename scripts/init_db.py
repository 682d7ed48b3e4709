import asyncio
import logging
import sys
import os

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.database import create_engine_from_settings
from core.logging import setup_logging
# Import models so their tables are registered on Base.metadata
from models import Base, Transaction, InterestAccount, AnnualLedgerEntry

logger = logging.getLogger(__name__)


async def init_database():
    logger.info("Connecting to database...")
    engine = create_engine_from_settings(settings)

    async with engine.begin() as conn:
        logger.info(f"Creating tables: {', '.join(sorted(Base.metadata.tables))}")
        await conn.run_sync(Base.metadata.create_all)
        logger.info("Tables created successfully.")

    await engine.dispose()


if __name__ == "__main__":
    setup_logging(settings)
    asyncio.run(init_database())
