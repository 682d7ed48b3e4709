"""
Persist accepted records in one transaction per chunk
"""

from typing import List, Sequence, Type
from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from core.exceptions import DatabaseConnectionError, DatabaseError
from models.base import Base
from schemas.records import BaseRecord

logger = logging.getLogger(__name__)

CONNECTION_ERROR_TYPES = (OperationalError, InterfaceError, DisconnectionError, ConnectionError, OSError)


class RecordLoader:
    """
    Save a chunk of validated records.

    Keyed entities (primary key taken from the record) are merged, so a
    re-run of the same file updates rows instead of duplicating them.
    Entities with a surrogate key are inserted. One commit per call;
    any failure rolls back and raises DatabaseError, or
    DatabaseConnectionError when the database could not be reached.
    """

    def __init__(self, db_session: AsyncSession, model: Type[Base], merge: bool = True):
        self.db = db_session
        self.model = model
        self.merge = merge

    async def save_all(self, records: Sequence[BaseRecord]) -> List[Base]:
        if not records:
            return []

        rows = []
        try:
            for record in records:
                row = self.model(**record.model_dump())
                if self.merge:
                    row = await self.db.merge(row)
                else:
                    self.db.add(row)
                rows.append(row)

            await self.db.commit()

        except Exception as e:
            logger.error(f"Failed to save {len(records)} rows into {self.model.__tablename__}: {e}")
            await self.db.rollback()

            error_class = DatabaseConnectionError if isinstance(e, CONNECTION_ERROR_TYPES) else DatabaseError
            raise error_class(
                "Failed to save chunk",
                context={
                    "operation": "MERGE" if self.merge else "INSERT",
                    "table_name": self.model.__tablename__,
                    "records": len(records),
                },
                original_exception=e
            )

        logger.info(f"Saved {len(rows)} rows into {self.model.__tablename__}")
        return rows
