"""Admin: connection pool inspection and the "close all connections" operation."""
import logging

from fastapi import APIRouter, Depends

from medinv.api.deps import get_current_session, get_database
from medinv.db.database import Database

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/connections")
async def connection_stats(database: Database = Depends(get_database)):
    return database.stats()


@router.post("/connections/close")
async def close_connections(
    database: Database = Depends(get_database),
    session: dict = Depends(get_current_session),
):
    """Close every pooled connection. The pool reconnects on the next query."""
    logger.warning(f"Closing all database connections (requested by {session.get('sub')})")
    await database.close_all()
    return {"message": "All database connections closed", "pool": database.stats()}
