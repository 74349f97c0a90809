"""Storage layer — the Datastore interface and its backends.

get_store is the FastAPI dependency handlers use; tests override it
with a MemoryDatastore.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from visitlog.db.engine import get_db
from visitlog.store.base import Datastore, StoreError
from visitlog.store.sql import SQLDatastore

__all__ = ["Datastore", "StoreError", "SQLDatastore", "get_store"]


def get_store(db: AsyncSession = Depends(get_db)) -> Datastore:
    return SQLDatastore(db)
