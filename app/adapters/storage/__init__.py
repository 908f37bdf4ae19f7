from app.adapters.storage.base import AbstractWaitlistStore
from app.adapters.storage.sqlalchemy_store import (
    SqlAlchemyWaitlistStore,
    create_store_engine,
    init_schema,
)

__all__ = [
    "AbstractWaitlistStore",
    "SqlAlchemyWaitlistStore",
    "create_store_engine",
    "init_schema",
]
