"""Database package — async SQLAlchemy engine, models, and the document store."""
from .engine import (
    build_engine, build_session_factory, create_tables,
    get_engine, get_session_factory, dispose_engine,
)
from .base import Base
from .store import Store, Collection, Cursor, get_store

__all__ = [
    "build_engine", "build_session_factory", "create_tables",
    "get_engine", "get_session_factory", "dispose_engine", "Base",
    "Store", "Collection", "Cursor", "get_store",
]
