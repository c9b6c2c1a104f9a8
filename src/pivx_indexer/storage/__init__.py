# File: src/pivx_indexer/storage/__init__.py
from .database import Database
from .memory import MemoryDatabase
from .sqlite import SqliteDatabase
from ..exceptions import DatabaseError

__all__ = ['Database', 'DatabaseError', 'MemoryDatabase', 'SqliteDatabase']
