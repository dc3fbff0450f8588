"""Store implementations and the PostgreSQL connection pool"""
from studyquest.db.store import ProgressStore
from studyquest.db.memory_store import InMemoryStore

__all__ = ["ProgressStore", "InMemoryStore"]
