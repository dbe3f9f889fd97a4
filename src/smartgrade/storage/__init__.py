"""
Storage module.

Key-value persistence of gradebooks.
"""

from .gradebook import Gradebook, GradebookRepository, default_rubric, storage_key
from .store import FileStore, KeyValueStore, MemoryStore

__all__ = [
    "Gradebook",
    "GradebookRepository",
    "default_rubric",
    "storage_key",
    "KeyValueStore",
    "MemoryStore",
    "FileStore",
]
