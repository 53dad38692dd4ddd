"""
Persistence - run status records and step artifacts.
"""

from .runs import InMemoryRunStore, JsonFileRunStore, RunRecord, RunStore

__all__ = ["InMemoryRunStore", "JsonFileRunStore", "RunRecord", "RunStore"]
