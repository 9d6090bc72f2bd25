from .manager import (
    COLLECTIONS,
    COMPLETION_TIMES,
    HABIT_GROUPS,
    InMemoryStore,
    JsonFileStore,
    StoragePort,
)

__all__ = [
    'COLLECTIONS',
    'COMPLETION_TIMES',
    'HABIT_GROUPS',
    'InMemoryStore',
    'JsonFileStore',
    'StoragePort',
]
