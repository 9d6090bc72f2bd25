# models/enums.py

from enum import Enum


class HabitType(str, Enum):
    BOOLEAN = "boolean"
    NUMERIC = "numeric"
    CHOICE = "choice"


class GroupType(str, Enum):
    """Типы групп привычек"""
    CONTEXTUAL = "contextual"
    TEMPORAL = "temporal"
    DIFFICULTY = "difficulty"
    MANUAL = "manual"

    @classmethod
    def values(cls):
        return [member.value for member in cls]


class PriorityFactor(str, Enum):
    """Факторы, повлиявшие на приоритет привычки"""
    QUICK_WIN = "quick_win"
    CONSISTENT = "consistent"
    GROUPED = "grouped"
    FAST = "fast"
    DEFAULT = "default"
    NO_DATA = "no_data"


class RecommendationType(str, Enum):
    REORDER = "reorder"
    GROUPING = "grouping"
    TIMING = "timing"
    OPTIMIZATION = "optimization"
