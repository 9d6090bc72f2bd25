"""
Shutdown Sequencer - Models Package
Модели данных для трекинга времени, групп и последовательностей привычек
"""

from .enums import (
    HabitType,
    GroupType,
    PriorityFactor,
    RecommendationType
)

from .habit import (
    Habit,
    HabitCompletion,
    EmptyValue,
    BooleanValue,
    NumericValue,
    ChoiceValue,
    CompletionValue,
    completion_value_from_dict
)

from .sequencing import (
    CompletionTimeRecord,
    HabitGroup,
    HabitPriority,
    SequenceItem,
    SequencingPreferences,
    RecommendationAction,
    SequenceRecommendation,
    GroupSuggestion,
    GroupRationale,
    AutoGroupResult
)

from .result import ServiceResult

__all__ = [
    # Enums
    'HabitType',
    'GroupType',
    'PriorityFactor',
    'RecommendationType',

    # Habit models
    'Habit',
    'HabitCompletion',
    'EmptyValue',
    'BooleanValue',
    'NumericValue',
    'ChoiceValue',
    'CompletionValue',
    'completion_value_from_dict',

    # Sequencing models
    'CompletionTimeRecord',
    'HabitGroup',
    'HabitPriority',
    'SequenceItem',
    'SequencingPreferences',
    'RecommendationAction',
    'SequenceRecommendation',
    'GroupSuggestion',
    'GroupRationale',
    'AutoGroupResult',

    # Results
    'ServiceResult'
]
