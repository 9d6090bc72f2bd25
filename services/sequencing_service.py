# services/sequencing_service.py

import logging
from typing import List, Optional, Sequence

from models.habit import Habit
from models.sequencing import (
    CompletionTimeRecord,
    HabitPriority,
    SequenceItem,
    SequenceRecommendation,
    SequencingPreferences,
)
from services import ordering
from services.grouping import GroupingService
from services.time_tracking import TimeTrackingService
from utils.decorators import service_operation

logger = logging.getLogger(__name__)


class SequencingService:
    """
    Фасад упорядочивания: читает записи времени и группы, затем передаёт их
    в чистые функции services.ordering. Каждый вызов пересчитывает порядок заново.
    """

    def __init__(self, time_tracking: TimeTrackingService, grouping: GroupingService):
        self.time_tracking = time_tracking
        self.grouping = grouping

    def _snapshot(self):
        return self.time_tracking.load_records(), self.grouping.load_groups()

    @service_operation("generate optimized sequence")
    def generate_optimized_sequence(self, habits: Sequence[Habit]) -> List[SequenceItem]:
        records, groups = self._snapshot()
        return ordering.generate_optimized_sequence(habits, records, groups)

    @service_operation("calculate habit priority")
    def calculate_habit_priority(self, habit_id: str,
                                 record: Optional[CompletionTimeRecord] = None) -> HabitPriority:
        groups = self.grouping.load_groups()
        if record is None:
            record = self.time_tracking.load_records().get(habit_id)
        if record is None:
            return ordering.default_priority(habit_id)
        return ordering.calculate_habit_priority(record, groups)

    @service_operation("apply preferences")
    def apply_sequencing_preferences(self, sequence: Sequence[SequenceItem],
                                     preferences: SequencingPreferences) -> List[SequenceItem]:
        return ordering.apply_sequencing_preferences(sequence, preferences)

    @service_operation("generate sequence with preferences")
    def generate_with_preferences(self, habits: Sequence[Habit],
                                  preferences: SequencingPreferences) -> List[SequenceItem]:
        records, groups = self._snapshot()
        base = ordering.generate_optimized_sequence(habits, records, groups)
        return ordering.apply_sequencing_preferences(base, preferences)

    @service_operation("validate sequence")
    def validate_sequence(self, sequence: Sequence[SequenceItem], habits: Sequence[Habit]) -> bool:
        return ordering.validate_sequence(sequence, habits)

    @service_operation("reorder by momentum")
    def reorder_by_momentum(self, habits: Sequence[Habit]) -> List[SequenceItem]:
        records, groups = self._snapshot()
        return ordering.reorder_by_momentum(habits, records, groups)

    @service_operation("generate recommendations")
    def get_sequence_recommendations(self, sequence: Sequence[SequenceItem]) -> List[SequenceRecommendation]:
        return ordering.get_sequence_recommendations(sequence)
