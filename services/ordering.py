# services/ordering.py

"""
Quick-win first ordering.

Чистые функции без доступа к хранилищу: на вход приходят привычки, записи
времени выполнения и группы, на выходе - оптимизированная последовательность,
проверка последовательности и рекомендации по её улучшению.
"""

import logging
import re
from dataclasses import replace
from functools import cmp_to_key
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from models.enums import PriorityFactor, RecommendationType
from models.habit import Habit
from models.sequencing import (
    CompletionTimeRecord,
    HabitGroup,
    HabitPriority,
    RecommendationAction,
    SequenceItem,
    SequenceRecommendation,
    SequencingPreferences,
)
from utils.exceptions import InvalidSequenceError

logger = logging.getLogger(__name__)


class PriorityWeights:
    """Веса и пороги формулы приоритета"""

    QUICK_WIN = 0.6
    CONSISTENCY = 0.2
    GROUPED_BONUS = 0.15
    FAST_BONUS = 0.1

    QUICK_WIN_THRESHOLD = 0.7
    CONSISTENT_COMPLETIONS = 10
    FULL_CONSISTENCY_COMPLETIONS = 20
    FAST_COMPLETION_MS = 30_000

    DEFAULT_SCORE = 0.5
    DEFAULT_QUICK_WIN = 0.5
    TIE_TOLERANCE = 0.001


class RecommendationThresholds:
    HIGH_MOMENTUM = 0.8
    LOW_MOMENTUM = 0.3
    QUICK_WIN_CONFIDENCE = 0.8
    CONSOLIDATE_CONFIDENCE = 0.7
    NEW_GROUP_CONFIDENCE = 0.6
    MOMENTUM_FLOW_CONFIDENCE = 0.6


MANUAL_OVERRIDE_PREFIX = "Manual override - "
MOMENTUM_STARTER = "momentum starter"
FALLBACK_REASONING = "balanced positioning"

# Порядок фрагментов в тексте обоснования
REASONING_FRAGMENTS = (
    (PriorityFactor.QUICK_WIN, "quick win"),
    (PriorityFactor.GROUPED, "grouped with {group}"),
    (PriorityFactor.FAST, "fast completion"),
    (PriorityFactor.CONSISTENT, "consistent performance"),
    (PriorityFactor.DEFAULT, "default positioning"),
)

GROUPING_FRAGMENT = re.compile(r"^grouped(\s+with\b.*)?$")
FRAGMENT_SEPARATOR = ", "

# Фрагменты без названия группы: после "grouped with ..." всё до первого из них - имя группы
PLAIN_FRAGMENTS = frozenset(
    [MOMENTUM_STARTER]
    + [template for factor, template in REASONING_FRAGMENTS if factor != PriorityFactor.GROUPED]
)

# Акценты reorder_by_momentum: "<tag> - <обоснование>"
MOMENTUM_TAG_SEPARATOR = " - "
TAG_MOMENTUM_BUILDER = "momentum_builder"
TAG_QUICK_WIN = "quick_win"
TAG_GROUPED = "grouped"
TAG_COMPLETION = "completion"
MOMENTUM_TAGS = (TAG_MOMENTUM_BUILDER, TAG_QUICK_WIN, TAG_GROUPED, TAG_COMPLETION)


# ===== ПРИОРИТЕТЫ =====

def habit_group_index(groups: Iterable[HabitGroup]) -> Dict[str, HabitGroup]:
    """habit_id -> группа (первая, если данные нарушают инвариант)"""
    index: Dict[str, HabitGroup] = {}
    for group in groups:
        for habit_id in group.habit_ids:
            index.setdefault(habit_id, group)
    return index


def calculate_habit_priority(record: CompletionTimeRecord, groups: Iterable[HabitGroup]) -> HabitPriority:
    """Приоритет одной привычки по её истории выполнения"""
    w = PriorityWeights
    score = 0.0
    factors = set()

    score += record.quick_win_score * w.QUICK_WIN
    if record.quick_win_score > w.QUICK_WIN_THRESHOLD:
        factors.add(PriorityFactor.QUICK_WIN)

    score += min(record.completion_count / w.FULL_CONSISTENCY_COMPLETIONS, 1.0) * w.CONSISTENCY
    if record.completion_count > w.CONSISTENT_COMPLETIONS:
        factors.add(PriorityFactor.CONSISTENT)

    if any(group.contains(record.habit_id) for group in groups):
        score += w.GROUPED_BONUS
        factors.add(PriorityFactor.GROUPED)

    if record.average_completion_time < w.FAST_COMPLETION_MS:
        score += w.FAST_BONUS
        factors.add(PriorityFactor.FAST)

    if record.completion_count == 0:
        factors.add(PriorityFactor.DEFAULT)

    return HabitPriority(habit_id=record.habit_id, score=min(score, 1.0), factors=frozenset(factors))


def default_priority(habit_id: str) -> HabitPriority:
    """Нейтральный приоритет для привычки без истории"""
    return HabitPriority(
        habit_id=habit_id,
        score=PriorityWeights.DEFAULT_SCORE,
        factors=frozenset({PriorityFactor.DEFAULT, PriorityFactor.NO_DATA}),
    )


def sort_priorities(priorities: List[HabitPriority],
                    records: Mapping[str, CompletionTimeRecord]) -> List[HabitPriority]:
    """По убыванию score; при равенстве - по quick_win_score записи"""

    def quick_win(habit_id: str) -> float:
        record = records.get(habit_id)
        return record.quick_win_score if record else PriorityWeights.DEFAULT_QUICK_WIN

    def compare(a: HabitPriority, b: HabitPriority) -> int:
        diff = b.score - a.score
        if abs(diff) < PriorityWeights.TIE_TOLERANCE:
            tie = quick_win(b.habit_id) - quick_win(a.habit_id)
            return (tie > 0) - (tie < 0)
        return 1 if diff > 0 else -1

    return sorted(priorities, key=cmp_to_key(compare))


def apply_group_constraints(priorities: List[HabitPriority], groups: Iterable[HabitGroup]) -> List[HabitPriority]:
    """
    Сводит участников каждой группы в непрерывный блок.

    Блок встаёт на место самого приоритетного участника группы, внутри блока
    сохраняется приоритетный порядок. Остальные привычки только сдвигаются.
    """
    result = list(priorities)
    for group in groups:
        members = [priority for priority in result if group.contains(priority.habit_id)]
        if len(members) < 2:
            continue

        anchor = next(index for index, priority in enumerate(result) if group.contains(priority.habit_id))
        rest = [priority for priority in result if not group.contains(priority.habit_id)]
        result = rest[:anchor] + members + rest[anchor:]
    return result


def format_reasoning(priority: HabitPriority, group: Optional[HabitGroup], position: int) -> str:
    """Текст обоснования из набора факторов"""
    reasons = []
    for factor, template in REASONING_FRAGMENTS:
        if not priority.has(factor):
            continue
        if factor == PriorityFactor.GROUPED:
            if group is None:
                continue
            reasons.append(template.format(group=group.name))
        else:
            reasons.append(template)

    if position == 0:
        reasons.insert(0, MOMENTUM_STARTER)

    return ', '.join(reasons) or FALLBACK_REASONING


# ===== ПОСЛЕДОВАТЕЛЬНОСТЬ =====

def active_habits(habits: Iterable[Habit]) -> List[Habit]:
    return [habit for habit in habits if habit.is_active]


def generate_optimized_sequence(habits: Sequence[Habit],
                                records: Mapping[str, CompletionTimeRecord],
                                groups: Sequence[HabitGroup]) -> List[SequenceItem]:
    """Оптимизированная последовательность: быстрые победы в начале, группы вместе"""
    habits = active_habits(habits)
    if not habits:
        return []

    priorities = []
    for habit in habits:
        record = records.get(habit.id)
        if record is None:
            priorities.append(default_priority(habit.id))
        else:
            priorities.append(calculate_habit_priority(record, groups))

    ordered = apply_group_constraints(sort_priorities(priorities, records), groups)
    by_habit = habit_group_index(groups)

    sequence = []
    for position, priority in enumerate(ordered):
        group = by_habit.get(priority.habit_id)
        sequence.append(SequenceItem(
            habit_id=priority.habit_id,
            position=position,
            group_id=group.id if group else None,
            momentum_score=priority.score,
            reasoning=format_reasoning(priority, group, position),
        ))

    logger.debug(f"🔢 Сформирована последовательность из {len(sequence)} привычек")
    return sequence


def _renumber(sequence: List[SequenceItem]) -> List[SequenceItem]:
    return [replace(item, position=index) for index, item in enumerate(sequence)]


def _strip_grouping_text(reasoning: str) -> str:
    """
    Убирает упоминание группы из обоснования.

    Имя группы может содержать запятые, поэтому после "grouped with ..."
    пропускается всё до следующего известного фрагмента. Акцент "grouped"
    от reorder_by_momentum заменяется на "completion".
    """
    prefix = ""
    if reasoning.startswith(MANUAL_OVERRIDE_PREFIX):
        prefix = MANUAL_OVERRIDE_PREFIX
        reasoning = reasoning[len(MANUAL_OVERRIDE_PREFIX):]

    tag, separator, body = reasoning.partition(MOMENTUM_TAG_SEPARATOR)
    if separator and tag in MOMENTUM_TAGS:
        prefix += (TAG_COMPLETION if tag == TAG_GROUPED else tag) + separator
        reasoning = body

    kept = []
    in_group_name = False
    for fragment in reasoning.split(FRAGMENT_SEPARATOR):
        fragment = fragment.strip()
        if GROUPING_FRAGMENT.match(fragment):
            in_group_name = True
            continue
        if in_group_name and fragment not in PLAIN_FRAGMENTS:
            continue
        in_group_name = False
        if fragment:
            kept.append(fragment)

    return prefix + (FRAGMENT_SEPARATOR.join(kept) or FALLBACK_REASONING)


def apply_manual_order(sequence: List[SequenceItem], manual_order: Sequence[str]) -> List[SequenceItem]:
    by_habit = {item.habit_id: item for item in sequence}
    ordered = []
    placed = set()

    for habit_id in manual_order:
        item = by_habit.get(habit_id)
        if item is None or habit_id in placed:
            continue
        ordered.append(replace(item, reasoning=MANUAL_OVERRIDE_PREFIX + item.reasoning))
        placed.add(habit_id)

    ordered.extend(item for item in sequence if item.habit_id not in placed)
    return ordered


def apply_sequencing_preferences(sequence: Sequence[SequenceItem],
                                 preferences: SequencingPreferences) -> List[SequenceItem]:
    """Применение пользовательских настроек к базовой последовательности"""
    result = sorted(sequence, key=lambda item: item.position)

    if preferences.override_algorithm and preferences.manual_order:
        result = apply_manual_order(result, preferences.manual_order)
    else:
        if preferences.quick_wins_first:
            result = sorted(result, key=lambda item: item.momentum_score, reverse=True)

        if preferences.disabled_grouping:
            result = [
                replace(item, group_id=None, reasoning=_strip_grouping_text(item.reasoning))
                for item in result
            ]

    return _renumber(result)


def validate_sequence(sequence: Sequence[SequenceItem], habits: Sequence[Habit]) -> bool:
    """Проверки выполняются по порядку, первая неудачная прерывает проверку"""
    habit_ids = [habit.id for habit in active_habits(habits)]
    known = set(habit_ids)

    invalid = [item.habit_id for item in sequence if item.habit_id not in known]
    if invalid:
        raise InvalidSequenceError(
            f"Invalid habit ID: {invalid[0]}",
            InvalidSequenceError.INVALID_HABIT_ID,
        )

    positions = [item.position for item in sequence]
    if len(positions) != len(set(positions)):
        raise InvalidSequenceError(
            "Duplicate position found in sequence",
            InvalidSequenceError.DUPLICATE_POSITION,
        )

    present = {item.habit_id for item in sequence}
    missing = [habit_id for habit_id in habit_ids if habit_id not in present]
    if missing:
        raise InvalidSequenceError(
            f"Missing habits in sequence: {', '.join(missing)}",
            InvalidSequenceError.MISSING_HABITS,
            missing_habits=missing,
        )

    if sorted(positions) != list(range(len(positions))):
        raise InvalidSequenceError(
            "Positions must be sequential starting from 0",
            InvalidSequenceError.NON_SEQUENTIAL_POSITIONS,
        )

    return True


def emphasize_momentum(sequence: Sequence[SequenceItem]) -> List[SequenceItem]:
    """Порядок не меняется, меняется только акцент в обоснованиях"""
    emphasized = []
    for index, item in enumerate(sorted(sequence, key=lambda i: i.position)):
        if index == 0:
            tag = TAG_MOMENTUM_BUILDER
        elif item.momentum_score > RecommendationThresholds.HIGH_MOMENTUM:
            tag = TAG_QUICK_WIN
        elif item.group_id:
            tag = TAG_GROUPED
        else:
            tag = TAG_COMPLETION
        emphasized.append(replace(item, reasoning=f"{tag}{MOMENTUM_TAG_SEPARATOR}{item.reasoning}"))
    return emphasized


def reorder_by_momentum(habits: Sequence[Habit],
                        records: Mapping[str, CompletionTimeRecord],
                        groups: Sequence[HabitGroup]) -> List[SequenceItem]:
    return emphasize_momentum(generate_optimized_sequence(habits, records, groups))


# ===== РЕКОМЕНДАЦИИ =====

def analyze_quick_win_placement(sequence: List[SequenceItem]) -> Optional[SequenceRecommendation]:
    """Первая быстрая победа не на старте последовательности"""
    for item in sequence:
        if item.momentum_score > RecommendationThresholds.HIGH_MOMENTUM and item.position > 0:
            return SequenceRecommendation(
                type=RecommendationType.REORDER,
                title="Move Quick Wins Earlier",
                description="Moving high-momentum habits earlier will improve psychological flow",
                confidence=RecommendationThresholds.QUICK_WIN_CONFIDENCE,
                action=RecommendationAction(move_habit=item.habit_id, to_position=0),
            )
    return None


def analyze_grouping(sequence: List[SequenceItem]) -> Optional[SequenceRecommendation]:
    group_ids = list(dict.fromkeys(item.group_id for item in sequence if item.group_id))

    for group_id in group_ids:
        positions = [item.position for item in sequence if item.group_id == group_id]
        # Разброс позиций больше размера группы - участники перемешаны с чужими
        if len(positions) > 1 and max(positions) - min(positions) >= len(positions):
            return SequenceRecommendation(
                type=RecommendationType.GROUPING,
                title="Consolidate Grouped Habits",
                description="Grouping related habits together improves flow and reduces context switching",
                confidence=RecommendationThresholds.CONSOLIDATE_CONFIDENCE,
            )

    high_ungrouped = [
        item for item in sequence
        if not item.group_id and item.momentum_score > RecommendationThresholds.HIGH_MOMENTUM
    ]
    if len(high_ungrouped) >= 2:
        return SequenceRecommendation(
            type=RecommendationType.GROUPING,
            title="Consider Grouping Similar Habits",
            description="Creating groups for similar high-momentum habits can improve flow",
            confidence=RecommendationThresholds.NEW_GROUP_CONFIDENCE,
        )

    return None


def analyze_momentum_flow(sequence: List[SequenceItem]) -> Optional[SequenceRecommendation]:
    for current, following in zip(sequence, sequence[1:]):
        if (current.momentum_score > RecommendationThresholds.HIGH_MOMENTUM
                and following.momentum_score < RecommendationThresholds.LOW_MOMENTUM):
            return SequenceRecommendation(
                type=RecommendationType.TIMING,
                title="Smooth Momentum Transition",
                description="Consider placing a medium-momentum habit between high and low momentum tasks",
                confidence=RecommendationThresholds.MOMENTUM_FLOW_CONFIDENCE,
            )
    return None


def get_sequence_recommendations(sequence: Sequence[SequenceItem]) -> List[SequenceRecommendation]:
    ordered = sorted(sequence, key=lambda item: item.position)
    recommendations = [
        recommendation
        for recommendation in (
            analyze_quick_win_placement(ordered),
            analyze_grouping(ordered),
            analyze_momentum_flow(ordered),
        )
        if recommendation is not None
    ]
    recommendations.sort(key=lambda recommendation: recommendation.confidence, reverse=True)
    return recommendations
