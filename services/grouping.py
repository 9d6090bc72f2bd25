# services/grouping.py

"""
Группировка привычек по контексту, времени и сложности.

Инвариант: одна привычка входит не более чем в одну группу.
"""

import logging
import re
import uuid
from typing import Iterable, List, Optional, Sequence, Tuple

from config import GroupingConfig
from database.manager import HABIT_GROUPS, StoragePort
from models.enums import GroupType, HabitType
from models.habit import Habit, utc_timestamp
from models.sequencing import AutoGroupResult, GroupRationale, GroupSuggestion, HabitGroup
from utils.decorators import service_operation
from utils.exceptions import ConflictError, NotFoundError, ValidationError
from utils.validators import has_habit_ids, is_valid_group_name, is_valid_group_type, is_valid_habit_id

logger = logging.getLogger(__name__)

KEYWORD_SPLIT = re.compile(r"[\s\-_,.!?]+")

MIN_SUGGESTION_CONFIDENCE = 0.3
KEYWORD_WEIGHT = 0.4
TEMPORAL_BOOLEAN_BONUS = 0.5
TEMPORAL_OTHER_BONUS = 0.2
DIGITAL_GROUP_CONFIDENCE = 0.8
QUICK_TASKS_CONFIDENCE = 0.6


def extract_keywords(text: str) -> List[str]:
    """Слова длиннее двух символов"""
    return [word.lower() for word in KEYWORD_SPLIT.split(text.lower()) if len(word) > 2]


def _mentions_any(text: str, keywords: Iterable[str]) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)


def validate_group_configuration(name: str, habit_ids: Sequence[str], group_type) -> None:
    if not is_valid_group_name(name):
        raise ValidationError("Group name is required")
    if not has_habit_ids(habit_ids):
        raise ValidationError("Group must contain at least one habit")
    if not is_valid_group_type(group_type):
        raise ValidationError("Invalid group type")


def check_for_duplicate_habits(habit_ids: Iterable[str], groups: Iterable[HabitGroup]) -> None:
    groups = list(groups)
    for habit_id in habit_ids:
        owner = next((group for group in groups if group.contains(habit_id)), None)
        if owner is not None:
            raise ConflictError(
                f'Habit {habit_id} is already assigned to group "{owner.name}"',
                habit_id=habit_id,
                group_name=owner.name,
            )


class GroupingService:
    """Сервис групп привычек"""

    def __init__(self, store: StoragePort, config: Optional[GroupingConfig] = None):
        self.store = store
        self.config = config or GroupingConfig()

    # ===== ХРАНИЛИЩЕ =====

    def load_groups(self) -> List[HabitGroup]:
        groups = []
        for group_id, raw in self.store.read_all(HABIT_GROUPS).items():
            try:
                groups.append(HabitGroup.from_dict(raw))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"⚠️ Пропущена поврежденная группа {group_id}: {e}")
        return groups

    def _save_groups(self, groups: List[HabitGroup]) -> None:
        self.store.write_all(HABIT_GROUPS, {group.id: group.to_dict() for group in groups})

    def _find(self, groups: List[HabitGroup], group_id: str) -> Tuple[int, HabitGroup]:
        for index, group in enumerate(groups):
            if group.id == group_id:
                return index, group
        raise NotFoundError("Group not found")

    @staticmethod
    def _type_value(group_type) -> str:
        return group_type.value if isinstance(group_type, GroupType) else group_type

    def _create(self, name: str, habit_ids: Sequence[str], group_type) -> HabitGroup:
        validate_group_configuration(name, habit_ids, group_type)
        groups = self.load_groups()
        check_for_duplicate_habits(habit_ids, groups)

        group = HabitGroup(
            id=str(uuid.uuid4()),
            name=name.strip(),
            habit_ids=list(dict.fromkeys(habit_ids)),
            group_type=self._type_value(group_type),
            created_at=utc_timestamp(),
        )
        groups.append(group)
        self._save_groups(groups)
        logger.info(f"📁 Создана группа '{group.name}' ({len(group.habit_ids)} привычек)")
        return group

    # ===== CRUD =====

    @service_operation("create habit group")
    def create_group(self, name: str, habit_ids: Sequence[str], group_type=GroupType.MANUAL) -> HabitGroup:
        return self._create(name, habit_ids, group_type)

    @service_operation("update habit group")
    def update_group(self, group: HabitGroup) -> HabitGroup:
        validate_group_configuration(group.name, group.habit_ids, group.group_type)
        groups = self.load_groups()
        index, _ = self._find(groups, group.id)
        check_for_duplicate_habits(group.habit_ids, [g for g in groups if g.id != group.id])

        updated = HabitGroup(
            id=group.id,
            name=group.name.strip(),
            habit_ids=list(dict.fromkeys(group.habit_ids)),
            group_type=self._type_value(group.group_type),
            created_at=groups[index].created_at,
        )
        groups[index] = updated
        self._save_groups(groups)
        return updated

    @service_operation("delete habit group")
    def delete_group(self, group_id: str) -> bool:
        groups = self.load_groups()
        index, group = self._find(groups, group_id)
        del groups[index]
        self._save_groups(groups)
        logger.info(f"🗑 Группа '{group.name}' удалена")
        return True

    @service_operation("get habit groups")
    def get_groups(self) -> List[HabitGroup]:
        return self.load_groups()

    @service_operation("get habit group")
    def get_group(self, group_id: str) -> HabitGroup:
        return self._find(self.load_groups(), group_id)[1]

    @service_operation("validate group configuration")
    def validate_group_configuration(self, name: str, habit_ids: Sequence[str], group_type) -> bool:
        validate_group_configuration(name, habit_ids, group_type)
        return True

    @service_operation("add habit to group")
    def add_habit_to_group(self, group_id: str, habit_id: str) -> HabitGroup:
        if not is_valid_habit_id(habit_id):
            raise ValidationError("Habit id is required")
        groups = self.load_groups()
        index, group = self._find(groups, group_id)
        check_for_duplicate_habits([habit_id], [g for g in groups if g.id != group_id])

        if group.contains(habit_id):
            raise ValidationError("Habit already in this group")

        group.habit_ids.append(habit_id)
        groups[index] = group
        self._save_groups(groups)
        return group

    @service_operation("remove habit from group")
    def remove_habit_from_group(self, group_id: str, habit_id: str) -> HabitGroup:
        groups = self.load_groups()
        index, group = self._find(groups, group_id)

        if not group.contains(habit_id):
            raise NotFoundError("Habit not found in group")
        if len(group.habit_ids) == 1:
            raise ValidationError("Group must contain at least one habit; delete the group instead")

        group.habit_ids = [hid for hid in group.habit_ids if hid != habit_id]
        groups[index] = group
        self._save_groups(groups)
        return group

    # ===== ПОДСКАЗКИ =====

    def context_similarity(self, habit_name: str, group_name: str) -> float:
        """Бонус за общий смысловой контекст (цифровые устройства, чтение/учёба)"""
        if (_mentions_any(habit_name, self.config.digital_keywords)
                and _mentions_any(group_name, self.config.digital_keywords)):
            return self.config.digital_similarity
        if (_mentions_any(habit_name, self.config.learning_keywords)
                and _mentions_any(group_name, self.config.learning_keywords)):
            return self.config.learning_similarity
        return 0.0

    def habit_group_similarity(self, habit: Habit, group: HabitGroup) -> Tuple[float, str]:
        confidence = 0.0
        reasons = []

        habit_keywords = extract_keywords(habit.name)
        group_keywords = extract_keywords(group.name)
        overlap = len([keyword for keyword in habit_keywords if keyword in group_keywords])
        if overlap > 0:
            confidence += KEYWORD_WEIGHT * overlap / max(len(habit_keywords), len(group_keywords))
            reasons.append('similar keywords')

        if group.group_type == GroupType.CONTEXTUAL.value:
            similarity = self.context_similarity(habit.name, group.name)
            confidence += similarity
            if similarity > MIN_SUGGESTION_CONFIDENCE:
                reasons.append('contextual similarity')

        if group.group_type == GroupType.TEMPORAL.value:
            # Булевы привычки - быстрые действия, хорошо ложатся во временные группы
            if habit.type == HabitType.BOOLEAN.value:
                confidence += TEMPORAL_BOOLEAN_BONUS
            else:
                confidence += TEMPORAL_OTHER_BONUS
            reasons.append('type compatibility')

        return min(confidence, 1.0), ', '.join(reasons) or 'general compatibility'

    @service_operation("suggest groups")
    def suggest_groups_for_habit(self, habit: Habit) -> List[GroupSuggestion]:
        suggestions = []
        for group in self.load_groups():
            confidence, reason = self.habit_group_similarity(habit, group)
            if confidence > MIN_SUGGESTION_CONFIDENCE:
                suggestions.append(GroupSuggestion(group=group, confidence=confidence, reason=reason))

        suggestions.sort(key=lambda suggestion: suggestion.confidence, reverse=True)
        return suggestions

    # ===== АВТОГРУППИРОВКА =====

    def _synthesize(self, name: str, habits: List[Habit], group_type: GroupType, persist: bool) -> HabitGroup:
        habit_ids = [habit.id for habit in habits]
        if persist:
            return self._create(name, habit_ids, group_type)
        return HabitGroup(
            id=str(uuid.uuid4()),
            name=name,
            habit_ids=habit_ids,
            group_type=group_type.value,
            created_at=utc_timestamp(),
        )

    @service_operation("auto-group habits")
    def auto_group_habits(self, habits: Sequence[Habit], persist: bool = False) -> AutoGroupResult:
        """
        Детерминированное разбиение негруппированных привычек:
        1. contextual "Digital Shutdown" - привычки про устройства (если их >= 2)
        2. temporal "Quick Tasks" - оставшиеся булевы привычки (если их >= 2)

        При persist=True группы создаются через create_group со всеми его проверками.
        """
        result = AutoGroupResult()
        if len(habits) < 2:
            return result

        taken = {habit_id for group in self.load_groups() for habit_id in group.habit_ids}
        candidates = [habit for habit in habits if habit.is_active and habit.id not in taken]

        digital = [habit for habit in candidates if _mentions_any(habit.name, self.config.auto_group_keywords)]
        if len(digital) >= 2:
            group = self._synthesize(self.config.digital_group_name, digital, GroupType.CONTEXTUAL, persist)
            result.groups.append(group)
            result.rationale.append(GroupRationale(
                group_id=group.id,
                reason='Habits related to digital devices and technology',
                confidence=DIGITAL_GROUP_CONFIDENCE,
            ))
            taken.update(group.habit_ids)

        quick = [habit for habit in candidates
                 if habit.id not in taken and habit.type == HabitType.BOOLEAN.value]
        if len(quick) >= 2:
            group = self._synthesize(self.config.quick_tasks_group_name, quick, GroupType.TEMPORAL, persist)
            result.groups.append(group)
            result.rationale.append(GroupRationale(
                group_id=group.id,
                reason='Quick boolean tasks that work well together',
                confidence=QUICK_TASKS_CONFIDENCE,
            ))

        if persist and result.groups:
            logger.info(f"🤖 Автогруппировка сохранила {len(result.groups)} групп")

        return result
