import math
from typing import Iterable

from models.enums import GroupType


def is_valid_habit_id(habit_id) -> bool:
    return isinstance(habit_id, str) and bool(habit_id.strip())


def is_valid_completion_time(time_ms) -> bool:
    if isinstance(time_ms, bool) or not isinstance(time_ms, (int, float)):
        return False
    return not math.isnan(time_ms) and time_ms >= 0


def is_valid_group_name(name) -> bool:
    return isinstance(name, str) and bool(name.strip())


def is_valid_group_type(group_type) -> bool:
    value = group_type.value if isinstance(group_type, GroupType) else group_type
    return value in GroupType.values()


def has_habit_ids(habit_ids: Iterable[str]) -> bool:
    return bool(habit_ids) and all(is_valid_habit_id(habit_id) for habit_id in habit_ids)
