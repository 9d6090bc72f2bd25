# models/habit.py

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Union

from .enums import HabitType


def utc_timestamp() -> str:
    """Текущее время в ISO формате (UTC)"""
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Habit:
    """Привычка в том виде, в котором её передаёт вызывающий код"""
    id: str
    name: str
    type: str = HabitType.BOOLEAN.value
    is_active: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "is_active": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Habit":
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            type=data.get("type", HabitType.BOOLEAN.value),
            is_active=data.get("is_active", True),
        )


# ===== ЗНАЧЕНИЕ ВЫПОЛНЕНИЯ =====

@dataclass(frozen=True)
class EmptyValue:
    def to_dict(self) -> dict:
        return {}


@dataclass(frozen=True)
class BooleanValue:
    value: bool

    def to_dict(self) -> dict:
        return {"boolean": self.value}


@dataclass(frozen=True)
class NumericValue:
    value: float

    def to_dict(self) -> dict:
        return {"numeric": self.value}


@dataclass(frozen=True)
class ChoiceValue:
    value: str

    def to_dict(self) -> dict:
        return {"choice": self.value}


CompletionValue = Union[EmptyValue, BooleanValue, NumericValue, ChoiceValue]


def completion_value_from_dict(data: Optional[dict]) -> CompletionValue:
    """Разбор значения из словаря вида {"boolean": true}"""
    if not data:
        return EmptyValue()
    if len(data) > 1:
        raise ValueError(f"Completion value must have at most one key, got: {sorted(data)}")
    key, value = next(iter(data.items()))
    if key == "boolean":
        return BooleanValue(bool(value))
    if key == "numeric":
        return NumericValue(float(value))
    if key == "choice":
        return ChoiceValue(str(value))
    raise ValueError(f"Unknown completion value kind: {key}")


@dataclass
class HabitCompletion:
    """Факт выполнения привычки"""
    habit_id: str
    time_to_complete: float  # в миллисекундах
    value: CompletionValue = field(default_factory=EmptyValue)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    completed_at: str = field(default_factory=utc_timestamp)
    flagged_for_action: bool = False
    action_note: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "habit_id": self.habit_id,
            "value": self.value.to_dict(),
            "completed_at": self.completed_at,
            "flagged_for_action": self.flagged_for_action,
            "action_note": self.action_note,
            "time_to_complete": self.time_to_complete,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HabitCompletion":
        return cls(
            id=data.get("id") or str(uuid.uuid4()),
            habit_id=data["habit_id"],
            value=completion_value_from_dict(data.get("value")),
            completed_at=data.get("completed_at") or utc_timestamp(),
            flagged_for_action=data.get("flagged_for_action", False),
            action_note=data.get("action_note"),
            time_to_complete=data["time_to_complete"],
        )
