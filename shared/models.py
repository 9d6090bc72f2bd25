from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Any
from datetime import datetime

from models.enums import GroupType, HabitType
from models.habit import Habit
from models.sequencing import HabitGroup, SequenceItem, SequencingPreferences


# Модели привычек и последовательностей
class HabitSchema(BaseModel):
    id: str = Field(..., min_length=1)
    name: str
    type: HabitType = HabitType.BOOLEAN
    is_active: bool = True

    def to_domain(self) -> Habit:
        return Habit(id=self.id, name=self.name, type=self.type.value, is_active=self.is_active)


class SequenceItemSchema(BaseModel):
    habit_id: str
    position: int
    momentum_score: float = Field(0.0, ge=0.0, le=1.0)
    reasoning: str = ""
    group_id: Optional[str] = None

    def to_domain(self) -> SequenceItem:
        return SequenceItem(
            habit_id=self.habit_id,
            position=self.position,
            momentum_score=self.momentum_score,
            reasoning=self.reasoning,
            group_id=self.group_id,
        )


class PreferencesSchema(BaseModel):
    manual_order: Optional[List[str]] = None
    disabled_grouping: bool = False
    quick_wins_first: bool = False
    adapt_to_patterns: bool = False
    override_algorithm: bool = False

    def to_domain(self) -> SequencingPreferences:
        return SequencingPreferences(**self.model_dump())


# Модели для создания/обновления
class TrackCompletionRequest(BaseModel):
    habit_id: str
    time_to_complete: float = Field(..., description="Время выполнения в миллисекундах")


class CompletionTimeUpdateRequest(BaseModel):
    average_completion_time: float = Field(..., ge=0)
    completion_count: int = Field(..., ge=0)


class CreateGroupRequest(BaseModel):
    name: str
    habit_ids: List[str]
    group_type: GroupType = GroupType.MANUAL


class UpdateGroupRequest(BaseModel):
    name: str
    habit_ids: List[str]
    group_type: GroupType

    def to_domain(self, group_id: str) -> HabitGroup:
        return HabitGroup(
            id=group_id,
            name=self.name,
            habit_ids=list(self.habit_ids),
            group_type=self.group_type.value,
        )


class GroupMembershipRequest(BaseModel):
    habit_id: str


class HabitListRequest(BaseModel):
    habits: List[HabitSchema]

    @field_validator('habits')
    @classmethod
    def validate_unique_ids(cls, v):
        ids = [habit.id for habit in v]
        if len(ids) != len(set(ids)):
            raise ValueError('Идентификаторы привычек должны быть уникальными')
        return v

    def to_domain(self) -> List[Habit]:
        return [habit.to_domain() for habit in self.habits]


class AutoGroupRequest(HabitListRequest):
    persist: bool = False


class SequenceRequest(HabitListRequest):
    preferences: Optional[PreferencesSchema] = None


class ValidateSequenceRequest(HabitListRequest):
    sequence: List[SequenceItemSchema]


class RecommendationsRequest(BaseModel):
    sequence: List[SequenceItemSchema]


# Модели для API ответов
class APIResponse(BaseModel):
    success: bool
    message: str = ""
    data: Optional[Any] = None
    errors: Optional[List[str]] = None
    timestamp: datetime = Field(default_factory=datetime.now)
