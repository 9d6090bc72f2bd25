# models/sequencing.py

from dataclasses import dataclass, field, asdict
from typing import Dict, FrozenSet, List, Optional

from .enums import GroupType, PriorityFactor, RecommendationType
from .habit import utc_timestamp


@dataclass
class CompletionTimeRecord:
    """История времени выполнения одной привычки"""
    habit_id: str
    average_completion_time: float  # мс, скользящее среднее
    completion_count: int
    quick_win_score: float  # 0-1, выводится из average_completion_time
    last_updated: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "CompletionTimeRecord":
        return cls(
            habit_id=data["habit_id"],
            average_completion_time=float(data["average_completion_time"]),
            completion_count=int(data["completion_count"]),
            quick_win_score=float(data.get("quick_win_score", 0.0)),
            last_updated=data.get("last_updated") or utc_timestamp(),
        )


@dataclass
class HabitGroup:
    """Именованная группа связанных привычек"""
    id: str
    name: str
    habit_ids: List[str]
    group_type: str = GroupType.MANUAL.value
    created_at: str = field(default_factory=utc_timestamp)

    def contains(self, habit_id: str) -> bool:
        return habit_id in self.habit_ids

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "habit_ids": list(self.habit_ids),
            "group_type": self.group_type,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HabitGroup":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            habit_ids=list(data.get("habit_ids", [])),
            group_type=data.get("group_type", GroupType.MANUAL.value),
            created_at=data.get("created_at") or utc_timestamp(),
        )


@dataclass
class HabitPriority:
    habit_id: str
    score: float
    factors: FrozenSet[PriorityFactor] = frozenset()

    def has(self, factor: PriorityFactor) -> bool:
        return factor in self.factors

    def to_dict(self) -> dict:
        return {
            "habit_id": self.habit_id,
            "score": self.score,
            "factors": sorted(factor.value for factor in self.factors),
        }


@dataclass
class SequenceItem:
    """Позиция привычки в оптимизированной последовательности"""
    habit_id: str
    position: int
    momentum_score: float
    reasoning: str
    group_id: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "SequenceItem":
        return cls(
            habit_id=data["habit_id"],
            position=int(data["position"]),
            momentum_score=float(data.get("momentum_score", 0.0)),
            reasoning=data.get("reasoning", ""),
            group_id=data.get("group_id"),
        )


@dataclass
class SequencingPreferences:
    """Пользовательские настройки порядка"""
    manual_order: Optional[List[str]] = None
    disabled_grouping: bool = False
    quick_wins_first: bool = False
    adapt_to_patterns: bool = False
    override_algorithm: bool = False

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "SequencingPreferences":
        return cls(**data)


@dataclass
class RecommendationAction:
    move_habit: str
    to_position: int


@dataclass
class SequenceRecommendation:
    type: RecommendationType
    title: str
    description: str
    confidence: float
    action: Optional[RecommendationAction] = None

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "confidence": self.confidence,
            "action": asdict(self.action) if self.action else None,
        }


@dataclass
class GroupSuggestion:
    group: HabitGroup
    confidence: float
    reason: str

    def to_dict(self) -> dict:
        return {
            "group": self.group.to_dict(),
            "confidence": self.confidence,
            "reason": self.reason,
        }


@dataclass
class GroupRationale:
    group_id: str
    reason: str
    confidence: float


@dataclass
class AutoGroupResult:
    groups: List[HabitGroup] = field(default_factory=list)
    rationale: List[GroupRationale] = field(default_factory=list)

    def to_dict(self) -> Dict[str, list]:
        return {
            "groups": [group.to_dict() for group in self.groups],
            "rationale": [asdict(item) for item in self.rationale],
        }
