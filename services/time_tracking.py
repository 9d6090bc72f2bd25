# services/time_tracking.py

"""
Трекинг времени выполнения привычек.

Для каждой привычки хранится скользящее среднее времени выполнения и
производный quick-win score (0 - медленно, 1 - очень быстро).
"""

import logging
from typing import Dict, List, Optional

from database.manager import COMPLETION_TIMES, StoragePort
from models.habit import HabitCompletion, utc_timestamp
from models.sequencing import CompletionTimeRecord
from utils.decorators import service_operation
from utils.exceptions import ValidationError
from utils.validators import is_valid_completion_time, is_valid_habit_id

logger = logging.getLogger(__name__)

# Пороги quick win (мс)
VERY_FAST_MS = 30_000   # 30 секунд = 1.0
FAST_MS = 60_000        # 1 минута = 0.8
MEDIUM_MS = 120_000     # 2 минуты = 0.4
SLOW_MS = 300_000       # 5 минут = 0.0

QUICK_WIN_WEIGHT = 0.6
CONSISTENCY_WEIGHT = 0.4
FULL_CONSISTENCY_COMPLETIONS = 20


def quick_win_score(completion_time_ms: float) -> float:
    """Кусочно-линейная невозрастающая функция времени -> [0, 1]"""
    if completion_time_ms <= VERY_FAST_MS:
        return 1.0
    if completion_time_ms <= FAST_MS:
        return 1.0 - 0.2 * (completion_time_ms - VERY_FAST_MS) / (FAST_MS - VERY_FAST_MS)
    if completion_time_ms <= MEDIUM_MS:
        return 0.8 - 0.4 * (completion_time_ms - FAST_MS) / (MEDIUM_MS - FAST_MS)
    if completion_time_ms <= SLOW_MS:
        return 0.4 - 0.4 * (completion_time_ms - MEDIUM_MS) / (SLOW_MS - MEDIUM_MS)
    return 0.0


def consistency_ratio(completion_count: int) -> float:
    return min(completion_count / FULL_CONSISTENCY_COMPLETIONS, 1.0)


def momentum_score(record: CompletionTimeRecord) -> float:
    """Композитная оценка: скорость + надёжность данных"""
    return (QUICK_WIN_WEIGHT * record.quick_win_score
            + CONSISTENCY_WEIGHT * consistency_ratio(record.completion_count))


class TimeTrackingService:
    """Сервис учёта времени выполнения"""

    def __init__(self, store: StoragePort):
        self.store = store

    # ===== ВНУТРЕННИЕ МЕТОДЫ =====

    def load_records(self) -> Dict[str, CompletionTimeRecord]:
        records = {}
        for habit_id, raw in self.store.read_all(COMPLETION_TIMES).items():
            try:
                record = CompletionTimeRecord.from_dict(raw)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"⚠️ Пропущена поврежденная запись времени {habit_id}: {e}")
                continue
            # Сохранённый score всегда производный от среднего
            record.quick_win_score = quick_win_score(record.average_completion_time)
            records[habit_id] = record
        return records

    def _save_records(self, records: Dict[str, CompletionTimeRecord]) -> None:
        self.store.write_all(
            COMPLETION_TIMES,
            {habit_id: record.to_dict() for habit_id, record in records.items()}
        )

    def _record_completion_time(self, habit_id: str, time_ms: float) -> CompletionTimeRecord:
        if not is_valid_habit_id(habit_id) or not is_valid_completion_time(time_ms):
            raise ValidationError(
                "Invalid completion data: habit_id required and time_to_complete must be non-negative"
            )

        records = self.load_records()
        existing = records.get(habit_id)

        if existing is None:
            record = CompletionTimeRecord(
                habit_id=habit_id,
                average_completion_time=float(time_ms),
                completion_count=1,
                quick_win_score=quick_win_score(time_ms),
            )
        else:
            count = existing.completion_count + 1
            average = (existing.average_completion_time * existing.completion_count + time_ms) / count
            record = CompletionTimeRecord(
                habit_id=habit_id,
                average_completion_time=average,
                completion_count=count,
                quick_win_score=quick_win_score(average),
                last_updated=utc_timestamp(),
            )

        records[habit_id] = record
        self._save_records(records)
        logger.debug(
            f"⏱ {habit_id}: среднее {record.average_completion_time:.0f} мс "
            f"после {record.completion_count} выполнений"
        )
        return record

    # ===== ПУБЛИЧНЫЕ ОПЕРАЦИИ =====

    @service_operation("track completion time")
    def record_completion_time(self, habit_id: str, time_ms: float) -> CompletionTimeRecord:
        return self._record_completion_time(habit_id, time_ms)

    @service_operation("track completion time")
    def track_completion(self, completion: HabitCompletion) -> CompletionTimeRecord:
        return self._record_completion_time(completion.habit_id, completion.time_to_complete)

    @service_operation("get sequencing data")
    def get_record(self, habit_id: str) -> Optional[CompletionTimeRecord]:
        return self.load_records().get(habit_id)

    @service_operation("get average completion time")
    def get_average_completion_time(self, habit_id: str) -> Optional[float]:
        record = self.load_records().get(habit_id)
        return record.average_completion_time if record else None

    @service_operation("get sequencing data")
    def get_all_records(self) -> List[CompletionTimeRecord]:
        return list(self.load_records().values())

    @service_operation("update sequencing data")
    def update_record(self, record: CompletionTimeRecord) -> CompletionTimeRecord:
        """Вставка/замена записи; quick_win_score пересчитывается из среднего"""
        if not is_valid_habit_id(record.habit_id):
            raise ValidationError("Invalid sequencing data: habit_id required")
        if not is_valid_completion_time(record.average_completion_time):
            raise ValidationError("Invalid sequencing data: average_completion_time must be non-negative")
        if record.completion_count < 0:
            raise ValidationError("Invalid sequencing data: completion_count must be non-negative")

        normalized = CompletionTimeRecord(
            habit_id=record.habit_id,
            average_completion_time=float(record.average_completion_time),
            completion_count=int(record.completion_count),
            quick_win_score=quick_win_score(record.average_completion_time),
            last_updated=utc_timestamp(),
        )
        records = self.load_records()
        records[normalized.habit_id] = normalized
        self._save_records(records)
        return normalized
