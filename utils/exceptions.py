# utils/exceptions.py

from typing import List, Optional


class SequencerError(Exception):
    """Базовая ошибка подсистемы последовательностей"""

    error_type = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SequencerError):
    """Некорректные входные данные (пустое имя, отрицательное время и т.д.)"""

    error_type = "validation_error"


class ConflictError(SequencerError):
    """Привычка уже состоит в другой группе"""

    error_type = "conflict_error"

    def __init__(self, message: str, habit_id: Optional[str] = None, group_name: Optional[str] = None):
        super().__init__(message)
        self.habit_id = habit_id
        self.group_name = group_name


class NotFoundError(SequencerError):
    """Группа или запись не найдена"""

    error_type = "not_found_error"


class InvalidSequenceError(SequencerError):
    """Последовательность не прошла проверку"""

    error_type = "invalid_sequence_error"

    INVALID_HABIT_ID = "invalid_habit_id"
    DUPLICATE_POSITION = "duplicate_position"
    MISSING_HABITS = "missing_habits"
    NON_SEQUENTIAL_POSITIONS = "non_sequential_positions"

    def __init__(self, message: str, reason: str, missing_habits: Optional[List[str]] = None):
        super().__init__(message)
        self.reason = reason
        self.missing_habits = missing_habits or []


class StorageError(SequencerError):
    """Сбой хранилища (квота, права доступа, поврежденный файл)"""

    error_type = "storage_error"
