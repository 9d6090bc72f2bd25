"""Общие фикстуры тестов"""
import pytest

from config import GroupingConfig
from database.manager import InMemoryStore, JsonFileStore
from models.habit import Habit
from models.sequencing import CompletionTimeRecord
from services.grouping import GroupingService
from services.sequencing_service import SequencingService
from services.time_tracking import TimeTrackingService, quick_win_score


def make_record(habit_id: str, average_ms: float, count: int) -> CompletionTimeRecord:
    return CompletionTimeRecord(
        habit_id=habit_id,
        average_completion_time=average_ms,
        completion_count=count,
        quick_win_score=quick_win_score(average_ms),
    )


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def file_store(tmp_path):
    return JsonFileStore(data_dir=tmp_path / "data", backup_dir=tmp_path / "backups")


@pytest.fixture
def time_tracking(store):
    return TimeTrackingService(store)


@pytest.fixture
def grouping(store):
    return GroupingService(store, GroupingConfig())


@pytest.fixture
def sequencing(time_tracking, grouping):
    return SequencingService(time_tracking, grouping)


@pytest.fixture
def habits():
    return [
        Habit(id="habit-1", name="Review tomorrow's calendar", type="boolean"),
        Habit(id="habit-2", name="Close laptop", type="boolean"),
        Habit(id="habit-3", name="Put phone on charger", type="boolean"),
        Habit(id="habit-4", name="Read 10 pages", type="numeric"),
    ]
