from fastapi import APIRouter, Depends

from models.sequencing import CompletionTimeRecord
from services import ServiceManager
from shared.models import APIResponse, CompletionTimeUpdateRequest, TrackCompletionRequest
from ..dependencies import get_services, to_response

router = APIRouter(prefix="/api/completion-times", tags=["completion-times"])


@router.get("/", response_model=APIResponse)
def get_all_completion_times(services: ServiceManager = Depends(get_services)):
    """
    Получить все записи времени выполнения
    """
    return to_response(services.time_tracking.get_all_records())


@router.post("/", response_model=APIResponse)
def track_completion_time(
    request: TrackCompletionRequest,
    services: ServiceManager = Depends(get_services)
):
    """
    Зафиксировать время выполнения привычки
    """
    result = services.time_tracking.record_completion_time(request.habit_id, request.time_to_complete)
    return to_response(result, "Время выполнения сохранено")


@router.get("/{habit_id}", response_model=APIResponse)
def get_completion_time(habit_id: str, services: ServiceManager = Depends(get_services)):
    """
    Запись привычки; data = null, если истории ещё нет
    """
    result = services.time_tracking.get_record(habit_id)
    message = "" if result.data is not None else "Нет данных о времени выполнения"
    return to_response(result, message)


@router.put("/{habit_id}", response_model=APIResponse)
def update_completion_time(
    habit_id: str,
    request: CompletionTimeUpdateRequest,
    services: ServiceManager = Depends(get_services)
):
    record = CompletionTimeRecord(
        habit_id=habit_id,
        average_completion_time=request.average_completion_time,
        completion_count=request.completion_count,
        quick_win_score=0.0,
    )
    return to_response(services.time_tracking.update_record(record), "Запись обновлена")
