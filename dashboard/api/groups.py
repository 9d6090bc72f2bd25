from fastapi import APIRouter, Depends

from services import ServiceManager
from shared.models import (
    APIResponse,
    AutoGroupRequest,
    CreateGroupRequest,
    GroupMembershipRequest,
    HabitSchema,
    UpdateGroupRequest,
)
from ..dependencies import get_services, to_response

router = APIRouter(prefix="/api/groups", tags=["groups"])


@router.get("/", response_model=APIResponse)
def get_groups(services: ServiceManager = Depends(get_services)):
    """
    Получить все группы привычек
    """
    return to_response(services.grouping.get_groups())


@router.post("/", response_model=APIResponse, status_code=201)
def create_group(request: CreateGroupRequest, services: ServiceManager = Depends(get_services)):
    result = services.grouping.create_group(request.name, request.habit_ids, request.group_type)
    return to_response(result, "Группа создана")


@router.post("/suggestions", response_model=APIResponse)
def suggest_groups(habit: HabitSchema, services: ServiceManager = Depends(get_services)):
    """
    Подходящие группы для привычки (уверенность > 0.3)
    """
    return to_response(services.grouping.suggest_groups_for_habit(habit.to_domain()))


@router.post("/auto", response_model=APIResponse)
def auto_group(request: AutoGroupRequest, services: ServiceManager = Depends(get_services)):
    """
    Автоматическая группировка привычек
    """
    result = services.grouping.auto_group_habits(request.to_domain(), persist=request.persist)
    return to_response(result)


@router.get("/{group_id}", response_model=APIResponse)
def get_group(group_id: str, services: ServiceManager = Depends(get_services)):
    return to_response(services.grouping.get_group(group_id))


@router.put("/{group_id}", response_model=APIResponse)
def update_group(group_id: str, request: UpdateGroupRequest, services: ServiceManager = Depends(get_services)):
    return to_response(services.grouping.update_group(request.to_domain(group_id)), "Группа обновлена")


@router.delete("/{group_id}", response_model=APIResponse)
def delete_group(group_id: str, services: ServiceManager = Depends(get_services)):
    return to_response(services.grouping.delete_group(group_id), "Группа удалена")


@router.post("/{group_id}/habits", response_model=APIResponse)
def add_habit(group_id: str, request: GroupMembershipRequest, services: ServiceManager = Depends(get_services)):
    return to_response(services.grouping.add_habit_to_group(group_id, request.habit_id))


@router.delete("/{group_id}/habits/{habit_id}", response_model=APIResponse)
def remove_habit(group_id: str, habit_id: str, services: ServiceManager = Depends(get_services)):
    return to_response(services.grouping.remove_habit_from_group(group_id, habit_id))
