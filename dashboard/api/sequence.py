from fastapi import APIRouter, Depends

from services import ServiceManager
from shared.models import (
    APIResponse,
    HabitListRequest,
    RecommendationsRequest,
    SequenceRequest,
    ValidateSequenceRequest,
)
from ..dependencies import get_services, to_response

router = APIRouter(prefix="/api/sequence", tags=["sequence"])


@router.post("/", response_model=APIResponse)
def generate_sequence(request: SequenceRequest, services: ServiceManager = Depends(get_services)):
    """
    Оптимизированная последовательность (с учётом настроек, если переданы)
    """
    habits = request.to_domain()
    if request.preferences is None:
        result = services.sequencing.generate_optimized_sequence(habits)
    else:
        result = services.sequencing.generate_with_preferences(habits, request.preferences.to_domain())
    return to_response(result)


@router.post("/momentum", response_model=APIResponse)
def reorder_by_momentum(request: HabitListRequest, services: ServiceManager = Depends(get_services)):
    return to_response(services.sequencing.reorder_by_momentum(request.to_domain()))


@router.post("/validate", response_model=APIResponse)
def validate_sequence(request: ValidateSequenceRequest, services: ServiceManager = Depends(get_services)):
    sequence = [item.to_domain() for item in request.sequence]
    result = services.sequencing.validate_sequence(sequence, request.to_domain())
    return to_response(result, "Последовательность корректна")


@router.post("/recommendations", response_model=APIResponse)
def get_recommendations(request: RecommendationsRequest, services: ServiceManager = Depends(get_services)):
    """
    Рекомендации по улучшению последовательности (по убыванию уверенности)
    """
    sequence = [item.to_domain() for item in request.sequence]
    return to_response(services.sequencing.get_sequence_recommendations(sequence))
