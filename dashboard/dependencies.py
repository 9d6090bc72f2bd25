#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Shutdown Sequencer - Dashboard Dependencies
Провайдеры сервисов и преобразование ServiceResult в HTTP ответы
"""

import logging
from typing import Any

from fastapi import HTTPException, status
from fastapi.encoders import jsonable_encoder

from models.result import ServiceResult
from services import ServiceManager, get_service_manager
from shared.models import APIResponse
from utils.exceptions import (
    ConflictError,
    InvalidSequenceError,
    NotFoundError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# ===== КОДЫ ОШИБОК =====

ERROR_STATUS = {
    ValidationError.error_type: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidSequenceError.error_type: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ConflictError.error_type: status.HTTP_409_CONFLICT,
    NotFoundError.error_type: status.HTTP_404_NOT_FOUND,
    StorageError.error_type: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_services() -> ServiceManager:
    """Менеджер сервисов (синглтон)"""
    return get_service_manager()


def serialize(data: Any) -> Any:
    if hasattr(data, "to_dict"):
        return data.to_dict()
    if isinstance(data, (list, tuple)):
        return [serialize(item) for item in data]
    return jsonable_encoder(data)


def to_response(result: ServiceResult, message: str = "") -> APIResponse:
    """Успех -> APIResponse, ошибка -> HTTPException с кодом по типу ошибки"""
    if result.success:
        return APIResponse(success=True, message=message, data=serialize(result.data))

    status_code = ERROR_STATUS.get(result.error_type, status.HTTP_500_INTERNAL_SERVER_ERROR)
    logger.debug(f"🚫 {status_code}: {result.error}")
    raise HTTPException(
        status_code=status_code,
        detail={"error": result.error, "error_type": result.error_type},
    )
