import functools
import logging

from models.result import ServiceResult
from utils.exceptions import SequencerError, StorageError


def service_operation(action: str):
    """
    Граница публичного API: исключения превращаются в ServiceResult.

    Ожидаемые ошибки (валидация, конфликт, не найдено) логируются как warning,
    сбои хранилища и неожиданные ошибки - как error.
    """
    def decorator(func):
        logger = logging.getLogger(func.__module__)

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return ServiceResult.ok(func(*args, **kwargs))
            except StorageError as e:
                logger.error(f"💾 {action}: ошибка хранилища: {e.message}")
                return ServiceResult.fail(f"Failed to {action}: {e.message}", e.error_type)
            except SequencerError as e:
                logger.warning(f"⚠️ {action}: {e.message}")
                return ServiceResult.fail(e.message, e.error_type)
            except Exception as e:
                logger.exception(f"❌ {action}: непредвиденная ошибка")
                return ServiceResult.fail(f"Failed to {action}: {e}", "error")
        return wrapper
    return decorator
