# services/__init__.py

"""
Модуль сервисов Shutdown Sequencer

Трекинг времени выполнения, группировка привычек и построение
оптимизированной последовательности.
"""

import logging
from typing import Optional

from config import SequencerConfig, get_config
from database.manager import COLLECTIONS, JsonFileStore, StoragePort

from .time_tracking import TimeTrackingService
from .grouping import GroupingService
from .sequencing_service import SequencingService

logger = logging.getLogger(__name__)


class ServiceManager:
    """
    Менеджер для управления всеми сервисами

    Обеспечивает:
    - Инициализацию сервисов в нужном порядке
    - Внедрение общего хранилища в сервисы
    """

    def __init__(self):
        self.store: Optional[StoragePort] = None
        self.time_tracking: Optional[TimeTrackingService] = None
        self.grouping: Optional[GroupingService] = None
        self.sequencing: Optional[SequencingService] = None
        self.initialized = False

    def initialize_services(self, config: Optional[SequencerConfig] = None,
                            store: Optional[StoragePort] = None) -> "ServiceManager":
        """Инициализация всех сервисов"""
        config = config or get_config()
        logger.info("🔧 Инициализация сервисов...")

        self.store = store or JsonFileStore.from_config(config)
        self.time_tracking = TimeTrackingService(self.store)
        self.grouping = GroupingService(self.store, config.grouping)
        self.sequencing = SequencingService(self.time_tracking, self.grouping)

        self.initialized = True
        logger.info("✅ Все сервисы инициализированы")
        return self

    def health_check(self) -> dict:
        """Проверка состояния хранилища"""
        health = {"status": "healthy", "collections": {}}

        if not self.initialized:
            return {"status": "not_initialized", "collections": {}}

        for collection in COLLECTIONS:
            try:
                health["collections"][collection] = len(self.store.read_all(collection))
            except Exception as e:
                logger.error(f"❌ Коллекция {collection} недоступна: {e}")
                health["collections"][collection] = None
                health["status"] = "degraded"

        return health


_service_manager: Optional[ServiceManager] = None


def get_service_manager() -> ServiceManager:
    """Глобальный менеджер сервисов"""
    global _service_manager
    if _service_manager is None:
        _service_manager = ServiceManager().initialize_services()
    return _service_manager


def set_service_manager(manager: Optional[ServiceManager]) -> None:
    global _service_manager
    _service_manager = manager


__all__ = [
    'ServiceManager',
    'TimeTrackingService',
    'GroupingService',
    'SequencingService',
    'get_service_manager',
    'set_service_manager'
]
