#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Shutdown Sequencer - Configuration
Централизованная конфигурация с валидацией
"""

import os
import sys
import logging
from pathlib import Path
from typing import Optional, Dict, Any, List, Tuple
from dataclasses import dataclass
from enum import Enum


class Environment(Enum):
    """Среды выполнения"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class LogLevel(Enum):
    """Уровни логирования"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


DEFAULT_DIGITAL_KEYWORDS = (
    'phone', 'laptop', 'computer', 'digital', 'screen', 'device', 'notification'
)
DEFAULT_LEARNING_KEYWORDS = ('read', 'learn', 'study', 'book', 'journal', 'write')
# Словарь автогруппировки "Digital Shutdown"
DEFAULT_AUTO_GROUP_KEYWORDS = ('phone', 'laptop', 'computer', 'digital', 'screen', 'notification')


@dataclass
class StorageConfig:
    """Конфигурация JSON хранилища"""
    data_dir: Path
    backup_dir: Path
    completion_times_file: str = "completion_times.json"
    habit_groups_file: str = "habit_groups.json"

    @property
    def collection_files(self) -> Dict[str, str]:
        return {
            "completion_times": self.completion_times_file,
            "habit_groups": self.habit_groups_file,
        }


@dataclass
class LoggingConfig:
    """Конфигурация логирования"""
    level: LogLevel = LogLevel.INFO
    log_to_file: bool = True
    log_dir: Path = Path("logs")
    log_format: str = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
    max_bytes: int = 10_000_000
    backup_count: int = 5


@dataclass
class GroupingConfig:
    """Словари ключевых слов для контекстной группировки"""
    digital_keywords: Tuple[str, ...] = DEFAULT_DIGITAL_KEYWORDS
    learning_keywords: Tuple[str, ...] = DEFAULT_LEARNING_KEYWORDS
    auto_group_keywords: Tuple[str, ...] = DEFAULT_AUTO_GROUP_KEYWORDS
    digital_similarity: float = 0.8
    learning_similarity: float = 0.7
    digital_group_name: str = "Digital Shutdown"
    quick_tasks_group_name: str = "Quick Tasks"


def _parse_keywords(raw: Optional[str], default: Tuple[str, ...]) -> Tuple[str, ...]:
    if not raw:
        return default
    keywords = tuple(word.strip().lower() for word in raw.split(',') if word.strip())
    return keywords or default


class SequencerConfig:
    """Главный класс конфигурации"""

    def __init__(self, ensure_directories: bool = True):
        self.environment = Environment(os.getenv('ENVIRONMENT', 'development'))
        self._load_config()
        self._validate_config()
        if ensure_directories:
            self._ensure_directories()

    def _load_config(self):
        """Загрузка конфигурации из переменных окружения"""

        # Директории
        self.data_dir = Path(os.getenv('DATA_DIR', 'data'))
        self.backup_dir = Path(os.getenv('BACKUP_DIR', 'backups'))

        self.storage = StorageConfig(
            data_dir=self.data_dir,
            backup_dir=self.backup_dir,
            completion_times_file=os.getenv('COMPLETION_TIMES_FILE', 'completion_times.json'),
            habit_groups_file=os.getenv('HABIT_GROUPS_FILE', 'habit_groups.json'),
        )

        # Логирование
        self.logging = LoggingConfig(
            level=LogLevel(os.getenv('LOG_LEVEL', 'INFO').upper()),
            log_to_file=os.getenv('LOG_TO_FILE', 'true').lower() == 'true',
            log_dir=Path(os.getenv('LOG_DIR', 'logs')),
            log_format=os.getenv(
                'LOG_FORMAT',
                '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
            ),
        )

        # Группировка
        self.grouping = GroupingConfig(
            digital_keywords=_parse_keywords(os.getenv('DIGITAL_KEYWORDS'), DEFAULT_DIGITAL_KEYWORDS),
            learning_keywords=_parse_keywords(os.getenv('LEARNING_KEYWORDS'), DEFAULT_LEARNING_KEYWORDS),
            auto_group_keywords=_parse_keywords(os.getenv('AUTO_GROUP_KEYWORDS'), DEFAULT_AUTO_GROUP_KEYWORDS),
        )

    def _validate_config(self):
        """Валидация конфигурации"""
        errors = []

        files = self.storage.collection_files
        if len(set(files.values())) != len(files):
            errors.append("Файлы коллекций должны различаться")

        for name, value in files.items():
            if not value.endswith('.json'):
                errors.append(f"Файл коллекции {name} должен иметь расширение .json: {value}")

        if set(self.grouping.digital_keywords) & set(self.grouping.learning_keywords):
            logging.warning("⚠️ Словари digital и learning пересекаются - контекстные бонусы могут дублироваться")

        if errors:
            raise ValueError("Ошибки конфигурации:\n" + "\n".join(f"• {error}" for error in errors))

    def _ensure_directories(self):
        """Создание необходимых директорий"""
        directories = [self.data_dir, self.backup_dir]
        if self.logging.log_to_file:
            directories.append(self.logging.log_dir)

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    def get_logging_config(self) -> Dict[str, Any]:
        """Получение конфигурации логирования для logging.config.dictConfig"""
        handlers: List[str] = ['console']
        if self.logging.log_to_file:
            handlers.append('file')

        config: Dict[str, Any] = {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'default': {
                    'format': self.logging.log_format,
                    'datefmt': '%Y-%m-%d %H:%M:%S'
                }
            },
            'handlers': {
                'console': {
                    'class': 'logging.StreamHandler',
                    'level': self.logging.level.value,
                    'formatter': 'default',
                    'stream': sys.stdout
                }
            },
            'loggers': {
                '': {
                    'level': self.logging.level.value,
                    'handlers': handlers,
                    'propagate': False
                },
                'uvicorn.access': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                }
            }
        }

        if self.logging.log_to_file:
            config['handlers']['file'] = {
                'class': 'logging.handlers.RotatingFileHandler',
                'level': self.logging.level.value,
                'formatter': 'default',
                'filename': str(self.logging.log_dir / f"sequencer_{self.environment.value}.log"),
                'maxBytes': self.logging.max_bytes,
                'backupCount': self.logging.backup_count,
                'encoding': 'utf-8'
            }

        return config

    def is_development(self) -> bool:
        """Проверка режима разработки"""
        return self.environment == Environment.DEVELOPMENT

    def is_production(self) -> bool:
        """Проверка продакшн режима"""
        return self.environment == Environment.PRODUCTION

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация конфигурации в словарь"""
        return {
            'environment': self.environment.value,
            'storage': {
                'data_dir': str(self.storage.data_dir),
                'backup_dir': str(self.storage.backup_dir),
                'collections': self.storage.collection_files
            },
            'logging': {
                'level': self.logging.level.value,
                'log_to_file': self.logging.log_to_file,
                'log_dir': str(self.logging.log_dir)
            },
            'grouping': {
                'digital_keywords': list(self.grouping.digital_keywords),
                'learning_keywords': list(self.grouping.learning_keywords),
                'auto_group_keywords': list(self.grouping.auto_group_keywords)
            }
        }


_config: Optional[SequencerConfig] = None


def get_config() -> SequencerConfig:
    """Глобальный экземпляр конфигурации (создаётся при первом обращении)"""
    global _config
    if _config is None:
        _config = SequencerConfig()
    return _config


def reset_config() -> None:
    global _config
    _config = None


__all__ = [
    'SequencerConfig',
    'Environment',
    'LogLevel',
    'StorageConfig',
    'LoggingConfig',
    'GroupingConfig',
    'get_config',
    'reset_config'
]
