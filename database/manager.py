# database/manager.py

import copy
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from utils.exceptions import StorageError

logger = logging.getLogger(__name__)

COMPLETION_TIMES = "completion_times"
HABIT_GROUPS = "habit_groups"
COLLECTIONS = (COMPLETION_TIMES, HABIT_GROUPS)


class StoragePort(ABC):
    """
    Хранилище записей по именованным коллекциям.

    Чтение отсутствующей или поврежденной коллекции возвращает пустой словарь,
    запись коллекции целиком атомарна с точки зрения вызывающего кода.
    """

    @abstractmethod
    def read_all(self, collection: str) -> Dict[str, dict]:
        ...

    @abstractmethod
    def write_all(self, collection: str, records: Dict[str, dict]) -> None:
        ...

    def get(self, collection: str, key: str) -> Optional[dict]:
        return self.read_all(collection).get(key)

    def set(self, collection: str, key: str, record: dict) -> None:
        records = self.read_all(collection)
        records[key] = record
        self.write_all(collection, records)

    def delete(self, collection: str, key: str) -> bool:
        records = self.read_all(collection)
        if key not in records:
            return False
        del records[key]
        self.write_all(collection, records)
        return True

    def export_data(self, collections: Iterable[str] = COLLECTIONS) -> Dict[str, Any]:
        """Экспорт всех коллекций"""
        export: Dict[str, Any] = {name: self.read_all(name) for name in collections}
        export['export_date'] = datetime.now().isoformat()
        return export


class InMemoryStore(StoragePort):
    """Хранилище в памяти (тесты, встраивание)"""

    def __init__(self, initial: Optional[Dict[str, Dict[str, dict]]] = None):
        self._collections: Dict[str, Dict[str, dict]] = copy.deepcopy(initial or {})

    def read_all(self, collection: str) -> Dict[str, dict]:
        return copy.deepcopy(self._collections.get(collection, {}))

    def write_all(self, collection: str, records: Dict[str, dict]) -> None:
        self._collections[collection] = copy.deepcopy(records)


class JsonFileStore(StoragePort):
    """Менеджер для работы с JSON файлами коллекций"""

    def __init__(self, data_dir: Path, backup_dir: Optional[Path] = None,
                 collection_files: Optional[Dict[str, str]] = None):
        self.data_dir = Path(data_dir)
        self.backup_dir = Path(backup_dir) if backup_dir else self.data_dir / "backups"
        self.collection_files = collection_files or {name: f"{name}.json" for name in COLLECTIONS}

        # Создаем директорию если её нет
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_config(cls, config) -> "JsonFileStore":
        return cls(
            data_dir=config.storage.data_dir,
            backup_dir=config.storage.backup_dir,
            collection_files=config.storage.collection_files,
        )

    def _path(self, collection: str) -> Path:
        file_name = self.collection_files.get(collection)
        if file_name is None:
            raise StorageError(f"Unknown collection: {collection}")
        return self.data_dir / file_name

    def read_all(self, collection: str) -> Dict[str, dict]:
        """Загрузка коллекции из JSON файла"""
        path = self._path(collection)
        if not path.exists():
            return {}

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"❌ Ошибка парсинга JSON {path}: {e}")
            self._move_corrupted(path)
            return {}
        except OSError as e:
            logger.error(f"❌ Ошибка чтения {path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"⚠️ Неверный формат файла {path}, коллекция считается пустой")
            return {}

        return {key: value for key, value in data.items() if isinstance(value, dict)}

    def write_all(self, collection: str, records: Dict[str, dict]) -> None:
        """Сохранение коллекции: временный файл + os.replace"""
        path = self._path(collection)
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}_", suffix=".tmp", dir=self.data_dir)
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(records, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, path)
            logger.debug(f"💾 Коллекция {collection} сохранена: {len(records)} записей")
        except (OSError, TypeError, ValueError) as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Failed to save to storage: {e}") from e

    def _move_corrupted(self, path: Path) -> None:
        """Перенос поврежденного файла в директорию бэкапов"""
        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            backup_name = f"corrupted_{path.stem}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"
            backup_path = self.backup_dir / backup_name
            path.replace(backup_path)
            logger.warning(f"🔄 Поврежденный файл перемещен в {backup_path}")
        except OSError as e:
            logger.error(f"❌ Ошибка создания бэкапа: {e}")
