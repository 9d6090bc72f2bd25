import logging
import logging.config
from pathlib import Path
from typing import Optional

from config import SequencerConfig, get_config


def setup_logger(config: Optional[SequencerConfig] = None) -> logging.Logger:
    """Настройка корневого логгера: консоль + RotatingFileHandler по конфигурации"""
    config = config or get_config()
    if config.logging.log_to_file:
        Path(config.logging.log_dir).mkdir(exist_ok=True, parents=True)
    logging.config.dictConfig(config.get_logging_config())
    return logging.getLogger()
