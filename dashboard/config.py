#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Shutdown Sequencer - Dashboard Configuration
Конфигурация HTTP API с настройками для разных сред
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DashboardSettings(BaseSettings):
    """Настройки HTTP API"""

    model_config = SettingsConfigDict(env_prefix="DASHBOARD_", env_file=".env", extra="ignore")

    # ===== ОСНОВНЫЕ НАСТРОЙКИ =====

    APP_NAME: str = Field(
        default="Shutdown Sequencer API",
        description="Название приложения"
    )

    VERSION: str = Field(
        default="1.0.0",
        description="Версия API"
    )

    DEBUG: bool = Field(
        default=False,
        description="Режим отладки"
    )

    # ===== СЕТЕВЫЕ НАСТРОЙКИ =====

    HOST: str = Field(
        default="127.0.0.1",
        description="Хост для запуска API"
    )

    PORT: int = Field(
        default=8000,
        description="Порт для запуска API"
    )

    # ===== CORS НАСТРОЙКИ =====

    ALLOWED_ORIGINS: List[str] = Field(
        default=["*"],
        description="Разрешенные источники для CORS"
    )

    ALLOWED_METHODS: List[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        description="Разрешенные HTTP методы"
    )

    @field_validator('PORT')
    @classmethod
    def validate_port(cls, v):
        if not 1 <= v <= 65535:
            raise ValueError(f'Порт {v} вне допустимого диапазона (1-65535)')
        return v


settings = DashboardSettings()
