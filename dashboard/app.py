#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Shutdown Sequencer - FastAPI Application
HTTP API для трекинга времени, групп и последовательности привычек
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from dashboard.api import completion_times, groups, sequence
from dashboard.config import DashboardSettings, settings as default_settings
from dashboard.dependencies import get_services
from services import ServiceManager, get_service_manager, set_service_manager

logger = logging.getLogger(__name__)


def create_app(settings: Optional[DashboardSettings] = None,
               service_manager: Optional[ServiceManager] = None) -> FastAPI:
    """Создание FastAPI приложения"""
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"🚀 Запуск {settings.APP_NAME} v{settings.VERSION}")
        if service_manager is not None:
            set_service_manager(service_manager)
        else:
            get_service_manager()
        app.state.started_at = time.time()
        yield
        logger.info("🛑 Остановка API")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=settings.ALLOWED_METHODS,
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.include_router(completion_times.router)
    app.include_router(groups.router)
    app.include_router(sequence.router)

    @app.get("/health", include_in_schema=False)
    def health(services: ServiceManager = Depends(get_services)):
        started_at = getattr(app.state, "started_at", time.time())
        return {
            **services.health_check(),
            "timestamp": datetime.now().isoformat(),
            "uptime_sec": round(time.time() - started_at, 2),
        }

    return app
