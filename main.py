#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Shutdown Sequencer - CLI
Запуск HTTP API и работа с последовательностью привычек из командной строки
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from config import get_config
from models.habit import Habit
from models.result import ServiceResult
from models.sequencing import SequencingPreferences
from services import ServiceManager
from utils.logger import setup_logger

logger = logging.getLogger(__name__)


def load_habits(path: Path) -> List[Habit]:
    """Загрузка списка привычек из JSON файла ([{id, name, type, is_active}])"""
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get('habits', [])
    return [Habit.from_dict(item) for item in data]


def _print_result(result: ServiceResult) -> int:
    payload = result.to_dict()
    if result.success:
        payload['data'] = _to_jsonable(result.data)
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0 if result.success else 1


def _to_jsonable(data):
    if hasattr(data, 'to_dict'):
        return data.to_dict()
    if isinstance(data, list):
        return [_to_jsonable(item) for item in data]
    return data


def cmd_serve(args, services: ServiceManager) -> int:
    import uvicorn
    from dashboard.app import create_app
    from dashboard.config import settings

    app = create_app(settings, services)
    uvicorn.run(app, host=args.host or settings.HOST, port=args.port or settings.PORT, log_config=None)
    return 0


def cmd_sequence(args, services: ServiceManager) -> int:
    habits = load_habits(Path(args.habits))
    preferences = SequencingPreferences(
        manual_order=args.manual_order.split(',') if args.manual_order else None,
        disabled_grouping=args.no_grouping,
        quick_wins_first=args.quick_wins_first,
        override_algorithm=bool(args.manual_order),
    )
    if args.momentum:
        result = services.sequencing.reorder_by_momentum(habits)
    else:
        result = services.sequencing.generate_with_preferences(habits, preferences)

    if args.recommend and result.success:
        _print_result(result)
        return _print_result(services.sequencing.get_sequence_recommendations(result.data))
    return _print_result(result)


def cmd_track(args, services: ServiceManager) -> int:
    return _print_result(services.time_tracking.record_completion_time(args.habit_id, args.ms))


def cmd_groups(args, services: ServiceManager) -> int:
    return _print_result(services.grouping.get_groups())


def cmd_auto_group(args, services: ServiceManager) -> int:
    habits = load_habits(Path(args.habits))
    return _print_result(services.grouping.auto_group_habits(habits, persist=args.save))


def cmd_export(args, services: ServiceManager) -> int:
    export = services.store.export_data()
    print(json.dumps(export, ensure_ascii=False, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Shutdown Sequencer - порядок выполнения привычек')
    parser.add_argument('--debug', action='store_true', help='Подробное логирование')
    commands = parser.add_subparsers(dest='command', required=True)

    serve = commands.add_parser('serve', help='Запуск HTTP API')
    serve.add_argument('--host', help='Хост (по умолчанию из настроек)')
    serve.add_argument('--port', type=int, help='Порт (по умолчанию из настроек)')
    serve.set_defaults(handler=cmd_serve)

    sequence = commands.add_parser('sequence', help='Оптимизированный порядок привычек')
    sequence.add_argument('habits', help='JSON файл со списком привычек')
    sequence.add_argument('--manual-order', help='Ручной порядок: id через запятую')
    sequence.add_argument('--quick-wins-first', action='store_true', help='Сортировать только по momentum')
    sequence.add_argument('--no-grouping', action='store_true', help='Отключить группы')
    sequence.add_argument('--momentum', action='store_true', help='Акцент на momentum в обоснованиях')
    sequence.add_argument('--recommend', action='store_true', help='Показать рекомендации')
    sequence.set_defaults(handler=cmd_sequence)

    track = commands.add_parser('track', help='Записать время выполнения')
    track.add_argument('habit_id')
    track.add_argument('ms', type=float, help='Время выполнения в миллисекундах')
    track.set_defaults(handler=cmd_track)

    groups = commands.add_parser('groups', help='Список групп')
    groups.set_defaults(handler=cmd_groups)

    auto = commands.add_parser('auto-group', help='Автоматическая группировка')
    auto.add_argument('habits', help='JSON файл со списком привычек')
    auto.add_argument('--save', action='store_true', help='Сохранить созданные группы')
    auto.set_defaults(handler=cmd_auto_group)

    export = commands.add_parser('export', help='Экспорт всех коллекций в JSON')
    export.set_defaults(handler=cmd_export)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Главная функция запуска"""
    args = build_parser().parse_args(argv)
    config = get_config()
    setup_logger(config)
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    services = ServiceManager().initialize_services(config)
    return args.handler(args, services)


if __name__ == "__main__":
    sys.exit(main())
