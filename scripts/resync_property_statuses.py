"""
Пересчёт статусов объектов по истории сделок.

Восстанавливает согласованность статусов SOLD/RENTED/ACTIVE после сбоев
синхронизации или одновременных изменений сделок по одному объекту.

Использование:
    python scripts/resync_property_statuses.py
    python scripts/resync_property_statuses.py --property-id <uuid> --property-id <uuid>
    python scripts/resync_property_statuses.py --preserve-manual
"""

import argparse
import sys
from pathlib import Path

# Добавляем корневую директорию проекта в путь
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from loguru import logger

from config.settings import config
from core.database import DatabaseManager
from core.exceptions import DatabaseConnectionError, PersistenceError
from core.logging_setup import setup_logging
from modules.crm.deals.deal_repository import DealRepository
from modules.crm.properties.property_repository import PropertyRepository
from modules.crm.properties.status_projector import PropertyStatusProjector
from modules.crm.schema_manager import SchemaManager


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Пересчёт статусов объектов по сделкам')
    parser.add_argument(
        '--property-id',
        action='append',
        default=[],
        help='ID объекта для пересчёта (можно указать несколько раз). По умолчанию - все объекты со сделками.'
    )
    parser.add_argument(
        '--preserve-manual',
        action='store_true',
        help='Не заменять на ACTIVE статусы DRAFT/UNDER_OFFER/RESERVED/ARCHIVED'
    )
    return parser.parse_args(argv)


def run(projector: PropertyStatusProjector, property_ids) -> dict:
    """Пересчёт указанных объектов или всех объектов со сделками"""
    if not property_ids:
        return projector.resync_all()

    result = {'synced': 0, 'errors': 0}
    for property_id in property_ids:
        try:
            projector.recompute(property_id)
            result['synced'] += 1
        except PersistenceError as e:
            logger.error(f"Не удалось пересчитать объект {property_id}: {e}")
            result['errors'] += 1
    return result


def main(argv=None) -> int:
    setup_logging(config.log_level, config.log_file)
    args = parse_args(argv)

    if not config.database:
        logger.error("❌ Конфигурация БД не задана в .env файле!")
        return 1

    db_manager = DatabaseManager(config.database)
    try:
        db_manager.connect()
    except DatabaseConnectionError as error:
        logger.error(f"❌ Ошибка подключения к БД: {error}")
        return 1

    try:
        if not SchemaManager(db_manager).ensure_tables():
            return 1
        projector = PropertyStatusProjector(
            DealRepository(db_manager),
            PropertyRepository(db_manager),
            preserve_manual_statuses=args.preserve_manual,
        )
        try:
            result = run(projector, args.property_id)
        except PersistenceError as error:
            logger.error(f"❌ Пересчёт прерван: {error}")
            return 1
        logger.info(f"✅ Обновлено объектов: {result['synced']}, ошибок: {result['errors']}")
        return 0 if result['errors'] == 0 else 2
    finally:
        db_manager.disconnect()


if __name__ == "__main__":
    sys.exit(main())
