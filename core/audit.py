"""
Журнал аудита изменений (таблица audit_logs)
"""

import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from loguru import logger

from core.auth_context import AuthContext
from core.exceptions import DatabaseConnectionError, DatabaseQueryError


def _json_serializer(obj: Any) -> Any:
    """Сериализатор для JSON, обрабатывающий даты, Decimal и Enum"""
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return float(obj)
    if isinstance(obj, Enum):
        return obj.value
    raise TypeError(f"Type {type(obj)} not serializable")


class AuditLogger:
    """Запись одной строки аудита на каждую успешную мутацию"""

    def __init__(self, db_manager):
        self.db_manager = db_manager

    def log(
        self,
        ctx: AuthContext,
        action: str,
        entity: str,
        entity_id: Optional[Any],
        metadata: Optional[Dict[str, Any]] = None
    ) -> bool:
        """
        Запись события аудита

        Ошибка записи не отменяет уже выполненную операцию, поэтому
        она только логируется.

        Returns:
            True если запись сохранена
        """
        try:
            metadata_json = json.dumps(metadata or {}, default=_json_serializer)
            self.db_manager.execute_update(
                """
                INSERT INTO audit_logs (action, entity, entity_id, metadata, user_id, role)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                (
                    action,
                    entity,
                    str(entity_id) if entity_id is not None else None,
                    metadata_json,
                    ctx.user_id,
                    ctx.role,
                )
            )
            logger.debug(f"Аудит: {action} {entity}#{entity_id}")
            return True
        except (DatabaseQueryError, DatabaseConnectionError, TypeError) as e:
            logger.error(f"Не удалось записать аудит {action} для {entity}#{entity_id}: {e}")
            return False
