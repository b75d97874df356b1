"""
Репозиторий объектов недвижимости (статус для воронки)
"""

from typing import Optional

from loguru import logger

from core.exceptions import DatabaseConnectionError, DatabaseQueryError, PersistenceError
from modules.crm.properties.models import Property, PropertyStatus


class PropertyRepository:
    """Чтение объекта и запись колонки status"""

    def __init__(self, db_manager):
        self.db_manager = db_manager

    def get_property(self, property_id: str) -> Optional[Property]:
        """Получение объекта по ID"""
        try:
            rows = self.db_manager.execute_query(
                "SELECT id, title, status, updated_at FROM properties WHERE id = %s",
                (property_id,)
            )
        except (DatabaseQueryError, DatabaseConnectionError) as e:
            logger.error(f"Ошибка при получении объекта {property_id}: {e}")
            raise PersistenceError(f"Failed to load property {property_id}") from e
        if not rows:
            return None
        row = rows[0]
        return Property(
            id=str(row['id']),
            title=row['title'],
            status=PropertyStatus(row['status']),
            updated_at=row.get('updated_at'),
        )

    def set_status(
        self,
        property_id: str,
        status: PropertyStatus,
        unless_in: Optional[frozenset] = None
    ) -> bool:
        """
        Запись статуса объекта

        Args:
            unless_in: не трогать объект, если его текущий статус входит в набор

        Returns:
            True если строка обновлена
        """
        query = """
            UPDATE properties
            SET status = %s, updated_at = CURRENT_TIMESTAMP
            WHERE id = %s
        """
        params: tuple = (status.value, property_id)
        if unless_in:
            query += " AND status NOT IN %s"
            params += (tuple(s.value for s in unless_in),)
        try:
            affected = self.db_manager.execute_update(query, params)
        except (DatabaseQueryError, DatabaseConnectionError) as e:
            logger.error(f"Ошибка при записи статуса объекта {property_id}: {e}")
            raise PersistenceError(f"Failed to write status of property {property_id}") from e
        return affected > 0
