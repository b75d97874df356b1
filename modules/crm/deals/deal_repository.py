"""
Репозиторий для работы со сделками
"""

from typing import Any, Dict, List, Optional

from loguru import logger

from core.exceptions import DatabaseConnectionError, DatabaseQueryError, PersistenceError
from modules.crm.deals.models import Deal, DealStatus, DealType

DEAL_COLUMNS = """
    id, lead_id, property_id, deal_type, status, commission_amount,
    transaction_date, transaction_end_date, co_agent_name, co_agent_contact,
    co_agent_online, source, created_by, created_at, updated_at
"""

# Колонки, которые можно передавать в INSERT/UPDATE
WRITABLE_COLUMNS = frozenset({
    'lead_id', 'property_id', 'deal_type', 'status', 'commission_amount',
    'transaction_date', 'transaction_end_date', 'co_agent_name',
    'co_agent_contact', 'co_agent_online', 'source', 'created_by',
})

_DB_ERRORS = (DatabaseQueryError, DatabaseConnectionError)


def _db_value(value: Any) -> Any:
    if isinstance(value, (DealStatus, DealType)):
        return value.value
    return value


class DealRepository:
    """Репозиторий для работы со сделками"""

    def __init__(self, db_manager):
        self.db_manager = db_manager

    @staticmethod
    def _row_to_deal(row: Dict[str, Any]) -> Deal:
        return Deal(
            id=str(row['id']),
            lead_id=str(row['lead_id']),
            property_id=str(row['property_id']),
            deal_type=DealType(row['deal_type']),
            status=DealStatus(row['status']),
            commission_amount=(
                float(row['commission_amount']) if row.get('commission_amount') is not None else None
            ),
            transaction_date=row.get('transaction_date'),
            transaction_end_date=row.get('transaction_end_date'),
            co_agent_name=row.get('co_agent_name'),
            co_agent_contact=row.get('co_agent_contact'),
            co_agent_online=row.get('co_agent_online'),
            source=row.get('source'),
            created_by=row.get('created_by'),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at'),
        )

    @staticmethod
    def _check_columns(fields: Dict[str, Any]) -> None:
        unknown = set(fields) - WRITABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unknown deal columns: {sorted(unknown)}")

    def _select(self, where_sql: str, params: tuple, order_sql: str = "") -> List[Deal]:
        rows = self.db_manager.execute_query(
            f"SELECT {DEAL_COLUMNS} FROM deals WHERE {where_sql} {order_sql}",
            params
        )
        return [self._row_to_deal(row) for row in rows]

    def get_deal(self, deal_id: str) -> Optional[Deal]:
        """Получение сделки по ID"""
        try:
            deals = self._select("id = %s", (deal_id,))
        except _DB_ERRORS as e:
            logger.error(f"Ошибка при получении сделки {deal_id}: {e}")
            raise PersistenceError(f"Failed to load deal {deal_id}") from e
        return deals[0] if deals else None

    def list_by_lead(self, lead_id: str) -> List[Deal]:
        """Сделки лида, новые первыми"""
        try:
            return self._select("lead_id = %s", (lead_id,), "ORDER BY created_at DESC, id DESC")
        except _DB_ERRORS as e:
            logger.error(f"Ошибка при получении сделок лида {lead_id}: {e}")
            raise PersistenceError(f"Failed to load deals of lead {lead_id}") from e

    def list_by_property(self, property_id: str) -> List[Deal]:
        """Сделки по объекту, новые первыми"""
        try:
            return self._select("property_id = %s", (property_id,), "ORDER BY created_at DESC, id DESC")
        except _DB_ERRORS as e:
            logger.error(f"Ошибка при получении сделок объекта {property_id}: {e}")
            raise PersistenceError(f"Failed to load deals of property {property_id}") from e

    def find_latest_win(self, property_id: str) -> Optional[Deal]:
        """
        Последняя выигранная сделка по объекту

        Порядок: created_at по убыванию, при равенстве - id по убыванию.
        """
        try:
            deals = self._select(
                "property_id = %s AND status = %s",
                (property_id, DealStatus.CLOSED_WIN.value),
                "ORDER BY created_at DESC, id DESC LIMIT 1"
            )
        except _DB_ERRORS as e:
            logger.error(f"Ошибка при поиске выигранной сделки объекта {property_id}: {e}")
            raise PersistenceError(f"Failed to read winning deal of property {property_id}") from e
        return deals[0] if deals else None

    def list_property_ids(self) -> List[str]:
        """ID всех объектов, по которым есть хотя бы одна сделка"""
        try:
            rows = self.db_manager.execute_query(
                "SELECT DISTINCT property_id FROM deals ORDER BY property_id"
            )
        except _DB_ERRORS as e:
            logger.error(f"Ошибка при получении объектов со сделками: {e}")
            raise PersistenceError("Failed to list properties with deals") from e
        return [str(row['property_id']) for row in rows]

    def create_deal(self, fields: Dict[str, Any]) -> Deal:
        """Создание сделки, возвращает сохранённую запись"""
        self._check_columns(fields)
        columns = list(fields)
        placeholders = ", ".join(["%s"] * len(columns))
        query = f"""
            INSERT INTO deals ({", ".join(columns)})
            VALUES ({placeholders})
            RETURNING {DEAL_COLUMNS}
        """
        try:
            rows = self.db_manager.execute_query(query, tuple(_db_value(fields[c]) for c in columns))
        except _DB_ERRORS as e:
            logger.error(f"Ошибка при создании сделки: {e}")
            raise PersistenceError("Failed to create deal") from e
        if not rows:
            raise PersistenceError("Deal insert returned no row")
        deal = self._row_to_deal(rows[0])
        logger.info(f"Сделка успешно создана с ID={deal.id}")
        return deal

    def update_deal(self, deal_id: str, fields: Dict[str, Any]) -> Optional[Deal]:
        """
        Частичное обновление сделки

        Returns:
            Обновлённая сделка или None, если сделка не найдена
        """
        self._check_columns(fields)
        if not fields:
            return self.get_deal(deal_id)
        columns = list(fields)
        set_sql = ", ".join(f"{column} = %s" for column in columns)
        query = f"""
            UPDATE deals
            SET {set_sql}, updated_at = CURRENT_TIMESTAMP
            WHERE id = %s
            RETURNING {DEAL_COLUMNS}
        """
        params = tuple(_db_value(fields[c]) for c in columns) + (deal_id,)
        try:
            rows = self.db_manager.execute_query(query, params)
        except _DB_ERRORS as e:
            logger.error(f"Ошибка при обновлении сделки {deal_id}: {e}")
            raise PersistenceError(f"Failed to update deal {deal_id}") from e
        return self._row_to_deal(rows[0]) if rows else None

    def delete_deal(self, deal_id: str) -> bool:
        """Удаление сделки (без мягкого удаления)"""
        try:
            affected = self.db_manager.execute_update("DELETE FROM deals WHERE id = %s", (deal_id,))
        except _DB_ERRORS as e:
            logger.error(f"Ошибка при удалении сделки {deal_id}: {e}")
            raise PersistenceError(f"Failed to delete deal {deal_id}") from e
        return affected > 0
