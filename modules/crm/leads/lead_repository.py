"""
Репозиторий для работы с лидами
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from loguru import logger

from core.exceptions import DatabaseConnectionError, DatabaseQueryError, PersistenceError
from modules.crm.leads.models import Lead, LeadStage

LEAD_COLUMNS = """
    id, full_name, phone, email, source, stage, budget_min, budget_max,
    preferences, note, created_by, created_at, updated_at
"""


class LeadRepository:
    """Репозиторий для работы с лидами"""

    def __init__(self, db_manager):
        self.db_manager = db_manager

    @staticmethod
    def _parse_preferences(value: Any) -> Dict[str, Any]:
        """Парсинг preferences из БД (может быть строкой JSON или уже словарем)"""
        if not value:
            return {}
        if isinstance(value, dict):
            return value
        if isinstance(value, str):
            try:
                return json.loads(value)
            except (json.JSONDecodeError, TypeError):
                logger.warning(f"Не удалось распарсить preferences как JSON: {value}")
        return {}

    def _row_to_lead(self, row: Dict[str, Any]) -> Lead:
        return Lead(
            id=str(row['id']),
            full_name=row['full_name'],
            stage=LeadStage(row['stage']),
            phone=row.get('phone'),
            email=row.get('email'),
            source=row.get('source'),
            budget_min=float(row['budget_min']) if row.get('budget_min') is not None else None,
            budget_max=float(row['budget_max']) if row.get('budget_max') is not None else None,
            preferences=self._parse_preferences(row.get('preferences')),
            note=row.get('note'),
            created_by=row.get('created_by'),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at'),
        )

    def get_lead(self, lead_id: str) -> Optional[Lead]:
        """Получение лида по ID"""
        try:
            rows = self.db_manager.execute_query(
                f"SELECT {LEAD_COLUMNS} FROM leads WHERE id = %s",
                (lead_id,)
            )
        except (DatabaseQueryError, DatabaseConnectionError) as e:
            logger.error(f"Ошибка при получении лида {lead_id}: {e}")
            raise PersistenceError(f"Failed to load lead {lead_id}") from e
        return self._row_to_lead(rows[0]) if rows else None

    def list_leads(self, stage: Optional[LeadStage] = None) -> List[Lead]:
        """Получение лидов для канбан-доски (новые изменения первыми)"""
        if stage is not None:
            query = f"SELECT {LEAD_COLUMNS} FROM leads WHERE stage = %s ORDER BY updated_at DESC, id"
            params = (stage.value,)
        else:
            query = f"SELECT {LEAD_COLUMNS} FROM leads ORDER BY updated_at DESC, id"
            params = None

        try:
            rows = self.db_manager.execute_query(query, params)
        except (DatabaseQueryError, DatabaseConnectionError) as e:
            logger.error(f"Ошибка при получении лидов: {e}")
            raise PersistenceError("Failed to load leads") from e

        leads = []
        for row in rows:
            try:
                leads.append(self._row_to_lead(row))
            except (KeyError, ValueError) as e:
                logger.error(f"Ошибка при преобразовании строки в Lead: {e}, row={row}")
        return leads

    def update_stage(self, lead_id: str, stage: LeadStage) -> Optional[datetime]:
        """
        Обновление этапа лида

        Returns:
            Новое значение updated_at или None, если лид не найден
        """
        try:
            rows = self.db_manager.execute_query(
                """
                UPDATE leads
                SET stage = %s, updated_at = CURRENT_TIMESTAMP
                WHERE id = %s
                RETURNING updated_at
                """,
                (stage.value, lead_id)
            )
        except (DatabaseQueryError, DatabaseConnectionError) as e:
            logger.error(f"Ошибка при обновлении этапа лида {lead_id}: {e}")
            raise PersistenceError(f"Failed to update stage of lead {lead_id}") from e
        return rows[0].get('updated_at') if rows else None
