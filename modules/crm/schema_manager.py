"""
Создание таблиц воронки лидов и сделок в БД
"""

from loguru import logger

from core.exceptions import DatabaseConnectionError, DatabaseQueryError

TABLES = (
    (
        "leads",
        """
        CREATE TABLE IF NOT EXISTS leads (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            full_name VARCHAR(255) NOT NULL,
            phone VARCHAR(64),
            email VARCHAR(255),
            source VARCHAR(32),
            stage VARCHAR(20) NOT NULL DEFAULT 'NEW'
                CHECK (stage IN ('NEW', 'CONTACTED', 'VIEWED', 'NEGOTIATING', 'CLOSED')),
            budget_min DECIMAL(15, 2),
            budget_max DECIMAL(15, 2),
            preferences JSONB,
            note TEXT,
            created_by VARCHAR(64),
            created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
        )
        """,
    ),
    (
        "properties",
        """
        CREATE TABLE IF NOT EXISTS properties (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            title VARCHAR(255) NOT NULL,
            status VARCHAR(20) NOT NULL DEFAULT 'DRAFT'
                CHECK (status IN ('DRAFT', 'ACTIVE', 'UNDER_OFFER', 'RESERVED',
                                  'SOLD', 'RENTED', 'ARCHIVED')),
            created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
        )
        """,
    ),
    (
        "deals",
        """
        CREATE TABLE IF NOT EXISTS deals (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            lead_id UUID NOT NULL REFERENCES leads(id) ON DELETE CASCADE,
            property_id UUID NOT NULL REFERENCES properties(id),
            deal_type VARCHAR(10) NOT NULL CHECK (deal_type IN ('SALE', 'RENT')),
            status VARCHAR(20) NOT NULL DEFAULT 'NEGOTIATING'
                CHECK (status IN ('NEGOTIATING', 'SIGNED', 'CLOSED_WIN',
                                  'CLOSED_LOSS', 'CANCELLED')),
            commission_amount DECIMAL(15, 2),
            transaction_date DATE,
            transaction_end_date DATE,
            co_agent_name VARCHAR(255),
            co_agent_contact VARCHAR(255),
            co_agent_online VARCHAR(255),
            source VARCHAR(64),
            created_by VARCHAR(64),
            created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
        )
        """,
    ),
    (
        "audit_logs",
        """
        CREATE TABLE IF NOT EXISTS audit_logs (
            id BIGSERIAL PRIMARY KEY,
            action VARCHAR(64) NOT NULL,
            entity VARCHAR(64) NOT NULL,
            entity_id VARCHAR(64),
            metadata JSONB,
            user_id VARCHAR(64),
            role VARCHAR(32),
            created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
        )
        """,
    ),
)

INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_leads_stage ON leads(stage)",
    "CREATE INDEX IF NOT EXISTS idx_deals_lead_id ON deals(lead_id)",
    # Чтение проектора: последняя выигранная сделка по объекту
    "CREATE INDEX IF NOT EXISTS idx_deals_property_status_created "
    "ON deals(property_id, status, created_at DESC, id DESC)",
    "CREATE INDEX IF NOT EXISTS idx_audit_logs_entity ON audit_logs(entity, entity_id)",
)


class SchemaManager:
    """Проверка и создание таблиц воронки"""

    def __init__(self, db_manager):
        self.db_manager = db_manager

    def ensure_tables(self) -> bool:
        """
        Создание таблиц и индексов, если их нет

        Returns:
            True если схема готова
        """
        if not self.db_manager.is_connected():
            logger.error("Нет подключения к базе данных для создания таблиц воронки")
            return False

        logger.info("Проверка и создание таблиц воронки лидов и сделок...")
        try:
            # gen_random_uuid() встроена начиная с PostgreSQL 13
            self.db_manager.execute_update("CREATE EXTENSION IF NOT EXISTS pgcrypto")
            for table_name, ddl in TABLES:
                self.db_manager.execute_update(ddl)
                logger.debug(f"Таблица {table_name} проверена/создана")
        except (DatabaseQueryError, DatabaseConnectionError) as e:
            logger.error(f"Ошибка при создании таблиц воронки: {e}", exc_info=True)
            return False

        for index_ddl in INDEXES:
            try:
                self.db_manager.execute_update(index_ddl)
            except DatabaseQueryError as e:
                logger.warning(f"Ошибка при создании индекса: {e}")

        logger.info("Таблицы воронки успешно проверены/созданы")
        return True
