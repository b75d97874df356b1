"""
Менеджер базы данных brokerage

Единое подключение к PostgreSQL (Singleton) и выполнение запросов.
"""

from typing import Any, Dict, List, Optional, Tuple

import psycopg2
from loguru import logger
from psycopg2.extras import RealDictCursor

from config.settings import DatabaseConfig
from core.exceptions import DatabaseConnectionError, DatabaseQueryError


class DatabaseManager:
    """
    Менеджер базы данных (Singleton)

    Управляет подключением и выполнением запросов. Каждый запрос
    коммитится отдельно: атомарность обеспечивается на уровне строки БД.
    """

    _instance: Optional['DatabaseManager'] = None
    _connection: Optional[psycopg2.extensions.connection] = None

    def __new__(cls, config: Optional[DatabaseConfig] = None):
        """
        Реализация Singleton паттерна

        Args:
            config: Конфигурация базы данных (используется только при первом создании)
        """
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._config = config
            cls._instance._connection = None
        return cls._instance

    def connect(self) -> None:
        """
        Установка подключения к базе данных

        Raises:
            DatabaseConnectionError: Если не удалось подключиться
        """
        if self._connection and not self._connection.closed:
            logger.debug("Подключение к БД уже установлено")
            return

        if not self._config:
            raise DatabaseConnectionError("Конфигурация БД не задана")

        try:
            self._connection = psycopg2.connect(
                host=self._config.host,
                database=self._config.database,
                user=self._config.user,
                password=self._config.password,
                port=self._config.port,
                cursor_factory=RealDictCursor
            )
            self._connection.autocommit = False
            logger.info(f"Успешное подключение к БД: {self._config.database}")
        except psycopg2.OperationalError as e:
            error_msg = f"Ошибка подключения к БД {self._config.database}: {e}"
            logger.error(error_msg)
            raise DatabaseConnectionError(error_msg) from e

    def disconnect(self) -> None:
        """Закрытие подключения к базе данных"""
        if self._connection and not self._connection.closed:
            self._connection.close()
            logger.info("Подключение к БД закрыто")
        self._connection = None

    def execute_query(
        self,
        query: str,
        params: Optional[Tuple] = None,
        cursor_factory=None
    ) -> List[Dict[str, Any]]:
        """
        Выполнение SELECT запроса или запроса с RETURNING

        Returns:
            Список строк в виде словарей

        Raises:
            DatabaseQueryError: Если произошла ошибка при выполнении запроса
        """
        if not self._connection or self._connection.closed:
            raise DatabaseConnectionError("Нет подключения к БД")

        try:
            if cursor_factory is None:
                cursor_factory = RealDictCursor

            with self._connection.cursor(cursor_factory=cursor_factory) as cursor:
                cursor.execute(query, params)
                query_upper = query.strip().upper()
                has_returning = 'RETURNING' in query_upper

                if query_upper.startswith('SELECT') or query_upper.startswith('WITH') or has_returning:
                    result = cursor.fetchall()
                    # SELECT тоже открывает транзакцию, закрываем её
                    self._connection.commit()
                    logger.debug(f"Выполнен запрос, возвращено {len(result)} строк")
                    return [dict(row) for row in result]

                self._connection.commit()
                logger.debug(f"Выполнен запрос: {query.strip()[:50]}...")
                return []
        except psycopg2.Error as e:
            self._connection.rollback()
            error_msg = f"Ошибка выполнения запроса к БД: {e}"
            logger.error(error_msg)
            raise DatabaseQueryError(error_msg) from e

    def execute_update(
        self,
        query: str,
        params: Optional[Tuple] = None
    ) -> int:
        """
        Выполнение INSERT/UPDATE/DELETE запроса

        Returns:
            Количество затронутых строк
        """
        if not self._connection or self._connection.closed:
            raise DatabaseConnectionError("Нет подключения к БД")

        try:
            with self._connection.cursor() as cursor:
                cursor.execute(query, params)
                affected_rows = cursor.rowcount
                self._connection.commit()
                logger.debug(f"Выполнен UPDATE запрос, затронуто строк: {affected_rows}")
                return affected_rows
        except psycopg2.Error as e:
            self._connection.rollback()
            error_msg = f"Ошибка выполнения UPDATE запроса к БД: {e}"
            logger.error(error_msg)
            raise DatabaseQueryError(error_msg) from e

    def is_connected(self) -> bool:
        """Проверка наличия активного подключения"""
        return self._connection is not None and not self._connection.closed

    @classmethod
    def get_instance(cls) -> Optional['DatabaseManager']:
        """Получение экземпляра Singleton"""
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Сброс Singleton (переподключение с другой конфигурацией)"""
        if cls._instance is not None:
            cls._instance.disconnect()
        cls._instance = None
