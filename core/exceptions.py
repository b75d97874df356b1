"""
Исключения приложения
"""

from typing import Optional


class DatabaseConnectionError(Exception):
    """Не удалось подключиться к базе данных"""


class DatabaseQueryError(Exception):
    """Ошибка выполнения SQL запроса"""


class PipelineError(Exception):
    """Базовая ошибка операций воронки (лиды, сделки, объекты)"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PipelineError):
    """Некорректные входные данные, отклоняются до обращения к БД"""

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.errors = errors or []


class NotFoundError(PipelineError):
    """Лид, сделка или объект не найдены"""

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class AuthorizationError(PipelineError):
    """Нет пользователя (UNAUTHORIZED) или недостаточно прав (FORBIDDEN)"""

    UNAUTHORIZED = 'UNAUTHORIZED'
    FORBIDDEN = 'FORBIDDEN'

    def __init__(self, code: str, message: Optional[str] = None):
        super().__init__(message or ('Unauthorized' if code == self.UNAUTHORIZED else 'Forbidden'))
        self.code = code


class PersistenceError(PipelineError):
    """Сбой чтения/записи в хранилище"""


class NavigationSignal(Exception):
    """
    Сигнал навигации UI (переход на другой экран).

    Не является ошибкой: сервисы пропускают его без изменений.
    """

    def __init__(self, target: str):
        super().__init__(target)
        self.target = target
