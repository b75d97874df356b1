"""
Настройки приложения

Значения берутся из переменных окружения и файла .env в корне проекта.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / '.env')


@dataclass
class DatabaseConfig:
    """Параметры подключения к PostgreSQL"""
    host: str
    database: str
    user: str
    password: str
    port: int = 5432


@dataclass
class UIConfig:
    """Настройки интерфейса"""
    font_family: str = 'Arial'
    font_size: int = 14


@dataclass
class AppConfig:
    """Общая конфигурация приложения"""
    database: Optional[DatabaseConfig] = None
    ui: UIConfig = field(default_factory=UIConfig)
    log_level: str = 'INFO'
    log_file: Optional[str] = None
    staff_roles: List[str] = field(default_factory=lambda: ['ADMIN', 'AGENT'])
    # Пользователь сессии GUI (выдаётся внешней аутентификацией)
    session_user_id: Optional[str] = None
    session_role: Optional[str] = None


def _load_database_config() -> Optional[DatabaseConfig]:
    """Сборка конфигурации БД; None, если имя базы не задано"""
    database = os.getenv('BROKERAGE_DB_NAME')
    if not database:
        return None
    return DatabaseConfig(
        host=os.getenv('BROKERAGE_DB_HOST', 'localhost'),
        database=database,
        user=os.getenv('BROKERAGE_DB_USER', 'postgres'),
        password=os.getenv('BROKERAGE_DB_PASSWORD', ''),
        port=int(os.getenv('BROKERAGE_DB_PORT', '5432')),
    )


def _parse_roles(value: str) -> List[str]:
    return [role.strip().upper() for role in value.split(',') if role.strip()]


def load_config() -> AppConfig:
    """Чтение конфигурации из окружения"""
    return AppConfig(
        database=_load_database_config(),
        ui=UIConfig(
            font_family=os.getenv('BROKERAGE_UI_FONT_FAMILY', 'Arial'),
            font_size=int(os.getenv('BROKERAGE_UI_FONT_SIZE', '14')),
        ),
        log_level=os.getenv('BROKERAGE_LOG_LEVEL', 'INFO').upper(),
        log_file=os.getenv('BROKERAGE_LOG_FILE') or None,
        staff_roles=_parse_roles(os.getenv('BROKERAGE_STAFF_ROLES', 'ADMIN,AGENT')),
        session_user_id=os.getenv('BROKERAGE_USER_ID') or None,
        session_role=(os.getenv('BROKERAGE_USER_ROLE') or 'AGENT').upper(),
    )


config = load_config()
