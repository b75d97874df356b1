"""
Настройка логирования loguru для точек входа (GUI, скрипты)
"""

import sys
from typing import Optional

from loguru import logger

LOG_FORMAT = "{time:HH:mm:ss} | {level: <8} | {message}"


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Замена стандартного обработчика loguru на консольный и файловый"""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=LOG_FORMAT,
        colorize=True
    )
    if log_file:
        logger.add(
            log_file,
            level=level,
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}"
        )
