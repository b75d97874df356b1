"""
Результат операции для UI: {success, message, data}
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class ActionResult:
    success: bool
    message: Optional[str] = None
    data: Any = None

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None) -> 'ActionResult':
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, message: str) -> 'ActionResult':
        return cls(success=False, message=message)
