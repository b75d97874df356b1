"""
Модели данных лидов
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class LeadStage(Enum):
    """Этап лида в воронке"""
    NEW = "NEW"
    CONTACTED = "CONTACTED"
    VIEWED = "VIEWED"
    NEGOTIATING = "NEGOTIATING"
    CLOSED = "CLOSED"


# Порядок колонок канбан-доски
LEAD_STAGE_ORDER = (
    LeadStage.NEW,
    LeadStage.CONTACTED,
    LeadStage.VIEWED,
    LeadStage.NEGOTIATING,
    LeadStage.CLOSED,
)

LEAD_STAGE_LABELS = {
    LeadStage.NEW: "Новый клиент",
    LeadStage.CONTACTED: "Связались",
    LeadStage.VIEWED: "Был на просмотре",
    LeadStage.NEGOTIATING: "Переговоры",
    LeadStage.CLOSED: "Сделка закрыта",
}


def parse_stage(value: Any) -> LeadStage:
    """
    Приведение значения к LeadStage

    Raises:
        ValueError: если значение не является одним из пяти этапов
    """
    if isinstance(value, LeadStage):
        return value
    if isinstance(value, str):
        try:
            return LeadStage(value.strip().upper())
        except ValueError:
            pass
    raise ValueError(f"Unknown lead stage: {value!r}")


def stage_label(stage: Optional[LeadStage]) -> str:
    if stage is None:
        return "-"
    return LEAD_STAGE_LABELS.get(stage, stage.value)


@dataclass
class Lead:
    """Потенциальный клиент"""
    id: Optional[str]
    full_name: str
    stage: LeadStage = LeadStage.NEW
    phone: Optional[str] = None
    email: Optional[str] = None
    source: Optional[str] = None
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    preferences: Dict[str, Any] = field(default_factory=dict)
    note: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def with_stage(self, stage: LeadStage) -> 'Lead':
        """Копия лида с другим этапом (исходный объект не меняется)"""
        return replace(self, stage=stage)
