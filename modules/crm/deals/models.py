"""
Модели данных сделок
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional


class DealType(Enum):
    """Тип сделки"""
    SALE = "SALE"
    RENT = "RENT"


class DealStatus(Enum):
    """
    Статус сделки

    Граф переходов не ограничен: любой статус может сменить любой другой.
    """
    NEGOTIATING = "NEGOTIATING"
    SIGNED = "SIGNED"
    CLOSED_WIN = "CLOSED_WIN"
    CLOSED_LOSS = "CLOSED_LOSS"
    CANCELLED = "CANCELLED"


@dataclass
class Deal:
    """Сделка между лидом и объектом недвижимости"""
    id: Optional[str]
    lead_id: str
    property_id: str
    deal_type: DealType
    status: DealStatus = DealStatus.NEGOTIATING
    commission_amount: Optional[float] = None
    transaction_date: Optional[date] = None
    transaction_end_date: Optional[date] = None  # только для RENT
    co_agent_name: Optional[str] = None
    co_agent_contact: Optional[str] = None
    co_agent_online: Optional[str] = None
    source: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_win(self) -> bool:
        return self.status == DealStatus.CLOSED_WIN
