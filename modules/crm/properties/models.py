"""
Модели данных объектов недвижимости (только поля, нужные воронке)
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class PropertyStatus(Enum):
    """Коммерческий статус объекта"""
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    UNDER_OFFER = "UNDER_OFFER"
    RESERVED = "RESERVED"
    SOLD = "SOLD"
    RENTED = "RENTED"
    ARCHIVED = "ARCHIVED"


# Статусы, которые выставляются вручную в других разделах
MANUAL_STATUSES = frozenset({
    PropertyStatus.DRAFT,
    PropertyStatus.UNDER_OFFER,
    PropertyStatus.RESERVED,
    PropertyStatus.ARCHIVED,
})

# Единственные статусы, которые пишет проектор
PROJECTED_STATUSES = frozenset({
    PropertyStatus.ACTIVE,
    PropertyStatus.SOLD,
    PropertyStatus.RENTED,
})


@dataclass
class Property:
    """Объект недвижимости"""
    id: Optional[str]
    title: str
    status: PropertyStatus = PropertyStatus.DRAFT
    updated_at: Optional[datetime] = None
