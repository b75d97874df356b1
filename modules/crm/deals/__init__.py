"""
Сделки и их жизненный цикл
"""

from modules.crm.deals.models import Deal, DealStatus, DealType
from modules.crm.deals.deal_repository import DealRepository
from modules.crm.deals.lifecycle_service import DealLifecycleService

__all__ = [
    'Deal',
    'DealStatus',
    'DealType',
    'DealRepository',
    'DealLifecycleService',
]
