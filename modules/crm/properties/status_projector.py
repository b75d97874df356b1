"""
Проектор статуса объекта по истории сделок

Статус объекта выводится из его сделок:
- есть выигранная сделка (CLOSED_WIN) - SOLD для SALE или RENTED для RENT
  по самой поздней такой сделке;
- выигранных сделок нет - ACTIVE.

Проектор пишет только ACTIVE, SOLD и RENTED. Пересчёт идемпотентен,
его можно вызывать повторно.
"""

from typing import Dict, Iterable, Optional

from loguru import logger

from core.exceptions import PersistenceError
from modules.crm.deals.models import Deal, DealStatus, DealType
from modules.crm.properties.models import MANUAL_STATUSES, PropertyStatus


def pick_latest_win(deals: Iterable[Deal]) -> Optional[Deal]:
    """Самая поздняя выигранная сделка (created_at, затем id по убыванию)"""
    wins = [deal for deal in deals if deal.status == DealStatus.CLOSED_WIN]
    if not wins:
        return None
    return max(wins, key=lambda deal: (deal.created_at is not None, deal.created_at, deal.id or ''))


def status_for_deal_type(deal_type: DealType) -> PropertyStatus:
    return PropertyStatus.SOLD if deal_type == DealType.SALE else PropertyStatus.RENTED


def derive_property_status(latest_win: Optional[Deal]) -> PropertyStatus:
    """Статус объекта по последней выигранной сделке"""
    if latest_win is None:
        return PropertyStatus.ACTIVE
    return status_for_deal_type(latest_win.deal_type)


class PropertyStatusProjector:
    """Пересчёт и запись статуса объекта"""

    def __init__(self, deal_repo, property_repo, preserve_manual_statuses: bool = False):
        """
        Args:
            preserve_manual_statuses: при откате на ACTIVE не трогать
                DRAFT/UNDER_OFFER/RESERVED/ARCHIVED
        """
        self.deal_repo = deal_repo
        self.property_repo = property_repo
        self.preserve_manual_statuses = preserve_manual_statuses

    def recompute(self, property_id: str) -> PropertyStatus:
        """
        Полный пересчёт статуса объекта

        Raises:
            PersistenceError: при ошибке чтения (ничего не записано) или записи
        """
        latest_win = self.deal_repo.find_latest_win(property_id)
        status = derive_property_status(latest_win)

        unless_in = None
        if status == PropertyStatus.ACTIVE and self.preserve_manual_statuses:
            unless_in = MANUAL_STATUSES

        updated = self.property_repo.set_status(property_id, status, unless_in=unless_in)
        logger.info(
            f"Статус объекта {property_id} пересчитан: {status.value}"
            + ("" if updated else " (строка не изменена)")
            + (f", по сделке {latest_win.id}" if latest_win else "")
        )
        return status

    def apply_winning_deal(self, property_id: str, deal_type: DealType) -> PropertyStatus:
        """Прямая запись SOLD/RENTED для только что выигранной сделки"""
        status = status_for_deal_type(deal_type)
        self.property_repo.set_status(property_id, status)
        logger.info(f"Статус объекта {property_id} установлен: {status.value}")
        return status

    def resync_all(self) -> Dict[str, int]:
        """
        Пересчёт всех объектов, по которым есть сделки

        Returns:
            Словарь с результатами: {'synced': count, 'errors': count}
        """
        result = {'synced': 0, 'errors': 0}
        for property_id in self.deal_repo.list_property_ids():
            try:
                self.recompute(property_id)
                result['synced'] += 1
            except PersistenceError as e:
                logger.error(f"Не удалось пересчитать статус объекта {property_id}: {e}")
                result['errors'] += 1

        logger.info(f"Пересчёт статусов завершён: обновлено {result['synced']}, ошибок {result['errors']}")
        return result
