"""
Тесты для проектора статуса объекта
"""

from datetime import datetime

import pytest

from core.exceptions import PersistenceError
from modules.crm.deals.models import Deal, DealStatus, DealType
from modules.crm.properties.models import PropertyStatus
from modules.crm.properties.status_projector import (
    PropertyStatusProjector,
    derive_property_status,
    pick_latest_win,
)

from conftest import make_deal_fields


def make_deal(deal_id, status=DealStatus.CLOSED_WIN, deal_type=DealType.SALE, created_at=None):
    return Deal(
        id=deal_id, lead_id="l1", property_id="p1",
        deal_type=deal_type, status=status, created_at=created_at
    )


class TestDeriveStatus:
    """Тесты для вычисления статуса по сделкам"""

    def test_no_win_means_active(self):
        deals = [make_deal("d1", status=DealStatus.NEGOTIATING), make_deal("d2", status=DealStatus.CLOSED_LOSS)]
        assert derive_property_status(pick_latest_win(deals)) == PropertyStatus.ACTIVE

    def test_sale_win_means_sold(self):
        assert derive_property_status(make_deal("d1")) == PropertyStatus.SOLD

    def test_rent_win_means_rented(self):
        assert derive_property_status(make_deal("d1", deal_type=DealType.RENT)) == PropertyStatus.RENTED

    def test_latest_win_by_created_at(self):
        older = make_deal("d9", deal_type=DealType.SALE, created_at=datetime(2024, 1, 1))
        newer = make_deal("d1", deal_type=DealType.RENT, created_at=datetime(2024, 2, 1))

        assert pick_latest_win([older, newer]) is newer

    def test_tie_broken_by_id_descending(self):
        """При одинаковом created_at побеждает больший id"""
        same_time = datetime(2024, 1, 1)
        a = make_deal("aaa", created_at=same_time)
        b = make_deal("bbb", deal_type=DealType.RENT, created_at=same_time)

        assert pick_latest_win([a, b]) is b
        assert pick_latest_win([b, a]) is b


class TestPropertyStatusProjector:
    """Тесты для пересчёта статуса в хранилище"""

    @pytest.fixture
    def lead(self, store):
        return store.add_lead()

    def test_recompute_without_deals(self, store, projector):
        prop = store.add_property(status=PropertyStatus.SOLD)

        assert projector.recompute(prop.id) == PropertyStatus.ACTIVE
        assert store.status_of(prop.id) == PropertyStatus.ACTIVE

    def test_recompute_uses_latest_win(self, store, projector, deal_repo, lead):
        prop = store.add_property()
        deal_repo.create_deal(make_deal_fields(lead.id, prop.id, status=DealStatus.CLOSED_WIN))
        deal_repo.create_deal(make_deal_fields(
            lead.id, prop.id, deal_type=DealType.RENT, status=DealStatus.CLOSED_WIN
        ))
        deal_repo.create_deal(make_deal_fields(lead.id, prop.id, status=DealStatus.CANCELLED))

        assert projector.recompute(prop.id) == PropertyStatus.RENTED
        assert store.status_of(prop.id) == PropertyStatus.RENTED

    def test_recompute_is_idempotent(self, store, projector, deal_repo, lead):
        prop = store.add_property()
        deal_repo.create_deal(make_deal_fields(lead.id, prop.id, status=DealStatus.CLOSED_WIN))

        first = projector.recompute(prop.id)
        second = projector.recompute(prop.id)

        assert first == second == store.status_of(prop.id) == PropertyStatus.SOLD

    def test_recompute_overwrites_manual_status_by_default(self, store, projector):
        prop = store.add_property(status=PropertyStatus.ARCHIVED)

        projector.recompute(prop.id)

        assert store.status_of(prop.id) == PropertyStatus.ACTIVE

    def test_preserve_manual_statuses(self, store, deal_repo, property_repo, lead):
        """Откат на ACTIVE не трогает ручные статусы, SOLD/RENTED пишутся всегда"""
        projector = PropertyStatusProjector(deal_repo, property_repo, preserve_manual_statuses=True)
        reserved = store.add_property(status=PropertyStatus.RESERVED)
        sold = store.add_property(status=PropertyStatus.SOLD)
        draft = store.add_property(status=PropertyStatus.DRAFT)
        deal_repo.create_deal(make_deal_fields(lead.id, draft.id, status=DealStatus.CLOSED_WIN))

        projector.recompute(reserved.id)
        projector.recompute(sold.id)
        projector.recompute(draft.id)

        assert store.status_of(reserved.id) == PropertyStatus.RESERVED
        assert store.status_of(sold.id) == PropertyStatus.ACTIVE
        assert store.status_of(draft.id) == PropertyStatus.SOLD

    def test_read_failure_writes_nothing(self, store, projector, deal_repo, property_repo):
        prop = store.add_property(status=PropertyStatus.SOLD)
        deal_repo.fail_reads = True

        with pytest.raises(PersistenceError):
            projector.recompute(prop.id)

        assert property_repo.writes == []
        assert store.status_of(prop.id) == PropertyStatus.SOLD

    def test_apply_winning_deal(self, store, projector):
        prop = store.add_property()

        assert projector.apply_winning_deal(prop.id, DealType.RENT) == PropertyStatus.RENTED
        assert store.status_of(prop.id) == PropertyStatus.RENTED

    def test_resync_all_counts_errors(self, store, projector, deal_repo, property_repo, lead):
        """Ошибка по одному объекту не останавливает пересчёт остальных"""
        first = store.add_property(status=PropertyStatus.DRAFT)
        second = store.add_property(status=PropertyStatus.DRAFT)
        deal_repo.create_deal(make_deal_fields(lead.id, first.id, status=DealStatus.CLOSED_WIN))
        deal_repo.create_deal(make_deal_fields(lead.id, second.id))

        original_set_status = property_repo.set_status

        def flaky_set_status(property_id, status, unless_in=None):
            if property_id == first.id:
                raise PersistenceError("locked")
            return original_set_status(property_id, status, unless_in=unless_in)

        property_repo.set_status = flaky_set_status

        assert projector.resync_all() == {'synced': 1, 'errors': 1}
        assert store.status_of(second.id) == PropertyStatus.ACTIVE
        assert store.status_of(first.id) == PropertyStatus.DRAFT
