"""
Тесты для моделей воронки: лиды, сделки, объекты
"""

import pytest

from modules.crm.deals.models import Deal, DealStatus, DealType
from modules.crm.leads.models import (
    LEAD_STAGE_LABELS,
    LEAD_STAGE_ORDER,
    Lead,
    LeadStage,
    parse_stage,
    stage_label,
)
from modules.crm.properties.models import (
    MANUAL_STATUSES,
    PROJECTED_STATUSES,
    PropertyStatus,
)


class TestLeadStage:
    """Тесты для этапов лида"""

    def test_stage_order(self):
        """Пять колонок в порядке воронки"""
        assert [stage.value for stage in LEAD_STAGE_ORDER] == [
            "NEW", "CONTACTED", "VIEWED", "NEGOTIATING", "CLOSED"
        ]

    def test_every_stage_has_label(self):
        assert set(LEAD_STAGE_LABELS) == set(LeadStage)
        assert stage_label(LeadStage.VIEWED) == "Был на просмотре"
        assert stage_label(None) == "-"

    @pytest.mark.parametrize("raw", ["NEW", "new", " Contacted ", LeadStage.CLOSED])
    def test_parse_stage_accepts_known_values(self, raw):
        assert isinstance(parse_stage(raw), LeadStage)

    @pytest.mark.parametrize("raw", ["WON", "", None, 3])
    def test_parse_stage_rejects_unknown_values(self, raw):
        with pytest.raises(ValueError):
            parse_stage(raw)


class TestLead:
    """Тесты для лида"""

    def test_defaults(self):
        lead = Lead(id="l1", full_name="Иван Петров")
        assert lead.stage == LeadStage.NEW
        assert lead.preferences == {}

    def test_with_stage_returns_copy(self):
        """Смена этапа не меняет исходный объект"""
        lead = Lead(id="l1", full_name="Иван Петров")
        moved = lead.with_stage(LeadStage.NEGOTIATING)

        assert moved.stage == LeadStage.NEGOTIATING
        assert lead.stage == LeadStage.NEW
        assert moved.id == lead.id


class TestDeal:
    """Тесты для сделки"""

    def test_defaults(self):
        deal = Deal(id="d1", lead_id="l1", property_id="p1", deal_type=DealType.SALE)
        assert deal.status == DealStatus.NEGOTIATING
        assert deal.transaction_end_date is None
        assert not deal.is_win

    def test_is_win(self):
        deal = Deal(
            id="d1", lead_id="l1", property_id="p1",
            deal_type=DealType.RENT, status=DealStatus.CLOSED_WIN
        )
        assert deal.is_win


class TestPropertyStatus:
    """Тесты для статусов объекта"""

    def test_projected_and_manual_statuses_are_disjoint(self):
        assert not MANUAL_STATUSES & PROJECTED_STATUSES
        assert MANUAL_STATUSES | PROJECTED_STATUSES == set(PropertyStatus)
