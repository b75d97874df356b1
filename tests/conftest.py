"""
Общие фикстуры: хранилище в памяти вместо PostgreSQL
"""

import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from unittest.mock import Mock

import pytest
from loguru import logger

from core.auth_context import AuthContext
from core.exceptions import PersistenceError
from modules.crm.deals.lifecycle_service import DealLifecycleService
from modules.crm.deals.models import Deal, DealStatus, DealType
from modules.crm.leads.models import Lead, LeadStage
from modules.crm.leads.stage_service import LeadStageService
from modules.crm.properties.models import Property, PropertyStatus
from modules.crm.properties.status_projector import PropertyStatusProjector, pick_latest_win

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def silence_logs():
    """Подавляем вывод loguru в тестах"""
    logger.remove()
    yield


class InMemoryStore:
    """Таблицы leads/deals/properties в памяти"""

    def __init__(self):
        self.leads: Dict[str, Lead] = {}
        self.deals: Dict[str, Deal] = {}
        self.properties: Dict[str, Property] = {}
        self._tick = 0

    def now(self) -> datetime:
        self._tick += 1
        return BASE_TIME + timedelta(minutes=self._tick)

    def add_lead(self, full_name: str = "Test Lead", stage: LeadStage = LeadStage.NEW) -> Lead:
        lead = Lead(id=str(uuid.uuid4()), full_name=full_name, stage=stage, updated_at=self.now())
        self.leads[lead.id] = lead
        return lead

    def add_property(self, status: PropertyStatus = PropertyStatus.ACTIVE, title: str = "Condo") -> Property:
        prop = Property(id=str(uuid.uuid4()), title=title, status=status)
        self.properties[prop.id] = prop
        return prop

    def status_of(self, property_id: str) -> PropertyStatus:
        return self.properties[property_id].status


class FakeLeadRepository:
    def __init__(self, store: InMemoryStore):
        self.store = store
        self.fail = False

    def get_lead(self, lead_id: str) -> Optional[Lead]:
        if self.fail:
            raise PersistenceError("store is down")
        return self.store.leads.get(lead_id)

    def list_leads(self, stage: Optional[LeadStage] = None) -> List[Lead]:
        leads = list(self.store.leads.values())
        if stage is not None:
            leads = [lead for lead in leads if lead.stage == stage]
        return leads

    def update_stage(self, lead_id: str, stage: LeadStage) -> Optional[datetime]:
        if self.fail:
            raise PersistenceError("store is down")
        lead = self.store.leads.get(lead_id)
        if lead is None:
            return None
        updated_at = self.store.now()
        self.store.leads[lead_id] = replace(lead, stage=stage, updated_at=updated_at)
        return updated_at


class FakeDealRepository:
    def __init__(self, store: InMemoryStore):
        self.store = store
        self.fail_reads = False
        self.fail_writes = False

    def _check_read(self):
        if self.fail_reads:
            raise PersistenceError("read failed")

    def get_deal(self, deal_id: str) -> Optional[Deal]:
        self._check_read()
        deal = self.store.deals.get(deal_id)
        return replace(deal) if deal else None

    def list_by_lead(self, lead_id: str) -> List[Deal]:
        self._check_read()
        return [d for d in self.store.deals.values() if d.lead_id == lead_id]

    def list_by_property(self, property_id: str) -> List[Deal]:
        self._check_read()
        return [d for d in self.store.deals.values() if d.property_id == property_id]

    def find_latest_win(self, property_id: str) -> Optional[Deal]:
        self._check_read()
        return pick_latest_win(d for d in self.store.deals.values() if d.property_id == property_id)

    def list_property_ids(self) -> List[str]:
        self._check_read()
        return sorted({d.property_id for d in self.store.deals.values()})

    def create_deal(self, fields: Dict[str, Any]) -> Deal:
        if self.fail_writes:
            raise PersistenceError("insert failed")
        now = self.store.now()
        deal = Deal(id=str(uuid.uuid4()), created_at=now, updated_at=now, **fields)
        self.store.deals[deal.id] = deal
        return replace(deal)

    def update_deal(self, deal_id: str, fields: Dict[str, Any]) -> Optional[Deal]:
        if self.fail_writes:
            raise PersistenceError("update failed")
        deal = self.store.deals.get(deal_id)
        if deal is None:
            return None
        updated = replace(deal, updated_at=self.store.now(), **fields)
        self.store.deals[deal_id] = updated
        return replace(updated)

    def delete_deal(self, deal_id: str) -> bool:
        if self.fail_writes:
            raise PersistenceError("delete failed")
        return self.store.deals.pop(deal_id, None) is not None


class FakePropertyRepository:
    def __init__(self, store: InMemoryStore):
        self.store = store
        self.fail_writes = False
        self.writes: List[tuple] = []

    def get_property(self, property_id: str) -> Optional[Property]:
        return self.store.properties.get(property_id)

    def set_status(self, property_id: str, status: PropertyStatus, unless_in=None) -> bool:
        if self.fail_writes:
            raise PersistenceError("write failed")
        prop = self.store.properties.get(property_id)
        if prop is None or (unless_in and prop.status in unless_in):
            return False
        prop.status = status
        self.writes.append((property_id, status))
        return True


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def ctx():
    return AuthContext(db_manager=None, user_id="agent-1", role="AGENT")


@pytest.fixture
def lead_repo(store):
    return FakeLeadRepository(store)


@pytest.fixture
def deal_repo(store):
    return FakeDealRepository(store)


@pytest.fixture
def property_repo(store):
    return FakePropertyRepository(store)


@pytest.fixture
def audit():
    return Mock()


@pytest.fixture
def projector(deal_repo, property_repo):
    return PropertyStatusProjector(deal_repo, property_repo)


@pytest.fixture
def deal_service(deal_repo, projector, audit):
    return DealLifecycleService(deal_repo, projector, audit)


@pytest.fixture
def stage_service(lead_repo, audit):
    return LeadStageService(lead_repo, audit)


def make_deal_fields(lead_id: str, property_id: str, **overrides) -> Dict[str, Any]:
    """Поля сделки для прямой вставки в хранилище"""
    fields = {
        'lead_id': lead_id,
        'property_id': property_id,
        'deal_type': DealType.SALE,
        'status': DealStatus.NEGOTIATING,
    }
    fields.update(overrides)
    return fields
