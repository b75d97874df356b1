"""
Лиды: этапы воронки и канбан-доска
"""

from modules.crm.leads.models import LEAD_STAGE_ORDER, Lead, LeadStage
from modules.crm.leads.lead_repository import LeadRepository
from modules.crm.leads.stage_service import LeadStageService
from modules.crm.leads.kanban_controller import GesturePhase, KanbanController

__all__ = [
    'LEAD_STAGE_ORDER',
    'Lead',
    'LeadStage',
    'LeadRepository',
    'LeadStageService',
    'GesturePhase',
    'KanbanController',
]
