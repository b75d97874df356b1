"""
Контроллер канбан-доски лидов

Оптимистичное перемещение карточек между этапами:
- drag_start: запоминаем перетаскиваемого лида;
- drag_over: меняем этап лида только в локальном состоянии (живой отклик UI);
- drag_end: если этап отличается от снимка, вызываем смену этапа на сервере;
  при ошибке локальное состояние целиком заменяется снимком.

Снимок берётся при загрузке доски и обновляется только после успешного
сохранения. Пока идёт сохранение, новое перетаскивание не начинается.
"""

from dataclasses import replace
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from modules.crm.leads.models import LEAD_STAGE_ORDER, Lead, LeadStage, stage_label

# (lead_id, stage) -> объект с полями success/message (ActionResult)
StageMutator = Callable[[str, LeadStage], object]
# (level, message), level: 'success' | 'error'
Notifier = Callable[[str, str], None]


class GesturePhase(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    COMMITTING = "committing"


def _copy_leads(leads: Sequence[Lead]) -> Tuple[Lead, ...]:
    return tuple(replace(lead) for lead in leads)


class KanbanController:
    """Состояние доски и обработка жестов перетаскивания"""

    def __init__(
        self,
        leads: Sequence[Lead],
        stage_mutator: StageMutator,
        notify: Optional[Notifier] = None
    ):
        self._snapshot: Tuple[Lead, ...] = _copy_leads(leads)
        self._leads: List[Lead] = list(self._snapshot)
        self._stage_mutator = stage_mutator
        self._notify = notify or (lambda level, message: None)
        self.phase = GesturePhase.IDLE
        self.active_lead_id: Optional[str] = None

    @property
    def leads(self) -> List[Lead]:
        return list(self._leads)

    @property
    def snapshot(self) -> Tuple[Lead, ...]:
        return self._snapshot

    def find_lead(self, lead_id: str) -> Optional[Lead]:
        for lead in self._leads:
            if lead.id == lead_id:
                return lead
        return None

    def _snapshot_lead(self, lead_id: str) -> Optional[Lead]:
        for lead in self._snapshot:
            if lead.id == lead_id:
                return lead
        return None

    def columns(self) -> Dict[LeadStage, List[Lead]]:
        """Лиды, сгруппированные по этапам в порядке колонок"""
        grouped: Dict[LeadStage, List[Lead]] = {stage: [] for stage in LEAD_STAGE_ORDER}
        for lead in self._leads:
            grouped[lead.stage].append(lead)
        return grouped

    def reload(self, leads: Sequence[Lead]) -> bool:
        """Замена данных доски (например, после повторной загрузки)"""
        if self.phase == GesturePhase.COMMITTING:
            logger.warning("Перезагрузка доски отклонена: идёт сохранение этапа")
            return False
        self._snapshot = _copy_leads(leads)
        self._leads = list(self._snapshot)
        self.phase = GesturePhase.IDLE
        self.active_lead_id = None
        return True

    # ------------------------------------------------------------------
    # Жесты
    # ------------------------------------------------------------------

    def drag_start(self, lead_id: str) -> bool:
        """idle -> dragging"""
        if self.phase != GesturePhase.IDLE:
            logger.debug(f"Перетаскивание лида {lead_id} отклонено: фаза {self.phase.value}")
            return False
        if self.find_lead(lead_id) is None:
            logger.warning(f"Перетаскивание неизвестного лида {lead_id}")
            return False
        self.phase = GesturePhase.DRAGGING
        self.active_lead_id = lead_id
        return True

    def _resolve_target_stage(self, over_id: Optional[str]) -> Optional[LeadStage]:
        """Над колонкой - её этап; над карточкой - этап этой карточки"""
        if over_id is None:
            return None
        if isinstance(over_id, LeadStage):
            return over_id
        try:
            return LeadStage(over_id)
        except ValueError:
            pass
        over_lead = self.find_lead(over_id)
        return over_lead.stage if over_lead else None

    def drag_over(self, over_id: Optional[str]) -> bool:
        """
        dragging -> dragging: оптимистичная смена этапа в локальном состоянии

        Returns:
            True если локальное состояние изменилось
        """
        if self.phase != GesturePhase.DRAGGING:
            return False
        new_stage = self._resolve_target_stage(over_id)
        active = self.find_lead(self.active_lead_id)
        if new_stage is None or active is None or active.stage == new_stage:
            return False
        self._leads = [
            lead.with_stage(new_stage) if lead.id == self.active_lead_id else lead
            for lead in self._leads
        ]
        return True

    def drag_cancel(self) -> None:
        """Отмена жеста: возврат к снимку"""
        if self.phase != GesturePhase.DRAGGING:
            return
        self._rollback()

    def drag_end(self, over_id: Optional[str]) -> Optional[bool]:
        """
        dragging -> idle

        Returns:
            None - сохранение не требовалось, True - этап сохранён,
            False - ошибка сохранения, доска откатилась к снимку
        """
        if self.phase != GesturePhase.DRAGGING:
            return None
        if over_id is None:
            # Карточку отпустили вне доски
            self._rollback()
            return None

        self.drag_over(over_id)

        lead_id = self.active_lead_id
        current = self.find_lead(lead_id)
        original = self._snapshot_lead(lead_id)
        if current is None or original is None or current.stage == original.stage:
            self._finish()
            return None

        self.phase = GesturePhase.COMMITTING
        new_stage = current.stage
        try:
            result = self._stage_mutator(lead_id, new_stage)
        except Exception as e:
            logger.error(f"Ошибка при сохранении этапа лида {lead_id}: {e}", exc_info=True)
            self._rollback()
            self._notify('error', "An error occurred")
            return False

        if not getattr(result, 'success', False):
            message = getattr(result, 'message', None) or "Failed to update stage"
            logger.warning(f"Этап лида {lead_id} не сохранён: {message}")
            self._rollback()
            self._notify('error', message)
            return False

        self._snapshot = _copy_leads(self._leads)
        self._finish()
        self._notify('success', f"Этап изменён: {stage_label(new_stage)}")
        return True

    def _rollback(self) -> None:
        self._leads = list(_copy_leads(self._snapshot))
        self._finish()

    def _finish(self) -> None:
        self.phase = GesturePhase.IDLE
        self.active_lead_id = None
