"""
Тесты для контроллера канбан-доски (оптимистичное перемещение и откат)
"""

from unittest.mock import Mock

import pytest

from core.action_result import ActionResult
from modules.crm.leads.kanban_controller import GesturePhase, KanbanController
from modules.crm.leads.models import Lead, LeadStage


@pytest.fixture
def leads():
    return [
        Lead(id="l1", full_name="Анна", stage=LeadStage.NEW),
        Lead(id="l2", full_name="Борис", stage=LeadStage.CONTACTED),
        Lead(id="l3", full_name="Вера", stage=LeadStage.NEGOTIATING),
    ]


@pytest.fixture
def mutator():
    return Mock(return_value=ActionResult.ok())


@pytest.fixture
def notify():
    return Mock()


@pytest.fixture
def controller(leads, mutator, notify):
    return KanbanController(leads, mutator, notify)


def stages(controller):
    return {lead.id: lead.stage for lead in controller.leads}


class TestDragGesture:
    """Тесты для жеста перетаскивания"""

    def test_columns_follow_board_order(self, controller):
        columns = controller.columns()

        assert list(columns) == [
            LeadStage.NEW, LeadStage.CONTACTED, LeadStage.VIEWED, LeadStage.NEGOTIATING, LeadStage.CLOSED
        ]
        assert [lead.id for lead in columns[LeadStage.NEW]] == ["l1"]
        assert columns[LeadStage.VIEWED] == []

    def test_drag_over_column_moves_locally(self, controller, mutator):
        controller.drag_start("l1")

        assert controller.drag_over("VIEWED") is True
        assert stages(controller)["l1"] == LeadStage.VIEWED
        mutator.assert_not_called()

    def test_drag_over_card_takes_its_stage(self, controller):
        controller.drag_start("l1")

        controller.drag_over("l3")

        assert stages(controller)["l1"] == LeadStage.NEGOTIATING

    def test_drag_over_unknown_target(self, controller):
        controller.drag_start("l1")

        assert controller.drag_over("nowhere") is False
        assert stages(controller)["l1"] == LeadStage.NEW

    def test_successful_drop_updates_snapshot(self, controller, mutator, notify):
        controller.drag_start("l1")
        controller.drag_over("CONTACTED")

        assert controller.drag_end("CONTACTED") is True

        mutator.assert_called_once_with("l1", LeadStage.CONTACTED)
        assert controller.phase == GesturePhase.IDLE
        assert {lead.id: lead.stage for lead in controller.snapshot}["l1"] == LeadStage.CONTACTED
        notify.assert_called_once_with('success', "Этап изменён: Связались")

    def test_failed_drop_rolls_back(self, leads, notify):
        """NEW -> NEGOTIATING, сервер отвечает ошибкой: доска возвращается к снимку"""
        mutator = Mock(return_value=ActionResult.fail("Lead not found"))
        controller = KanbanController(leads, mutator, notify)
        before = stages(controller)

        controller.drag_start("l1")
        controller.drag_over("NEGOTIATING")
        assert stages(controller)["l1"] == LeadStage.NEGOTIATING

        assert controller.drag_end("NEGOTIATING") is False

        assert stages(controller) == before
        assert controller.phase == GesturePhase.IDLE
        notify.assert_called_once_with('error', "Lead not found")

    def test_exception_rolls_back_with_generic_message(self, leads, notify):
        mutator = Mock(side_effect=ConnectionError("offline"))
        controller = KanbanController(leads, mutator, notify)

        controller.drag_start("l2")
        assert controller.drag_end("CLOSED") is False

        assert stages(controller)["l2"] == LeadStage.CONTACTED
        notify.assert_called_once_with('error', "An error occurred")

    def test_rollback_restores_snapshot_after_earlier_success(self, leads, notify):
        """Откат возвращает состояние после последнего успешного сохранения"""
        mutator = Mock(side_effect=[ActionResult.ok(), ActionResult.fail("Forbidden")])
        controller = KanbanController(leads, mutator, notify)

        controller.drag_start("l1")
        controller.drag_end("VIEWED")
        controller.drag_start("l1")
        controller.drag_end("CLOSED")

        assert stages(controller)["l1"] == LeadStage.VIEWED

    def test_drop_on_same_stage_is_noop(self, controller, mutator, notify):
        controller.drag_start("l1")
        controller.drag_over("VIEWED")
        controller.drag_over("NEW")

        assert controller.drag_end("NEW") is None

        mutator.assert_not_called()
        notify.assert_not_called()
        assert controller.phase == GesturePhase.IDLE

    def test_drop_outside_board_rolls_back(self, controller, mutator):
        controller.drag_start("l1")
        controller.drag_over("CLOSED")

        assert controller.drag_end(None) is None

        assert stages(controller)["l1"] == LeadStage.NEW
        mutator.assert_not_called()

    def test_drag_cancel(self, controller):
        controller.drag_start("l2")
        controller.drag_over("VIEWED")

        controller.drag_cancel()

        assert stages(controller)["l2"] == LeadStage.CONTACTED
        assert controller.phase == GesturePhase.IDLE

    def test_drag_end_without_gesture(self, controller, mutator):
        assert controller.drag_end("CLOSED") is None
        mutator.assert_not_called()

    def test_unknown_lead_cannot_be_dragged(self, controller):
        assert controller.drag_start("ghost") is False
        assert controller.phase == GesturePhase.IDLE


class TestCommittingPhase:
    """Во время сохранения новые жесты и перезагрузка отклоняются"""

    def test_gestures_refused_while_committing(self, leads, notify):
        observed = {}

        def slow_mutator(lead_id, stage):
            observed['drag_start'] = controller.drag_start("l2")
            observed['reload'] = controller.reload([])
            observed['phase'] = controller.phase
            return ActionResult.ok()

        controller = KanbanController(leads, slow_mutator, notify)
        controller.drag_start("l1")
        controller.drag_end("CLOSED")

        assert observed == {'drag_start': False, 'reload': False, 'phase': GesturePhase.COMMITTING}
        assert stages(controller)["l1"] == LeadStage.CLOSED
        assert stages(controller)["l2"] == LeadStage.CONTACTED

    def test_reload_replaces_snapshot(self, controller):
        fresh = [Lead(id="l9", full_name="Глеб", stage=LeadStage.CLOSED)]

        assert controller.reload(fresh) is True

        assert [lead.id for lead in controller.snapshot] == ["l9"]
        assert controller.find_lead("l1") is None

    def test_source_list_is_not_mutated(self, leads, controller):
        controller.drag_start("l1")
        controller.drag_end("CLOSED")

        assert leads[0].stage == LeadStage.NEW
