"""
Виджет раздела лидов с канбан-доской
"""

from typing import Optional

from PyQt5.QtWidgets import QMessageBox, QPushButton, QVBoxLayout, QWidget
from loguru import logger

from core.auth_context import AuthContext
from modules.crm.leads.kanban_board import LeadKanbanBoard
from modules.crm.leads.kanban_controller import KanbanController
from modules.crm.leads.stage_service import LeadStageService


class LeadsWidget(QWidget):
    """Раздел лидов: загрузка данных и канбан-доска"""

    def __init__(self, stage_service: LeadStageService, ctx: AuthContext, parent=None):
        super().__init__(parent)
        self.stage_service = stage_service
        self.ctx = ctx
        self.kanban_board: Optional[LeadKanbanBoard] = None
        self.init_ui()
        self.load_data()

    def init_ui(self):
        layout = QVBoxLayout(self)
        layout.setSpacing(0)
        layout.setContentsMargins(0, 0, 0, 0)

        btn_refresh = QPushButton("🔄 Обновить")
        btn_refresh.clicked.connect(self.load_data)
        layout.addWidget(btn_refresh)

    def _mutate_stage(self, lead_id, stage):
        return self.stage_service.set_stage(self.ctx, lead_id, stage)

    def load_data(self):
        """Загрузка лидов и построение доски"""
        result = self.stage_service.list_board(self.ctx)
        if not result.success:
            logger.error(f"Ошибка при загрузке лидов: {result.message}")
            QMessageBox.critical(self, "Ошибка", f"Не удалось загрузить лиды:\n{result.message}")
            return

        leads = result.data
        logger.info(f"Загружено лидов: {len(leads)}")

        if self.kanban_board is not None:
            if not self.kanban_board.reload(leads):
                logger.warning("Доска занята сохранением, обновление пропущено")
            return

        controller = KanbanController(leads, self._mutate_stage, notify=self._notify)
        self.kanban_board = LeadKanbanBoard(controller, parent=self)
        self.layout().addWidget(self.kanban_board)

    def _notify(self, level: str, message: str):
        if self.kanban_board is not None:
            self.kanban_board.show_notice(level, message)
