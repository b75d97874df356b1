"""
Канбан-доска лидов
"""

from typing import Dict, List, Optional

from PyQt5.QtCore import Qt, QTimer, pyqtSignal
from PyQt5.QtWidgets import QHBoxLayout, QLabel, QScrollArea, QVBoxLayout, QWidget
from loguru import logger

from modules.crm.leads.kanban_controller import KanbanController
from modules.crm.leads.kanban_column import LeadKanbanColumn
from modules.crm.leads.lead_card import LeadCard
from modules.crm.leads.models import LEAD_STAGE_ORDER, LeadStage
from modules.styles.pipeline_styles import apply_label_style, apply_notice_style

NOTICE_TIMEOUT_MS = 4000


class LeadKanbanBoard(QWidget):
    """Канбан-доска лидов, состояние хранится в KanbanController"""

    notified = pyqtSignal(str, str)
    lead_opened = pyqtSignal(str)

    def __init__(self, controller: KanbanController, parent=None):
        super().__init__(parent)
        self.controller = controller
        self.columns: Dict[LeadStage, LeadKanbanColumn] = {}
        self.cards: Dict[str, LeadCard] = {}
        self.init_ui()
        self.render()

    def init_ui(self):
        """Инициализация интерфейса канбан-доски"""
        main_layout = QVBoxLayout(self)
        main_layout.setSpacing(10)
        main_layout.setContentsMargins(20, 20, 20, 20)

        header = QLabel("Воронка лидов")
        apply_label_style(header, 'h1')
        main_layout.addWidget(header)

        self.notice_label = QLabel("")
        self.notice_label.setVisible(False)
        main_layout.addWidget(self.notice_label)

        self.notice_timer = QTimer(self)
        self.notice_timer.setSingleShot(True)
        self.notice_timer.setInterval(NOTICE_TIMEOUT_MS)
        self.notice_timer.timeout.connect(lambda: self.notice_label.setVisible(False))

        scroll_area = QScrollArea()
        scroll_area.setWidgetResizable(True)
        scroll_area.setHorizontalScrollBarPolicy(Qt.ScrollBarAsNeeded)
        scroll_area.setVerticalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        scroll_area.setStyleSheet("QScrollArea { border: none; }")

        columns_container = QWidget()
        columns_layout = QHBoxLayout(columns_container)
        columns_layout.setSpacing(15)
        columns_layout.setContentsMargins(0, 0, 0, 0)

        for stage in LEAD_STAGE_ORDER:
            column = LeadKanbanColumn(stage, board=self)
            self.columns[stage] = column
            columns_layout.addWidget(column)
        columns_layout.addStretch()

        scroll_area.setWidget(columns_container)
        main_layout.addWidget(scroll_area)

    def render(self):
        """
        Синхронизация колонок с состоянием контроллера

        Карточки переносятся между колонками, а не пересоздаются:
        перетаскиваемый виджет должен жить до конца жеста.
        """
        grouped = self.controller.columns()
        seen = set()
        for stage, leads in grouped.items():
            column = self.columns[stage]
            for lead in leads:
                seen.add(lead.id)
                card = self.cards.get(lead.id)
                if card is None:
                    card = LeadCard(lead, board=self)
                    card.clicked.connect(self.lead_opened.emit)
                    self.cards[lead.id] = card
                else:
                    card.set_lead(lead)
                current_column = card.get_parent_column()
                if current_column is not column:
                    if current_column is not None:
                        current_column.remove_card(card)
                    column.add_card(card)

        for lead_id in [lead_id for lead_id in self.cards if lead_id not in seen]:
            card = self.cards.pop(lead_id)
            column = card.get_parent_column()
            if column is not None:
                column.remove_card(card)
            card.deleteLater()

    def start_drag(self, lead_id: str) -> bool:
        return self.controller.drag_start(lead_id)

    def hover(self, over_id: str):
        if self.controller.drag_over(over_id):
            self.render()

    def finish_drag(self, over_id: Optional[str]):
        self.controller.drag_end(over_id)
        self.render()

    def reload(self, leads: List) -> bool:
        if not self.controller.reload(leads):
            return False
        self.render()
        return True

    def show_notice(self, level: str, message: str):
        """Всплывающее уведомление об итоге перемещения"""
        logger.info(f"Уведомление канбан-доски [{level}]: {message}")
        apply_notice_style(self.notice_label, level)
        self.notice_label.setText(message)
        self.notice_label.setVisible(True)
        # Новое уведомление перезапускает отсчёт скрытия
        self.notice_timer.start()
        self.notified.emit(level, message)

    def column_lead_ids(self, stage: LeadStage) -> List[str]:
        return [card.lead_id for card in self.columns[stage].cards]
