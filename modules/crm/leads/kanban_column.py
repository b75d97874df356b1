"""
Колонка канбан-доски лидов (один этап)
"""

from typing import List, Optional

from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import QFrame, QLabel, QScrollArea, QVBoxLayout, QWidget

from modules.crm.leads.lead_card import MIME_PREFIX, LeadCard
from modules.crm.leads.models import LeadStage, stage_label
from modules.styles.pipeline_styles import (
    apply_kanban_column_style,
    apply_kanban_header_style,
    apply_label_style,
)


def _lead_id_from_mime(event) -> Optional[str]:
    mime = event.mimeData()
    if mime.hasText() and mime.text().startswith(MIME_PREFIX):
        return mime.text()[len(MIME_PREFIX):]
    return None


class LeadKanbanColumn(QFrame):
    """Колонка канбан-доски для этапа лида"""

    def __init__(self, stage: LeadStage, board=None, parent=None):
        super().__init__(parent)
        self.stage = stage
        self.board = board
        self.cards: List[LeadCard] = []
        self.setAcceptDrops(True)
        self.init_ui()

    def init_ui(self):
        """Инициализация интерфейса колонки"""
        layout = QVBoxLayout(self)
        layout.setSpacing(10)
        layout.setContentsMargins(10, 10, 10, 10)

        apply_kanban_column_style(self)
        self.setMinimumWidth(240)
        self.setMaximumWidth(300)

        header = QLabel(stage_label(self.stage))
        apply_kanban_header_style(header)
        layout.addWidget(header)

        self.counter_label = QLabel("0")
        apply_label_style(self.counter_label, 'small')
        layout.addWidget(self.counter_label)

        scroll_area = QScrollArea()
        scroll_area.setWidgetResizable(True)
        scroll_area.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        scroll_area.setStyleSheet("QScrollArea { border: none; background: transparent; }")

        self.cards_container = QWidget()
        self.cards_layout = QVBoxLayout(self.cards_container)
        self.cards_layout.setSpacing(10)
        self.cards_layout.setContentsMargins(0, 0, 0, 0)
        self.cards_layout.addStretch()

        scroll_area.setWidget(self.cards_container)
        layout.addWidget(scroll_area)

    def add_card(self, card: LeadCard):
        """Добавление карточки в колонку"""
        self.cards_layout.insertWidget(self.cards_layout.count() - 1, card)
        self.cards.append(card)
        card.set_parent_column(self)
        self.update_counter()

    def remove_card(self, card: LeadCard):
        """Удаление карточки из колонки (виджет не уничтожается)"""
        if card in self.cards:
            self.cards.remove(card)
            self.cards_layout.removeWidget(card)
            card.set_parent_column(None)
            self.update_counter()

    def update_counter(self):
        self.counter_label.setText(str(len(self.cards)))

    def dragEnterEvent(self, event):
        if _lead_id_from_mime(event) is not None:
            event.acceptProposedAction()
            if self.board:
                self.board.hover(self.stage.value)
        else:
            event.ignore()

    def dragMoveEvent(self, event):
        if _lead_id_from_mime(event) is not None:
            event.acceptProposedAction()
        else:
            event.ignore()

    def dropEvent(self, event):
        """Сброс карточки: фиксация этапа через контроллер доски"""
        if _lead_id_from_mime(event) is None or self.board is None:
            event.ignore()
            return
        event.acceptProposedAction()
        self.board.finish_drag(self.stage.value)
