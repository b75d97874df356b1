"""
Карточка лида для канбан-доски
"""

from PyQt5.QtCore import QMimeData, QPoint, Qt, pyqtSignal
from PyQt5.QtGui import QDrag, QMouseEvent
from PyQt5.QtWidgets import QFrame, QLabel, QVBoxLayout
from loguru import logger

from modules.crm.leads.models import Lead
from modules.styles.pipeline_styles import COLORS, apply_label_style, apply_lead_card_style

MIME_PREFIX = "LeadCard:"


def format_budget(lead: Lead) -> str:
    """Бюджет лида в виде диапазона"""
    def fmt(value: float) -> str:
        return f"{value:,.0f}".replace(',', ' ')

    if lead.budget_min is not None and lead.budget_max is not None:
        return f"{fmt(lead.budget_min)} – {fmt(lead.budget_max)}"
    if lead.budget_min is not None:
        return f"от {fmt(lead.budget_min)}"
    if lead.budget_max is not None:
        return f"до {fmt(lead.budget_max)}"
    return ""


class LeadCard(QFrame):
    """Карточка лида в канбан-доске"""

    clicked = pyqtSignal(str)

    def __init__(self, lead: Lead, board=None, parent=None):
        super().__init__(parent)
        self.lead = lead
        self.board = board
        self._parent_column = None
        self.drag_start_position = QPoint()
        self.setCursor(Qt.PointingHandCursor)
        self.setAcceptDrops(False)
        self.init_ui()
        apply_lead_card_style(self)

    def init_ui(self):
        """Инициализация интерфейса карточки"""
        layout = QVBoxLayout(self)
        layout.setSpacing(6)
        layout.setContentsMargins(12, 12, 12, 12)
        self.setMinimumHeight(70)

        self.name_label = QLabel(self.lead.full_name)
        self.name_label.setWordWrap(True)
        apply_label_style(self.name_label, 'normal')
        self.name_label.setStyleSheet(f"font-weight: bold; color: {COLORS['text_dark']};")
        layout.addWidget(self.name_label)

        contact = self.lead.phone or self.lead.email
        if contact:
            contact_label = QLabel(f"📞 {contact}")
            apply_label_style(contact_label, 'small')
            layout.addWidget(contact_label)

        budget = format_budget(self.lead)
        if budget:
            budget_label = QLabel(f"💰 {budget}")
            apply_label_style(budget_label, 'small')
            budget_label.setStyleSheet(f"color: {COLORS['primary']};")
            layout.addWidget(budget_label)

        layout.addStretch()

    @property
    def lead_id(self) -> str:
        return self.lead.id

    def set_lead(self, lead: Lead):
        """Обновление данных лида без пересоздания карточки"""
        self.lead = lead

    def mousePressEvent(self, event: QMouseEvent):
        if event.button() == Qt.LeftButton:
            self.drag_start_position = event.pos()
        super().mousePressEvent(event)

    def mouseDoubleClickEvent(self, event: QMouseEvent):
        if event.button() == Qt.LeftButton:
            self.clicked.emit(self.lead.id)
            event.accept()
            return
        super().mouseDoubleClickEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent):
        """Начало drag-and-drop карточки"""
        if not (event.buttons() & Qt.LeftButton):
            return
        if (event.pos() - self.drag_start_position).manhattanLength() < 8:
            return
        if self.board is None or not self.board.start_drag(self.lead.id):
            return

        drag = QDrag(self)
        mime_data = QMimeData()
        mime_data.setText(f"{MIME_PREFIX}{self.lead.id}")
        drag.setMimeData(mime_data)
        drag.setPixmap(self.grab())
        drag.setHotSpot(event.pos())

        drop_action = drag.exec_(Qt.MoveAction)
        if drop_action != Qt.MoveAction:
            # Отпустили вне колонок
            self.board.finish_drag(None)
        logger.debug(f"Перетаскивание лида {self.lead.id} завершено")

    def set_parent_column(self, column):
        self._parent_column = column

    def get_parent_column(self):
        return self._parent_column
