from PyQt5.QtWidgets import QApplication, QLabel, QMainWindow, QVBoxLayout, QWidget
from loguru import logger

from config.settings import config
from core.audit import AuditLogger
from core.auth_context import AuthContext
from core.database import DatabaseManager
from core.exceptions import DatabaseConnectionError
from modules.crm.leads.lead_repository import LeadRepository
from modules.crm.leads.leads_widget import LeadsWidget
from modules.crm.leads.stage_service import LeadStageService
from modules.crm.schema_manager import SchemaManager
from modules.styles.pipeline_styles import apply_label_style


class MainWindow(QMainWindow):
    """Главное окно: воронка лидов"""

    def __init__(self):
        super().__init__()
        self.setWindowTitle("Brokerage Pipeline: воронка лидов")

        screen = QApplication.primaryScreen()
        if screen is not None:
            size = screen.availableGeometry()
            self.resize(int(size.width() * 0.9), int(size.height() * 0.9))

        self.db_manager = None
        try:
            self.db_manager = DatabaseManager(config.database)
            self.db_manager.connect()
            SchemaManager(self.db_manager).ensure_tables()
            logger.info("База данных подключена в главном окне")
        except DatabaseConnectionError as e:
            logger.error(f"Ошибка подключения к БД в главном окне: {e}")
            self.db_manager = None

        self.init_ui()

    def init_ui(self):
        central = QWidget()
        layout = QVBoxLayout(central)

        if self.db_manager is None:
            message = QLabel("Нет подключения к базе данных. Проверьте настройки BROKERAGE_DB_* в .env")
            apply_label_style(message, 'h3')
            layout.addWidget(message)
        else:
            ctx = AuthContext(
                db_manager=self.db_manager,
                user_id=config.session_user_id,
                role=config.session_role,
            )
            stage_service = LeadStageService(
                LeadRepository(self.db_manager),
                AuditLogger(self.db_manager),
                staff_roles=config.staff_roles,
            )
            layout.addWidget(LeadsWidget(stage_service, ctx, parent=central))

        self.setCentralWidget(central)

    def closeEvent(self, event):
        if self.db_manager is not None:
            self.db_manager.disconnect()
        super().closeEvent(event)
