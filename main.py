import sys

from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import QApplication

from config.settings import config
from core.logging_setup import setup_logging
from ui.main_window import MainWindow

if __name__ == "__main__":
    setup_logging(config.log_level, config.log_file)

    if hasattr(Qt, 'AA_EnableHighDpiScaling'):
        QApplication.setAttribute(Qt.AA_EnableHighDpiScaling, True)
    if hasattr(Qt, 'AA_UseHighDpiPixmaps'):
        QApplication.setAttribute(Qt.AA_UseHighDpiPixmaps, True)

    app = QApplication(sys.argv)

    win = MainWindow()
    win.show()

    sys.exit(app.exec_())
