"""Main application window for CreditDesk."""
import sys
import os

# Disable GPU and software rasterizer to prevent crashes on older hardware.
# Must be set before QWebEngineWidgets is imported/initialized.
os.environ.setdefault("QTWEBENGINE_CHROMIUM_FLAGS", "--disable-gpu --disable-software-rasterizer")

from PyQt6.QtWidgets import (QApplication, QMainWindow, QMessageBox, QWidget,
                             QVBoxLayout, QFormLayout, QLineEdit, QHBoxLayout, QPushButton)
from PyQt6.QtGui import QIcon

from .config import DEFAULT_THEME
from .data_structures import ClientInfo
from .logger import setup_logger, get_logger
from .plan_document import PlanDocumentProjector
from .theme import ThemeManager
from .views.product_step import ProductStepForm
from .views.wizard_timeline import WizardTimeline
from .wizard import default_credit_steps

logger = get_logger(__name__)


class PersonalInfoForm(QWidget):
    """First step: client data carried onto the payment plan."""

    def __init__(self, navigator_getter):
        super().__init__()
        self._get_navigator = navigator_getter

        layout = QVBoxLayout(self)
        form = QFormLayout()
        self.name_input = QLineEdit()
        self.document_input = QLineEdit()
        self.address_input = QLineEdit()
        self.phone_input = QLineEdit()
        form.addRow("Nombre:", self.name_input)
        form.addRow("Cédula/Nit:", self.document_input)
        form.addRow("Dirección:", self.address_input)
        form.addRow("Teléfono:", self.phone_input)
        layout.addLayout(form)
        layout.addStretch()

        buttons = QHBoxLayout()
        buttons.addStretch()
        btn_next = QPushButton("Siguiente")
        btn_next.clicked.connect(lambda: self._get_navigator().next())
        buttons.addWidget(btn_next)
        layout.addLayout(buttons)

    def client_info(self) -> ClientInfo:
        return ClientInfo(
            name=self.name_input.text().strip() or None,
            document=self.document_input.text().strip() or None,
            address=self.address_input.text().strip() or None,
            phone=self.phone_input.text().strip() or None
        )


class MainApp(QMainWindow):
    """Main application window hosting the credit application wizard."""

    def __init__(self):
        super().__init__()
        self.setWindowTitle("CreditDesk - Solicitud de crédito")
        self.resize(1100, 760)

        if getattr(sys, 'frozen', False):
            base_path = os.path.dirname(sys.executable)
        else:
            base_path = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

        icon_path = os.path.join(base_path, "resources", "icon.png")
        if os.path.exists(icon_path):
            self.setWindowIcon(QIcon(icon_path))

        self.theme_manager = ThemeManager(DEFAULT_THEME)
        self.printer_view = None
        self.projector = PlanDocumentProjector(self.get_printer_view)
        self.personal_info = None

        steps = default_credit_steps(
            icons={"info": "1", "codeu": "2", "prod": "$", "firm": "4", "supp": "5"},
            contents={
                "info": self._build_personal_info,
                "prod": lambda: ProductStepForm(
                    lambda: self.wizard.navigator, self.projector, self._client_info,
                    theme_manager=self.theme_manager
                ),
            }
        )
        self.wizard = WizardTimeline(steps, initial_step_id="info",
                                     on_change_step=self.on_change_step,
                                     theme_manager=self.theme_manager)
        self.setCentralWidget(self.wizard)

        view_menu = self.menuBar().addMenu("Ver")
        theme_action = view_menu.addAction("Cambiar tema (claro/oscuro)")
        theme_action.triggered.connect(self.toggle_theme)

        self.apply_theme()

    def apply_theme(self):
        """Update window and wizard styles based on current theme."""
        t = self.theme_manager
        self.setStyleSheet(f"QMainWindow {{ background-color: {t.get_color('bg_primary')}; }}"
                           f" QLabel {{ color: {t.get_color('text_primary')}; }}")
        self.wizard.refresh()

    def toggle_theme(self):
        new_theme = self.theme_manager.toggle_theme()
        logger.info(f"Theme changed to {new_theme}")
        self.apply_theme()

    def _build_personal_info(self):
        self.personal_info = PersonalInfoForm(lambda: self.wizard.navigator)
        return self.personal_info

    def _client_info(self):
        return self.personal_info.client_info() if self.personal_info else ClientInfo()

    def on_change_step(self, step_id):
        logger.info(f"step -> {step_id}")

    def get_printer_view(self):
        """Get or create the hidden QWebEngineView for printing."""
        if self.printer_view is None:
            try:
                from PyQt6.QtWebEngineWidgets import QWebEngineView
                self.printer_view = QWebEngineView()
                self.printer_view.hide()
            except ImportError:
                logger.warning("QtWebEngineWidgets not found. PDF printing not available.")
                return None
        return self.printer_view

    def closeEvent(self, event):
        """Confirm before exiting."""
        reply = QMessageBox.question(self, "Salir", "¿Desea salir de la solicitud?",
                                     QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                                     QMessageBox.StandardButton.No)
        if reply == QMessageBox.StandardButton.Yes:
            event.accept()
        else:
            event.ignore()


def main():
    """Entry point for the application."""
    setup_logger()

    # QtWebEngineWidgets must be imported before QApplication is created
    try:
        from PyQt6.QtWebEngineWidgets import QWebEngineView  # noqa: F401
    except ImportError:
        pass  # Not installed, plan export will fall back to HTML

    app = QApplication(sys.argv)
    window = MainApp()
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
