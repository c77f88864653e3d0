"""Product step of the credit wizard: terms form plus amortization table."""
import os

from PyQt6.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton,
                             QLineEdit, QComboBox, QFormLayout, QGridLayout, QTableWidget,
                             QTableWidgetItem, QHeaderView, QMessageBox, QFileDialog)
from PyQt6.QtCore import Qt

from ..amortization import summarize_credit, configured_monthly_rate, warranty_percent_for_term
from ..config import (
    DEFAULT_FORM_TERM_MONTHS, TERM_OPTIONS, DEFAULT_LOGO_PATH
)
from ..data_structures import (
    CreditCharges, PlanDocumentInput, ProductInfo, CreditTerms, ClientInfo
)
from ..exceptions import CreditDeskError
from ..logger import get_logger
from ..theme import ThemeManager
from ..money import (
    format_cop, format_percent, format_thousands, unformat_number, to_number_safe,
    normalize_term
)

logger = get_logger(__name__)


class MoneyLineEdit(QLineEdit):
    """Line edit that keeps its text grouped by thousands ("12.345")."""

    def __init__(self, value=0):
        super().__init__()
        self.setAlignment(Qt.AlignmentFlag.AlignRight)
        self.textEdited.connect(self._reformat)
        self.set_value(value)

    def _reformat(self, text):
        digits = unformat_number(text)
        formatted = format_thousands(digits)
        if formatted != text:
            self.setText(formatted)

    def set_value(self, value):
        self.setText(format_thousands(str(int(value or 0))))

    def value(self) -> int:
        return to_number_safe(self.text())


class AmortizationTable(QWidget):
    """Summary cards and per-period table of a CreditSummary."""

    HEADERS = ["#", "Cuota base", "Seguro", "Cuota total", "Interés", "Capital", "Saldo"]

    def __init__(self):
        super().__init__()
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        grid = QGridLayout()
        self.labels = {}
        cards = [
            ("financed_base", "Base financiada (incl. gastos)"),
            ("down_payment", "Cuota inicial"),
            ("financed_amount", "Monto financiado"),
            ("monthly_rate", "Tasa de financiación mensual"),
            ("total_installment", "Cuota"),
        ]
        for i, (key, caption) in enumerate(cards):
            grid.addWidget(QLabel(caption), (i // 3) * 2, i % 3)
            value = QLabel("-")
            value.setStyleSheet("font-weight: 600;")
            grid.addWidget(value, (i // 3) * 2 + 1, i % 3)
            self.labels[key] = value
        layout.addLayout(grid)

        self.table = QTableWidget(0, len(self.HEADERS))
        self.table.setHorizontalHeaderLabels(self.HEADERS)
        self.table.verticalHeader().setVisible(False)
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        self.table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        layout.addWidget(self.table)

    def set_summary(self, summary):
        self.labels["financed_base"].setText(format_cop(summary.financed_base))
        self.labels["down_payment"].setText(format_cop(summary.down_payment))
        self.labels["financed_amount"].setText(format_cop(summary.financed_amount))
        self.labels["monthly_rate"].setText(format_percent(summary.monthly_rate))
        self.labels["total_installment"].setText(
            f"{format_cop(summary.total_installment)} "
            f"(base {format_cop(summary.base_installment)} + seguro {format_cop(summary.monthly_insurance)})"
        )

        rows = summary.schedule.rows
        self.table.setRowCount(len(rows))
        for r, row in enumerate(rows):
            values = [
                str(row.period),
                format_cop(row.installment),
                format_cop(summary.monthly_insurance),
                format_cop(row.installment + summary.monthly_insurance),
                format_cop(row.interest),
                format_cop(row.principal_paid),
                format_cop(row.closing_balance),
            ]
            for c, text in enumerate(values):
                item = QTableWidgetItem(text)
                if c > 0:
                    item.setTextAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
                self.table.setItem(r, c, item)

    def clear(self):
        for label in self.labels.values():
            label.setText("-")
        self.table.setRowCount(0)


class ProductStepForm(QWidget):
    """Product terms form. Every edit recomputes the schedule in full."""

    def __init__(self, navigator_getter, projector, client_getter=None,
                 monthly_rate=None, theme_manager=None):
        """Initialize ProductStepForm.

        Args:
            navigator_getter: Callable returning the hosting WizardNavigator.
            projector: PlanDocumentProjector used for the download button.
            client_getter: Optional callable returning the ClientInfo captured
                by the personal information step.
            monthly_rate: Monthly financing rate as a fraction. Defaults to
                the configured financing rate setting.
            theme_manager: Optional ThemeManager for colors.
        """
        super().__init__()
        self._get_navigator = navigator_getter
        self.projector = projector
        self._get_client = client_getter
        self.monthly_rate = configured_monthly_rate() if monthly_rate is None else monthly_rate
        self.theme_manager = theme_manager or ThemeManager()
        self.summary = None

        self.init_ui()
        self.recalculate()

    def init_ui(self):
        layout = QVBoxLayout(self)

        form = QFormLayout()
        self.product_input = QLineEdit()
        self.product_input.setPlaceholderText("Marca - Línea - Modelo")
        form.addRow("Producto:", self.product_input)

        self.term_combo = QComboBox()
        for months in TERM_OPTIONS:
            self.term_combo.addItem(f"{months} cuotas", months)
        self.term_combo.setCurrentIndex(self.term_combo.findData(DEFAULT_FORM_TERM_MONTHS))
        form.addRow("Plazo:", self.term_combo)

        self.value_input = MoneyLineEdit()
        form.addRow("Valor motocicleta:", self.value_input)
        self.down_payment_input = MoneyLineEdit()
        form.addRow("Cuota inicial:", self.down_payment_input)
        self.soat_input = MoneyLineEdit()
        form.addRow("SOAT:", self.soat_input)
        self.registration_input = MoneyLineEdit()
        form.addRow("Matrícula:", self.registration_input)
        self.taxes_input = MoneyLineEdit()
        form.addRow("Impuestos:", self.taxes_input)
        self.accessories_input = MoneyLineEdit()
        form.addRow("Accesorios:", self.accessories_input)
        self.warranty_input = MoneyLineEdit()
        form.addRow("Garantía extendida:", self.warranty_input)
        self.insurance_input = MoneyLineEdit()
        form.addRow("Seguros (total):", self.insurance_input)
        layout.addLayout(form)

        self.error_label = QLabel()
        self.error_label.hide()
        layout.addWidget(self.error_label)

        self.table = AmortizationTable()
        layout.addWidget(self.table, 1)

        buttons = QHBoxLayout()
        self.btn_prev = QPushButton("Anterior")
        self.btn_prev.clicked.connect(lambda: self._get_navigator().previous())
        buttons.addWidget(self.btn_prev)
        buttons.addStretch()
        self.btn_plan = QPushButton("Descargar plan de pagos")
        self.btn_plan.clicked.connect(self.download_plan)
        buttons.addWidget(self.btn_plan)
        self.btn_next = QPushButton("Siguiente")
        self.btn_next.clicked.connect(lambda: self._get_navigator().next())
        buttons.addWidget(self.btn_next)
        layout.addLayout(buttons)

        self.term_combo.currentIndexChanged.connect(self.recalculate)
        for field in (self.value_input, self.down_payment_input, self.soat_input,
                      self.registration_input, self.taxes_input, self.accessories_input,
                      self.warranty_input, self.insurance_input):
            field.textChanged.connect(self.recalculate)

    def charges(self) -> CreditCharges:
        return CreditCharges(
            product_value=self.value_input.value(),
            down_payment=self.down_payment_input.value(),
            term_months=normalize_term(self.term_combo.currentData()),
            soat=self.soat_input.value(),
            registration=self.registration_input.value(),
            taxes=self.taxes_input.value(),
            accessories=self.accessories_input.value(),
            extended_warranty=self.warranty_input.value(),
            insurance_total=self.insurance_input.value()
        )

    def recalculate(self):
        try:
            charges = self.charges()
            self.summary = summarize_credit(charges, self.monthly_rate,
                                            warranty_percent_for_term(charges.term_months))
        except CreditDeskError as e:
            logger.warning(f"Could not compute schedule: {e}")
            self.summary = None
            self.table.clear()
            self.error_label.setText(str(e))
            self.error_label.setStyleSheet(f"color: {self.theme_manager.get_color('danger')};")
            self.error_label.show()
            return
        self.error_label.hide()
        self.table.set_summary(self.summary)

    def plan_input(self) -> PlanDocumentInput:
        charges = self.charges()
        client = self._get_client() if self._get_client else ClientInfo()
        return PlanDocumentInput(
            client=client,
            product=ProductInfo(name=self.product_input.text().strip() or None,
                                value=charges.product_value),
            credit=CreditTerms(down_payment=charges.down_payment,
                               term_months=charges.term_months,
                               monthly_rate=self.monthly_rate),
            logo_path=os.path.abspath(DEFAULT_LOGO_PATH) if os.path.exists(DEFAULT_LOGO_PATH) else None
        )

    def download_plan(self):
        folder = QFileDialog.getExistingDirectory(self, "Guardar plan de pagos")
        if not folder:
            return

        result = self.projector.generate_pdf(self.plan_input(), folder)
        if not result:
            QMessageBox.warning(self, "Plan de pagos", f"No fue posible generar el plan:\n{result.error}")
            return

        note = "" if result.mode == "pdf" else "\n(PDF no disponible, se guardó en HTML)"
        QMessageBox.information(self, "Plan de pagos", f"Plan guardado en:\n{result.value}{note}")
