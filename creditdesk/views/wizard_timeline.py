"""Timeline widget hosting the credit application wizard."""
from PyQt6.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton,
                             QProgressBar, QStackedWidget, QFrame)
from PyQt6.QtGui import QIcon
from PyQt6.QtCore import Qt, pyqtSignal

from ..theme import ThemeManager
from ..wizard import WizardNavigator, STATUS_DONE, STATUS_CURRENT

# Keyboard shortcuts map onto navigator operations; no navigation logic here
KEY_BINDINGS = {
    Qt.Key.Key_Right: "next",
    Qt.Key.Key_Left: "previous",
    Qt.Key.Key_Home: "first",
    Qt.Key.Key_End: "last",
}


class StepDot(QPushButton):
    """Round button representing one step of the timeline."""

    def __init__(self, index, step, timeline):
        super().__init__()
        self.index = index
        self.step = step
        self.timeline = timeline

        self.setFixedSize(48, 48)
        self.setCursor(Qt.CursorShape.PointingHandCursor)
        self.setToolTip(step.title)
        self.setAccessibleName(step.title)
        if isinstance(step.icon, QIcon):
            self.setIcon(step.icon)
        elif step.icon:
            self.setText(str(step.icon))
        else:
            self.setText(str(index + 1))

        self.clicked.connect(lambda: self.timeline.navigator.go_to(self.index))

    def keyPressEvent(self, event):
        if event.key() in (Qt.Key.Key_Return, Qt.Key.Key_Enter):
            self.timeline.navigator.go_to(self.index)
            return
        super().keyPressEvent(event)

    def update_style(self, status):
        t = self.timeline.theme_manager
        if status == STATUS_DONE:
            bg, fg, ring = t.get_color("success"), t.get_color("success_text"), t.get_color("success")
        elif status == STATUS_CURRENT:
            bg, fg, ring = t.get_color("card_bg"), t.get_color("success"), t.get_color("success")
        else:
            bg, fg, ring = t.get_color("card_bg"), t.get_color("text_muted"), t.get_color("border")
        self.setStyleSheet(f"""
            QPushButton {{
                background-color: {bg};
                color: {fg};
                border: 2px solid {ring};
                border-radius: 24px;
                font-weight: bold;
            }}
        """)


class WizardTimeline(QWidget):
    """Header, step timeline and content panel driven by a WizardNavigator.

    Step content is built lazily from each step's content factory the first
    time the step becomes active. The widget forwards every step change to
    the stepChanged signal and to the optional on_change_step callback.
    """

    stepChanged = pyqtSignal(str)

    def __init__(self, steps, initial_step_id=None, on_change_step=None, theme_manager=None):
        super().__init__()
        self.theme_manager = theme_manager or ThemeManager()
        self.on_change_step = on_change_step
        self.navigator = WizardNavigator(steps, initial_step_id, on_step_changed=self._on_step_changed)
        self._pages = {}

        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.init_ui()
        self.refresh()

    def init_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(16)

        # Header: "Paso x de N" + progress
        header = QHBoxLayout()
        self.position_label = QLabel()
        header.addWidget(self.position_label)
        header.addStretch()
        self.progress_bar = QProgressBar()
        self.progress_bar.setRange(0, 100)
        self.progress_bar.setFixedWidth(280)
        self.progress_bar.setTextVisible(False)
        header.addWidget(self.progress_bar)
        layout.addLayout(header)

        # Timeline
        timeline = QHBoxLayout()
        self.dots = []
        self.titles = []
        for index, step in enumerate(self.navigator.registry):
            column = QVBoxLayout()
            column.setAlignment(Qt.AlignmentFlag.AlignHCenter)
            dot = StepDot(index, step, self)
            title = QLabel(step.title)
            title.setAlignment(Qt.AlignmentFlag.AlignCenter)
            title.setWordWrap(True)
            column.addWidget(dot, alignment=Qt.AlignmentFlag.AlignHCenter)
            column.addWidget(title)
            timeline.addLayout(column)
            self.dots.append(dot)
            self.titles.append(title)
        layout.addLayout(timeline)

        # Panel
        panel = QFrame()
        panel.setObjectName("wizardPanel")
        panel_layout = QVBoxLayout(panel)
        self.stack = QStackedWidget()
        panel_layout.addWidget(self.stack)
        layout.addWidget(panel, 1)
        self.panel = panel

    def _page_for(self, step):
        page = self._pages.get(step.id)
        if page is None:
            page = step.content() if step.content else QLabel(step.title)
            self._pages[step.id] = page
            self.stack.addWidget(page)
        return page

    def refresh(self):
        """Sync header, timeline and panel with the navigator state."""
        nav = self.navigator
        t = self.theme_manager

        self.position_label.setText(nav.position_label)
        self.position_label.setStyleSheet(f"font-size: 13px; color: {t.get_color('text_secondary')};")
        self.progress_bar.setValue(nav.progress_percent)
        self.progress_bar.setStyleSheet(f"""
            QProgressBar {{ border: none; background: {t.get_color('border')}; height: 6px; border-radius: 3px; }}
            QProgressBar::chunk {{ background: {t.get_color('success')}; border-radius: 3px; }}
        """)

        for index, (dot, title) in enumerate(zip(self.dots, self.titles)):
            status = nav.step_status(index)
            dot.update_style(status)
            if status == STATUS_CURRENT:
                title.setStyleSheet(f"font-weight: 600; color: {t.get_color('success')};")
            elif status == STATUS_DONE:
                title.setStyleSheet(f"color: {t.get_color('text_primary')};")
            else:
                title.setStyleSheet(f"color: {t.get_color('text_muted')};")

        self.panel.setStyleSheet(f"""
            #wizardPanel {{
                background-color: {t.get_color('card_bg')};
                border: 1px solid {t.get_color('card_border')};
                border-radius: 8px;
            }}
        """)
        self.stack.setCurrentWidget(self._page_for(nav.active_step))

    def keyPressEvent(self, event):
        operation = KEY_BINDINGS.get(event.key())
        if operation:
            getattr(self.navigator, operation)()
            event.accept()
            return
        super().keyPressEvent(event)

    def _on_step_changed(self, step_id):
        self.refresh()
        self.stepChanged.emit(step_id)
        if self.on_change_step:
            self.on_change_step(step_id)
