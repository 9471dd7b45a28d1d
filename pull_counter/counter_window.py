"""Small always-on-top window showing the current pull count."""
from PyQt6.QtWidgets import QWidget, QVBoxLayout, QLabel, QMenu
from PyQt6.QtCore import Qt, pyqtSignal, QPoint
from typing import Optional

from .logger import get_logger

logger = get_logger(__name__)

COUNTER_STYLE = """
QWidget#pullcounter {
    background-color: rgba(13, 13, 13, 160);
    border-radius: 6px;
}
QLabel#pullcounttext {
    color: #e8e8e8;
    font-size: 28px;
    font-weight: bold;
    padding: 2px 10px;
}
QLabel#pullcounttext[wipe="true"] {
    color: #ff5a5a;
}
"""


class CounterWindow(QWidget):
    """Frameless window with a single count label."""

    # Signals
    exit_requested = pyqtSignal()
    reset_requested = pyqtSignal()
    geometry_saved = pyqtSignal(bytes)

    def __init__(self, always_on_top: bool = True, parent=None):
        super().__init__(parent)
        self.setObjectName("pullcounter")
        self.setWindowTitle("Pull Counter")
        flags = Qt.WindowType.FramelessWindowHint | Qt.WindowType.Tool
        if always_on_top:
            flags |= Qt.WindowType.WindowStaysOnTopHint
        self.setWindowFlags(flags)
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground)
        self._drag_offset: Optional[QPoint] = None

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self.count_label = QLabel("")
        self.count_label.setObjectName("pullcounttext")
        self.count_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.count_label.setProperty("wipe", False)
        layout.addWidget(self.count_label)

        self.setStyleSheet(COUNTER_STYLE)
        self.setMinimumSize(60, 44)

    def show_count(self, boss_id: str, count: int) -> None:
        self.count_label.setText(str(count))
        self.count_label.setToolTip(boss_id)
        self._set_wipe(False)

    def clear(self) -> None:
        self.count_label.setText("")
        self.count_label.setToolTip("")

    def mark_wipe(self) -> None:
        self._set_wipe(True)

    def _set_wipe(self, wipe: bool) -> None:
        self.count_label.setProperty("wipe", wipe)
        # Re-evaluate the [wipe="true"] selector
        self.count_label.style().unpolish(self.count_label)
        self.count_label.style().polish(self.count_label)

    def contextMenuEvent(self, event) -> None:
        menu = QMenu(self)
        reset_action = menu.addAction("Reset pull count")
        exit_action = menu.addAction("Exit")
        chosen = menu.exec(event.globalPos())
        if chosen == reset_action:
            self.reset_requested.emit()
        elif chosen == exit_action:
            self.exit_requested.emit()

    def mousePressEvent(self, event) -> None:
        if event.button() == Qt.MouseButton.LeftButton:
            self._drag_offset = event.globalPosition().toPoint() - self.frameGeometry().topLeft()
            event.accept()

    def mouseMoveEvent(self, event) -> None:
        if self._drag_offset is not None and event.buttons() & Qt.MouseButton.LeftButton:
            self.move(event.globalPosition().toPoint() - self._drag_offset)
            event.accept()

    def mouseReleaseEvent(self, event) -> None:
        if self._drag_offset is not None:
            self._drag_offset = None
            self.geometry_saved.emit(bytes(self.saveGeometry()))

    def closeEvent(self, event) -> None:
        self.geometry_saved.emit(bytes(self.saveGeometry()))
        super().closeEvent(event)
