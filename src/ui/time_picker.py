from __future__ import annotations

from datetime import datetime
from typing import Callable

from PySide6.QtCore import QEvent, QObject, QPoint, Qt, Signal
from PySide6.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

try:
    from core.time_engine import DEFAULT_INTERVAL_MINUTES, ClockConvention, TimeRange
    from core.time_session import TimeInputController, ValidityClass, synced_text
except ModuleNotFoundError:
    from ..core.time_engine import DEFAULT_INTERVAL_MINUTES, ClockConvention, TimeRange
    from ..core.time_session import TimeInputController, ValidityClass, synced_text


CLOCK_GLYPH = "\U0001F552"

_STYLE_SHEET = """
QLineEdit[validity="valid"] {
    border: 1px solid rgba(0, 170, 0, 0.6);
    background-color: rgba(0, 255, 0, 0.05);
}
QLineEdit[validity="invalid"] {
    border: 1px solid rgba(210, 0, 0, 0.6);
    background-color: rgba(255, 0, 0, 0.05);
}
"""


class TimePickerWidget(QWidget):
    """
    Masked time input with a clock button and a suggestion drop-down.

    The widget hosts its own value: commits from the input session are
    written back with ``set_value`` and then announced via ``value_changed``.
    """

    value_changed = Signal(object)

    def __init__(
        self,
        *,
        convention: ClockConvention = ClockConvention.TWELVE_HOUR,
        time_range: TimeRange | None = None,
        interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
        max_span_hours: float | None = None,
        value: datetime | None = None,
        max_visible_suggestions: int = 8,
        clock: Callable[[], datetime] = datetime.now,
        parent: QWidget | None = None,
    ):
        super().__init__(parent)
        self._max_visible_suggestions = max(1, int(max_visible_suggestions))
        self._controller = TimeInputController(
            convention=convention,
            time_range=time_range,
            interval_minutes=interval_minutes,
            max_span_hours=max_span_hours,
            value=value,
            clock=clock,
            parent=self,
        )
        self._build_ui()
        self._connect_controller()
        self._render_text(self._controller.display_text)
        self._render_suggestions(self._controller.suggestions)
        self._render_drop_down(self._controller.is_drop_down_visible)

        app = QApplication.instance()
        if app is not None:
            app.installEventFilter(self)

    def _build_ui(self) -> None:
        self.setStyleSheet(_STYLE_SHEET)
        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.setSpacing(4)

        row = QHBoxLayout()
        row.setSpacing(2)
        self._line_edit = QLineEdit(self)
        self._line_edit.setPlaceholderText(self._controller.placeholder_text)
        self._line_edit.textEdited.connect(self._on_text_edited)
        self._line_edit.returnPressed.connect(self._controller.on_blur)

        self._clock_button = QToolButton(self)
        self._clock_button.setText(CLOCK_GLYPH)
        self._clock_button.setToolTip("Show suggested times")
        # Clicking the affordance or the list must not steal focus from the input.
        self._clock_button.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self._clock_button.clicked.connect(self._on_clock_clicked)
        row.addWidget(self._line_edit, 1)
        row.addWidget(self._clock_button)
        root.addLayout(row)

        self._suggestion_list = QListWidget(self)
        self._suggestion_list.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self._suggestion_list.itemClicked.connect(self._on_item_clicked)
        self._suggestion_list.hide()
        root.addWidget(self._suggestion_list)

    def _connect_controller(self) -> None:
        self._controller.display_text_changed.connect(self._render_text)
        self._controller.suggestions_changed.connect(self._render_suggestions)
        self._controller.drop_down_visibility_changed.connect(self._render_drop_down)
        self._controller.value_committed.connect(self._on_value_committed)

    # --- public API ---

    @property
    def controller(self) -> TimeInputController:
        return self._controller

    def value(self) -> datetime | None:
        return self._controller.value

    def set_value(self, value: datetime | None) -> None:
        self._controller.set_value(value)
        self._render_validity()

    def text(self) -> str:
        return self._line_edit.text()

    def set_convention(self, convention: ClockConvention) -> None:
        self._controller.set_convention(convention)
        self._line_edit.setPlaceholderText(self._controller.placeholder_text)
        self._render_text(self._controller.display_text)

    def set_time_range(self, time_range: TimeRange | None) -> None:
        self._controller.set_time_range(time_range)
        self._render_validity()

    # --- event plumbing ---

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        if watched is self._line_edit and event.type() == QEvent.Type.FocusOut:
            self._controller.on_blur()
        elif event.type() == QEvent.Type.MouseButtonPress and self._controller.snapshot.drop_down_open:
            if not self._contains_global(event.globalPosition().toPoint()):
                self._controller.on_click_outside()
        return super().eventFilter(watched, event)

    def _contains_global(self, global_pos: QPoint) -> bool:
        if not self.isVisible():
            return False
        return self.rect().contains(self.mapFromGlobal(global_pos))

    def _on_text_edited(self, text: str) -> None:
        self._controller.on_raw_input(text)
        # Rejected keystrokes leave the session untouched; undo them in the editor.
        if self._line_edit.text() != self._controller.display_text:
            self._line_edit.setText(self._controller.display_text)
        self._render_validity()

    def _on_clock_clicked(self) -> None:
        self._controller.on_focus_affordance()
        self._line_edit.setFocus(Qt.FocusReason.OtherFocusReason)

    def _on_item_clicked(self, item: QListWidgetItem) -> None:
        row = self._suggestion_list.row(item)
        suggestions = self._controller.suggestions
        if 0 <= row < len(suggestions):
            self._controller.on_pick_suggestion(suggestions[row])

    def _on_value_committed(self, value: datetime | None) -> None:
        self._controller.set_value(value)
        self._render_validity()
        self.value_changed.emit(value)

    # --- rendering ---

    def _render_text(self, text: str) -> None:
        if self._line_edit.text() != text:
            self._line_edit.setText(text)
        self._render_validity()

    def _render_suggestions(self, suggestions: list[datetime]) -> None:
        convention = self._controller.options.convention
        self._suggestion_list.clear()
        for candidate in suggestions:
            self._suggestion_list.addItem(synced_text(candidate, convention))
        row_height = max(self._suggestion_list.sizeHintForRow(0), 18) if suggestions else 18
        visible_rows = min(len(suggestions), self._max_visible_suggestions) or 1
        self._suggestion_list.setFixedHeight(row_height * visible_rows + 2 * self._suggestion_list.frameWidth())

    def _render_drop_down(self, visible: bool) -> None:
        self._suggestion_list.setVisible(visible)

    def _render_validity(self) -> None:
        validity: ValidityClass = self._controller.validity_class
        if self._line_edit.property("validity") == validity.value:
            return
        self._line_edit.setProperty("validity", validity.value)
        style = self._line_edit.style()
        style.unpolish(self._line_edit)
        style.polish(self._line_edit)
