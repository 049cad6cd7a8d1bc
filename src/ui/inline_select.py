from __future__ import annotations

from typing import Iterable

from PySide6.QtCore import Signal
from PySide6.QtWidgets import QButtonGroup, QHBoxLayout, QPushButton, QWidget


class InlineSelect(QWidget):
    """Segmented single-choice control; emits only when the choice changes."""

    option_changed = Signal(str)

    def __init__(
        self,
        options: Iterable[tuple[str, str]],
        value: str | None = None,
        parent: QWidget | None = None,
    ):
        super().__init__(parent)
        self._group = QButtonGroup(self)
        self._group.setExclusive(True)
        self._buttons: dict[str, QPushButton] = {}
        self._value: str | None = None

        layout = QHBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)
        layout.setSpacing(2)
        for option_value, label in options:
            button = QPushButton(label, self)
            button.setCheckable(True)
            button.setProperty("optionValue", option_value)
            self._group.addButton(button)
            self._buttons[option_value] = button
            layout.addWidget(button)

        self._group.buttonClicked.connect(self._on_button_clicked)
        if value is not None:
            self.set_value(value)
        elif self._buttons:
            self.set_value(next(iter(self._buttons)))

    @property
    def value(self) -> str | None:
        return self._value

    def options(self) -> list[str]:
        return list(self._buttons)

    def set_value(self, value: str) -> None:
        """Select ``value`` without emitting ``option_changed``."""
        button = self._buttons.get(value)
        if button is None:
            return
        button.setChecked(True)
        self._value = value

    def _on_button_clicked(self, button: QPushButton) -> None:
        value = str(button.property("optionValue"))
        if value == self._value:
            return
        self._value = value
        self.option_changed.emit(value)
