from __future__ import annotations

from datetime import datetime
from typing import Callable

from PySide6.QtGui import QFont
from PySide6.QtWidgets import QHBoxLayout, QLabel, QVBoxLayout, QWidget

try:
    from core.config_manager import AppConfig
    from core.logger import get_logger
    from core.time_engine import ClockConvention
    from ui.inline_select import InlineSelect
    from ui.time_picker import TimePickerWidget
except ModuleNotFoundError:
    from ..core.config_manager import AppConfig
    from ..core.logger import get_logger
    from ..core.time_engine import ClockConvention
    from .inline_select import InlineSelect
    from .time_picker import TimePickerWidget


CONVENTION_OPTIONS = [
    (ClockConvention.TWELVE_HOUR.value, "12h"),
    (ClockConvention.TWENTY_FOUR_HOUR.value, "24h"),
]

_log = get_logger("ui")


def describe_value(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value is not None else "-"


class DemoWindow(QWidget):
    """Picker playground: time input, clock convention toggle and the committed value."""

    def __init__(
        self,
        config: AppConfig,
        on_config_changed: Callable[[AppConfig], None] | None = None,
        clock: Callable[[], datetime] = datetime.now,
        parent: QWidget | None = None,
    ):
        super().__init__(parent)
        self._config = config
        self._on_config_changed = on_config_changed
        self.setWindowTitle("Time Picker")
        font = QFont(self.font())
        font.setPixelSize(config.appearance.font_size_px)
        self.setFont(font)

        picker_cfg = config.picker
        self.picker = TimePickerWidget(
            convention=picker_cfg.convention,
            time_range=picker_cfg.time_range,
            interval_minutes=picker_cfg.interval_minutes,
            max_span_hours=picker_cfg.span_hours,
            max_visible_suggestions=config.appearance.max_visible_suggestions,
            clock=clock,
            parent=self,
        )
        self.convention_select = InlineSelect(CONVENTION_OPTIONS, picker_cfg.convention.value, self)
        self.result_label = QLabel(self)
        self._set_result(None)

        controls = QHBoxLayout()
        controls.addWidget(self.picker, 1)
        controls.addWidget(self.convention_select)
        root = QVBoxLayout(self)
        root.addLayout(controls)
        root.addWidget(self.result_label)
        root.addStretch(1)

        self.picker.value_changed.connect(self._set_result)
        self.convention_select.option_changed.connect(self._on_convention_changed)

    def _set_result(self, value: datetime | None) -> None:
        self.result_label.setText(f"<b>Value:</b> {describe_value(value)}")

    def _on_convention_changed(self, value: str) -> None:
        convention = ClockConvention.from_value(value)
        _log.info("[Convention] switched to %s", convention.value)
        self.picker.set_convention(convention)
        self._config.picker.clock_convention = convention.value
        if self._on_config_changed is not None:
            self._on_config_changed(self._config)
