from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import time
from pathlib import Path
from typing import Any

from PySide6.QtCore import QIODevice, QSaveFile

try:
    from core.time_engine import DEFAULT_INTERVAL_MINUTES, ClockConvention, TimeRange
except ModuleNotFoundError:
    from .time_engine import DEFAULT_INTERVAL_MINUTES, ClockConvention, TimeRange


@dataclass(slots=True)
class PickerConfig:
    clock_convention: str = "12h"  # 12h / 24h
    min_time: str = ""  # "HH:MM" or empty for start of day
    max_time: str = ""  # "HH:MM" or empty for end of day
    interval_minutes: int = DEFAULT_INTERVAL_MINUTES
    max_span_hours: float = 0.0  # 0 = unbounded

    @property
    def convention(self) -> ClockConvention:
        return ClockConvention.from_value(self.clock_convention)

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(_parse_hhmm(self.min_time), _parse_hhmm(self.max_time))

    @property
    def span_hours(self) -> float | None:
        return self.max_span_hours if self.max_span_hours > 0 else None


@dataclass(slots=True)
class AppearanceConfig:
    font_size_px: int = 14
    max_visible_suggestions: int = 8


@dataclass(slots=True)
class BehaviorConfig:
    debug_mode: bool = False


@dataclass(slots=True)
class AppConfig:
    version: str = "1.0.0"
    picker: PickerConfig = field(default_factory=PickerConfig)
    appearance: AppearanceConfig = field(default_factory=AppearanceConfig)
    behavior: BehaviorConfig = field(default_factory=BehaviorConfig)


def _parse_hhmm(value: str) -> time | None:
    text = (value or "").strip()
    if not text or ":" not in text:
        return None
    hh_str, mm_str = text.split(":", 1)
    try:
        hh = int(hh_str)
        mm = int(mm_str)
    except ValueError:
        return None
    if not (0 <= hh < 24 and 0 <= mm < 60):
        return None
    return time(hh, mm)


def _normalize_hhmm(value: Any) -> str:
    parsed = _parse_hhmm(str(value or ""))
    return "" if parsed is None else parsed.strftime("%H:%M")


class ConfigManager:
    """Load picker configuration from JSON with safe defaults."""

    def __init__(self, config_path: Path):
        self._config_path = config_path

    @property
    def config_path(self) -> Path:
        return self._config_path

    def load(self) -> AppConfig:
        if not self._config_path.exists():
            return AppConfig()
        try:
            raw = json.loads(self._config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return AppConfig()
        if not isinstance(raw, dict):
            return AppConfig()

        return AppConfig(
            version=str(raw.get("version", "1.0.0")),
            picker=self._build_picker(raw.get("picker")),
            appearance=self._build_appearance(raw.get("appearance")),
            behavior=self._build_behavior(raw.get("behavior")),
        )

    def save(self, config: AppConfig) -> bool:
        payload = self.to_dict(config)
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(payload, ensure_ascii=False, indent=2) + "\n"
        saver = QSaveFile(str(self._config_path))
        if not saver.open(QIODevice.OpenModeFlag.WriteOnly | QIODevice.OpenModeFlag.Truncate):
            return False
        raw = content.encode("utf-8")
        written = saver.write(raw)
        if written != len(raw):
            saver.cancelWriting()
            return False
        return bool(saver.commit())

    @staticmethod
    def to_dict(config: AppConfig) -> dict[str, Any]:
        return {
            "version": str(config.version),
            "picker": {
                "clock_convention": config.picker.convention.value,
                "min_time": _normalize_hhmm(config.picker.min_time),
                "max_time": _normalize_hhmm(config.picker.max_time),
                "interval_minutes": int(config.picker.interval_minutes),
                "max_span_hours": float(config.picker.max_span_hours),
            },
            "appearance": {
                "font_size_px": int(config.appearance.font_size_px),
                "max_visible_suggestions": int(config.appearance.max_visible_suggestions),
            },
            "behavior": {
                "debug_mode": bool(config.behavior.debug_mode),
            },
        }

    @staticmethod
    def _build_picker(payload: Any) -> PickerConfig:
        if not isinstance(payload, dict):
            return PickerConfig()
        convention = str(payload.get("clock_convention", "12h")).strip().lower()
        if convention not in {"12h", "24h"}:
            convention = "12h"
        try:
            interval = int(payload.get("interval_minutes", DEFAULT_INTERVAL_MINUTES))
        except (TypeError, ValueError):
            interval = DEFAULT_INTERVAL_MINUTES
        try:
            span = float(payload.get("max_span_hours", 0.0) or 0.0)
        except (TypeError, ValueError):
            span = 0.0
        return PickerConfig(
            clock_convention=convention,
            min_time=_normalize_hhmm(payload.get("min_time", "")),
            max_time=_normalize_hhmm(payload.get("max_time", "")),
            interval_minutes=max(1, min(720, interval)),
            max_span_hours=max(0.0, min(24.0, span)),
        )

    @staticmethod
    def _build_appearance(payload: Any) -> AppearanceConfig:
        if not isinstance(payload, dict):
            return AppearanceConfig()
        try:
            font_size = int(payload.get("font_size_px", 14))
            visible = int(payload.get("max_visible_suggestions", 8))
        except (TypeError, ValueError):
            return AppearanceConfig()
        return AppearanceConfig(
            font_size_px=max(8, min(48, font_size)),
            max_visible_suggestions=max(3, min(48, visible)),
        )

    @staticmethod
    def _build_behavior(payload: Any) -> BehaviorConfig:
        if not isinstance(payload, dict):
            return BehaviorConfig()
        return BehaviorConfig(debug_mode=bool(payload.get("debug_mode", False)))
