from __future__ import annotations

import os
from pathlib import Path

from PySide6.QtCore import QStandardPaths


APP_NAME = "TimeMaskPicker"
CONFIG_FILE_NAME = "config.json"
BUNDLED_CONFIG = Path("config") / CONFIG_FILE_NAME


def get_base_dir() -> Path:
    """Project root holding ``config/``; ``APP_BASE_DIR`` overrides it."""
    override = os.environ.get("APP_BASE_DIR", "").strip()
    return Path(override) if override else Path(__file__).resolve().parents[2]


def get_user_data_dir() -> Path:
    location = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.AppDataLocation)
    target = Path(location) if location else Path.home() / ".local" / "share"
    # Without an application name Qt hands back the shared data root.
    if target.name.lower() != APP_NAME.lower():
        target = target / APP_NAME
    target.mkdir(parents=True, exist_ok=True)
    return target


def get_log_dir() -> Path:
    target = get_user_data_dir() / "logs"
    target.mkdir(parents=True, exist_ok=True)
    return target


def get_bundled_config() -> Path | None:
    candidate = get_base_dir() / BUNDLED_CONFIG
    return candidate if candidate.is_file() else None


def resolve_config_path() -> Path:
    """
    Return the per-user config path, seeding it from the bundled defaults.

    The path is returned even when seeding fails; the loader then falls back
    to built-in defaults.
    """
    user_cfg = get_user_data_dir() / CONFIG_FILE_NAME
    bundled = get_bundled_config()
    if not user_cfg.exists() and bundled is not None:
        try:
            user_cfg.write_text(bundled.read_text(encoding="utf-8"), encoding="utf-8")
        except OSError:
            pass
    return user_cfg
