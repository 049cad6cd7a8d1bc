import os
import sys

# High-DPI setup must happen before creating QApplication.
os.environ.setdefault("QT_ENABLE_HIGHDPI_SCALING", "1")
os.environ.setdefault("QT_SCALE_FACTOR_ROUNDING_POLICY", "PassThrough")

from PySide6.QtWidgets import QApplication

try:
    from core.config_manager import AppConfig, ConfigManager
    from core.logger import setup_logger
    from core.paths import APP_NAME, get_base_dir, get_log_dir, resolve_config_path
    from ui.demo_window import DemoWindow
except ModuleNotFoundError:
    from .core.config_manager import AppConfig, ConfigManager
    from .core.logger import setup_logger
    from .core.paths import APP_NAME, get_base_dir, get_log_dir, resolve_config_path
    from .ui.demo_window import DemoWindow


def main() -> int:
    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)

    config_path = resolve_config_path()
    config_manager = ConfigManager(config_path)
    config = config_manager.load()

    logger = setup_logger(get_log_dir(), debug=config.behavior.debug_mode)
    logger.info("Application starting. base_dir=%s config=%s", get_base_dir(), config_path)
    logger.info(
        "Picker convention=%s range=%s-%s interval=%d span=%s",
        config.picker.convention.value,
        config.picker.min_time or "start",
        config.picker.max_time or "end",
        config.picker.interval_minutes,
        config.picker.span_hours,
    )

    def _persist(updated: AppConfig) -> None:
        if not config_manager.save(updated):
            logger.warning("Failed to save config to %s", config_path)

    window = DemoWindow(config, on_config_changed=_persist)
    window.resize(420, 320)
    window.show()

    app.aboutToQuit.connect(lambda: logger.info("Application shutting down."))
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
