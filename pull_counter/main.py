"""Main application entry point."""
import sys
import json
import os
import base64
import argparse
from pathlib import Path
from queue import Queue, Empty
from typing import List, Optional

from PyQt6.QtWidgets import QApplication
from PyQt6.QtCore import QTimer, QObject, QByteArray, pyqtSignal, pyqtSlot

from .logger import setup_logging, get_logger, resolve_log_level
from .counter import PullCounter
from .counter_storage import CounterStorage
from .counter_window import CounterWindow
from .locale_regex import COUNTDOWN_ENGAGE, DEFAULT_LANGUAGE
from .log_monitor import LogMonitor
from .network_log import NetworkLogParser, dispatch
from .pull_counts import PullCounterStore
from .timestamp_formatter import TimestampFormatter

logger = get_logger(__name__)

APP_NAME = "pull counter"

# Batches handled per timer tick so a log backlog cannot stall the UI
MAX_BATCHES_PER_TICK = 10

DEFAULT_SETTINGS = {
    "log_directory": "",
    "parser_language": DEFAULT_LANGUAGE,
    "timezone": "",  # Empty = keep the offset each record was logged with
    "always_on_top": True,
    "window_geometry": None,  # Base64 encoded window geometry
    "log_poll_interval_ms": 1000,  # How often the network log is checked
    "queue_drain_interval_ms": 100,  # How often queued lines are handed to the counter
}


def get_user_data_dir() -> Path:
    """
    Get the user data directory for storing settings and data files.
    Uses OS-specific application data directories.
    """
    if sys.platform == 'win32':
        appdata = os.getenv('APPDATA')
        if appdata:
            return Path(appdata) / APP_NAME
        return Path.home() / "AppData" / "Roaming" / APP_NAME
    elif sys.platform == 'darwin':
        return Path.home() / "Library" / "Application Support" / APP_NAME
    else:
        xdg_config = os.getenv('XDG_CONFIG_HOME')
        if xdg_config:
            return Path(xdg_config) / APP_NAME
        return Path.home() / ".config" / APP_NAME


def load_settings(settings_path: Path) -> dict:
    """Load settings from JSON file merged over the defaults."""
    settings = dict(DEFAULT_SETTINGS)
    if not settings_path.exists():
        logger.info(f"[SETTINGS] File not found: {settings_path!s}, using defaults")
        return settings
    try:
        with open(settings_path, 'r', encoding='utf-8') as f:
            loaded = json.load(f)
        if isinstance(loaded, dict):
            settings.update(loaded)
            logger.info(f"[SETTINGS] Loaded from {settings_path!s}")
        else:
            logger.error(f"[SETTINGS] {settings_path!s} does not hold an object, using defaults")
    except (json.JSONDecodeError, IOError) as e:
        logger.error(f"[SETTINGS] Error loading settings from {settings_path!s}: {e}", exc_info=True)

    if settings.get('parser_language') not in COUNTDOWN_ENGAGE:
        logger.warning(f"[SETTINGS] Unknown parser_language {settings.get('parser_language')!r}, "
                       f"countdown pattern falls back to '{DEFAULT_LANGUAGE}'")
    return settings


def save_settings(settings_path: Path, settings: dict) -> None:
    """Save settings to JSON file."""
    try:
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        with open(settings_path, 'w', encoding='utf-8') as f:
            json.dump(settings, f, indent=2, ensure_ascii=False)
        logger.debug(f"[SETTINGS] Saved to {settings_path!s}")
    except IOError as e:
        logger.error(f"[SETTINGS] Error saving to {settings_path!s}: {e}", exc_info=True)


def log_poll_interval(settings: dict) -> float:
    """Seconds between log monitor polls from the log_poll_interval_ms setting."""
    try:
        interval_ms = int(settings.get('log_poll_interval_ms') or DEFAULT_SETTINGS['log_poll_interval_ms'])
    except (TypeError, ValueError):
        logger.warning(f"[SETTINGS] Bad log_poll_interval_ms {settings.get('log_poll_interval_ms')!r}, using default")
        interval_ms = DEFAULT_SETTINGS['log_poll_interval_ms']
    return max(interval_ms, 50) / 1000.0


class PullCounterApp(QObject):
    """Main application class."""

    # Emitted from the loader thread, handled on the main thread
    save_data_loaded = pyqtSignal(object)

    def __init__(self, app: QApplication, data_dir: Path, settings_overrides: Optional[dict] = None):
        super().__init__()
        self.app = app
        self.data_dir = data_dir
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.settings_path = self.data_dir / "settings.json"
        self.counts_path = self.data_dir / "pullcounts.json"

        logger.info(f"Data directory: {self.data_dir}")
        self.settings = load_settings(self.settings_path)
        # Command line values apply to this run only
        self.effective_settings = dict(self.settings)
        self.effective_settings.update(settings_overrides or {})

        # Thread-safe queue for line batches from the monitor thread
        self.log_line_queue = Queue()

        self.window = CounterWindow(always_on_top=bool(self.effective_settings.get('always_on_top', True)))
        self._restore_window_geometry()
        self.window.exit_requested.connect(self._exit_app)
        self.window.geometry_saved.connect(self._save_window_geometry)

        self.storage = CounterStorage(str(self.counts_path))
        self.storage.start()
        self.store = PullCounterStore(save_data=self.storage.save_data)

        self.parser = NetworkLogParser(TimestampFormatter(self.effective_settings.get('timezone') or None))
        self.counter = PullCounter(
            store=self.store,
            language=self.effective_settings.get('parser_language') or DEFAULT_LANGUAGE,
            on_show_count=self.window.show_count,
            on_clear=self.window.clear,
            on_wipe=self.window.mark_wipe,
        )
        self.window.reset_requested.connect(self.counter.reset_pull_counter)

        # Saved counts arrive asynchronously; early events use an empty store
        self.save_data_loaded.connect(self._on_save_data_loaded)
        self.storage.load_async(self.save_data_loaded.emit)

        self.log_monitor: Optional[LogMonitor] = None
        log_directory = self.effective_settings.get('log_directory') or ''
        if log_directory:
            self.log_monitor = LogMonitor(log_directory, self._on_new_log_lines,
                                          poll_interval=log_poll_interval(self.effective_settings))
            self.log_monitor.start()
        else:
            logger.warning("No log directory configured; set log_directory in "
                           f"{self.settings_path} or pass --log-dir")

        # Timer to process queued log lines on main thread
        self.log_processor_timer = QTimer()
        self.log_processor_timer.timeout.connect(self._process_queued_log_lines)
        self.log_processor_timer.start(int(self.effective_settings.get('queue_drain_interval_ms') or 100))

        self.app.aboutToQuit.connect(self._shutdown)
        self.window.show()

    @pyqtSlot(object)
    def _on_save_data_loaded(self, data) -> None:
        self.counter.set_save_data(data)

    def _on_new_log_lines(self, lines: List[str]) -> None:
        """Handle a batch of new lines (called from log monitor thread)."""
        self.log_line_queue.put(lines)

    def _process_queued_log_lines(self) -> None:
        """Process queued log batches on the main thread."""
        processed = 0
        while processed < MAX_BATCHES_PER_TICK:
            try:
                lines = self.log_line_queue.get_nowait()
            except Empty:
                break
            processed += 1
            try:
                for event in self.parser.parse_batch(lines):
                    dispatch(event, self.counter)
            except Exception as e:
                logger.error(f"Error processing log batch: {e}", exc_info=True)

    def _restore_window_geometry(self) -> None:
        geometry = self.settings.get('window_geometry')
        if not geometry:
            return
        try:
            self.window.restoreGeometry(QByteArray(base64.b64decode(geometry)))
        except (ValueError, TypeError) as e:
            logger.warning(f"Could not restore window geometry: {e}")

    def _save_window_geometry(self, geometry: bytes) -> None:
        self.settings['window_geometry'] = base64.b64encode(geometry).decode('utf-8')
        save_settings(self.settings_path, self.settings)

    def _exit_app(self) -> None:
        logger.info("Exit requested")
        self.window.close()
        self.app.quit()

    def _shutdown(self) -> None:
        self.log_processor_timer.stop()
        if self.log_monitor:
            self.log_monitor.stop()
        self.storage.stop()
        logger.info("Pull counter stopped")


def main():
    """Application entry point."""
    parser = argparse.ArgumentParser(description='Pull Counter')
    parser.add_argument('--debug', '-d', action='store_true',
                        help='Enable debug logging (verbose)')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Set logging level (DEBUG, INFO, WARNING, ERROR)')
    parser.add_argument('--log-dir', help='Directory containing Network_*.log files')
    parser.add_argument('--language', choices=sorted(COUNTDOWN_ENGAGE),
                        help='Parser language of the game client')
    args, _unknown = parser.parse_known_args()  # Leave Qt arguments alone

    log_level = resolve_log_level(args.debug, args.log_level)

    data_dir = get_user_data_dir()
    app_logger = setup_logging(data_dir / "logs", log_level=log_level)

    def exception_handler(exc_type, exc_value, exc_traceback):
        """Handle unhandled exceptions."""
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        app_logger.critical("Unhandled exception", exc_info=(exc_type, exc_value, exc_traceback))

    sys.excepthook = exception_handler

    overrides = {}
    if args.log_dir:
        overrides['log_directory'] = args.log_dir
    if args.language:
        overrides['parser_language'] = args.language

    app = QApplication(sys.argv)
    app.setApplicationName("Pull Counter")
    app.setQuitOnLastWindowClosed(True)

    pull_counter_app = PullCounterApp(app, data_dir, overrides)
    exit_code = app.exec()
    del pull_counter_app
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
