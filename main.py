import logging
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication

ROOT = Path(__file__).resolve().parent
SRC_DIR = ROOT / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from core.config import load_config
from core.state import AppState, Notify
from player.player import QtAudioEngine
from player.queue import QueueController
from ui.main_window import MainWindow

logger = logging.getLogger("mp3player")

def setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

def init_app_state() -> AppState:
    config = load_config()
    setup_logging(config.debug)
    if config.extra:
        logger.debug("Unused settings: %s", config.extra)

    app_state = AppState(config)

    try:
        app_state.engine = QtAudioEngine(volume=config.volume)
        app_state.controller = QueueController(app_state.engine, app_state.queue)
        logger.info("Audio backend: %s", app_state.engine.backend_name())
    except Exception as e:
        logger.exception("Failed to initialize audio player")
        app_state.engine = None
        app_state.controller = None
        app_state.queued_notifications.append(
            Notify(message=f"Failed to initialize audio player: {e}", notify_type="error")
        )

    return app_state

def main() -> int:
    qt_app = QApplication(sys.argv)
    qt_app.setApplicationName("Music Player")

    app_state = init_app_state()
    main_window = MainWindow(app_state)
    main_window.show()

    return qt_app.exec()

if __name__ == "__main__":
    raise SystemExit(main())
