from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QLabel, QProgressBar, QMessageBox, QHBoxLayout,
    QToolButton, QStyle,
)
from PySide6.QtCore import Qt
from PySide6.QtGui import QShortcut, QKeySequence

from core.errors import EngineLoadFailure
from ui.player_bar import PlayerBar
from ui.widgets.track_list_widget import TrackListWidget
from ui.workers.scan_coordinator import ScanCoordinator


class MainWindow(QMainWindow):
    def __init__(self, app_state):
        super().__init__()
        self.setWindowTitle("Music Player")
        self.resize(720, 640)
        self.app_state = app_state
        self.controller = app_state.controller
        self.queue = app_state.queue

        self.scans = ScanCoordinator(app_state)
        self.app_state.scanner = self.scans

        # --- Shortcuts ---
        if self.controller:
            QShortcut(QKeySequence("Space"), self, activated=self._toggle_play)
            QShortcut(QKeySequence("Ctrl+Right"), self, activated=self._play_next)
            QShortcut(QKeySequence("Ctrl+Left"), self, activated=self._play_previous)
        QShortcut(QKeySequence("Return"), self, activated=self._play_selected)
        QShortcut(QKeySequence("Enter"), self, activated=self._play_selected)
        QShortcut(QKeySequence("F5"), self, activated=self.refresh_library)

        self.central_widget = QWidget()
        self.setCentralWidget(self.central_widget)
        self.layout = QVBoxLayout(self.central_widget)

        self.app_state.notification.connect(self._on_notify)

        # --- Top bar ---
        top_bar = QHBoxLayout()
        title = QLabel("Music Player")
        title.setObjectName("AppTitle")
        top_bar.addWidget(title)
        top_bar.addStretch(1)

        self.btn_refresh = QToolButton()
        self.btn_refresh.setIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_BrowserReload))
        self.btn_refresh.setToolTip("Rescan music")
        self.btn_refresh.clicked.connect(self.refresh_library)
        top_bar.addWidget(self.btn_refresh)

        self.layout.addLayout(top_bar)

        # --- Scan progress (hidden when idle) ---
        self.scan_row = QWidget()
        scan_layout = QHBoxLayout(self.scan_row)
        scan_layout.setContentsMargins(8, 6, 8, 6)
        scan_layout.setSpacing(10)

        self.scan_label = QLabel("Scanning for music files…")
        self.scan_label.setObjectName("ScanLabel")

        self.progress_bar = QProgressBar()
        self.progress_bar.setObjectName("ScanProgress")
        self.progress_bar.setTextVisible(False)
        self.progress_bar.setRange(0, 0)    # total is unknown while walking

        scan_layout.addWidget(self.scan_label)
        scan_layout.addWidget(self.progress_bar, 1)
        self.scan_row.setObjectName("ScanRow")
        self.scan_row.setVisible(False)

        self.layout.addWidget(self.scan_row)

        # --- Track list ---
        self.track_list = TrackListWidget(self.queue)
        self.track_list.playTrack.connect(self.on_play_track)
        self.layout.addWidget(self.track_list, 1)

        # --- PlayerBar ---
        if self.controller:
            self.player_bar = PlayerBar(self.controller, self)
            self.layout.addWidget(self.player_bar)
            self.controller.playFailed.connect(self._on_play_failed)

        # --- Scanner wiring ---
        self.queue.scanningChanged.connect(self._on_scanning_changed)
        self.scans.progress.connect(self._update_scan_progress)
        self.scans.scanFinished.connect(self._scan_finished)

        self.setStyleSheet(self.styleSheet() + """
            QMainWindow { background: #020617; }
            QLabel#AppTitle { color: #e5e7eb; font-size: 16px; font-weight: bold; }
            QWidget#ScanRow {
                background: #020617;
                border-top: 1px solid #111827;
            }
            QLabel#ScanLabel {
                color: #9ca3af;
                font-size: 11px;
            }
            QProgressBar#ScanProgress {
                background: #0b1222;
                border: 1px solid #1f2937;
                border-radius: 999px;
                height: 10px;
            }
            QProgressBar#ScanProgress::chunk {
                border-radius: 999px;
                background: #38bdf8;
            }
            """)

        self.show_queued_notifications()

    # ------------------ scanning ------------------
    def refresh_library(self):
        self.scans.rescan()

    def _on_scanning_changed(self, scanning: bool):
        self.scan_row.setVisible(scanning)
        self.scan_label.setText("Scanning for music files…")
        if scanning:
            self.statusBar().showMessage("Scanning library…")

    def _update_scan_progress(self, found: int):
        self.scan_label.setText(f"Scanning for music files… {found} found")

    def _scan_finished(self, ok: bool, msg: str):
        self.statusBar().showMessage(msg, 4000)

    # ------------------ playback ------------------
    def on_play_track(self, row: int):
        if not self.controller:
            self.app_state.notify("Audio playback is not available.", "error")
            return
        try:
            self.controller.play(row)
        except EngineLoadFailure:
            # already reported through playFailed
            pass
        except IndexError:
            self.app_state.notify("That track is no longer in the list.", "warn")

    def _toggle_play(self):
        self.player_bar.toggle_play()

    def _play_next(self):
        self.player_bar.play_next()

    def _play_previous(self):
        self.player_bar.play_previous()

    def _play_selected(self):
        row = self.track_list.selected_row()
        if row is not None:
            self.on_play_track(row)

    def _on_play_failed(self, err):
        self.app_state.notify(str(err), "error")

    # ------------------ notifications ------------------
    def show_queued_notifications(self):
        for n in self.app_state.queued_notifications:
            self._on_notify(n)
        self.app_state.queued_notifications.clear()

    def _on_notify(self, n):
        kind = (getattr(n, "notify_type", "info") or "info").lower()
        msg = getattr(n, "message", "") or ""
        if not msg:
            return

        if kind == "error":
            self.statusBar().showMessage(msg, 6000)
            QMessageBox.warning(self, "Music Player", msg)
        else:
            self.statusBar().showMessage(msg, 4000)

    # ------------------ lifecycle ------------------
    def showEvent(self, event):
        super().showEvent(event)
        if not getattr(self, "_initial_scan_done", False):
            self._initial_scan_done = True
            self.refresh_library()

    def closeEvent(self, event):
        self.scans.shutdown()
        if self.controller:
            self.controller.dispose()
        super().closeEvent(event)
