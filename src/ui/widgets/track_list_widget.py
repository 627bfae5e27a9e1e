# ui/track_list_widget.py
from __future__ import annotations

from PySide6.QtCore import Signal, Qt, QItemSelectionModel
from PySide6.QtWidgets import QWidget, QVBoxLayout, QTableView, QMenu, QLabel, QStackedLayout

from ui.models.track_table_model import TrackTableModel


class TrackListWidget(QWidget):
    playTrack = Signal(int)       # row index in the queue

    def __init__(self, queue_state):
        super().__init__()
        self.queue_state = queue_state

        self.table = QTableView()
        self.model = TrackTableModel([])
        self.table.setModel(self.model)

        self.table.setSelectionBehavior(QTableView.SelectionBehavior.SelectRows)
        self.table.setSelectionMode(QTableView.SelectionMode.SingleSelection)
        self.table.verticalHeader().setVisible(False)
        self.table.setShowGrid(False)
        self.table.setAlternatingRowColors(True)

        self.table.setColumnWidth(0, 420)
        self.table.setColumnWidth(1, 200)
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.setObjectName("TrackTable")

        self.table.verticalHeader().setDefaultSectionSize(24)

        self._apply_styles()

        # Double click -> play
        self.table.doubleClicked.connect(self._on_double_click)

        # Right-click context menu
        self.table.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.table.customContextMenuRequested.connect(self._on_context_menu)

        self.empty_label = QLabel("No music files found")
        self.empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.empty_label.setObjectName("EmptyLabel")

        self._stack = QStackedLayout()
        self._stack.addWidget(self.table)
        self._stack.addWidget(self.empty_label)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addLayout(self._stack)

        self.queue_state.tracksChanged.connect(self._on_tracks_changed)
        self.queue_state.currentChanged.connect(self.set_now_playing)
        self.queue_state.durationChanged.connect(self._on_duration_changed)

        self._on_tracks_changed(self.queue_state.tracks)

    # -------------------------
    # External API
    # -------------------------
    def selected_row(self) -> int | None:
        idx = self.table.currentIndex()
        if not idx.isValid():
            return None
        return idx.row()

    def set_now_playing(self, row: int | None):
        self.model.set_playing_row(row)
        if row is None:
            self.table.clearSelection()
            return

        idx = self.model.index(row, 0)
        sm = self.table.selectionModel()
        if sm is None or not idx.isValid():
            return

        sm.setCurrentIndex(
            idx,
            QItemSelectionModel.SelectionFlag.ClearAndSelect | QItemSelectionModel.SelectionFlag.Rows,
        )
        self.table.scrollTo(idx, QTableView.ScrollHint.PositionAtCenter)

    # -------------------------
    # State updates
    # -------------------------
    def _on_tracks_changed(self, tracks):
        self.model.set_tracks(tracks)
        self._stack.setCurrentWidget(self.table if tracks else self.empty_label)
        if self.queue_state.current_index is not None:
            self.set_now_playing(self.queue_state.current_index)

    def _on_duration_changed(self, _ms: int):
        # the controller writes the duration onto the current Track
        if self.queue_state.current_index is not None:
            self.model.refresh_row(self.queue_state.current_index)

    # -------------------------
    # UI Events
    # -------------------------
    def _on_double_click(self, index):
        if not index.isValid():
            return
        self.playTrack.emit(index.row())

    def _on_context_menu(self, pos):
        idx = self.table.indexAt(pos)
        if not idx.isValid():
            return

        track = self.model.track_at(idx.row())
        if track is None:
            return

        menu = QMenu(self)
        act_play = menu.addAction("Play")

        chosen = menu.exec(self.table.viewport().mapToGlobal(pos))
        if chosen == act_play:
            self.playTrack.emit(idx.row())

    def _apply_styles(self):
        self.setStyleSheet("""
        QTableView#TrackTable {
            background-color: #020617;
            alternate-background-color: #030712;
            border: none;
            color: #e5e7eb;
            gridline-color: #020617;
            selection-background-color: rgba(56, 189, 248, 0.2);
            selection-color: #e5e7eb;
        }

        QHeaderView::section {
            background-color: #020617;
            color: #9ca3af;
            padding: 4px 6px;
            border: none;
            border-bottom: 1px solid #111827;
            font-size: 11px;
        }

        QLabel#EmptyLabel {
            color: #6b7280;
            font-size: 13px;
        }
        """)
